"""
Errors and input validation for the force simulation.

Provides the exception hierarchy raised by the engine and centralized
validation functions for links, canvas size and numeric parameters.
"""

from __future__ import annotations

import math
from typing import Any, Hashable, Iterable, Optional, Sequence

from .types import Node


class SimulationError(Exception):
    """Base exception for force simulation errors."""

    pass


class ConfigurationError(SimulationError, ValueError):
    """Raised when input data or parameters are invalid."""

    pass


class NotFoundError(SimulationError, KeyError):
    """Raised when a node id does not exist in the simulation."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable
        return str(self.args[0]) if self.args else ""


class StateError(SimulationError, RuntimeError):
    """Raised when an operation is not valid in the current lifecycle state."""

    pass


def validate_node_ids(ids: Iterable[Hashable]) -> None:
    """
    Validate that node ids are unique.

    Raises:
        ConfigurationError: If any id appears more than once
    """
    seen: set[Hashable] = set()
    duplicates: list[Hashable] = []
    for node_id in ids:
        if node_id in seen and node_id not in duplicates:
            duplicates.append(node_id)
        seen.add(node_id)

    if duplicates:
        raise ConfigurationError(
            "Duplicate node ids: " + ", ".join(repr(d) for d in duplicates)
        )


def validate_link_endpoints(
    links: Sequence[Any],
    node_ids: Iterable[Hashable],
    strict: bool = True,
) -> list[tuple[int, str]]:
    """
    Validate that all link endpoints resolve to known node ids.

    Args:
        links: Sequence of Link objects or dicts with source/target
        node_ids: Ids of the nodes in the current node set
        strict: If True, raises on invalid. If False, returns list of issues.

    Returns:
        List of (link_index, issue_description) tuples

    Raises:
        ConfigurationError: If strict=True and invalid links found
    """
    known = set(node_ids)
    issues: list[tuple[int, str]] = []

    for i, link in enumerate(links):
        for attr in ("source", "target"):
            endpoint = _get_endpoint_id(link, attr)
            if endpoint is None:
                issues.append((i, f"Link {i}: {attr} is None"))
            elif endpoint not in known:
                issues.append((i, f"Link {i}: {attr} {endpoint!r} is not a known node id"))

    if strict and issues:
        msg = "Invalid link endpoints:\n" + "\n".join(issue[1] for issue in issues)
        raise ConfigurationError(msg)

    return issues


def validate_canvas_size(size: Sequence[float]) -> tuple[float, float]:
    """
    Validate canvas size dimensions.

    Args:
        size: [width, height] sequence

    Returns:
        Validated (width, height) tuple

    Raises:
        ConfigurationError: If dimensions are invalid
    """
    if len(size) < 2:
        raise ConfigurationError(
            f"Canvas size must have 2 elements [width, height], got {len(size)}"
        )

    width, height = float(size[0]), float(size[1])

    if width <= 0:
        raise ConfigurationError(f"Canvas width must be positive, got {width}")
    if height <= 0:
        raise ConfigurationError(f"Canvas height must be positive, got {height}")

    return width, height


def validate_alpha(alpha: float, name: str = "alpha") -> float:
    """
    Validate an alpha-like value is in [0, 1].

    Raises:
        ConfigurationError: If value not in [0, 1]
    """
    alpha = float(alpha)
    if not 0 <= alpha <= 1:
        raise ConfigurationError(f"{name} must be in [0, 1], got {alpha}")
    return alpha


def validate_iterations(iterations: int, name: str = "iterations") -> int:
    """
    Validate iteration count is positive.

    Raises:
        ConfigurationError: If iterations < 1
    """
    if iterations < 1:
        raise ConfigurationError(f"{name} must be >= 1, got {iterations}")
    return int(iterations)


def validate_non_negative(value: float, name: str) -> float:
    """
    Validate a distance-like value is not negative (infinity is allowed).

    Raises:
        ConfigurationError: If value is negative or NaN
    """
    value = float(value)
    if math.isnan(value) or value < 0:
        raise ConfigurationError(f"{name} must be >= 0, got {value}")
    return value


def validate_finite(value: float, name: str) -> float:
    """
    Validate a coordinate-like value is a finite number.

    Raises:
        ConfigurationError: If value is NaN or infinite
    """
    value = float(value)
    if not math.isfinite(value):
        raise ConfigurationError(f"{name} must be finite, got {value}")
    return value


def _get_endpoint_id(obj: Any, attr: str) -> Optional[Hashable]:
    """Extract an endpoint id from a Link, dict, or object with source/target."""
    if isinstance(obj, dict):
        val = obj.get(attr)
    else:
        val = getattr(obj, attr, None)

    if val is None:
        return None
    if isinstance(val, Node):
        return val.id
    return val


__all__ = [
    "SimulationError",
    "ConfigurationError",
    "NotFoundError",
    "StateError",
    "validate_node_ids",
    "validate_link_endpoints",
    "validate_canvas_size",
    "validate_alpha",
    "validate_iterations",
    "validate_non_negative",
    "validate_finite",
]
