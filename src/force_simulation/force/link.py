"""
Link (spring) force.

Pulls linked nodes together, or pushes them apart, toward a rest distance.
Corrections are split between the endpoints by degree so that hubs with
many incident links stay comparatively stable.
"""

from __future__ import annotations

import math
import random
from typing import Callable, Hashable, Optional, Sequence, Union

import numpy as np

from ..spatial.quadtree import QuadTree
from ..types import Link, LinkLike, Node
from ..validation import ConfigurationError, validate_iterations, validate_link_endpoints
from .base import Force

LinkNumericAccessor = Union[float, Callable[[Link], float]]


def resolve_links(links: Sequence[LinkLike], nodes: Sequence[Node]) -> list[Link]:
    """
    Normalize links and replace endpoint ids with node references.

    Args:
        links: Link objects, dicts, or objects with source/target
        nodes: Node set the endpoints must belong to

    Returns:
        New list of Link objects whose source/target are Node instances

    Raises:
        ConfigurationError: If an endpoint is missing or unknown
    """
    by_id: dict[Hashable, Node] = {node.id: node for node in nodes}
    members = {id(node) for node in nodes}

    normalized = [_as_link(link) for link in links]
    validate_link_endpoints(normalized, by_id.keys(), strict=True)

    resolved: list[Link] = []
    for i, link in enumerate(normalized):
        for attr in ("source", "target"):
            endpoint = getattr(link, attr)
            if isinstance(endpoint, Node):
                if id(endpoint) not in members:
                    raise ConfigurationError(
                        f"Link {i}: {attr} {endpoint!r} is not part of the node set"
                    )
            else:
                setattr(link, attr, by_id[endpoint])
        link.index = i
        resolved.append(link)
    return resolved


def _as_link(link_data: LinkLike) -> Link:
    """Convert a link-like record to a Link."""
    if isinstance(link_data, Link):
        return link_data
    if isinstance(link_data, dict):
        try:
            return Link(**link_data)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Malformed link {link_data!r}: {exc}") from exc
    source = getattr(link_data, "source", None)
    target = getattr(link_data, "target", None)
    if source is None or target is None:
        raise ConfigurationError(f"Malformed link {link_data!r}: missing source or target")
    return Link(
        source,
        target,
        getattr(link_data, "distance", None),
        getattr(link_data, "strength", None),
    )


class LinkForce(Force):
    """
    Spring force along links.

    For a link of current length l and rest distance d the endpoints
    receive a velocity change of (l - d) / l * alpha * strength along the
    link vector, split so that the endpoint with the higher degree moves
    less. Lengths are measured on predicted positions (x + vx) for stability.

    Example:
        springs = LinkForce(links, distance=45)
        springs.initialize(nodes)
        springs.apply(nodes, alpha=1.0, index=None)
    """

    name = "link"

    def __init__(
        self,
        links: Optional[Sequence[LinkLike]] = None,
        distance: LinkNumericAccessor = 30.0,
        strength: Optional[LinkNumericAccessor] = None,
        iterations: int = 1,
    ) -> None:
        """
        Initialize link force.

        Args:
            links: Links to simulate (ids are resolved against the node set)
            distance: Default rest distance (constant or function of the link);
                a link's own distance attribute takes precedence.
            strength: Default strength (constant or function of the link). If
                None, uses 1 / min(degree(source), degree(target)). A link's
                own strength attribute takes precedence.
            iterations: Relaxation passes per step
        """
        super().__init__()
        self._input_links: list[LinkLike] = list(links) if links is not None else []
        self._links: list[Link] = []
        self._distance: LinkNumericAccessor = distance
        self._strength: Optional[LinkNumericAccessor] = strength
        self._iterations: int = validate_iterations(iterations)

        # Internal state (initialized in initialize())
        self._sources: np.ndarray = np.zeros(0, dtype=np.int64)
        self._targets: np.ndarray = np.zeros(0, dtype=np.int64)
        self._count: np.ndarray = np.zeros(0, dtype=np.int64)
        self._bias: np.ndarray = np.zeros(0, dtype=np.float64)
        self._strengths: np.ndarray = np.zeros(0, dtype=np.float64)
        self._distances: np.ndarray = np.zeros(0, dtype=np.float64)

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def links(self) -> list[Link]:
        """Get the resolved links (empty until initialized)."""
        return self._links

    @links.setter
    def links(self, value: Sequence[LinkLike]) -> None:
        """Replace the links and re-resolve them against the bound nodes."""
        self._input_links = list(value)
        if self._nodes:
            self.initialize(self._nodes, self._random)

    @property
    def source_links(self) -> list[LinkLike]:
        """Get the links as given, before resolution."""
        return self._input_links

    @source_links.setter
    def source_links(self, value: Sequence[LinkLike]) -> None:
        """Set the links to resolve on the next initialize()."""
        self._input_links = list(value)

    @property
    def iterations(self) -> int:
        """Get relaxation passes per step."""
        return self._iterations

    @iterations.setter
    def iterations(self, value: int) -> None:
        """Set relaxation passes per step (minimum 1)."""
        self._iterations = validate_iterations(value)

    @property
    def degrees(self) -> np.ndarray:
        """Number of incident links per node."""
        return self._count

    # -------------------------------------------------------------------------
    # Force Implementation
    # -------------------------------------------------------------------------

    def initialize(self, nodes: Sequence[Node], rng: Optional[random.Random] = None) -> None:
        super().initialize(nodes, rng)
        n = len(self._nodes)
        self._links = resolve_links(self._input_links, self._nodes)
        position = {id(node): i for i, node in enumerate(self._nodes)}

        m = len(self._links)
        self._sources = np.fromiter(
            (position[id(link.source)] for link in self._links), dtype=np.int64, count=m
        )
        self._targets = np.fromiter(
            (position[id(link.target)] for link in self._links), dtype=np.int64, count=m
        )
        self._count = np.bincount(
            np.concatenate([self._sources, self._targets]), minlength=n
        ).astype(np.int64)

        src_count = self._count[self._sources].astype(np.float64)
        tgt_count = self._count[self._targets].astype(np.float64)
        self._bias = src_count / np.maximum(src_count + tgt_count, 1.0)

        default_strength = 1.0 / np.maximum(np.minimum(src_count, tgt_count), 1.0)
        self._strengths = np.array(
            [
                self._link_value(link, "strength", self._strength, default_strength[k])
                for k, link in enumerate(self._links)
            ],
            dtype=np.float64,
        )
        self._distances = np.array(
            [self._link_value(link, "distance", self._distance, 0.0) for link in self._links],
            dtype=np.float64,
        )

    @staticmethod
    def _link_value(
        link: Link,
        attr: str,
        accessor: Optional[LinkNumericAccessor],
        fallback: float,
    ) -> float:
        """Resolve a per-link value: own attribute, then accessor, then fallback."""
        own = getattr(link, attr, None)
        if own is not None:
            return float(own)
        if accessor is None:
            return float(fallback)
        if callable(accessor):
            return float(accessor(link))
        return float(accessor)

    def apply(self, nodes: Sequence[Node], alpha: float, index: Optional[QuadTree]) -> None:
        if len(self._count) != len(nodes):
            self.initialize(nodes)

        for _ in range(self._iterations):
            for k in range(len(self._links)):
                source = nodes[self._sources[k]]
                target = nodes[self._targets[k]]

                dx = target.x + target.vx - source.x - source.vx
                dy = target.y + target.vy - source.y - source.vy
                dist = math.sqrt(dx * dx + dy * dy)
                if dist == 0:
                    # Coincident endpoints: pick a tiny deterministic direction
                    dx = self.jiggle()
                    dy = self.jiggle()
                    dist = math.sqrt(dx * dx + dy * dy)

                factor = (dist - self._distances[k]) / dist * alpha * self._strengths[k]
                dx *= factor
                dy *= factor

                bias = self._bias[k]
                target.vx -= dx * bias
                target.vy -= dy * bias
                source.vx += dx * (1 - bias)
                source.vy += dy * (1 - bias)

    def __repr__(self) -> str:
        return f"LinkForce(links={len(self._input_links)}, iterations={self._iterations})"


__all__ = ["LinkForce", "LinkNumericAccessor", "resolve_links"]
