"""
Common types for the force simulation.

This module provides the fundamental types shared by every component:
- Node: Simulated body with position, velocity and an optional pin
- Link: Spring connecting two nodes
- EventType: Simulation lifecycle events
- Event: Event payload for callbacks
- Snapshot: Renderer-facing view of the current positions
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Callable, Hashable, Optional, Sequence, TypedDict, Union


class EventType(IntEnum):
    """
    Simulation lifecycle events.

    - start: run() has begun stepping
    - tick: Fired once per step (for animation)
    - end: run() has cooled below alpha_min or was stopped
    """

    start = 0
    tick = 1
    end = 2


class PointSnapshot(TypedDict):
    """A bare position."""

    x: float
    y: float


class NodeSnapshot(TypedDict):
    """Position of a single node, keyed by its id."""

    id: Hashable
    x: float
    y: float


class LinkSnapshot(TypedDict):
    """Resolved endpoint positions of a single link."""

    source: PointSnapshot
    target: PointSnapshot


class Snapshot(TypedDict):
    """Per-step output consumed by renderers."""

    alpha: float
    nodes: list[NodeSnapshot]
    links: list[LinkSnapshot]


class Event(TypedDict, total=False):
    """Event payload passed to event listeners."""

    type: EventType
    alpha: float
    snapshot: Optional[Snapshot]


class Node:
    """
    Simulated graph node.

    Attributes:
        id: Opaque unique identifier (defaults to index)
        index: Index in the nodes list (set by the simulation)
        x: X coordinate
        y: Y coordinate
        vx: X velocity
        vy: Y velocity
        fx: Pinned X coordinate, or None when free
        fy: Pinned Y coordinate, or None when free
    """

    def __init__(self, **kwargs: Any) -> None:
        """Initialize node with optional properties."""
        self.id: Optional[Hashable] = kwargs.get("id")
        self.index: Optional[int] = kwargs.get("index")
        self.x: Optional[float] = kwargs.get("x")
        self.y: Optional[float] = kwargs.get("y")
        self.vx: float = kwargs.get("vx", 0.0)
        self.vy: float = kwargs.get("vy", 0.0)
        self.fx: Optional[float] = kwargs.get("fx")
        self.fy: Optional[float] = kwargs.get("fy")

        # Copy any additional domain properties (e.g. a country code)
        for key, value in kwargs.items():
            if not hasattr(self, key):
                setattr(self, key, value)

    @property
    def pinned(self) -> bool:
        """True if either axis is pinned."""
        return self.fx is not None or self.fy is not None

    def __repr__(self) -> str:
        x = self.x if self.x is not None else float("nan")
        y = self.y if self.y is not None else float("nan")
        return f"Node(id={self.id!r}, x={x:.2f}, y={y:.2f})"


class Link:
    """
    Spring connecting two nodes.

    Attributes:
        source: Source node or node id
        target: Target node or node id
        distance: Rest distance (optional, falls back to the link force default)
        strength: Spring strength (optional, falls back to a degree-based value)
        index: Index in the links list (set by the simulation)
    """

    def __init__(
        self,
        source: Union[Node, Hashable],
        target: Union[Node, Hashable],
        distance: Optional[float] = None,
        strength: Optional[float] = None,
        **kwargs: Any,
    ) -> None:
        """
        Initialize link between two nodes.

        Args:
            source: Source node or node id (required)
            target: Target node or node id (required)
            distance: Rest distance (optional)
            strength: Spring strength (optional)

        Raises:
            ValueError: If source or target is None
        """
        if source is None:
            raise ValueError("Link source cannot be None")
        if target is None:
            raise ValueError("Link target cannot be None")

        self.source = source
        self.target = target
        self.distance = distance
        self.strength = strength
        self.index: Optional[int] = kwargs.pop("index", None)

        for key, value in kwargs.items():
            if not hasattr(self, key):
                setattr(self, key, value)

    def __repr__(self) -> str:
        src = self.source.id if isinstance(self.source, Node) else self.source
        tgt = self.target.id if isinstance(self.target, Node) else self.target
        return f"Link({src!r} -> {tgt!r})"


# Per-node parameter: a constant or a function of the node
NodeNumericAccessor = Union[float, Callable[[Node], float]]


# Type aliases for Pythonic API
NodeLike = Union[Node, dict[str, Any], Any]
"""Input type for nodes: Node objects, dicts, or objects with node attributes."""

LinkLike = Union[Link, dict[str, Any], Any]
"""Input type for links: Link objects, dicts, or objects with source/target."""

SizeType = Union[tuple[float, float], list[float], Sequence[float]]
"""Canvas size: (width, height) tuple, list, or sequence."""


__all__ = [
    "EventType",
    "Event",
    "PointSnapshot",
    "NodeSnapshot",
    "LinkSnapshot",
    "Snapshot",
    "Node",
    "Link",
    "NodeNumericAccessor",
    "NodeLike",
    "LinkLike",
    "SizeType",
]
