"""
Collision force.

Treats nodes as circles and pushes overlapping pairs apart by directly
correcting their positions. Candidate pairs come from a quadtree query, so
a pass costs O(n log n) instead of O(n^2).
"""

from __future__ import annotations

import math
import random
from typing import Optional, Sequence

from ..spatial.quadtree import QuadTree
from ..types import Node, NodeNumericAccessor
from ..validation import validate_alpha, validate_iterations
from .base import Force, resolve_per_node


class CollideForce(Force):
    """
    Prevent node overlap.

    For every pair closer than the sum of their radii, both nodes are moved
    apart along the line between their centres by the overlap times
    strength. The correction is split by squared radius (larger circles
    move less). A pinned node absorbs none of the correction; its partner
    absorbs all of it.

    Candidate pairs are queried once per pass, before any correction is
    made. A single pass therefore separates isolated pairs, but inside a
    cluster a correction can push a node into a neighbour the query did not
    return. Raise iterations for dense clusters.

    Example:
        collide = CollideForce(radius=9)
        collide.apply(nodes, alpha=1.0, index=None)
    """

    name = "collide"

    def __init__(
        self,
        radius: NodeNumericAccessor = 1.0,
        strength: float = 1.0,
        iterations: int = 1,
    ) -> None:
        """
        Initialize collision force.

        Args:
            radius: Circle radius per node (constant or function of the node)
            strength: Fraction of the overlap removed per pass (0 to 1)
            iterations: Relaxation passes per step
        """
        super().__init__()
        self._radius: NodeNumericAccessor = radius
        self._strength: float = validate_alpha(strength, "strength")
        self._iterations: int = validate_iterations(iterations)
        self._radii: list[float] = []

    @property
    def radius(self) -> NodeNumericAccessor:
        """Get radius (constant or accessor)."""
        return self._radius

    @radius.setter
    def radius(self, value: NodeNumericAccessor) -> None:
        """Set radius and re-evaluate it for the bound nodes."""
        self._radius = value
        self._radii = resolve_per_node(value, self._nodes)

    @property
    def strength(self) -> float:
        """Get overlap correction strength."""
        return self._strength

    @strength.setter
    def strength(self, value: float) -> None:
        """Set overlap correction strength (0 to 1)."""
        self._strength = validate_alpha(value, "strength")

    @property
    def iterations(self) -> int:
        """Get relaxation passes per step."""
        return self._iterations

    @iterations.setter
    def iterations(self, value: int) -> None:
        """Set relaxation passes per step (minimum 1)."""
        self._iterations = validate_iterations(value)

    def initialize(self, nodes: Sequence[Node], rng: Optional[random.Random] = None) -> None:
        super().initialize(nodes, rng)
        self._radii = resolve_per_node(self._radius, self._nodes)

    def apply(self, nodes: Sequence[Node], alpha: float, index: Optional[QuadTree]) -> None:
        if len(self._radii) != len(nodes):
            self.initialize(nodes)
        if not nodes or not self._strength:
            return

        radii = self._radii
        max_radius = max(radii)
        if max_radius <= 0:
            return

        for _ in range(self._iterations):
            # Corrections move nodes, so each pass queries fresh positions
            tree = QuadTree.from_nodes(nodes)
            for i, node in enumerate(nodes):
                ri = radii[i]
                for body in tree.find_within(node.x, node.y, ri + max_radius):
                    # Each unordered pair once
                    if body.index <= i:
                        continue
                    self._separate(node, nodes[body.index], ri, radii[body.index])

    def _separate(self, a: Node, b: Node, ra: float, rb: float) -> None:
        """Push a and b apart if their circles overlap."""
        reach = ra + rb
        dx = a.x - b.x
        dy = a.y - b.y
        dist_sq = dx * dx + dy * dy
        if dist_sq >= reach * reach:
            return

        if a.pinned and b.pinned:
            return
        if a.pinned:
            wa, wb = 0.0, 1.0
        elif b.pinned:
            wa, wb = 1.0, 0.0
        else:
            ra_sq, rb_sq = ra * ra, rb * rb
            wa = rb_sq / (ra_sq + rb_sq)
            wb = 1.0 - wa

        if dist_sq == 0:
            dx = self.jiggle()
            dy = self.jiggle()
            dist_sq = dx * dx + dy * dy
        dist = math.sqrt(dist_sq)

        factor = (reach - dist) / dist * self._strength
        dx *= factor
        dy *= factor
        a.x += dx * wa
        a.y += dy * wa
        b.x -= dx * wb
        b.y -= dy * wb

    def __repr__(self) -> str:
        return (
            f"CollideForce(radius={self._radius!r}, strength={self._strength}, "
            f"iterations={self._iterations})"
        )


__all__ = ["CollideForce"]
