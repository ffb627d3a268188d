"""
Centering force.

Translates the free nodes so that their mean position moves onto a target
point. This is a rigid position correction rather than a force: velocities
are left alone and the shift is not scaled by alpha.
"""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from ..spatial.quadtree import QuadTree
from ..types import Node
from ..validation import validate_non_negative
from .base import Force


class CenterForce(Force):
    """
    Keep the graph centred on (x, y).

    Each step every unpinned node is shifted by (target - mean) * strength,
    where mean is the centroid of the unpinned nodes. Pinned nodes are
    neither counted nor moved, so dragging a node does not drag the
    centroid computation along with it.

    Example:
        center = CenterForce(450, 400)
        center.apply(nodes, alpha=1.0, index=None)
    """

    name = "center"

    def __init__(self, x: float = 0.0, y: float = 0.0, strength: float = 1.0) -> None:
        """
        Initialize centering force.

        Args:
            x: Target X coordinate
            y: Target Y coordinate
            strength: Fraction of the offset corrected per step (1 = snap)
        """
        super().__init__()
        self.x = float(x)
        self.y = float(y)
        self._strength = validate_non_negative(strength, "strength")

    @property
    def strength(self) -> float:
        """Get correction strength."""
        return self._strength

    @strength.setter
    def strength(self, value: float) -> None:
        """Set correction strength."""
        self._strength = validate_non_negative(value, "strength")

    def apply(self, nodes: Sequence[Node], alpha: float, index: Optional[QuadTree]) -> None:
        free = [node for node in nodes if not node.pinned]
        if not free or not self._strength:
            return

        xs = np.fromiter((node.x for node in free), dtype=np.float64, count=len(free))
        ys = np.fromiter((node.y for node in free), dtype=np.float64, count=len(free))
        dx = (self.x - float(xs.mean())) * self._strength
        dy = (self.y - float(ys.mean())) * self._strength

        for node in free:
            node.x += dx
            node.y += dy

    def __repr__(self) -> str:
        return f"CenterForce(x={self.x}, y={self.y}, strength={self._strength})"


__all__ = ["CenterForce"]
