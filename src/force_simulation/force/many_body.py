"""
Many-body (charge) force.

Every node pushes (negative strength) or pulls (positive strength) every
other node with a magnitude that falls off as 1/distance. The pairwise sum
is approximated with the Barnes-Hut quadtree: distant clusters act as a
single charge at their center of mass.
"""

from __future__ import annotations

import math
import random
from typing import Optional, Sequence

from ..spatial.quadtree import Body, QuadTree
from ..types import Node, NodeNumericAccessor
from ..validation import ConfigurationError, validate_non_negative
from .base import Force, resolve_per_node


class ManyBodyForce(Force):
    """
    Simulated electrostatic repulsion (or gravity) between all nodes.

    Each node receives a velocity change of
    strength(other) * alpha * (other - node) / d^2 from every other node,
    which is a magnitude of strength * alpha / d along the separation.

    Example:
        charge = ManyBodyForce(strength=-40, distance_max=150)
        charge.initialize(nodes)
        charge.apply(nodes, alpha=1.0, index=None)
    """

    name = "charge"

    def __init__(
        self,
        strength: NodeNumericAccessor = -30.0,
        distance_min: float = 1.0,
        distance_max: float = math.inf,
        theta: float = 0.9,
    ) -> None:
        """
        Initialize many-body force.

        Args:
            strength: Charge per node (constant or function of the node).
                Negative values repel, positive values attract.
            distance_min: Distance floor; closer pairs are softened so that
                near-coincident nodes do not receive unbounded impulses.
            distance_max: Pairs farther apart than this do not interact.
            theta: Barnes-Hut threshold (0 = exact pairwise sum).
        """
        super().__init__()
        self._strength: NodeNumericAccessor = strength
        self._distance_min = validate_non_negative(distance_min, "distance_min")
        self._distance_max = validate_non_negative(distance_max, "distance_max")
        if self._distance_max < self._distance_min:
            raise ConfigurationError("distance_max must be >= distance_min")
        self._theta = validate_non_negative(theta, "theta")
        self._strengths: list[float] = []

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def strength(self) -> NodeNumericAccessor:
        """Get charge strength (constant or accessor)."""
        return self._strength

    @strength.setter
    def strength(self, value: NodeNumericAccessor) -> None:
        """Set charge strength and re-evaluate it for the bound nodes."""
        self._strength = value
        self._strengths = resolve_per_node(value, self._nodes)

    @property
    def distance_min(self) -> float:
        """Get the softening distance."""
        return self._distance_min

    @property
    def distance_max(self) -> float:
        """Get the interaction cutoff distance."""
        return self._distance_max

    @property
    def theta(self) -> float:
        """Get the Barnes-Hut threshold."""
        return self._theta

    @theta.setter
    def theta(self, value: float) -> None:
        """Set the Barnes-Hut threshold."""
        self._theta = validate_non_negative(value, "theta")

    # -------------------------------------------------------------------------
    # Force Implementation
    # -------------------------------------------------------------------------

    def initialize(self, nodes: Sequence[Node], rng: Optional[random.Random] = None) -> None:
        super().initialize(nodes, rng)
        self._strengths = resolve_per_node(self._strength, self._nodes)

    def apply(self, nodes: Sequence[Node], alpha: float, index: Optional[QuadTree]) -> None:
        if len(self._strengths) != len(nodes):
            self.initialize(nodes)

        if not any(self._strengths):
            return

        if index is None:
            tree = QuadTree.from_nodes(nodes, theta=self._theta, strengths=self._strengths)
        else:
            tree = index
            tree.reweight(self._strengths)

        for i, node in enumerate(nodes):
            dvx, dvy = tree.calculate_force(
                Body(node.x, node.y, index=i),
                alpha=alpha,
                distance_min=self._distance_min,
                distance_max=self._distance_max,
                jiggle=self.jiggle,
                theta=self._theta,
            )
            node.vx += dvx
            node.vy += dvy

    def __repr__(self) -> str:
        return (
            f"ManyBodyForce(strength={self._strength!r}, "
            f"distance_max={self._distance_max}, theta={self._theta})"
        )


__all__ = ["ManyBodyForce"]
