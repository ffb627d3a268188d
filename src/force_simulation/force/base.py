"""
Base class for simulation forces.

A force is a stateless-between-steps operation on the node list. The
simulation calls initialize() whenever the node set changes and apply()
once per step, in registration order.
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from ..spatial.quadtree import QuadTree
from ..types import Node, NodeNumericAccessor

# Magnitude of the offset used to separate exactly coincident points
JIGGLE_SCALE = 1e-6


class Force(ABC):
    """
    Abstract base class for all forces.

    Subclasses accumulate velocity deltas (or apply position corrections)
    on the nodes passed to apply().
    """

    #: Name used to look the force up on a simulation
    name: str = "force"

    def __init__(self) -> None:
        self._nodes: list[Node] = []
        self._random: random.Random = random.Random(0)

    def initialize(self, nodes: Sequence[Node], rng: Optional[random.Random] = None) -> None:
        """
        Bind the force to a node list.

        Args:
            nodes: Nodes owned by the simulation (indices already assigned)
            rng: Shared random source for jiggle; keeps runs reproducible
        """
        self._nodes = list(nodes)
        if rng is not None:
            self._random = rng

    @abstractmethod
    def apply(self, nodes: Sequence[Node], alpha: float, index: Optional[QuadTree]) -> None:
        """
        Apply the force for one step.

        Args:
            nodes: Current node list
            alpha: Current simulation alpha
            index: Spatial index built from positions at the start of the step
        """
        pass

    def jiggle(self) -> float:
        """Tiny non-zero random offset for breaking coincidence."""
        value = (self._random.random() - 0.5) * JIGGLE_SCALE
        return value if value else JIGGLE_SCALE / 2

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


def resolve_per_node(value: NodeNumericAccessor, nodes: Sequence[Node]) -> list[float]:
    """Evaluate a constant-or-callable parameter for every node."""
    if callable(value):
        return [float(value(node)) for node in nodes]
    return [float(value)] * len(nodes)


__all__ = ["Force", "JIGGLE_SCALE", "resolve_per_node"]
