"""
Drag interaction adapter.

Translates pointer drag gestures into pin/reheat/cool calls on a
Simulation. While at least one node is held the simulation is kept warm;
once the last drag ends it is allowed to settle again.
"""

from __future__ import annotations

import warnings
from typing import Hashable

from .simulation import Simulation
from .validation import NotFoundError

# alpha_target while a node is held
DRAG_ALPHA_TARGET = 0.2


class DragHandler:
    """
    Pointer drag adapter for a Simulation.

    Example:
        drag = DragHandler(simulation)
        drag.on_drag_start("FR", x, y)
        drag.on_drag_move("FR", x + 5, y)
        simulation.step()
        drag.on_drag_end("FR")
    """

    def __init__(self, simulation: Simulation, alpha_target: float = DRAG_ALPHA_TARGET) -> None:
        """
        Initialize drag handler.

        Args:
            simulation: Simulation to drive
            alpha_target: alpha_target used while any node is held
        """
        self.simulation = simulation
        self.alpha_target = alpha_target
        self._active: set[Hashable] = set()

    @property
    def active(self) -> frozenset[Hashable]:
        """Ids of the nodes currently held."""
        return frozenset(self._active)

    def on_drag_start(self, node_id: Hashable, x: float, y: float) -> bool:
        """
        Pin the node under the pointer and reheat the simulation.

        Returns:
            True if the node was found
        """
        if not self._pin(node_id, x, y):
            return False
        if not self._active:
            self.simulation.reheat(self.alpha_target)
        self._active.add(node_id)
        return True

    def on_drag_move(self, node_id: Hashable, x: float, y: float) -> bool:
        """
        Move the pin of a held node.

        Returns:
            True if the node was found
        """
        return self._pin(node_id, x, y)

    def on_drag_end(self, node_id: Hashable) -> bool:
        """
        Release the node and let the simulation cool once nothing is held.

        Returns:
            True if the node was found
        """
        try:
            self.simulation.unpin(node_id)
        except NotFoundError as exc:
            warnings.warn(f"Ignoring drag end: {exc}", stacklevel=2)
            return False
        self._active.discard(node_id)
        if not self._active:
            self.simulation.cool()
        return True

    def _pin(self, node_id: Hashable, x: float, y: float) -> bool:
        try:
            self.simulation.pin(node_id, x, y)
        except NotFoundError as exc:
            warnings.warn(f"Ignoring drag: {exc}", stacklevel=3)
            return False
        return True


__all__ = ["DragHandler", "DRAG_ALPHA_TARGET"]
