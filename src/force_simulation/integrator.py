"""
Velocity integration.

Turns the velocity accumulated by the forces into a position update,
applies friction, enforces pins and clamps free nodes to a bounding box.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

from .config import Bounds
from .types import Node
from .validation import validate_alpha


class Integrator:
    """
    Explicit Euler step with velocity decay.

    Per free axis: v *= velocity_decay; p += v.
    Per pinned axis: p = pin; v = 0.

    Clamping only sets the position of free axes; the velocity is kept so a
    node pressed against the boundary keeps pushing and is re-clamped on
    the next step. Pinned axes are never clamped, the pin always wins.
    """

    def __init__(self, velocity_decay: float = 0.6, bounds: Optional[Bounds] = None) -> None:
        """
        Initialize integrator.

        Args:
            velocity_decay: Per-step velocity multiplier (0 = no memory, 1 = no friction)
            bounds: Clamp box for free nodes, or None for an unbounded plane
        """
        self._velocity_decay = validate_alpha(velocity_decay, "velocity_decay")
        self.bounds = bounds

    @property
    def velocity_decay(self) -> float:
        """Get per-step velocity multiplier."""
        return self._velocity_decay

    @velocity_decay.setter
    def velocity_decay(self, value: float) -> None:
        """Set per-step velocity multiplier (0 to 1)."""
        self._velocity_decay = validate_alpha(value, "velocity_decay")

    def integrate(self, nodes: Sequence[Node], previous: Sequence[tuple[float, float]]) -> None:
        """
        Advance every node by one step.

        Args:
            nodes: Nodes with accumulated velocities
            previous: Positions at the start of the step, used to recover
                from non-finite values produced by degenerate input
        """
        decay = self._velocity_decay
        bounds = self.bounds

        for node, (px, py) in zip(nodes, previous):
            if node.fx is None:
                node.vx *= decay
                node.x += node.vx
                if not (math.isfinite(node.x) and math.isfinite(node.vx)):
                    node.x, node.vx = px, 0.0
            else:
                node.x = node.fx
                node.vx = 0.0

            if node.fy is None:
                node.vy *= decay
                node.y += node.vy
                if not (math.isfinite(node.y) and math.isfinite(node.vy)):
                    node.y, node.vy = py, 0.0
            else:
                node.y = node.fy
                node.vy = 0.0

            if bounds is not None:
                cx, cy = bounds.clamp(node.x, node.y)
                if node.fx is None:
                    node.x = cx
                if node.fy is None:
                    node.y = cy

    def __repr__(self) -> str:
        return f"Integrator(velocity_decay={self._velocity_decay}, bounds={self.bounds!r})"


__all__ = ["Integrator"]
