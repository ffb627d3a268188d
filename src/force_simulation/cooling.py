"""
Cooling schedule for the simulation.

Alpha is the simulation "temperature": every force scales its effect by
it, and it decays geometrically toward alpha_target each step. The
simulation is considered converged once alpha falls to alpha_min.
"""

from __future__ import annotations

import math
from typing import Optional

from .config import DEFAULT_ALPHA_DECAY, DEFAULT_ALPHA_MIN
from .validation import validate_alpha


class Cooling:
    """
    Alpha (temperature) management.

    Example:
        cooling = Cooling()
        while cooling.is_warm:
            ...  # apply forces scaled by cooling.alpha
            cooling.decay()

        # Interaction: keep the simulation warm while a node is dragged
        cooling.reheat(0.2)
        ...
        cooling.cool()
    """

    def __init__(
        self,
        alpha: float = 1.0,
        alpha_min: float = DEFAULT_ALPHA_MIN,
        alpha_decay: float = DEFAULT_ALPHA_DECAY,
        alpha_target: float = 0.0,
    ) -> None:
        """
        Initialize cooling schedule.

        Args:
            alpha: Initial alpha (0 to 1)
            alpha_min: Convergence threshold
            alpha_decay: Fraction of the gap to alpha_target closed per step
            alpha_target: Value alpha decays toward
        """
        self._alpha: float = max(0.0, min(1.0, float(alpha)))
        self._alpha_min: float = validate_alpha(alpha_min, "alpha_min")
        self._alpha_decay: float = validate_alpha(alpha_decay, "alpha_decay")
        self._alpha_target: float = validate_alpha(alpha_target, "alpha_target")

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def alpha(self) -> float:
        """Get current alpha (temperature/energy)."""
        return self._alpha

    @alpha.setter
    def alpha(self, value: float) -> None:
        """Set alpha (temperature/energy), clamped to [0, 1]."""
        self._alpha = max(0.0, min(1.0, float(value)))

    @property
    def alpha_min(self) -> float:
        """Get minimum alpha (convergence threshold)."""
        return self._alpha_min

    @alpha_min.setter
    def alpha_min(self, value: float) -> None:
        """Set minimum alpha (convergence threshold)."""
        self._alpha_min = validate_alpha(value, "alpha_min")

    @property
    def alpha_decay(self) -> float:
        """Get alpha decay rate."""
        return self._alpha_decay

    @alpha_decay.setter
    def alpha_decay(self, value: float) -> None:
        """Set alpha decay rate (0 to 1)."""
        self._alpha_decay = validate_alpha(value, "alpha_decay")

    @property
    def alpha_target(self) -> float:
        """Get the value alpha decays toward."""
        return self._alpha_target

    @alpha_target.setter
    def alpha_target(self, value: float) -> None:
        """Set the value alpha decays toward (0 to 1)."""
        self._alpha_target = validate_alpha(value, "alpha_target")

    @property
    def is_warm(self) -> bool:
        """True while the simulation is still moving (alpha > alpha_min)."""
        return self._alpha > self._alpha_min

    # -------------------------------------------------------------------------
    # Schedule
    # -------------------------------------------------------------------------

    def decay(self) -> float:
        """
        Move alpha one step toward alpha_target.

        Returns:
            The new alpha
        """
        self._alpha += (self._alpha_target - self._alpha) * self._alpha_decay
        return self._alpha

    def reheat(self, target: float = 0.2, reset: bool = False) -> None:
        """
        Keep the simulation warm, e.g. while a node is being dragged.

        Args:
            target: New alpha_target
            reset: If True, restart from alpha = 1
        """
        self.alpha_target = target
        if reset:
            self._alpha = 1.0
        elif self._alpha < self._alpha_target:
            self._alpha = self._alpha_target

    def cool(self) -> None:
        """Let the simulation settle gradually (alpha_target = 0)."""
        self._alpha_target = 0.0

    def steps_to_converge(self) -> Optional[int]:
        """
        Number of decay() calls until alpha <= alpha_min.

        Returns:
            Step count (0 if already converged), or None if alpha_target
            keeps alpha above alpha_min forever.
        """
        if not self.is_warm:
            return 0
        if self._alpha_target >= self._alpha_min or self._alpha_decay <= 0:
            return None
        if self._alpha_decay >= 1:
            return 1

        # alpha_k - target = (alpha - target) * (1 - decay)^k
        gap = self._alpha - self._alpha_target
        needed = self._alpha_min - self._alpha_target
        steps = math.ceil(math.log(needed / gap) / math.log(1 - self._alpha_decay))
        # Guard against rounding at the boundary
        return max(1, steps) + 1

    def __repr__(self) -> str:
        return (
            f"Cooling(alpha={self._alpha:.4f}, alpha_min={self._alpha_min}, "
            f"alpha_target={self._alpha_target})"
        )


__all__ = ["Cooling"]
