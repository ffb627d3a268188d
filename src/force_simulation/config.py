"""
Simulation configuration.

All tunables of the engine live in a single validated dataclass so that
a simulation can be rebuilt from the same parameters, and so that the
Barnes-Hut threshold and collision iteration count are explicit settings
rather than hidden constants.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Any, Optional

from .types import NodeNumericAccessor, SizeType
from .validation import (
    ConfigurationError,
    validate_alpha,
    validate_canvas_size,
    validate_iterations,
    validate_non_negative,
)

# Default decay cools from alpha=1 to alpha_min in 300 steps
DEFAULT_ALPHA_MIN = 0.001
DEFAULT_ALPHA_DECAY = 1 - math.pow(DEFAULT_ALPHA_MIN, 1 / 300)


@dataclass(frozen=True)
class Bounds:
    """
    Axis-aligned clamp box applied to node positions.

    Attributes:
        min_x, min_y: Lower corner
        max_x, max_y: Upper corner
    """

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    def __post_init__(self) -> None:
        if self.min_x > self.max_x or self.min_y > self.max_y:
            raise ConfigurationError(
                f"Bounds are inverted: ({self.min_x}, {self.min_y}) - ({self.max_x}, {self.max_y})"
            )

    @classmethod
    def from_size(cls, size: SizeType, margin: SizeType = (0.0, 0.0)) -> Bounds:
        """
        Build a clamp box for a canvas, inset by a per-axis margin.

        Args:
            size: Canvas (width, height)
            margin: (x_margin, y_margin) kept clear on every side

        Returns:
            Bounds spanning [margin, size - margin] on each axis
        """
        width, height = validate_canvas_size(size)
        mx, my = float(margin[0]), float(margin[1])
        return cls(mx, my, width - mx, height - my)

    def clamp(self, x: float, y: float) -> tuple[float, float]:
        """Clamp a point into the box."""
        return (
            max(self.min_x, min(self.max_x, x)),
            max(self.min_y, min(self.max_y, y)),
        )


@dataclass
class SimulationConfig:
    """
    Tunable parameters for a force simulation.

    Cooling:
        alpha: Initial alpha (0 to 1)
        alpha_min: Convergence threshold
        alpha_decay: Fraction of the gap to alpha_target closed per step
        alpha_target: Value alpha decays toward
        velocity_decay: Per-step velocity multiplier (friction)

    Many-body force:
        charge_strength: Negative repels, positive attracts
        distance_min: Distance floor for coincident/near nodes
        distance_max: Cutoff beyond which nodes do not interact
        theta: Barnes-Hut approximation threshold

    Centering force:
        center: Target point
        center_strength: Fraction of the offset corrected per step

    Link force:
        link_distance: Default rest distance
        link_strength: Default strength, or None for degree-based strength
        link_iterations: Relaxation passes per step

    Collision force:
        collide_radius: Node radius (constant or function of the node)
        collide_strength: Fraction of the overlap removed per pass
        collide_iterations: Relaxation passes per step

    Integration:
        bounds: Clamp box for positions, or None for an unbounded plane
        random_seed: Seed for the jiggle used to separate coincident nodes
    """

    alpha: float = 1.0
    alpha_min: float = DEFAULT_ALPHA_MIN
    alpha_decay: float = DEFAULT_ALPHA_DECAY
    alpha_target: float = 0.0
    velocity_decay: float = 0.6

    charge_strength: NodeNumericAccessor = -30.0
    distance_min: float = 1.0
    distance_max: float = math.inf
    theta: float = 0.9

    center: tuple[float, float] = (0.0, 0.0)
    center_strength: float = 1.0

    link_distance: float = 30.0
    link_strength: Optional[float] = None
    link_iterations: int = 1

    collide_radius: NodeNumericAccessor = 1.0
    collide_strength: float = 1.0
    collide_iterations: int = 1

    bounds: Optional[Bounds] = None
    random_seed: Optional[int] = 0

    def __post_init__(self) -> None:
        self.alpha = validate_alpha(self.alpha)
        self.alpha_min = validate_alpha(self.alpha_min, "alpha_min")
        self.alpha_decay = validate_alpha(self.alpha_decay, "alpha_decay")
        self.alpha_target = validate_alpha(self.alpha_target, "alpha_target")
        self.velocity_decay = validate_alpha(self.velocity_decay, "velocity_decay")

        self.distance_min = validate_non_negative(self.distance_min, "distance_min")
        self.distance_max = validate_non_negative(self.distance_max, "distance_max")
        if self.distance_max < self.distance_min:
            raise ConfigurationError(
                f"distance_max ({self.distance_max}) must be >= distance_min ({self.distance_min})"
            )
        self.theta = validate_non_negative(self.theta, "theta")
        self.center_strength = validate_non_negative(self.center_strength, "center_strength")

        self.link_distance = validate_non_negative(self.link_distance, "link_distance")
        self.link_iterations = validate_iterations(self.link_iterations, "link_iterations")
        self.collide_strength = validate_alpha(self.collide_strength, "collide_strength")
        self.collide_iterations = validate_iterations(
            self.collide_iterations, "collide_iterations"
        )

        self.center = (float(self.center[0]), float(self.center[1]))

    @classmethod
    def for_canvas(
        cls,
        size: SizeType,
        margin: SizeType = (0.0, 0.0),
        **kwargs: Any,
    ) -> SimulationConfig:
        """
        Build a config centred on a canvas and clamped to it.

        Args:
            size: Canvas (width, height)
            margin: Per-axis margin kept clear of the canvas edges
            **kwargs: Any other SimulationConfig field

        Example:
            config = SimulationConfig.for_canvas(
                (900, 800),
                margin=(16, 11),
                charge_strength=-40,
                distance_max=150,
                link_distance=45,
                collide_radius=9,
            )
        """
        width, height = validate_canvas_size(size)
        kwargs.setdefault("center", (width / 2, height / 2))
        kwargs.setdefault("bounds", Bounds.from_size((width, height), margin))
        return cls(**kwargs)

    def evolve(self, **changes: Any) -> SimulationConfig:
        """Return a copy with some fields replaced (re-validated)."""
        return replace(self, **changes)


__all__ = [
    "DEFAULT_ALPHA_MIN",
    "DEFAULT_ALPHA_DECAY",
    "Bounds",
    "SimulationConfig",
]
