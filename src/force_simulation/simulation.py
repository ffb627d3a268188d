"""
Force simulation driver.

The Simulation owns the node and link state and advances it one step at a
time. A step builds the spatial index, applies every registered force in
order, integrates velocities and decays alpha. Stepping is synchronous and
performs no I/O, so an external clock (an animation frame callback, a test
loop) decides when to call step().
"""

from __future__ import annotations

import math
import random
from typing import TYPE_CHECKING, Any, Callable, Hashable, Optional, Sequence

if TYPE_CHECKING:
    from typing_extensions import Self

from .config import SimulationConfig
from .cooling import Cooling
from .force import CenterForce, CollideForce, Force, LinkForce, ManyBodyForce, resolve_links
from .integrator import Integrator
from .spatial.quadtree import QuadTree
from .types import Event, EventType, Link, LinkLike, Node, NodeLike, Snapshot
from .validation import NotFoundError, StateError, validate_finite, validate_node_ids

# Phyllotaxis placement for nodes without a position
INITIAL_RADIUS = 10.0
INITIAL_ANGLE = math.pi * (3 - math.sqrt(5))


class Simulation:
    """
    Force-directed graph simulation.

    Provides:
    - Node/link normalization and validation
    - Ordered force registry (many-body, centering, link, collision)
    - Step loop with alpha cooling and convergence
    - Pin/unpin and reheat/cool for interactive dragging
    - Event system (start/tick/end)

    Example:
        simulation = Simulation(
            nodes=[{"id": "A"}, {"id": "B"}, {"id": "C"}],
            links=[{"source": "A", "target": "B"}, {"source": "B", "target": "C"}],
            config=SimulationConfig(link_distance=25),
        )
        simulation.run()

        for node in simulation.nodes:
            print(f"Node {node.id}: ({node.x}, {node.y})")
    """

    def __init__(
        self,
        nodes: Optional[Sequence[NodeLike]] = None,
        links: Optional[Sequence[LinkLike]] = None,
        config: Optional[SimulationConfig] = None,
        *,
        forces: Optional[Sequence[Force]] = None,
        on_start: Optional[Callable[[Optional[Event]], None]] = None,
        on_tick: Optional[Callable[[Optional[Event]], None]] = None,
        on_end: Optional[Callable[[Optional[Event]], None]] = None,
    ) -> None:
        """
        Create a simulation, initializing it if nodes are given.

        Args:
            nodes: Node records (Node objects, dicts, or objects with attributes)
            links: Link records whose source/target are node ids or Nodes
            config: Tunable parameters (defaults to SimulationConfig())
            forces: Explicit ordered forces replacing the default set
            on_start: Callback for start event
            on_tick: Callback for tick event (once per step)
            on_end: Callback for end event
        """
        self._config: SimulationConfig = config if config is not None else SimulationConfig()
        self._nodes: list[Node] = []
        self._links: list[Link] = []
        self._by_id: dict[Hashable, Node] = {}
        self._forces: list[Force] = []
        self._cooling = Cooling(
            alpha=self._config.alpha,
            alpha_min=self._config.alpha_min,
            alpha_decay=self._config.alpha_decay,
            alpha_target=self._config.alpha_target,
        )
        self._integrator = Integrator(self._config.velocity_decay, self._config.bounds)
        self._random = random.Random(self._config.random_seed)
        self._events: dict[EventType, Callable[[Optional[Event]], None]] = {}
        self._initialized: bool = False
        self._running: bool = False
        self._step_count: int = 0

        if on_start:
            self._events[EventType.start] = on_start
        if on_tick:
            self._events[EventType.tick] = on_tick
        if on_end:
            self._events[EventType.end] = on_end

        if nodes is not None:
            self.initialize(nodes, links or [], forces=forces)

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def nodes(self) -> list[Node]:
        """Get the list of nodes."""
        return self._nodes

    @property
    def links(self) -> list[Link]:
        """Get the list of resolved links."""
        return self._links

    @property
    def forces(self) -> list[Force]:
        """Get the registered forces, in application order."""
        return list(self._forces)

    @property
    def config(self) -> SimulationConfig:
        """Get the configuration the simulation was initialized with."""
        return self._config

    @property
    def cooling(self) -> Cooling:
        """Get the cooling schedule."""
        return self._cooling

    @property
    def integrator(self) -> Integrator:
        """Get the integrator."""
        return self._integrator

    @property
    def alpha(self) -> float:
        """Get current alpha (temperature/energy)."""
        return self._cooling.alpha

    @alpha.setter
    def alpha(self, value: float) -> None:
        """Set alpha, clamped to [0, 1]."""
        self._cooling.alpha = value

    @property
    def alpha_target(self) -> float:
        """Get the value alpha decays toward."""
        return self._cooling.alpha_target

    @alpha_target.setter
    def alpha_target(self, value: float) -> None:
        """Set the value alpha decays toward."""
        self._cooling.alpha_target = value

    @property
    def initialized(self) -> bool:
        """True once initialize() has succeeded and until discard()."""
        return self._initialized

    @property
    def running(self) -> bool:
        """True while run() is stepping."""
        return self._running

    @property
    def step_count(self) -> int:
        """Number of steps since initialization."""
        return self._step_count

    # -------------------------------------------------------------------------
    # Event System
    # -------------------------------------------------------------------------

    def on(self, event: EventType | str, callback: Callable[[Optional[Event]], None]) -> Self:
        """
        Subscribe to a simulation event.

        Args:
            event: Event type (EventType enum or string name)
            callback: Function to call when event fires

        Returns:
            self (for chaining)
        """
        if isinstance(event, str):
            event = EventType[event]
        self._events[event] = callback
        return self

    def trigger(self, event: Event) -> None:
        """
        Trigger an event, calling the registered callback.

        Args:
            event: Event payload with type and optional data
        """
        event_type = event.get("type")
        if event_type is not None and event_type in self._events:
            self._events[event_type](event)

    # -------------------------------------------------------------------------
    # Lifecycle Methods
    # -------------------------------------------------------------------------

    def initialize(
        self,
        nodes: Sequence[NodeLike],
        links: Sequence[LinkLike] = (),
        config: Optional[SimulationConfig] = None,
        forces: Optional[Sequence[Force]] = None,
    ) -> Self:
        """
        Load a node/link set and register forces.

        Args:
            nodes: Node records; ids must be unique (missing ids default to
                the node's index)
            links: Link records referencing node ids
            config: Replaces the current configuration if given
            forces: Explicit ordered forces; defaults to many-body, centering,
                link and collision built from the configuration

        Returns:
            self (for chaining)

        Raises:
            ConfigurationError: On duplicate node ids or unresolvable links,
                or non-finite pins.
        """
        if config is not None:
            self._config = config
        cfg = self._config

        node_list = [_as_node(record) for record in nodes]
        for i, node in enumerate(node_list):
            node.index = i
            if node.id is None:
                node.id = i
            if node.fx is not None:
                node.fx = validate_finite(node.fx, f"Node {node.id!r} fx")
            if node.fy is not None:
                node.fy = validate_finite(node.fy, f"Node {node.id!r} fy")
        validate_node_ids(node.id for node in node_list)
        link_list = resolve_links(links, node_list)

        self._nodes = node_list
        self._links = link_list
        self._by_id = {node.id: node for node in node_list}
        self._initialize_positions()

        self._cooling = Cooling(
            alpha=cfg.alpha,
            alpha_min=cfg.alpha_min,
            alpha_decay=cfg.alpha_decay,
            alpha_target=cfg.alpha_target,
        )
        self._integrator = Integrator(cfg.velocity_decay, cfg.bounds)
        self._random = random.Random(cfg.random_seed)

        self._forces = list(forces) if forces is not None else self._default_forces()
        for force in self._forces:
            if isinstance(force, LinkForce) and not force.source_links:
                force.source_links = self._links
            force.initialize(self._nodes, self._random)

        self._initialized = True
        self._running = False
        self._step_count = 0
        return self

    def _default_forces(self) -> list[Force]:
        """Build the default ordered force set from the configuration."""
        cfg = self._config
        return [
            ManyBodyForce(
                strength=cfg.charge_strength,
                distance_min=cfg.distance_min,
                distance_max=cfg.distance_max,
                theta=cfg.theta,
            ),
            CenterForce(cfg.center[0], cfg.center[1], strength=cfg.center_strength),
            LinkForce(
                self._links,
                distance=cfg.link_distance,
                strength=cfg.link_strength,
                iterations=cfg.link_iterations,
            ),
            CollideForce(
                radius=cfg.collide_radius,
                strength=cfg.collide_strength,
                iterations=cfg.collide_iterations,
            ),
        ]

    def _initialize_positions(self) -> None:
        """
        Place nodes without a position on a phyllotaxis spiral.

        Pinned axes start at their pin; non-finite velocities are reset.
        """
        cx, cy = self._config.center
        for i, node in enumerate(self._nodes):
            if node.fx is not None:
                node.x = node.fx
            if node.fy is not None:
                node.y = node.fy
            if not (_is_finite(node.x) and _is_finite(node.y)):
                radius = INITIAL_RADIUS * math.sqrt(0.5 + i)
                angle = i * INITIAL_ANGLE
                node.x = cx + radius * math.cos(angle)
                node.y = cy + radius * math.sin(angle)
            node.x = float(node.x)  # type: ignore[arg-type]
            node.y = float(node.y)  # type: ignore[arg-type]
            node.vx = float(node.vx) if _is_finite(node.vx) else 0.0
            node.vy = float(node.vy) if _is_finite(node.vy) else 0.0

    def step(self) -> float:
        """
        Advance the simulation by one step.

        Builds the spatial index, applies every force in order, integrates
        velocities, decays alpha and fires a tick event.

        Returns:
            The new alpha

        Raises:
            StateError: If the simulation is not initialized.
        """
        self._require_initialized()

        previous = [(node.x, node.y) for node in self._nodes]
        index = QuadTree.from_nodes(self._nodes, theta=self._config.theta)
        alpha = self._cooling.alpha
        for force in self._forces:
            force.apply(self._nodes, alpha, index)

        self._integrator.integrate(self._nodes, previous)
        alpha = self._cooling.decay()
        self._step_count += 1

        if EventType.tick in self._events:
            self.trigger({"type": EventType.tick, "alpha": alpha, "snapshot": self.snapshot()})
        return alpha

    def run(self, max_steps: Optional[int] = None) -> Self:
        """
        Step until alpha <= alpha_min, stop() is called, or max_steps is hit.

        Without max_steps the convergence check is repeated before every
        step, so a tick listener may reheat or retarget alpha mid-run.

        Args:
            max_steps: Upper bound on steps. Required when alpha_target keeps
                the simulation warm indefinitely.

        Returns:
            self (for chaining)

        Raises:
            StateError: If not initialized, or if the schedule can never
                converge and no max_steps is given.
        """
        self._require_initialized()
        if max_steps is None:
            self._require_convergent()

        self._running = True
        self.trigger({"type": EventType.start, "alpha": self._cooling.alpha})

        steps = 0
        try:
            while self._running and self._cooling.is_warm:
                if max_steps is not None:
                    if steps >= max_steps:
                        break
                else:
                    self._require_convergent()
                self.step()
                steps += 1
        finally:
            self._running = False

        self.trigger({"type": EventType.end, "alpha": self._cooling.alpha})
        return self

    def restart(self, max_steps: Optional[int] = None) -> Self:
        """Run again from the current alpha, e.g. after moving nodes externally."""
        return self.run(max_steps)

    def stop(self) -> Self:
        """Stop run() after the current step. State is kept."""
        self._running = False
        return self

    def discard(self) -> None:
        """Drop all node/link state. The simulation must be re-initialized."""
        self._nodes = []
        self._links = []
        self._by_id = {}
        self._forces = []
        self._initialized = False
        self._running = False

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise StateError("Simulation has no node set; call initialize() first")

    def _require_convergent(self) -> None:
        if self._cooling.steps_to_converge() is None:
            raise StateError(
                f"alpha_target ({self._cooling.alpha_target}) keeps alpha above "
                f"alpha_min ({self._cooling.alpha_min}); pass max_steps or call cool()"
            )

    # -------------------------------------------------------------------------
    # Interaction
    # -------------------------------------------------------------------------

    def node(self, node_id: Hashable) -> Node:
        """
        Look up a node by id.

        Raises:
            NotFoundError: If no node has this id.
        """
        try:
            return self._by_id[node_id]
        except KeyError:
            raise NotFoundError(f"Unknown node id {node_id!r}") from None

    def pin(self, node_id: Hashable, x: float, y: float) -> Self:
        """
        Fix a node at (x, y). Forces no longer move it.

        Raises:
            NotFoundError: If no node has this id.
            ConfigurationError: If x or y is NaN or infinite.
        """
        x = validate_finite(x, "x")
        y = validate_finite(y, "y")
        node = self.node(node_id)
        node.fx = x
        node.fy = y
        return self

    def unpin(self, node_id: Hashable) -> Self:
        """
        Release a pinned node back to the forces.

        Raises:
            NotFoundError: If no node has this id.
        """
        node = self.node(node_id)
        node.fx = None
        node.fy = None
        return self

    def reheat(self, target: float = 0.2, reset: bool = False) -> Self:
        """Raise alpha_target so the simulation keeps moving (see Cooling.reheat)."""
        self._cooling.reheat(target, reset=reset)
        return self

    def cool(self) -> Self:
        """Return alpha_target to 0 so the simulation settles."""
        self._cooling.cool()
        return self

    def find(self, x: float, y: float, radius: float = math.inf) -> Optional[Node]:
        """
        Find the node closest to (x, y) within radius.

        Returns:
            The closest node, or None if none lies within radius.
        """
        if not self._nodes:
            return None
        body = QuadTree.from_nodes(self._nodes).nearest(x, y, radius)
        return self._nodes[body.index] if body is not None else None

    def force(self, name: str) -> Optional[Force]:
        """Get the first registered force with this name, or None."""
        for force in self._forces:
            if force.name == name:
                return force
        return None

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    def snapshot(self) -> Snapshot:
        """
        Renderer-facing view of the current positions.

        Returns:
            Node positions keyed by id and resolved link endpoint positions.
        """
        return {
            "alpha": self._cooling.alpha,
            "nodes": [{"id": n.id, "x": n.x, "y": n.y} for n in self._nodes],  # type: ignore[misc]
            "links": [
                {
                    "source": {"x": link.source.x, "y": link.source.y},  # type: ignore[union-attr]
                    "target": {"x": link.target.x, "y": link.target.y},  # type: ignore[union-attr]
                }
                for link in self._links
            ],
        }

    def __repr__(self) -> str:
        return (
            f"Simulation(nodes={len(self._nodes)}, links={len(self._links)}, "
            f"alpha={self._cooling.alpha:.4f})"
        )


def _as_node(node_data: NodeLike) -> Node:
    """Convert a node-like record to a Node."""
    if isinstance(node_data, Node):
        return node_data
    if isinstance(node_data, dict):
        return Node(**node_data)

    # Generic object - copy attributes
    node = Node()
    for attr in ["id", "x", "y", "vx", "vy", "fx", "fy"]:
        if hasattr(node_data, attr):
            setattr(node, attr, getattr(node_data, attr))
    for attr in dir(node_data):
        if not attr.startswith("_") and not hasattr(node, attr):
            setattr(node, attr, getattr(node_data, attr))
    return node


def _is_finite(value: Any) -> bool:
    return value is not None and math.isfinite(value)


__all__ = ["Simulation", "INITIAL_RADIUS", "INITIAL_ANGLE"]
