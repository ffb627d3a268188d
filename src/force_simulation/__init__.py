"""
force-simulation: A d3-style force-directed graph layout engine in Python.

This package simulates nodes and links as a physical system and cools it
step by step until the layout settles.

Components:
- simulation: Step/run driver with events, pinning and reheating
- force: Many-body (Barnes-Hut), centering, link and collision forces
- spatial: Quadtree with mass aggregation and neighbourhood queries
- drag: Pointer drag adapter for interactive use
- io: JSON graph loading
"""

__version__ = "0.1.0"

# Configuration
from .config import (
    DEFAULT_ALPHA_DECAY,
    DEFAULT_ALPHA_MIN,
    Bounds,
    SimulationConfig,
)
from .cooling import Cooling
from .drag import DragHandler

# Forces
from .force import (
    CenterForce,
    CollideForce,
    Force,
    LinkForce,
    ManyBodyForce,
)
from .integrator import Integrator
from .io import graph_from_dict, load_graph
from .simulation import Simulation

# Spatial data structures
from .spatial import Body, QuadTree, QuadTreeNode
from .types import (
    Event,
    EventType,
    Link,
    LinkLike,
    Node,
    NodeLike,
    NodeNumericAccessor,
    SizeType,
    Snapshot,
)

# Validation utilities
from .validation import (
    ConfigurationError,
    NotFoundError,
    SimulationError,
    StateError,
    validate_canvas_size,
    validate_link_endpoints,
    validate_node_ids,
)

__all__ = [
    # Version
    "__version__",
    # Shared types
    "Node",
    "Link",
    "EventType",
    "Event",
    "Snapshot",
    "NodeNumericAccessor",
    # Type aliases for API
    "NodeLike",
    "LinkLike",
    "SizeType",
    # Configuration
    "SimulationConfig",
    "Bounds",
    "DEFAULT_ALPHA_MIN",
    "DEFAULT_ALPHA_DECAY",
    # Engine
    "Simulation",
    "Cooling",
    "Integrator",
    "DragHandler",
    # Forces
    "Force",
    "ManyBodyForce",
    "CenterForce",
    "LinkForce",
    "CollideForce",
    # Spatial
    "QuadTree",
    "QuadTreeNode",
    "Body",
    # IO
    "graph_from_dict",
    "load_graph",
    # Validation
    "SimulationError",
    "ConfigurationError",
    "NotFoundError",
    "StateError",
    "validate_node_ids",
    "validate_link_endpoints",
    "validate_canvas_size",
]
