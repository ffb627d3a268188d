"""
Forces for the simulation.

Each force implements the same apply(nodes, alpha, index) contract and
is applied in registration order every step:
- ManyBodyForce: Barnes-Hut approximated charge between all nodes
- CenterForce: Rigid translation of the free nodes onto a target point
- LinkForce: Degree-weighted springs along links
- CollideForce: Overlap removal for circular nodes
"""

from .base import Force
from .center import CenterForce
from .collide import CollideForce
from .link import LinkForce, resolve_links
from .many_body import ManyBodyForce

__all__ = [
    "Force",
    "ManyBodyForce",
    "CenterForce",
    "LinkForce",
    "CollideForce",
    "resolve_links",
]
