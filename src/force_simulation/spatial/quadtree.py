"""
Quadtree implementation for Barnes-Hut force approximation.

The quadtree recursively subdivides 2D space into quadrants,
enabling O(n log n) approximate n-body force calculations and
sub-quadratic proximity queries for collision detection.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

from ..types import Node

# Bodies closer than the region size at this depth share a leaf
MAX_DEPTH = 48


@dataclass
class Body:
    """A body (node) with position and mass for force calculations."""

    x: float
    y: float
    mass: float = 1.0
    index: int = -1  # Original node index


@dataclass
class QuadTreeNode:
    """
    A node in the quadtree.

    Attributes:
        x, y: Center of this region
        half_size: Half the width/height of this region
        center_of_mass_x/y: Center of mass of bodies in this subtree,
            weighted by absolute mass
        total_mass: Signed total mass of bodies in this subtree
        weight: Total absolute mass of bodies in this subtree
        bodies: Bodies stored in this leaf (several when coincident)
        children: Four child quadrants [NW, NE, SW, SE] if internal
    """

    x: float
    y: float
    half_size: float

    # Aggregated properties
    center_of_mass_x: float = 0.0
    center_of_mass_y: float = 0.0
    total_mass: float = 0.0
    weight: float = 0.0

    # Content
    bodies: List[Body] = field(default_factory=list)
    children: Optional[List[Optional[QuadTreeNode]]] = None

    def is_leaf(self) -> bool:
        """True if this node has no children."""
        return self.children is None

    def is_empty(self) -> bool:
        """True if this node contains no bodies."""
        return not self.bodies and self.children is None

    def contains(self, x: float, y: float) -> bool:
        """Check if point (x, y) is within this node's region."""
        return abs(x - self.x) <= self.half_size and abs(y - self.y) <= self.half_size

    def distance_to(self, x: float, y: float) -> float:
        """Distance from (x, y) to the nearest point of this region (0 if inside)."""
        dx = max(abs(x - self.x) - self.half_size, 0.0)
        dy = max(abs(y - self.y) - self.half_size, 0.0)
        return math.sqrt(dx * dx + dy * dy)

    def get_quadrant(self, x: float, y: float) -> int:
        """
        Get quadrant index for a point.

        Returns:
            0=NW, 1=NE, 2=SW, 3=SE
        """
        east = x >= self.x
        south = y >= self.y
        return (2 if south else 0) + (1 if east else 0)

    def iter_children(self) -> List[QuadTreeNode]:
        """Non-empty child quadrants."""
        if self.children is None:
            return []
        return [child for child in self.children if child is not None]


class QuadTree:
    """
    Barnes-Hut quadtree for approximate force calculations.

    The Barnes-Hut algorithm uses a quadtree to approximate long-range
    forces. For distant clusters, the algorithm treats the cluster as
    a single body at its center of mass, reducing complexity from
    O(n^2) to O(n log n).

    Usage:
        tree = QuadTree.from_nodes(nodes, theta=0.9, strengths=strengths)

        # Velocity delta on a body from every other body
        dvx, dvy = tree.calculate_force(body, alpha=1.0)

        # Candidate neighbours for collision detection
        near = tree.find_within(x, y, radius)

    The theta parameter controls the accuracy/speed tradeoff:
    - theta = 0: Exact calculation (no approximation)
    - theta = 0.9: Default, coarse but stable for layout
    - theta = 1.0+: Fast but less accurate
    """

    def __init__(
        self,
        bounds: Tuple[float, float, float, float],
        theta: float = 0.9,
    ):
        """
        Initialize quadtree.

        Args:
            bounds: (min_x, min_y, max_x, max_y) bounding box
            theta: Barnes-Hut threshold (0 = exact, higher = more approximation)
        """
        min_x, min_y, max_x, max_y = bounds
        center_x = (min_x + max_x) / 2
        center_y = (min_y + max_y) / 2
        # Use max dimension to ensure square region
        half_size = max(max_x - min_x, max_y - min_y) / 2

        self.root = QuadTreeNode(center_x, center_y, half_size)
        self.theta = theta
        self.body_count = 0

    def insert(self, body: Body) -> None:
        """Insert a body into the quadtree."""
        self._insert_into(self.root, body, 0)
        self.body_count += 1

    def _insert_into(self, node: QuadTreeNode, body: Body, depth: int) -> None:
        """Recursively insert body into subtree rooted at node."""
        if node.is_empty():
            node.bodies.append(body)
            return

        if node.is_leaf():
            first = node.bodies[0]
            if (first.x == body.x and first.y == body.y) or depth >= MAX_DEPTH:
                # Coincident bodies cannot be separated by subdividing
                node.bodies.append(body)
                return

            # Leaf with existing bodies - must subdivide
            existing = node.bodies
            node.bodies = []
            node.children = [None, None, None, None]
            for other in existing:
                self._insert_into_child(node, other, depth)

        self._insert_into_child(node, body, depth)

    def _insert_into_child(self, node: QuadTreeNode, body: Body, depth: int) -> None:
        """Insert body into the appropriate child of node."""
        assert node.children is not None
        quadrant = node.get_quadrant(body.x, body.y)

        child = node.children[quadrant]
        if child is None:
            hs = node.half_size / 2
            cx = node.x + hs * (1 if quadrant & 1 else -1)
            cy = node.y + hs * (1 if quadrant & 2 else -1)
            child = node.children[quadrant] = QuadTreeNode(cx, cy, hs)

        self._insert_into(child, body, depth + 1)

    def compute_mass_distribution(self) -> None:
        """Compute center of mass for all nodes (post-order traversal)."""
        self.visit_after(self._compute_mass)

    def reweight(self, masses: Sequence[float]) -> None:
        """
        Replace body masses (indexed by body.index) and re-aggregate.

        Lets one geometric index serve forces with different per-node weights.
        """

        def assign(quad: QuadTreeNode) -> None:
            for body in quad.bodies:
                body.mass = masses[body.index]
            self._compute_mass(quad)

        self.visit_after(assign)

    @staticmethod
    def _compute_mass(node: QuadTreeNode) -> None:
        """Aggregate mass of a node whose children are already aggregated."""
        if node.is_leaf():
            parts = [(b.mass, abs(b.mass), b.x, b.y) for b in node.bodies]
        else:
            parts = [
                (c.total_mass, c.weight, c.center_of_mass_x, c.center_of_mass_y)
                for c in node.iter_children()
            ]

        if not parts:
            return

        node.total_mass = sum(p[0] for p in parts)
        node.weight = sum(p[1] for p in parts)
        if node.weight > 0:
            node.center_of_mass_x = sum(p[1] * p[2] for p in parts) / node.weight
            node.center_of_mass_y = sum(p[1] * p[3] for p in parts) / node.weight
        else:
            # Massless subtree: fall back to the geometric centroid
            node.center_of_mass_x = sum(p[2] for p in parts) / len(parts)
            node.center_of_mass_y = sum(p[3] for p in parts) / len(parts)

    # -------------------------------------------------------------------------
    # Traversal
    # -------------------------------------------------------------------------

    def visit(self, callback: Callable[[QuadTreeNode], bool]) -> None:
        """
        Pre-order traversal with early exit.

        Args:
            callback: Called for every non-empty quad. Returning True prunes
                the quad (its children are not visited).
        """
        if self.root.is_empty():
            return
        stack = [self.root]
        while stack:
            quad = stack.pop()
            if not callback(quad):
                stack.extend(quad.iter_children())

    def visit_after(self, callback: Callable[[QuadTreeNode], None]) -> None:
        """Post-order traversal: children are visited before their parent."""
        order: List[QuadTreeNode] = []
        stack = [self.root]
        while stack:
            quad = stack.pop()
            order.append(quad)
            stack.extend(quad.iter_children())
        for quad in reversed(order):
            callback(quad)

    def find_within(self, x: float, y: float, radius: float) -> List[Body]:
        """
        Find all bodies within radius of a point.

        Quads whose nearest possible point is farther than radius are pruned.
        """
        found: List[Body] = []
        r_sq = radius * radius

        def check(quad: QuadTreeNode) -> bool:
            if quad.distance_to(x, y) > radius:
                return True
            for body in quad.bodies:
                dx = body.x - x
                dy = body.y - y
                if dx * dx + dy * dy <= r_sq:
                    found.append(body)
            return False

        self.visit(check)
        return found

    def nearest(self, x: float, y: float, radius: float = math.inf) -> Optional[Body]:
        """
        Find the body closest to a point, or None if none lies within radius.
        """
        best: List[Optional[Body]] = [None]
        best_dist = [radius]

        def check(quad: QuadTreeNode) -> bool:
            if quad.distance_to(x, y) > best_dist[0]:
                return True
            for body in quad.bodies:
                dist = math.hypot(body.x - x, body.y - y)
                if dist <= best_dist[0]:
                    best[0] = body
                    best_dist[0] = dist
            return False

        self.visit(check)
        return best[0]

    # -------------------------------------------------------------------------
    # Barnes-Hut
    # -------------------------------------------------------------------------

    def calculate_force(
        self,
        body: Body,
        alpha: float = 1.0,
        distance_min: float = 1.0,
        distance_max: float = math.inf,
        jiggle: Optional[Callable[[], float]] = None,
        theta: Optional[float] = None,
    ) -> Tuple[float, float]:
        """
        Calculate the approximate velocity change on a body.

        Every other body contributes mass * alpha * (other - body) / d^2,
        so negative masses repel and positive masses attract. If a cluster
        is sufficiently far away (size/distance < theta) it is treated as
        a single mass at its center of mass.

        Args:
            body: The body to calculate force on
            alpha: Current simulation alpha
            distance_min: Distances below this are softened to avoid blow-up
            distance_max: Bodies farther than this are ignored
            jiggle: Source of tiny random offsets for coincident bodies
            theta: Overrides the tree's Barnes-Hut threshold for this query

        Returns:
            (dvx, dvy) velocity delta
        """
        if self.root.is_empty():
            return 0.0, 0.0
        return self._calculate_force(
            self.root,
            body,
            alpha,
            distance_min * distance_min,
            distance_max * distance_max,
            jiggle,
            self.theta if theta is None else theta,
        )

    def _calculate_force(
        self,
        node: QuadTreeNode,
        body: Body,
        alpha: float,
        dmin_sq: float,
        dmax_sq: float,
        jiggle: Optional[Callable[[], float]],
        theta: float,
    ) -> Tuple[float, float]:
        """Recursively calculate force contribution from node."""
        if not node.weight:
            return 0.0, 0.0

        if node.is_leaf():
            fx, fy = 0.0, 0.0
            for other in node.bodies:
                # Skip self-interaction (same body)
                if other.index == body.index:
                    continue
                dx = other.x - body.x
                dy = other.y - body.y
                dist_sq = dx * dx + dy * dy
                if dist_sq >= dmax_sq:
                    continue
                cfx, cfy = _pair_force(dx, dy, dist_sq, other.mass, alpha, dmin_sq, jiggle)
                fx += cfx
                fy += cfy
            return fx, fy

        dx = node.center_of_mass_x - body.x
        dy = node.center_of_mass_y - body.y
        dist_sq = dx * dx + dy * dy
        width = node.half_size * 2

        # Barnes-Hut criterion: s/d < theta, for clusters not enclosing the body
        if width * width < theta * theta * dist_sq and not node.contains(body.x, body.y):
            if dist_sq >= dmax_sq:
                return 0.0, 0.0
            return _pair_force(dx, dy, dist_sq, node.total_mass, alpha, dmin_sq, jiggle)

        # Whole region out of range
        nearest = node.distance_to(body.x, body.y)
        if nearest * nearest >= dmax_sq:
            return 0.0, 0.0

        # Node is too close - recurse into children
        fx, fy = 0.0, 0.0
        for child in node.iter_children():
            cfx, cfy = self._calculate_force(
                child, body, alpha, dmin_sq, dmax_sq, jiggle, theta
            )
            fx += cfx
            fy += cfy
        return fx, fy

    @classmethod
    def from_nodes(
        cls,
        nodes: Sequence[Node],
        padding: float = 1.0,
        theta: float = 0.9,
        strengths: Optional[Sequence[float]] = None,
    ) -> QuadTree:
        """
        Build quadtree from a list of Node objects.

        Args:
            nodes: List of Node objects with x, y attributes
            padding: Padding around bounding box
            theta: Barnes-Hut threshold
            strengths: Per-node mass (many-body strength); defaults to 1.0

        Returns:
            QuadTree with all nodes inserted and mass computed
        """
        if not nodes:
            return cls((0, 0, 100, 100), theta=theta)

        min_x = min(n.x for n in nodes) - padding
        min_y = min(n.y for n in nodes) - padding
        max_x = max(n.x for n in nodes) + padding
        max_y = max(n.y for n in nodes) + padding

        tree = cls((min_x, min_y, max_x, max_y), theta=theta)

        for i, node in enumerate(nodes):
            mass = strengths[i] if strengths is not None else 1.0
            tree.insert(Body(node.x, node.y, mass=mass, index=i))

        tree.compute_mass_distribution()
        return tree


def _pair_force(
    dx: float,
    dy: float,
    dist_sq: float,
    mass: float,
    alpha: float,
    dmin_sq: float,
    jiggle: Optional[Callable[[], float]],
) -> Tuple[float, float]:
    """Velocity change from a single (possibly aggregated) mass at offset (dx, dy)."""
    if dist_sq == 0:
        if jiggle is None:
            return 0.0, 0.0
        dx = jiggle()
        dy = jiggle()
        dist_sq = dx * dx + dy * dy
    if dist_sq < dmin_sq:
        # Soften: geometric mean of the true and minimum squared distance
        dist_sq = math.sqrt(dmin_sq * dist_sq)
    factor = mass * alpha / dist_sq
    return dx * factor, dy * factor


__all__ = ["Body", "QuadTree", "QuadTreeNode", "MAX_DEPTH"]
