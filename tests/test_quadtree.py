"""Tests for QuadTree implementation and Barnes-Hut force approximation."""

import math

from force_simulation.spatial.quadtree import MAX_DEPTH, Body, QuadTree, QuadTreeNode
from force_simulation.types import Node


def _exact_velocity(bodies, target_idx, alpha=1.0):
    """Direct O(n^2) sum of mass * alpha * offset / d^2."""
    target = bodies[target_idx]
    fx, fy = 0.0, 0.0
    for i, body in enumerate(bodies):
        if i == target_idx:
            continue
        dx = body.x - target.x
        dy = body.y - target.y
        dist_sq = dx * dx + dy * dy
        fx += dx * body.mass * alpha / dist_sq
        fy += dy * body.mass * alpha / dist_sq
    return fx, fy


def _build(bodies, theta=0.9, bounds=(0, 0, 400, 400)):
    tree = QuadTree(bounds=bounds, theta=theta)
    for body in bodies:
        tree.insert(body)
    tree.compute_mass_distribution()
    return tree


class TestBody:
    """Tests for the Body dataclass."""

    def test_body_creation(self):
        """Test basic body creation."""
        body = Body(x=10.0, y=20.0, mass=-30.0, index=5)
        assert body.x == 10.0
        assert body.y == 20.0
        assert body.mass == -30.0
        assert body.index == 5

    def test_body_defaults(self):
        """Test body default values."""
        body = Body(x=0.0, y=0.0)
        assert body.mass == 1.0
        assert body.index == -1


class TestQuadTreeNode:
    """Tests for QuadTreeNode."""

    def test_node_creation(self):
        """Test node creation with bounds."""
        node = QuadTreeNode(x=50.0, y=50.0, half_size=50.0)
        assert node.half_size == 50.0
        assert node.is_empty()
        assert node.is_leaf()

    def test_contains(self):
        """Test point containment check, boundary inclusive."""
        node = QuadTreeNode(x=50.0, y=50.0, half_size=50.0)
        assert node.contains(25.0, 75.0)
        assert node.contains(0.0, 100.0)
        assert not node.contains(-1.0, 50.0)
        assert not node.contains(50.0, 101.0)

    def test_get_quadrant(self):
        """Test quadrant determination (0=NW, 1=NE, 2=SW, 3=SE)."""
        node = QuadTreeNode(x=50.0, y=50.0, half_size=50.0)
        assert node.get_quadrant(25.0, 25.0) == 0
        assert node.get_quadrant(75.0, 25.0) == 1
        assert node.get_quadrant(25.0, 75.0) == 2
        assert node.get_quadrant(75.0, 75.0) == 3

    def test_distance_to(self):
        """Test distance from a point to the region."""
        node = QuadTreeNode(x=50.0, y=50.0, half_size=50.0)
        assert node.distance_to(50.0, 50.0) == 0.0
        assert node.distance_to(110.0, 50.0) == 10.0
        assert abs(node.distance_to(103.0, 104.0) - 5.0) < 1e-12


class TestQuadTreeInsertion:
    """Tests for QuadTree insertion operations."""

    def test_empty_tree(self):
        """Test empty tree state."""
        tree = QuadTree(bounds=(0, 0, 100, 100))
        assert tree.body_count == 0
        assert tree.root.is_empty()

    def test_single_body_insertion(self):
        """Test inserting a single body keeps the root a leaf."""
        tree = QuadTree(bounds=(0, 0, 100, 100))
        body = Body(25.0, 25.0, index=0)
        tree.insert(body)

        assert tree.body_count == 1
        assert tree.root.bodies == [body]
        assert tree.root.is_leaf()

    def test_two_body_insertion(self):
        """Test inserting two bodies causes subdivision."""
        tree = QuadTree(bounds=(0, 0, 100, 100))
        tree.insert(Body(25.0, 25.0, index=0))
        tree.insert(Body(75.0, 75.0, index=1))

        assert tree.body_count == 2
        assert not tree.root.is_leaf()
        assert len(tree.root.iter_children()) == 2

    def test_coincident_bodies_share_leaf(self):
        """Test coincident bodies are stored together instead of recursing forever."""
        tree = QuadTree(bounds=(0, 0, 100, 100))
        for i in range(5):
            tree.insert(Body(40.0, 40.0, index=i))

        assert tree.body_count == 5
        assert tree.root.is_leaf()
        assert len(tree.root.bodies) == 5

    def test_nearly_coincident_bodies_bounded_depth(self):
        """Test bodies closer than float resolution stop subdividing at MAX_DEPTH."""
        tree = QuadTree(bounds=(0, 0, 100, 100))
        tree.insert(Body(50.0, 50.0, index=0))
        tree.insert(Body(50.0 + 1e-13, 50.0, index=1))

        depth = 0
        quad = tree.root
        while not quad.is_leaf():
            (quad,) = quad.iter_children()
            depth += 1
        assert depth <= MAX_DEPTH
        assert len(quad.bodies) == 2


class TestQuadTreeMassDistribution:
    """Tests for center of mass computation."""

    def test_single_body_mass(self):
        """Test mass distribution for single body."""
        tree = _build([Body(30.0, 40.0, mass=2.0, index=0)], bounds=(0, 0, 100, 100))
        assert tree.root.total_mass == 2.0
        assert tree.root.center_of_mass_x == 30.0
        assert tree.root.center_of_mass_y == 40.0

    def test_weighted_center_of_mass(self):
        """Test center of mass with different masses."""
        tree = _build(
            [Body(0.0, 0.0, mass=3.0, index=0), Body(100.0, 0.0, mass=1.0, index=1)],
            bounds=(0, 0, 100, 100),
        )
        assert tree.root.total_mass == 4.0
        assert abs(tree.root.center_of_mass_x - 25.0) < 1e-10

    def test_negative_masses_weighted_by_magnitude(self):
        """Test repulsive (negative) masses still give a center inside the cluster."""
        tree = _build(
            [Body(0.0, 0.0, mass=-30.0, index=0), Body(100.0, 0.0, mass=-10.0, index=1)],
            bounds=(0, 0, 100, 100),
        )
        assert tree.root.total_mass == -40.0
        assert tree.root.weight == 40.0
        assert abs(tree.root.center_of_mass_x - 25.0) < 1e-10

    def test_massless_subtree_uses_centroid(self):
        """Test zero-mass bodies aggregate to their geometric centroid."""
        tree = _build(
            [Body(20.0, 20.0, mass=0.0, index=0), Body(80.0, 60.0, mass=0.0, index=1)],
            bounds=(0, 0, 100, 100),
        )
        assert tree.root.weight == 0.0
        assert abs(tree.root.center_of_mass_x - 50.0) < 1e-10
        assert abs(tree.root.center_of_mass_y - 40.0) < 1e-10

    def test_reweight(self):
        """Test masses can be replaced without rebuilding the tree."""
        tree = _build(
            [Body(0.0, 0.0, index=0), Body(100.0, 0.0, index=1)],
            bounds=(0, 0, 100, 100),
        )
        tree.reweight([-1.0, -3.0])
        assert tree.root.total_mass == -4.0
        assert abs(tree.root.center_of_mass_x - 75.0) < 1e-10


class TestQuadTreeQueries:
    """Tests for neighbourhood queries."""

    def test_find_within(self):
        """Test radius query returns exactly the bodies in range."""
        bodies = [Body(float(x), float(y), index=i) for i, (x, y) in enumerate(
            [(10, 10), (12, 10), (50, 50), (90, 90), (10, 14)]
        )]
        tree = _build(bodies, bounds=(0, 0, 100, 100))

        found = sorted(b.index for b in tree.find_within(10.0, 10.0, 4.0))
        assert found == [0, 1, 4]

    def test_find_within_matches_brute_force(self):
        """Test radius query against a linear scan."""
        bodies = [
            Body(float((i * 37) % 101), float((i * 61) % 97), index=i) for i in range(200)
        ]
        tree = _build(bodies, bounds=(0, 0, 101, 101))

        for cx, cy, r in [(50, 50, 10), (0, 0, 25), (100, 20, 7.5)]:
            expected = {
                b.index for b in bodies if math.hypot(b.x - cx, b.y - cy) <= r
            }
            assert {b.index for b in tree.find_within(cx, cy, r)} == expected

    def test_nearest(self):
        """Test nearest-body query."""
        tree = _build(
            [Body(10.0, 10.0, index=0), Body(60.0, 60.0, index=1), Body(90.0, 10.0, index=2)],
            bounds=(0, 0, 100, 100),
        )
        assert tree.nearest(55.0, 50.0).index == 1
        assert tree.nearest(85.0, 0.0).index == 2

    def test_nearest_respects_radius(self):
        """Test nearest returns None when nothing lies within radius."""
        tree = _build([Body(10.0, 10.0, index=0)], bounds=(0, 0, 100, 100))
        assert tree.nearest(50.0, 50.0, radius=5.0) is None

    def test_queries_on_empty_tree(self):
        """Test queries on an empty tree."""
        tree = QuadTree(bounds=(0, 0, 100, 100))
        assert tree.find_within(0.0, 0.0, 100.0) == []
        assert tree.nearest(0.0, 0.0) is None


class TestQuadTreeForceCalculation:
    """Tests for Barnes-Hut force approximation."""

    def test_force_on_single_body(self):
        """Test that single body has no force on itself."""
        body = Body(50.0, 50.0, mass=-30.0, index=0)
        tree = _build([body], bounds=(0, 0, 100, 100))

        assert tree.calculate_force(body) == (0.0, 0.0)

    def test_repulsive_force_direction(self):
        """Test that negative masses push bodies apart."""
        bodies = [Body(40.0, 50.0, mass=-30.0, index=0), Body(60.0, 50.0, mass=-30.0, index=1)]
        tree = _build(bodies, bounds=(0, 0, 100, 100))

        fx0, fy0 = tree.calculate_force(bodies[0])
        fx1, fy1 = tree.calculate_force(bodies[1])
        assert fx0 < 0
        assert fx1 > 0
        assert fy0 == 0.0 and fy1 == 0.0

    def test_attractive_force_direction(self):
        """Test that positive masses pull bodies together."""
        bodies = [Body(40.0, 50.0, mass=5.0, index=0), Body(60.0, 50.0, mass=5.0, index=1)]
        tree = _build(bodies, bounds=(0, 0, 100, 100))

        fx0, _ = tree.calculate_force(bodies[0])
        assert fx0 > 0

    def test_force_magnitude_inverse_distance(self):
        """Test the velocity delta is mass * alpha / d along the offset."""
        source = Body(0.0, 50.0, mass=-30.0, index=0)
        tree = _build([source], bounds=(0, 0, 200, 100))

        fx, fy = tree.calculate_force(Body(20.0, 50.0, index=1), alpha=0.5)
        assert abs(fx - 30.0 * 0.5 / 20.0) < 1e-12
        assert fy == 0.0

    def test_distance_min_softening(self):
        """Test close pairs are softened instead of blowing up."""
        tree = _build([Body(0.5, 0.0, mass=-1.0, index=0)], bounds=(-1, -1, 1, 1))

        fx, _ = tree.calculate_force(Body(0.0, 0.0, index=1), distance_min=1.0)
        # d^2 = sqrt(1 * 0.25) = 0.5, dv = -1 * 0.5 / 0.5
        assert abs(fx - (-1.0)) < 1e-12

    def test_distance_max_cutoff(self):
        """Test bodies beyond distance_max contribute nothing."""
        bodies = [Body(0.0, 0.0, mass=-30.0, index=0), Body(300.0, 0.0, mass=-30.0, index=1)]
        tree = _build(bodies)

        assert tree.calculate_force(bodies[0], distance_max=150.0) == (0.0, 0.0)
        fx, _ = tree.calculate_force(bodies[0], distance_max=400.0)
        assert fx < 0

    def test_coincident_bodies_use_jiggle(self):
        """Test coincident bodies get a finite push only when a jiggle is supplied."""
        bodies = [Body(10.0, 10.0, mass=-30.0, index=0), Body(10.0, 10.0, mass=-30.0, index=1)]
        tree = _build(bodies, bounds=(0, 0, 100, 100))

        assert tree.calculate_force(bodies[0]) == (0.0, 0.0)

        fx, fy = tree.calculate_force(bodies[0], jiggle=lambda: 1e-7)
        assert math.isfinite(fx) and math.isfinite(fy)
        assert fx != 0.0 and fy != 0.0

    def test_theta_zero_exact(self):
        """Test that theta=0 matches the direct sum."""
        bodies = [
            Body(50.0, 50.0, mass=-30.0, index=0),
            Body(150.0, 50.0, mass=-30.0, index=1),
            Body(100.0, 150.0, mass=-10.0, index=2),
            Body(110.0, 160.0, mass=-10.0, index=3),
        ]
        tree = _build(bodies, theta=0.0, bounds=(0, 0, 200, 200))

        for i, body in enumerate(bodies):
            exact_fx, exact_fy = _exact_velocity(bodies, i)
            fx, fy = tree.calculate_force(body)
            assert abs(fx - exact_fx) < 1e-9
            assert abs(fy - exact_fy) < 1e-9

    def test_theta_override(self):
        """Test a per-query theta overrides the tree's threshold."""
        bodies = [Body(float(i % 10) * 3, float(i // 10) * 3, mass=-1.0, index=i) for i in range(50)]
        probe = Body(390.0, 390.0, mass=-1.0, index=99)
        tree = _build(bodies)

        exact_fx, exact_fy = _exact_velocity(bodies + [probe], 50)
        fx, fy = tree.calculate_force(probe, theta=0.0)
        assert abs(fx - exact_fx) < 1e-9
        assert abs(fy - exact_fy) < 1e-9

    def test_barnes_hut_vs_exact_cluster(self):
        """Test the approximation on a distant cluster stays close to exact."""
        cluster = [
            Body(10.0 + (i % 5), 10.0 + (i // 5), mass=-30.0, index=i) for i in range(25)
        ]
        probe = Body(390.0, 390.0, mass=-30.0, index=25)
        tree = _build(cluster + [probe], theta=0.9)

        exact_fx, exact_fy = _exact_velocity(cluster + [probe], 25)
        fx, fy = tree.calculate_force(probe)
        assert abs(fx - exact_fx) / abs(exact_fx) < 0.05
        assert abs(fy - exact_fy) / abs(exact_fy) < 0.05


class TestQuadTreeFromNodes:
    """Tests for building QuadTree from Node objects."""

    def test_from_nodes_empty(self):
        """Test building tree from empty node list."""
        tree = QuadTree.from_nodes([])
        assert tree.body_count == 0

    def test_from_nodes_basic(self):
        """Test building tree from Node objects."""
        nodes = [
            Node(x=10.0, y=20.0),
            Node(x=30.0, y=40.0),
            Node(x=50.0, y=60.0),
        ]
        tree = QuadTree.from_nodes(nodes)

        assert tree.body_count == 3
        assert tree.root.total_mass == 3.0
        assert sorted(b.index for b in tree.find_within(30.0, 40.0, 100.0)) == [0, 1, 2]

    def test_from_nodes_strengths(self):
        """Test per-node strengths become body masses."""
        nodes = [Node(x=0.0, y=0.0), Node(x=10.0, y=0.0)]
        tree = QuadTree.from_nodes(nodes, strengths=[-30.0, -10.0])
        assert tree.root.total_mass == -40.0

    def test_from_nodes_theta(self):
        """Test that theta parameter is passed correctly."""
        tree = QuadTree.from_nodes([Node(x=0, y=0)], theta=0.8)
        assert tree.theta == 0.8
