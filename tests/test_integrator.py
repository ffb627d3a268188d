"""Tests for velocity integration, pinning and clamping."""

import math

import pytest

from force_simulation.config import Bounds
from force_simulation.integrator import Integrator
from force_simulation.types import Node
from force_simulation.validation import ConfigurationError


def integrate(integrator, nodes):
    """Run one integration step, recording start positions like the driver does."""
    previous = [(n.x, n.y) for n in nodes]
    integrator.integrate(nodes, previous)


class TestIntegrator:
    """Tests for Integrator."""

    def test_default_velocity_decay(self):
        """Test default friction multiplier."""
        assert Integrator().velocity_decay == 0.6

    def test_invalid_velocity_decay(self):
        """Test velocity decay outside [0, 1] is rejected."""
        with pytest.raises(ConfigurationError, match="velocity_decay"):
            Integrator(velocity_decay=1.5)

    def test_euler_step(self):
        """Test v *= decay; x += v."""
        node = Node(x=10.0, y=20.0, vx=5.0, vy=-10.0)
        integrate(Integrator(0.6), [node])
        assert node.vx == 3.0
        assert node.vy == -6.0
        assert node.x == 13.0
        assert node.y == 14.0

    def test_zero_velocity_no_motion(self):
        """Test nodes at rest stay put."""
        node = Node(x=1.0, y=2.0)
        integrate(Integrator(), [node])
        assert (node.x, node.y) == (1.0, 2.0)

    def test_pinned_node_snaps_to_pin(self):
        """Test a pinned node ends the step at its pin with zero velocity."""
        node = Node(x=0.0, y=0.0, vx=50.0, vy=50.0, fx=7.0, fy=8.0)
        integrate(Integrator(), [node])
        assert (node.x, node.y) == (7.0, 8.0)
        assert (node.vx, node.vy) == (0.0, 0.0)

    def test_single_axis_pin(self):
        """Test pins are honoured per axis."""
        node = Node(x=0.0, y=0.0, vx=10.0, vy=10.0, fx=5.0)
        integrate(Integrator(0.5), [node])
        assert node.x == 5.0
        assert node.vx == 0.0
        assert node.y == 5.0
        assert node.vy == 5.0

    def test_clamp_both_axes(self):
        """Test free nodes are clamped on both axes."""
        bounds = Bounds(16, 11, 884, 789)
        nodes = [
            Node(x=880.0, y=780.0, vx=100.0, vy=100.0),
            Node(x=20.0, y=20.0, vx=-100.0, vy=-100.0),
        ]
        integrate(Integrator(1.0, bounds), nodes)
        assert (nodes[0].x, nodes[0].y) == (884.0, 789.0)
        assert (nodes[1].x, nodes[1].y) == (16.0, 11.0)

    def test_clamp_keeps_velocity(self):
        """Test clamping sets position only."""
        node = Node(x=95.0, y=50.0, vx=20.0)
        integrate(Integrator(1.0, Bounds(0, 0, 100, 100)), [node])
        assert node.x == 100.0
        assert node.vx == 20.0

    def test_pin_outside_bounds_wins(self):
        """Test a pinned axis is never clamped."""
        node = Node(x=0.0, y=0.0, fx=500.0, fy=-50.0)
        integrate(Integrator(bounds=Bounds(0, 0, 100, 100)), [node])
        assert (node.x, node.y) == (500.0, -50.0)

    def test_non_finite_reset(self):
        """Test NaN or infinite values fall back to the previous position."""
        nodes = [
            Node(x=1.0, y=2.0, vx=math.nan, vy=0.5),
            Node(x=3.0, y=4.0, vx=1.0, vy=math.inf),
        ]
        integrate(Integrator(1.0), nodes)

        assert (nodes[0].x, nodes[0].vx) == (1.0, 0.0)
        assert (nodes[0].y, nodes[0].vy) == (2.5, 0.5)
        assert (nodes[1].x, nodes[1].vx) == (4.0, 1.0)
        assert (nodes[1].y, nodes[1].vy) == (4.0, 0.0)

    def test_all_positions_finite(self):
        """Test no non-finite value escapes a step."""
        nodes = [
            Node(x=0.0, y=0.0, vx=math.inf, vy=-math.inf),
            Node(x=0.0, y=0.0, vx=math.nan, vy=math.nan),
        ]
        integrate(Integrator(), nodes)
        for node in nodes:
            assert all(math.isfinite(v) for v in (node.x, node.y, node.vx, node.vy))
