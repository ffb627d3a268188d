"""Tests for the pointer drag adapter."""

import pytest

from force_simulation import DragHandler, Simulation


def create_simulation():
    """Create a settled A-B-C chain."""
    nodes = [{"id": "A"}, {"id": "B"}, {"id": "C"}]
    links = [{"source": "A", "target": "B"}, {"source": "B", "target": "C"}]
    simulation = Simulation(nodes, links)
    simulation.run()
    return simulation


class TestDragHandler:
    """Tests for DragHandler."""

    def test_drag_start_pins_and_reheats(self):
        """Test drag start pins the node and keeps the simulation warm."""
        simulation = create_simulation()
        drag = DragHandler(simulation)

        assert drag.on_drag_start("A", 10.0, 20.0)
        node = simulation.node("A")
        assert (node.fx, node.fy) == (10.0, 20.0)
        assert simulation.alpha_target == 0.2
        assert simulation.cooling.is_warm
        assert drag.active == {"A"}

    def test_drag_move_updates_pin(self):
        """Test drag moves follow the pointer."""
        simulation = create_simulation()
        drag = DragHandler(simulation)
        drag.on_drag_start("A", 10.0, 20.0)
        drag.on_drag_move("A", 15.0, 25.0)
        simulation.step()

        node = simulation.node("A")
        assert (node.x, node.y) == (15.0, 25.0)

    def test_drag_end_unpins_and_cools(self):
        """Test drag end releases the node and lets the simulation settle."""
        simulation = create_simulation()
        drag = DragHandler(simulation)
        drag.on_drag_start("A", 10.0, 20.0)
        for _ in range(5):
            simulation.step()

        assert drag.on_drag_end("A")
        node = simulation.node("A")
        assert node.fx is None and node.fy is None
        assert simulation.alpha_target == 0.0
        assert not drag.active

        simulation.run()
        assert not simulation.cooling.is_warm

    def test_concurrent_drags(self):
        """Test the simulation stays warm until the last drag ends."""
        simulation = create_simulation()
        drag = DragHandler(simulation)
        drag.on_drag_start("A", 0.0, 0.0)
        drag.on_drag_start("C", 50.0, 0.0)

        drag.on_drag_end("A")
        assert simulation.alpha_target == 0.2

        drag.on_drag_end("C")
        assert simulation.alpha_target == 0.0

    def test_custom_alpha_target(self):
        """Test the drag alpha_target is configurable."""
        simulation = create_simulation()
        drag = DragHandler(simulation, alpha_target=0.3)
        drag.on_drag_start("B", 0.0, 0.0)
        assert simulation.alpha_target == 0.3

    def test_unknown_node_warns(self):
        """Test unknown ids warn and leave the simulation untouched."""
        simulation = create_simulation()
        drag = DragHandler(simulation)
        alpha = simulation.alpha

        with pytest.warns(UserWarning, match="Unknown node id 'Z'"):
            assert not drag.on_drag_start("Z", 0.0, 0.0)
        with pytest.warns(UserWarning, match="Ignoring drag"):
            assert not drag.on_drag_move("Z", 0.0, 0.0)
        with pytest.warns(UserWarning, match="Ignoring drag end"):
            assert not drag.on_drag_end("Z")

        assert simulation.alpha == alpha
        assert simulation.alpha_target == 0.0
        assert not drag.active
