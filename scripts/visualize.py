#!/usr/bin/env python3
"""
Visualization script for the force simulation.

Generates images of a settled layout, of the layout cooling over time and
of a simulated drag into ./build/

Usage:
    uv run python scripts/visualize.py
    uv run python scripts/visualize.py --graph countries.json --id-key code --link-key index
"""

from __future__ import annotations

import argparse
from pathlib import Path

import matplotlib.pyplot as plt

from force_simulation import DragHandler, Simulation, SimulationConfig, load_graph

# Output directory
BUILD_DIR = Path(__file__).parent.parent / "build"

# Canvas and node box of the original country map
CANVAS = (900, 800)
NODE_SIZE = (16, 11)


def ensure_build_dir():
    """Create build directory if it doesn't exist."""
    BUILD_DIR.mkdir(exist_ok=True)


def canvas_config(**kwargs):
    """Configuration matching the country map front end."""
    kwargs.setdefault("charge_strength", -40)
    kwargs.setdefault("distance_max", 150)
    kwargs.setdefault("link_distance", 45)
    kwargs.setdefault("collide_radius", (NODE_SIZE[0] + 2) / 2)
    return SimulationConfig.for_canvas(CANVAS, margin=NODE_SIZE, **kwargs)


def draw_snapshot(snapshot, title="Force Simulation", ax=None, highlight=()):
    """Draw a simulation snapshot on an axis."""
    for link in snapshot["links"]:
        ax.plot(
            [link["source"]["x"], link["target"]["x"]],
            [link["source"]["y"], link["target"]["y"]],
            "gray",
            alpha=0.5,
            linewidth=1,
        )

    xs = [n["x"] for n in snapshot["nodes"]]
    ys = [n["y"] for n in snapshot["nodes"]]
    colors = ["crimson" if n["id"] in highlight else "steelblue" for n in snapshot["nodes"]]
    ax.scatter(xs, ys, s=40, c=colors, zorder=5, edgecolors="white", linewidth=0.5)

    ax.set_xlim(0, CANVAS[0])
    ax.set_ylim(CANVAS[1], 0)
    ax.set_title(f"{title} (alpha={snapshot['alpha']:.3f})", fontsize=10, fontweight="bold")
    ax.set_aspect("equal")
    ax.axis("off")


def save_figure(fig, filename):
    filepath = BUILD_DIR / filename
    fig.savefig(filepath, dpi=150, bbox_inches="tight", facecolor="white")
    plt.close(fig)
    print(f"  Saved: {filepath}")


def create_sample_graph(n=120, seed=3):
    """Create a clustered sample graph: rings of nodes joined by a few bridges."""
    import random

    rng = random.Random(seed)
    nodes = [{"id": i} for i in range(n)]
    links = []
    cluster = 12
    for start in range(0, n, cluster):
        members = list(range(start, min(start + cluster, n)))
        for a, b in zip(members, members[1:] + members[:1]):
            links.append({"source": a, "target": b})
        for _ in range(3):
            a, b = rng.sample(members, 2)
            links.append({"source": a, "target": b})
    for _ in range(n // cluster):
        a, b = rng.sample(range(n), 2)
        links.append({"source": a, "target": b})
    return nodes, links


def save_layout(nodes, links, filename):
    """Run a simulation to convergence and save the result."""
    simulation = Simulation(nodes, links, canvas_config())
    simulation.run()

    fig, ax = plt.subplots(figsize=(9, 8))
    draw_snapshot(simulation.snapshot(), f"Settled after {simulation.step_count} steps", ax=ax)
    save_figure(fig, filename)


def save_cooling(nodes, links, filename, frames=(0, 5, 20, 60, 150, 300)):
    """Save snapshots of the layout at several step counts."""
    captured = {}
    simulation = Simulation(nodes, links, canvas_config())
    captured[0] = simulation.snapshot()

    def on_tick(event):
        if simulation.step_count in frames:
            captured[simulation.step_count] = event["snapshot"]

    simulation.on("tick", on_tick)
    simulation.run()

    cols = 3
    rows = (len(captured) + cols - 1) // cols
    fig, axes = plt.subplots(rows, cols, figsize=(5 * cols, 4.5 * rows))
    axes = axes.flatten()
    for ax, (step, snapshot) in zip(axes, sorted(captured.items())):
        draw_snapshot(snapshot, f"Step {step}", ax=ax)
    for ax in axes[len(captured):]:
        ax.axis("off")

    fig.suptitle("Cooling", fontsize=14, fontweight="bold")
    plt.tight_layout()
    save_figure(fig, filename)


def save_drag(nodes, links, filename):
    """Drag one node across the canvas and save before/after images."""
    simulation = Simulation(nodes, links, canvas_config())
    simulation.run()
    before = simulation.snapshot()

    dragged = simulation.nodes[0].id
    drag = DragHandler(simulation)
    start = simulation.node(dragged)
    x, y = start.x, start.y
    drag.on_drag_start(dragged, x, y)
    for i in range(60):
        x += (150 - x) * 0.1
        y += (150 - y) * 0.1
        drag.on_drag_move(dragged, x, y)
        simulation.step()
    during = simulation.snapshot()
    drag.on_drag_end(dragged)
    simulation.run()

    fig, axes = plt.subplots(1, 3, figsize=(15, 4.5))
    draw_snapshot(before, "Before drag", ax=axes[0], highlight={dragged})
    draw_snapshot(during, "Dragging", ax=axes[1], highlight={dragged})
    draw_snapshot(simulation.snapshot(), "Released", ax=axes[2], highlight={dragged})
    fig.suptitle("Drag interaction", fontsize=14, fontweight="bold")
    plt.tight_layout()
    save_figure(fig, filename)


def generate_all(graph=None, id_key="id", link_key="id"):
    """Generate all visualization images."""
    ensure_build_dir()

    if graph is not None:
        nodes, links = load_graph(graph, id_key=id_key, link_key=link_key)
    else:
        nodes, links = create_sample_graph()
    print(f"Graph: {len(nodes)} nodes, {len(links)} links")

    print("Generating settled layout...")
    save_layout(nodes, links, "layout.png")

    print("Generating cooling sequence...")
    save_cooling(nodes, links, "cooling.png")

    print("Generating drag sequence...")
    save_drag(nodes, links, "drag.png")

    print()
    print(f"All images saved to: {BUILD_DIR.absolute()}")


def main():
    parser = argparse.ArgumentParser(description="Visualize the force simulation")
    parser.add_argument("--graph", type=Path, help="JSON graph file (defaults to a sample graph)")
    parser.add_argument("--id-key", default="id", help="Node field used as id")
    parser.add_argument(
        "--link-key", default="id", choices=["id", "index"], help="How links refer to nodes"
    )
    args = parser.parse_args()
    generate_all(args.graph, args.id_key, args.link_key)


if __name__ == "__main__":
    main()
