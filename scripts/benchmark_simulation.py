#!/usr/bin/env python3
"""
Benchmark the force simulation on generated graphs.

Times a full cooling run for several graph sizes and Barnes-Hut thresholds,
and reports the per-step cost.

Usage:
    uv run python scripts/benchmark_simulation.py
    uv run python scripts/benchmark_simulation.py --sizes 100,500,2000 --thetas 0.5,0.9
    uv run python scripts/benchmark_simulation.py --max-steps 50 --output results.json
"""

from __future__ import annotations

import argparse
import json
import random
import time
from typing import Any

from force_simulation import Simulation, SimulationConfig


def generate_barabasi_albert(n: int, m: int, seed: int | None = None) -> tuple[list[dict], list[dict]]:
    """Preferential-attachment graph: each new node links to m existing nodes."""
    rng = random.Random(seed)
    nodes = [{"id": i} for i in range(n)]
    links = []
    targets = list(range(min(m, n)))
    repeated: list[int] = []

    for source in range(len(targets), n):
        for target in set(targets):
            links.append({"source": source, "target": target})
        repeated.extend(targets)
        repeated.extend([source] * m)
        targets = [rng.choice(repeated) for _ in range(m)]

    return nodes, links


def benchmark_simulation(
    nodes: list[dict],
    links: list[dict],
    config: SimulationConfig,
    max_steps: int | None = None,
) -> dict[str, Any]:
    """
    Time a single simulation run.

    Returns:
        Dict with timing and result info
    """
    # Fresh node copies so no positions carry over between runs
    fresh_nodes = [{"id": n["id"]} for n in nodes]

    start = time.perf_counter()
    simulation = Simulation(fresh_nodes, links, config)
    setup = time.perf_counter() - start
    simulation.run(max_steps)
    elapsed = time.perf_counter() - start

    return {
        "time_seconds": elapsed,
        "setup_seconds": setup,
        "steps": simulation.step_count,
        "ms_per_step": 1000 * (elapsed - setup) / max(simulation.step_count, 1),
        "num_nodes": len(nodes),
        "num_edges": len(links),
    }


def run_benchmarks(
    sizes: list[int],
    thetas: list[float],
    max_steps: int | None = None,
) -> list[dict]:
    """Run benchmarks over every size/theta combination."""
    results = []

    print(f"\nBenchmarking {len(sizes)} graph sizes x {len(thetas)} thetas")
    print("=" * 80)

    for n in sizes:
        nodes, links = generate_barabasi_albert(n, 2, seed=42)
        print(f"\nBA(n={n}, m=2): {len(nodes)} nodes, {len(links)} edges")
        print("-" * 60)

        for theta in thetas:
            config = SimulationConfig(theta=theta)
            result = benchmark_simulation(nodes, links, config, max_steps)
            print(
                f"  theta={theta:<5}: {result['time_seconds']:.3f}s "
                f"({result['steps']} steps, {result['ms_per_step']:.2f} ms/step)"
            )
            results.append({"graph": f"ba_{n}", "theta": theta, **result})

    # Summary
    print("\n" + "=" * 80)
    print("SUMMARY (ms per step)")
    print("=" * 80)

    print(f"{'Nodes':<10s}", end="")
    for theta in thetas:
        print(f"{'theta=' + str(theta):>14s}", end="")
    print()
    print("-" * (10 + 14 * len(thetas)))

    for n in sizes:
        print(f"{n:<10d}", end="")
        for theta in thetas:
            matching = [r for r in results if r["num_nodes"] == n and r["theta"] == theta]
            if matching:
                print(f"{matching[0]['ms_per_step']:>14.2f}", end="")
            else:
                print(f"{'--':>14s}", end="")
        print()

    return results


def main():
    parser = argparse.ArgumentParser(description="Benchmark the force simulation")
    parser.add_argument("--sizes", default="50,200,1000", help="Comma-separated node counts")
    parser.add_argument("--thetas", default="0.5,0.9,1.5", help="Comma-separated Barnes-Hut thresholds")
    parser.add_argument("--max-steps", type=int, help="Cap the number of steps per run")
    parser.add_argument("--output", help="Output JSON file for results")

    args = parser.parse_args()

    results = run_benchmarks(
        sizes=[int(s) for s in args.sizes.split(",")],
        thetas=[float(t) for t in args.thetas.split(",")],
        max_steps=args.max_steps,
    )

    if args.output and results:
        with open(args.output, "w") as f:
            json.dump(results, f, indent=2)
        print(f"\nResults saved to {args.output}")


if __name__ == "__main__":
    main()
