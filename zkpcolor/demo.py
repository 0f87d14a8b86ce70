"""
Multi-round ZKP demo with commitments.

- the prover commits to a shuffled coloring
- the verifier picks an edge
- the prover opens that edge
- the verifier checks the commitments & that the colors differ
Repeated many times => high confidence in correctness.
"""

import argparse
import asyncio
import logging
import random
import sys
from typing import Optional

from .auto import AutoProver
from .config import COLOR_NAMES, NUM_COLORS, ZKPConfig
from .engine import ConfidenceReport, ZKPEngine


async def run_demo(vertex_count: int = 8, rounds: int = 20, seed: Optional[int] = None,
                   auto: bool = False, config: Optional[ZKPConfig] = None) -> ConfidenceReport:
    engine = ZKPEngine(config, rng=random.Random(seed))
    await engine.new_session(vertex_count)

    edges = engine.edges
    print(f"CHALLENGER: Graph has {len(engine.vertices)} vertices, "
          f"{len(edges)} edges, with k={NUM_COLORS}.")
    if engine.degraded:
        print("SOLVER: WARNING - no verified 3-coloring; this session is DEGRADED.")
    else:
        print(f"SOLVER: Found a valid {NUM_COLORS}-coloring (kept secret).")

    if auto:
        prover = AutoProver(engine, interval=0, max_rounds=rounds)
        prover.start()
        await prover.wait()
        results = prover.history
    else:
        results = []
        for i in range(rounds):
            if i:
                await engine.scramble_colors()
            edge_index = engine.pick_challenge()
            if edge_index is None:
                break
            await engine.select_edge(edge_index)
            results.append(await engine.verify())

    for i, result in enumerate(results):
        u, v = result.vertices
        cu, cv = result.colors
        verdict = "PASS" if result.is_valid else "FAIL"
        print(f"[Round {i+1}] Edge={result.edge_index} V{u} ({COLOR_NAMES[cu]}) <-> "
              f"V{v} ({COLOR_NAMES[cv]}) => {verdict}")

    stats = engine.get_confidence()
    if not results:
        print("\nVERIFIER: Nothing to check - the graph has no edges.")
    elif stats.successes == stats.rounds:
        print(f"\nVERIFIER: All {stats.rounds} checks passed. "
              f"Confidence {stats.confidence:.1f}% ({stats.formula}).")
    else:
        print(f"\nVERIFIER: {stats.successes}/{stats.rounds} checks passed. "
              f"Possibly the prover is cheating.")
    return stats


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Interactive ZKP of graph 3-colorability")
    parser.add_argument("--vertices", type=int, default=8, help="number of vertices")
    parser.add_argument("--rounds", type=int, default=20, help="challenge rounds to run")
    parser.add_argument("--seed", type=int, default=None, help="seed for reproducible graphs")
    parser.add_argument("--auto", action="store_true", help="drive rounds with auto mode")
    parser.add_argument("--log-level", default="WARNING", help="logging level")
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    if args.vertices < 1:
        parser.error("--vertices must be at least 1")

    stats = asyncio.run(run_demo(args.vertices, args.rounds, args.seed, args.auto))
    return 1 if stats.degraded else 0


if __name__ == "__main__":
    sys.exit(main())
