#!/usr/bin/env python3
"""Compare greedy and 2-opt tours on random grid road networks.

Usage:
    python scripts/benchmark_two_opt.py \
        --rows 15 --cols 15 \
        --stops 5 10 20 \
        --instances 20 \
        --seed 42 \
        --output-dir results/two_opt
"""
import sys
import argparse
import json
import logging
from dataclasses import asdict
from pathlib import Path

from roadtour.experiments.analysis import compare_greedy_two_opt, random_instances, summarize
from roadtour.models.graph import GraphConfig, MapGraph

logger = logging.getLogger(__name__)


def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(
        description="Compare greedy and 2-opt tours on random grid road networks"
    )
    parser.add_argument("--rows", type=int, default=15, help="Grid rows")
    parser.add_argument("--cols", type=int, default=15, help="Grid columns")
    parser.add_argument(
        "--drop", type=float, default=0.1,
        help="Fraction of roads removed from the grid (default: 0.1)"
    )
    parser.add_argument(
        "--stops", type=int, nargs="+", default=[5, 10, 20],
        help="Stop counts to test (default: 5 10 20)"
    )
    parser.add_argument("--instances", type=int, default=20, help="Instances per stop count")
    parser.add_argument("--weight-by", choices=["distance", "time"], default="time")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument(
        "--output-dir", type=str, default=None,
        help="Output directory for results"
    )

    args = parser.parse_args()
    logging.basicConfig(level=logging.WARNING)

    graph = MapGraph.create_grid(
        args.rows, args.cols,
        drop_fraction=args.drop,
        seed=args.seed,
        config=GraphConfig(weight_by=args.weight_by),
    )
    print(graph.summary())

    all_rows = {}
    for n_stops in args.stops:
        instances = random_instances(graph, args.instances, n_stops, seed=args.seed + n_stops)
        rows = compare_greedy_two_opt(graph, instances)
        summary = summarize(rows)
        all_rows[n_stops] = {'rows': rows, 'summary': asdict(summary)}

        p_value = "n/a" if summary.wilcoxon_p_value is None else f"{summary.wilcoxon_p_value:.3g}"
        print(f"{n_stops:3d} stops: greedy={summary.mean_greedy_cost:9.3f}  "
              f"2-opt={summary.mean_two_opt_cost:9.3f}  "
              f"improvement={summary.mean_improvement:6.2%}±{summary.std_improvement:.2%}  "
              f"passes={summary.mean_passes:5.1f}  infeasible={summary.n_infeasible}  p={p_value}")

    if args.output_dir:
        output_dir = Path(args.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        out_path = output_dir / "two_opt_benchmark.json"
        with open(out_path, 'w') as f:
            json.dump(all_rows, f, indent=2)
        print(f"\nResults: {out_path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
