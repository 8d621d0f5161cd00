"""Analysis utilities for tour benchmarks.

This module provides functions for:
- Generating random tour instances on a graph
- Running greedy and 2-opt side by side
- Aggregating costs and testing whether 2-opt improves significantly
"""
from __future__ import annotations

from pathlib import Path
from typing import List, Dict, Any, Optional
import json
import logging
import numpy as np
from dataclasses import dataclass
from scipy import stats

from ..models.errors import NoFeasibleTour
from ..models.graph import MapGraph
from ..models.problem import TourInstance
from ..solver import SolverConfig, solve

logger = logging.getLogger(__name__)


@dataclass
class BenchmarkSummary:
    """Aggregated greedy vs 2-opt results."""
    n_instances: int
    n_infeasible: int

    mean_greedy_cost: float
    mean_two_opt_cost: float
    mean_improvement: float
    std_improvement: float
    max_improvement: float

    mean_runtime: float
    mean_passes: float

    wilcoxon_p_value: Optional[float] = None


def random_instances(
    graph: MapGraph,
    n_instances: int,
    n_stops: int,
    seed: int | None = None,
) -> List[TourInstance]:
    """Sample tour instances from graph vertices.

    Args:
        graph: Road network to sample from
        n_instances: Number of instances
        n_stops: Stops per instance
        seed: Random seed for reproducibility

    Returns:
        Instances with distinct start and stops and no forbidden locations
    """
    rng = np.random.default_rng(seed)
    locations = graph.locations
    if n_stops + 1 > len(locations):
        raise ValueError(f"Graph has {len(locations)} vertices, need {n_stops + 1}")

    instances = []
    for k in range(n_instances):
        picks = rng.choice(len(locations), size=n_stops + 1, replace=False)
        instances.append(TourInstance(
            start=locations[picks[0]],
            stops=tuple(locations[p] for p in picks[1:]),
            name=f"random_{n_stops}s_{k}",
        ))
    return instances


def compare_greedy_two_opt(graph: MapGraph, instances: List[TourInstance]) -> List[Dict[str, Any]]:
    """Solve each instance with and without 2-opt.

    Instances with no feasible tour are reported with feasible=False.

    Returns:
        One row per instance
    """
    rows = []
    for instance in instances:
        try:
            tour, solve_stats = solve(instance, graph, SolverConfig(use_two_opt=True))
        except NoFeasibleTour as e:
            logger.warning(f"{instance.name}: {e}")
            rows.append({'instance_name': instance.name, 'feasible': False})
            continue

        two_opt_stats = solve_stats.two_opt
        rows.append({
            'instance_name': instance.name,
            'feasible': True,
            'n_stops': instance.n_stops,
            'greedy_cost': solve_stats.greedy_cost,
            'two_opt_cost': tour.total_cost,
            'improvement': two_opt_stats.improvement if two_opt_stats else 0.0,
            'passes': two_opt_stats.passes if two_opt_stats else 0,
            'swaps': two_opt_stats.swaps if two_opt_stats else 0,
            'path_queries': solve_stats.path_queries,
            'runtime': solve_stats.runtime,
        })
    return rows


def summarize(rows: List[Dict[str, Any]], alpha: float = 0.05) -> BenchmarkSummary:
    """Aggregate comparison rows.

    The Wilcoxon signed-rank test runs when at least 5 instances have a
    nonzero cost difference.
    """
    feasible = [r for r in rows if r.get('feasible')]
    if not feasible:
        return BenchmarkSummary(
            n_instances=len(rows),
            n_infeasible=len(rows),
            mean_greedy_cost=float('nan'),
            mean_two_opt_cost=float('nan'),
            mean_improvement=0.0,
            std_improvement=0.0,
            max_improvement=0.0,
            mean_runtime=0.0,
            mean_passes=0.0,
        )

    greedy = np.array([r['greedy_cost'] for r in feasible])
    two_opt = np.array([r['two_opt_cost'] for r in feasible])
    improvement = np.array([r['improvement'] for r in feasible])

    p_value = None
    if np.count_nonzero(greedy - two_opt) >= 5:
        _, p_value = stats.wilcoxon(greedy, two_opt)
        p_value = float(p_value)
        logger.info(f"Wilcoxon p={p_value:.4g} (significant={p_value < alpha})")

    return BenchmarkSummary(
        n_instances=len(rows),
        n_infeasible=len(rows) - len(feasible),
        mean_greedy_cost=float(np.mean(greedy)),
        mean_two_opt_cost=float(np.mean(two_opt)),
        mean_improvement=float(np.mean(improvement)),
        std_improvement=float(np.std(improvement)),
        max_improvement=float(np.max(improvement)),
        mean_runtime=float(np.mean([r['runtime'] for r in feasible])),
        mean_passes=float(np.mean([r['passes'] for r in feasible])),
        wilcoxon_p_value=p_value,
    )


def load_results(results_dir: str | Path) -> List[Dict[str, Any]]:
    """Load all grading JSON result files from a directory.

    Args:
        results_dir: Directory containing result JSON files

    Returns:
        List of result dictionaries, one per case
    """
    results_dir = Path(results_dir)
    results = []

    for json_file in sorted(results_dir.glob("*_results.json")):
        with open(json_file, 'r') as f:
            data = json.load(f)
        for entry in data.get('results', []):
            entry['_file'] = str(json_file)
            results.append(entry)

    return results
