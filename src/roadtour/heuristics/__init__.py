"""Heuristic algorithms for tour construction and refinement."""

from .leg_cache import LegCache
from .constructive import nearest_neighbor, greedy_tour
from .two_opt import (
    TwoOptConfig,
    TwoOptStatistics,
    two_opt_delta,
    apply_two_opt,
    best_two_opt,
    refine,
    refine_with_stats,
)
from .materializer import materialize, construct_meta_path

__all__ = [
    "LegCache",
    # Constructive heuristics
    "nearest_neighbor",
    "greedy_tour",
    # 2-opt
    "TwoOptConfig",
    "TwoOptStatistics",
    "two_opt_delta",
    "apply_two_opt",
    "best_two_opt",
    "refine",
    "refine_with_stats",
    # Materialization
    "materialize",
    "construct_meta_path",
]
