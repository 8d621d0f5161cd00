"""Closed-tour construction on road networks.

Public API:
- tsp_tour: greedy nearest-neighbor tour, optionally refined with 2-opt
- materialize: full road path and meta path of a tour
"""

from .models import (
    Location,
    TourInstance,
    Leg,
    Tour,
    MapGraph,
    GraphConfig,
    TourError,
    InvalidInput,
    NoFeasibleTour,
    TourCancelled,
)
from .heuristics import greedy_tour, refine, materialize, construct_meta_path
from .solver import (
    SolverConfig,
    SolveStatistics,
    solve,
    tsp_tour,
    greedy_shortest_cycle,
    two_opt_shortest_cycle,
)

__all__ = [
    "Location",
    "TourInstance",
    "Leg",
    "Tour",
    "MapGraph",
    "GraphConfig",
    "TourError",
    "InvalidInput",
    "NoFeasibleTour",
    "TourCancelled",
    "greedy_tour",
    "refine",
    "materialize",
    "construct_meta_path",
    "SolverConfig",
    "SolveStatistics",
    "solve",
    "tsp_tour",
    "greedy_shortest_cycle",
    "two_opt_shortest_cycle",
]
