"""Entry points for closed-tour construction.

tsp_tour validates the request, builds the greedy cycle and, when
asked, refines it with 2-opt. An optional threading.Event lets the
caller abandon a run between phases; the algorithms themselves always
terminate without it.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Optional
import logging
import threading
import time

from .heuristics.constructive import greedy_tour
from .heuristics.leg_cache import LegCache
from .heuristics.two_opt import TwoOptConfig, TwoOptStatistics, refine_with_stats
from .models.errors import InvalidInput, TourCancelled
from .models.problem import Location, TourInstance

if TYPE_CHECKING:
    from .models.graph import MapGraph
    from .models.tour import Tour

logger = logging.getLogger(__name__)


@dataclass
class SolverConfig:
    """Configuration for tour solving.

    Attributes:
        use_two_opt: Refine the greedy tour with 2-opt
        validate_input: Reject malformed requests before searching
        two_opt: 2-opt refinement settings
    """
    use_two_opt: bool = False
    validate_input: bool = True
    two_opt: TwoOptConfig = field(default_factory=TwoOptConfig)


@dataclass
class SolveStatistics:
    """Statistics from a single solve."""
    greedy_cost: float = 0.0
    final_cost: float = 0.0
    path_queries: int = 0
    runtime: float = 0.0
    two_opt: Optional[TwoOptStatistics] = None

    def summary(self) -> str:
        text = (
            f"Solve Statistics:\n"
            f"  Greedy cost: {self.greedy_cost:.4f}\n"
            f"  Final cost: {self.final_cost:.4f}\n"
            f"  Shortest-path queries: {self.path_queries}\n"
            f"  Runtime: {self.runtime:.4f}s\n"
        )
        if self.two_opt is not None:
            text += self.two_opt.summary()
        return text


def _check_cancelled(cancel: Optional[threading.Event], phase: str) -> None:
    if cancel is not None and cancel.is_set():
        logger.warning(f"Tour cancelled before {phase}")
        raise TourCancelled(f"Cancelled before {phase}")


def solve(
    instance: TourInstance,
    graph: MapGraph,
    config: Optional[SolverConfig] = None,
    cancel: Optional[threading.Event] = None,
) -> tuple[Tour, SolveStatistics]:
    """Build (and optionally refine) a closed tour for an instance.

    Args:
        instance: Tour instance
        graph: Road network, not mutated while solving
        config: Solver configuration
        cancel: Event checked between phases

    Returns:
        Tuple of (tour, statistics)

    Raises:
        InvalidInput: If the request is malformed
        NoFeasibleTour: If some stop cannot be reached under the constraints
        TourCancelled: If cancel was set at a phase boundary
    """
    config = config or SolverConfig()
    start_time = time.perf_counter()

    if config.validate_input:
        issues = instance.validate(graph)
        if issues:
            raise InvalidInput(issues)

    _check_cancelled(cancel, "construction")
    cache = LegCache(instance, graph)
    tour = greedy_tour(instance, graph, cache)
    stats = SolveStatistics(greedy_cost=tour.total_cost, final_cost=tour.total_cost)

    if config.use_two_opt:
        _check_cancelled(cancel, "refinement")
        tour, stats.two_opt = refine_with_stats(tour, instance, graph, cache, config.two_opt)
        stats.final_cost = tour.total_cost

    stats.path_queries = cache.n_queries
    stats.runtime = time.perf_counter() - start_time
    return tour, stats


def tsp_tour(
    start: Location | tuple[float, float],
    stops: Iterable[Location | tuple[float, float]],
    forbidden=None,
    graph: MapGraph = None,
    use_two_opt: bool = False,
    config: Optional[SolverConfig] = None,
    cancel: Optional[threading.Event] = None,
) -> Tour:
    """Closed tour from start through every stop and back.

    Args:
        start: Start location (required)
        stops: Stops to visit once each, in tie-break order
        forbidden: Locations to avoid, as an iterable or a nested {x: {y: ...}} mapping
        graph: Road network
        use_two_opt: Refine the greedy tour with 2-opt
        config: Solver configuration (use_two_opt overrides its flag)
        cancel: Event checked between phases

    Returns:
        Tour whose legs run start -> ... -> start
    """
    if graph is None:
        raise InvalidInput(["A graph is required"])
    config = config or SolverConfig()
    if use_two_opt != config.use_two_opt:
        config = SolverConfig(
            use_two_opt=use_two_opt,
            validate_input=config.validate_input,
            two_opt=config.two_opt,
        )
    instance = TourInstance.create(start, stops if stops is not None else (), forbidden)
    tour, _ = solve(instance, graph, config, cancel)
    return tour


def greedy_shortest_cycle(start, stops, forbidden, graph: MapGraph) -> Tour:
    """Greedy nearest-neighbor cycle."""
    return tsp_tour(start, stops, forbidden, graph, use_two_opt=False)


def two_opt_shortest_cycle(start, stops, forbidden, graph: MapGraph) -> Tour:
    """Greedy cycle refined with 2-opt."""
    return tsp_tour(start, stops, forbidden, graph, use_two_opt=True)
