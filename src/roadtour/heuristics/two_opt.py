"""2-opt local search over the stop ordering.

The tour is handled as a route of node indices [0, s_1, ..., s_n, 0]
with the start fixed at both ends. A 2-opt move removes the edges
(i-1, i) and (k, k+1) and reverses positions i..k. Each pass applies
the single best strictly improving move; the search stops at the
first pass without one.

Since every applied move lowers the tour cost by more than
improvement_epsilon and there are finitely many orderings, the search
always terminates.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Sequence
import logging
import time

import numpy as np

from ..models.errors import InvalidInput
from .leg_cache import LegCache

if TYPE_CHECKING:
    from ..models.graph import MapGraph
    from ..models.problem import TourInstance
    from ..models.tour import Tour

logger = logging.getLogger(__name__)

Route = list[int]


@dataclass
class TwoOptConfig:
    """Configuration for 2-opt refinement.

    Attributes:
        improvement_epsilon: Minimum cost decrease for a move to count as
                             an improvement (guards against float noise)
    """
    improvement_epsilon: float = 1e-9

    def __post_init__(self):
        if self.improvement_epsilon < 0:
            raise ValueError(
                f"improvement_epsilon must be non-negative, got {self.improvement_epsilon}"
            )


@dataclass
class TwoOptStatistics:
    """Statistics from a 2-opt run."""
    passes: int = 0
    swaps: int = 0
    moves_evaluated: int = 0
    moves_disqualified: int = 0
    initial_cost: float = 0.0
    final_cost: float = 0.0
    runtime: float = 0.0

    @property
    def improvement(self) -> float:
        """Relative cost decrease."""
        if self.initial_cost <= 0:
            return 0.0
        return (self.initial_cost - self.final_cost) / self.initial_cost

    def summary(self) -> str:
        return (
            f"2-opt Statistics:\n"
            f"  Passes: {self.passes}\n"
            f"  Swaps applied: {self.swaps}\n"
            f"  Moves evaluated: {self.moves_evaluated} ({self.moves_disqualified} infeasible)\n"
            f"  Initial cost: {self.initial_cost:.4f}\n"
            f"  Final cost: {self.final_cost:.4f}\n"
            f"  Improvement: {self.improvement:.2%}\n"
        )


def two_opt_delta(route: Sequence[int], i: int, k: int, cache: LegCache) -> float:
    """Cost change for reversing route[i:k+1]. Assumes 0 < i < k < len-1.

    Includes the reversed inner legs, which differ from the forward ones
    on directed networks. Returns inf if any new leg is infeasible.
    """
    inner_forward = 0.0
    inner_reverse = 0.0
    for m in range(i, k):
        inner_forward += cache.cost(route[m], route[m + 1])
        inner_reverse += cache.cost(route[m + 1], route[m])
    return _delta(route, i, k, cache, inner_forward, inner_reverse)


def _delta(route, i, k, cache, inner_forward, inner_reverse) -> float:
    a, b, c, d = route[i - 1], route[i], route[k], route[k + 1]
    after = cache.cost(a, c) + cache.cost(b, d) + inner_reverse
    if not np.isfinite(after):
        return float('inf')
    before = cache.cost(a, b) + cache.cost(c, d) + inner_forward
    return after - before


def apply_two_opt(route: Sequence[int], i: int, k: int) -> Route:
    """Return a new route with positions i..k reversed."""
    return list(route[:i]) + list(reversed(route[i:k + 1])) + list(route[k + 1:])


def best_two_opt(
    route: Sequence[int],
    cache: LegCache,
    epsilon: float = 1e-9,
    stats: Optional[TwoOptStatistics] = None,
) -> tuple[Optional[tuple[int, int]], float]:
    """Scan every move once and return the best strictly improving one.

    Scan order is i ascending, then k ascending; among equal deltas the
    first one found wins.

    Returns:
        Tuple of ((i, k) or None if no improving move, delta)
    """
    best = None
    best_delta = -epsilon
    last = len(route) - 2

    for i in range(1, last):
        inner_forward = 0.0
        inner_reverse = 0.0
        for k in range(i + 1, last + 1):
            inner_forward += cache.cost(route[k - 1], route[k])
            inner_reverse += cache.cost(route[k], route[k - 1])
            delta = _delta(route, i, k, cache, inner_forward, inner_reverse)

            if stats is not None:
                stats.moves_evaluated += 1
                if not np.isfinite(delta):
                    stats.moves_disqualified += 1

            if delta < best_delta:
                best, best_delta = (i, k), delta

    return best, best_delta


def refine_with_stats(
    initial_tour: Tour,
    instance: TourInstance,
    graph: MapGraph,
    cache: Optional[LegCache] = None,
    config: Optional[TwoOptConfig] = None,
) -> tuple[Tour, TwoOptStatistics]:
    """Improve a tour with 2-opt until no improving move remains.

    Args:
        initial_tour: Feasible closed tour over the instance's stops
        instance: Tour instance the tour was built for
        graph: Road network
        cache: Shared leg cache (created if None)
        config: Refinement configuration

    Returns:
        Tuple of (refined tour, statistics). The refined tour never costs
        more than the initial one; it is the initial tour object itself
        when no move improves it.

    Raises:
        InvalidInput: If the tour does not visit the instance's stops exactly once
    """
    config = config or TwoOptConfig()
    if cache is None:
        cache = LegCache(instance, graph)

    start_time = time.perf_counter()
    stats = TwoOptStatistics(initial_cost=initial_tour.total_cost, final_cost=initial_tour.total_cost)

    try:
        order = cache.order_of(initial_tour)
    except KeyError as e:
        raise InvalidInput([f"Tour visits {e.args[0]}, which is not a stop of '{instance.name}'"]) from e
    if sorted(order) != list(range(1, instance.n_stops + 1)):
        raise InvalidInput([f"Tour does not visit every stop of '{instance.name}' exactly once"])

    if len(order) < 2:
        stats.runtime = time.perf_counter() - start_time
        return initial_tour, stats

    route = [0] + order + [0]
    while True:
        stats.passes += 1
        move, delta = best_two_opt(route, cache, config.improvement_epsilon, stats)
        if move is None:
            break
        i, k = move
        logger.debug(f"2-opt pass {stats.passes}: reverse positions {i}..{k}, delta={delta:.6f}")
        route = apply_two_opt(route, i, k)
        stats.swaps += 1

    if stats.swaps == 0:
        tour = initial_tour
    else:
        tour = cache.build_tour(route[1:-1])

    stats.final_cost = tour.total_cost
    stats.runtime = time.perf_counter() - start_time
    logger.info(
        f"2-opt for '{instance.name}': {stats.swaps} swaps in {stats.passes} passes, "
        f"cost {stats.initial_cost:.4f} -> {stats.final_cost:.4f}"
    )
    return tour, stats


def refine(
    initial_tour: Tour,
    instance: TourInstance,
    graph: MapGraph,
    cache: Optional[LegCache] = None,
    config: Optional[TwoOptConfig] = None,
) -> Tour:
    """2-opt refinement; see refine_with_stats."""
    tour, _ = refine_with_stats(initial_tour, instance, graph, cache, config)
    return tour
