"""Constructive heuristic for the initial tour.

Provides the greedy nearest-neighbor cycle: starting at the start
location, always travel to the cheapest reachable unvisited stop,
then return to the start.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Optional
import logging

from ..models.errors import NoFeasibleTour
from ..models.tour import Tour
from .leg_cache import LegCache

if TYPE_CHECKING:
    from ..models.graph import MapGraph
    from ..models.problem import TourInstance

logger = logging.getLogger(__name__)


def nearest_neighbor(instance: TourInstance, graph: MapGraph, cache: Optional[LegCache] = None) -> list[int]:
    """Nearest Neighbor ordering of stops.

    Repeatedly moves to the unvisited stop with the cheapest shortest
    path from the current position. Stops with no feasible path are
    skipped for that step; equal costs keep the earliest stop in input
    order.

    Time Complexity: O(n^2) shortest-path queries where n = stops

    Args:
        instance: Tour instance
        graph: Road network
        cache: Shared leg cache (created if None)

    Returns:
        Stop indices (1..n) in visitation order

    Raises:
        NoFeasibleTour: If no unvisited stop is reachable from the current
                        position, or the last stop cannot reach the start
    """
    if cache is None:
        cache = LegCache(instance, graph)

    unvisited = list(range(1, instance.n_stops + 1))
    order = []
    current = 0

    while unvisited:
        best_stop = None
        best_cost = float('inf')

        for stop_idx in unvisited:
            cost = cache.cost(current, stop_idx)
            if cost < best_cost:
                best_cost = cost
                best_stop = stop_idx

        if best_stop is None:
            stranded = [cache.nodes[i] for i in unvisited]
            logger.warning(f"Nearest neighbor: {len(stranded)} stops unreachable from {cache.nodes[current]}")
            raise NoFeasibleTour(cache.nodes[current], stranded)

        logger.debug(f"Nearest neighbor: {cache.nodes[current]} -> {cache.nodes[best_stop]} cost={best_cost:.4f}")
        order.append(best_stop)
        unvisited.remove(best_stop)
        current = best_stop

    if order and not cache.is_feasible(current, 0):
        logger.warning(f"Nearest neighbor: cannot return from {cache.nodes[current]} to start")
        raise NoFeasibleTour(cache.nodes[current], [cache.nodes[0]])

    return order


def greedy_tour(instance: TourInstance, graph: MapGraph, cache: Optional[LegCache] = None) -> Tour:
    """Greedy nearest-neighbor closed tour.

    An instance with no stops yields the trivial start -> start tour
    with cost 0.

    Args:
        instance: Tour instance
        graph: Road network
        cache: Shared leg cache (created if None)

    Returns:
        Closed tour visiting every stop once

    Raises:
        NoFeasibleTour: If the greedy walk gets stuck
    """
    if cache is None:
        cache = LegCache(instance, graph)

    order = nearest_neighbor(instance, graph, cache)
    tour = cache.build_tour(order)

    logger.info(f"Greedy tour for '{instance.name}': {instance.n_stops} stops, cost={tour.total_cost:.4f}")
    return tour
