"""Memoized shortest-path legs between tour nodes.

Node indices follow TourInstance.all_nodes: 0 is the start and
1..n are the stops in input order. Costs are kept in a numpy matrix
with NaN for pairs not yet queried and inf for infeasible pairs.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Sequence
import logging

import numpy as np

from ..models.errors import NoFeasibleTour
from ..models.tour import Leg, Tour

if TYPE_CHECKING:
    from ..models.graph import MapGraph
    from ..models.problem import TourInstance

logger = logging.getLogger(__name__)


class LegCache:
    """Lazily queried leg table for one tour instance."""

    def __init__(self, instance: TourInstance, graph: MapGraph):
        self.instance = instance
        self.graph = graph
        self.nodes = instance.all_nodes
        n = len(self.nodes)
        self._costs = np.full((n, n), np.nan, dtype=np.float64)
        self._legs: dict[tuple[int, int], Optional[Leg]] = {}
        self.n_queries = 0

    @property
    def n_nodes(self) -> int:
        """Number of tour nodes (start + stops)."""
        return len(self.nodes)

    def leg(self, i: int, j: int) -> Optional[Leg]:
        """Shortest leg from node i to node j, or None if infeasible."""
        key = (i, j)
        if key not in self._legs:
            self.n_queries += 1
            leg = self.graph.shortest_path(self.nodes[i], self.nodes[j], self.instance.forbidden)
            self._legs[key] = leg
            self._costs[i, j] = np.inf if leg is None else leg.cost
        return self._legs[key]

    def cost(self, i: int, j: int) -> float:
        """Cost of leg i -> j (inf if infeasible)."""
        if np.isnan(self._costs[i, j]):
            self.leg(i, j)
        return float(self._costs[i, j])

    def is_feasible(self, i: int, j: int) -> bool:
        """Check whether a path i -> j exists."""
        return np.isfinite(self.cost(i, j))

    def route_cost(self, route: Sequence[int]) -> float:
        """Sum of leg costs along a sequence of node indices."""
        return float(sum(self.cost(a, b) for a, b in zip(route, route[1:])))

    def build_tour(self, order: Sequence[int]) -> Tour:
        """Build a closed tour visiting stop indices in the given order.

        Args:
            order: Stop indices (1..n) in visitation order

        Raises:
            NoFeasibleTour: If any consecutive pair has no path
        """
        if not order:
            return Tour.trivial(self.nodes[0])

        route = [0] + list(order) + [0]
        legs = []
        for a, b in zip(route, route[1:]):
            leg = self.leg(a, b)
            if leg is None:
                raise NoFeasibleTour(self.nodes[a], [self.nodes[b]])
            legs.append(leg)
        return Tour(start=self.nodes[0], legs=legs)

    def order_of(self, tour: Tour) -> list[int]:
        """Recover stop indices from a tour's visitation order."""
        index = {loc: i for i, loc in enumerate(self.nodes)}
        return [index[loc] for loc in tour.stop_order()]
