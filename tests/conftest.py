# tests/conftest.py
from itertools import permutations

import pytest

from roadtour.models.graph import MapGraph
from roadtour.models.problem import Location
from roadtour.models.tour import Leg

L = Location

LECTURE_START = L(0.0, 0.0)
LECTURE_STOPS = [L(5.0, 0.0), L(5.0, -8.0), L(0.0, -6.0)]


def complete_graph(points, road_type="residential", config=None) -> MapGraph:
    """Two-way roads between every pair of points."""
    graph = MapGraph(config)
    for p in points:
        graph.add_vertex(p)
    for a, b in permutations(points, 2):
        graph.add_edge(a, b, road_name=f"{a}-{b}", road_type=road_type)
    return graph


class MatrixGraph:
    """Stand-in oracle answering from a fixed cost table.

    Pairs missing from the table have no path.
    """

    def __init__(self, costs):
        self.costs = dict(costs)
        self.calls = []

    def has_location(self, location):
        return any(location in pair for pair in self.costs)

    def shortest_path(self, origin, destination, forbidden=frozenset()):
        self.calls.append((origin, destination))
        if origin == destination:
            return Leg.trivial(origin)
        cost = self.costs.get((origin, destination))
        if cost is None:
            return None
        return Leg(origin, destination, (origin, destination), cost)


@pytest.fixture
def line_graph():
    """(0,0) - (1,1) - (2,2) - (3,3), two-way, Euclidean weights."""
    graph = MapGraph()
    points = [L(float(i), float(i)) for i in range(4)]
    for a, b in zip(points, points[1:]):
        graph.add_road(a, b, road_name="Diagonal Ave")
    return graph


@pytest.fixture
def lecture_graph():
    """Four points where greedy crosses its own edges."""
    return complete_graph([LECTURE_START] + LECTURE_STOPS)


@pytest.fixture
def grid_graph():
    return MapGraph.create_grid(6, 6, seed=7)
