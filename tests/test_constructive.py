# tests/test_constructive.py
import math

import pytest

from conftest import LECTURE_START, LECTURE_STOPS, MatrixGraph, complete_graph
from roadtour.heuristics.constructive import greedy_tour, nearest_neighbor
from roadtour.heuristics.leg_cache import LegCache
from roadtour.models.errors import NoFeasibleTour
from roadtour.models.problem import Location, TourInstance

L = Location


def test_greedy_line_visits_in_increasing_order(line_graph):
    inst = TourInstance.create((0, 0), [(3, 3), (1, 1), (2, 2)])
    tour = greedy_tour(inst, line_graph)

    assert tour.meta_path() == [L(0, 0), L(1, 1), L(2, 2), L(3, 3), L(0, 0)]
    assert tour.total_cost == pytest.approx(6 * math.sqrt(2))
    # closing leg runs back along the line
    assert tour[-1].path == (L(3, 3), L(2, 2), L(1, 1), L(0, 0))


def test_greedy_lecture_example_crosses(lecture_graph):
    inst = TourInstance(start=LECTURE_START, stops=tuple(LECTURE_STOPS))
    tour = greedy_tour(inst, lecture_graph)
    assert tour.meta_path() == [L(0, 0), L(5, 0), L(0, -6), L(5, -8), L(0, 0)]
    expected = 5 + math.hypot(5, 6) + math.hypot(5, 2) + math.hypot(5, 8)
    assert tour.total_cost == pytest.approx(expected)


def test_greedy_ties_follow_input_order():
    points = [L(0, 0), L(1, 0), L(0, 1), L(-1, 0)]
    graph = complete_graph(points)

    first = greedy_tour(TourInstance(start=L(0, 0), stops=(L(1, 0), L(0, 1), L(-1, 0))), graph)
    assert first.meta_path()[1] == L(1, 0)

    second = greedy_tour(TourInstance(start=L(0, 0), stops=(L(0, 1), L(1, 0), L(-1, 0))), graph)
    assert second.meta_path() == [L(0, 0), L(0, 1), L(1, 0), L(-1, 0), L(0, 0)]


def test_greedy_is_deterministic(grid_graph):
    locs = grid_graph.locations
    inst = TourInstance(start=locs[0], stops=tuple(locs[5:30:3]))
    runs = [greedy_tour(inst, grid_graph).meta_path() for _ in range(3)]
    assert runs[0] == runs[1] == runs[2]


def test_greedy_empty_stops_is_trivial(line_graph):
    tour = greedy_tour(TourInstance(start=L(1, 1)), line_graph)
    assert len(tour) == 1
    assert tour.total_cost == 0.0
    assert tour.meta_path() == [L(1, 1), L(1, 1)]
    assert tour.full_path() == [L(1, 1)]


def test_greedy_raises_when_stop_behind_forbidden(line_graph):
    inst = TourInstance.create((0, 0), [(2, 2)], [(1, 1)])
    with pytest.raises(NoFeasibleTour) as excinfo:
        greedy_tour(inst, line_graph)
    assert excinfo.value.origin == L(0, 0)
    assert excinfo.value.unreachable == (L(2, 2),)


def test_greedy_skips_unreachable_candidate_for_now():
    # (2, 0) is only reachable from (1, 0), which the greedy walk visits first
    s, a, b = L(0, 0), L(1, 0), L(2, 0)
    graph = MatrixGraph({
        (s, a): 5.0,
        (a, b): 1.0,
        (b, s): 1.0,
        (a, s): 1.0,
    })
    inst = TourInstance(start=s, stops=(b, a))
    assert nearest_neighbor(inst, graph) == [2, 1]


def test_greedy_raises_when_return_leg_missing():
    s, a = L(0, 0), L(1, 0)
    graph = MatrixGraph({(s, a): 1.0})
    with pytest.raises(NoFeasibleTour) as excinfo:
        greedy_tour(TourInstance(start=s, stops=(a,)), graph)
    assert excinfo.value.unreachable == (s,)


def test_greedy_reuses_shared_cache(lecture_graph):
    inst = TourInstance(start=LECTURE_START, stops=tuple(LECTURE_STOPS))
    cache = LegCache(inst, lecture_graph)
    greedy_tour(inst, lecture_graph, cache)
    queries = cache.n_queries
    greedy_tour(inst, lecture_graph, cache)
    assert cache.n_queries == queries
