# tests/test_two_opt.py
import math

import numpy as np
import pytest

from conftest import LECTURE_START, LECTURE_STOPS, MatrixGraph, complete_graph
from roadtour.heuristics.constructive import greedy_tour
from roadtour.heuristics.leg_cache import LegCache
from roadtour.heuristics.two_opt import (
    TwoOptConfig,
    apply_two_opt,
    best_two_opt,
    refine,
    refine_with_stats,
    two_opt_delta,
)
from roadtour.models.errors import InvalidInput
from roadtour.models.graph import MapGraph
from roadtour.models.problem import Location, TourInstance
from roadtour.models.tour import Tour

L = Location


def test_apply_two_opt_reverses_segment():
    assert apply_two_opt([0, 1, 2, 3, 4, 0], 2, 4) == [0, 1, 4, 3, 2, 0]
    assert apply_two_opt([0, 1, 2, 0], 1, 2) == [0, 2, 1, 0]


def test_lecture_example_fixed_by_one_swap(lecture_graph):
    inst = TourInstance(start=LECTURE_START, stops=tuple(LECTURE_STOPS))
    greedy = greedy_tour(inst, lecture_graph)
    refined, stats = refine_with_stats(greedy, inst, lecture_graph)

    assert refined.total_cost < greedy.total_cost
    assert refined.meta_path() == [L(0, 0), L(5, 0), L(5, -8), L(0, -6), L(0, 0)]
    assert refined.total_cost == pytest.approx(5 + 8 + math.hypot(5, 2) + 6)
    assert stats.swaps == 1
    assert stats.passes == 2
    assert stats.improvement > 0
    assert "Swaps applied: 1" in stats.summary()


def test_refine_is_idempotent(lecture_graph):
    inst = TourInstance(start=LECTURE_START, stops=tuple(LECTURE_STOPS))
    once = refine(greedy_tour(inst, lecture_graph), inst, lecture_graph)
    twice, stats = refine_with_stats(once, inst, lecture_graph)
    assert twice is once
    assert stats.swaps == 0
    assert stats.passes == 1


def test_refine_keeps_line_tour(line_graph):
    # every reversal on the line ties or loses, so nothing is applied
    inst = TourInstance.create((0, 0), [(1, 1), (2, 2), (3, 3)])
    greedy = greedy_tour(inst, line_graph)
    refined = refine(greedy, inst, line_graph)
    assert refined is greedy


def test_refine_short_tours_untouched(line_graph):
    empty = TourInstance.create((0, 0), [])
    tour = greedy_tour(empty, line_graph)
    assert refine(tour, empty, line_graph) is tour

    single = TourInstance.create((0, 0), [(2, 2)])
    tour = greedy_tour(single, line_graph)
    assert refine(tour, single, line_graph) is tour


def test_refine_never_worsens_random_grids():
    graph = MapGraph.create_grid(8, 8, seed=11)
    rng = np.random.default_rng(5)
    locs = graph.locations
    for _ in range(10):
        picks = rng.choice(len(locs), size=9, replace=False)
        inst = TourInstance(start=locs[picks[0]], stops=tuple(locs[p] for p in picks[1:]))
        cache = LegCache(inst, graph)
        greedy = greedy_tour(inst, graph, cache)
        refined = refine(greedy, inst, graph, cache)

        assert refined.total_cost <= greedy.total_cost
        ok, violations = refined.validate(inst.stops, inst.forbidden)
        assert ok, violations
        assert refine(refined, inst, graph, cache) is refined


def test_refine_is_deterministic(grid_graph):
    locs = grid_graph.locations
    inst = TourInstance(start=locs[7], stops=tuple(locs[i] for i in (0, 35, 5, 30, 14, 21, 3, 28)))
    runs = [refine(greedy_tour(inst, grid_graph), inst, grid_graph).meta_path() for _ in range(3)]
    assert runs[0] == runs[1] == runs[2]


def test_delta_matches_recomputed_cost_on_directed_graph():
    rng = np.random.default_rng(2)
    points = [L(float(i), float(rng.integers(0, 10))) for i in range(7)]
    graph = MapGraph()
    # one-way ring keeps every pair reachable, chords make costs asymmetric
    for a, b in zip(points, points[1:] + points[:1]):
        graph.add_road(a, b, two_way=False)
    for a, b in [(points[0], points[3]), (points[5], points[1]), (points[2], points[6])]:
        graph.add_road(a, b, two_way=False)

    inst = TourInstance(start=points[0], stops=tuple(points[1:]))
    cache = LegCache(inst, graph)
    route = [0, 1, 2, 3, 4, 5, 6, 0]
    base = cache.route_cost(route)
    for i in range(1, 6):
        for k in range(i + 1, 7):
            delta = two_opt_delta(route, i, k, cache)
            expected = cache.route_cost(apply_two_opt(route, i, k)) - base
            assert delta == pytest.approx(expected)


def test_infeasible_swap_is_disqualified():
    s, a, b, c = L(0, 0), L(1, 0), L(2, 0), L(3, 0)
    costs = {
        (s, a): 1.0, (a, b): 10.0, (b, c): 1.0, (c, s): 10.0,
        # reversing a..b would be cheaper but b -> a has no path
        (s, b): 1.0, (a, c): 1.0,
    }
    graph = MatrixGraph(costs)
    inst = TourInstance(start=s, stops=(a, b, c))
    cache = LegCache(inst, graph)
    route = [0, 1, 2, 3, 0]

    assert two_opt_delta(route, 1, 2, cache) == float('inf')
    move, _ = best_two_opt(route, cache)
    assert move is None

    tour = cache.build_tour([1, 2, 3])
    refined, stats = refine_with_stats(tour, inst, graph, cache)
    assert refined is tour
    assert stats.moves_disqualified == stats.moves_evaluated


def test_best_swap_ties_pick_first_in_scan_order():
    s, a, b, c = L(0, 0), L(1, 0), L(2, 0), L(3, 0)
    nodes = [s, a, b, c]
    costs = {(p, q): 1.0 for p in nodes for q in nodes if p != q}
    costs[(s, a)] = 5.0
    costs[(a, s)] = 5.0
    costs[(c, s)] = 5.0
    graph = MatrixGraph(costs)
    inst = TourInstance(start=s, stops=(a, b, c))
    cache = LegCache(inst, graph)

    # (1, 2), (1, 3) and (2, 3) all save 4; (1, 2) is scanned first
    move, delta = best_two_opt([0, 1, 2, 3, 0], cache)
    assert move == (1, 2)
    assert delta == pytest.approx(-4.0)


def test_epsilon_blocks_tiny_improvements():
    s, a, b = L(0, 0), L(1, 0), L(2, 0)
    costs = {(s, a): 1.0, (a, b): 1.0, (b, s): 1.0, (s, b): 1.0, (b, a): 1.0, (a, s): 1.0 - 1e-12}
    graph = MatrixGraph(costs)
    inst = TourInstance(start=s, stops=(a, b))
    tour = LegCache(inst, graph).build_tour([1, 2])
    assert refine(tour, inst, graph, config=TwoOptConfig(improvement_epsilon=1e-9)) is tour
    refined = refine(tour, inst, graph, config=TwoOptConfig(improvement_epsilon=0.0))
    assert refined.meta_path() == [s, b, a, s]


def test_negative_epsilon_is_rejected():
    with pytest.raises(ValueError, match="non-negative"):
        TwoOptConfig(improvement_epsilon=-1e-6)


def test_zero_delta_moves_are_not_applied():
    # on a complete square every reversal of the optimal tour costs the same or more
    corners = [L(0, 0), L(1, 0), L(1, 1), L(0, 1)]
    graph = complete_graph(corners)
    inst = TourInstance(start=corners[0], stops=tuple(corners[1:]))
    tour = LegCache(inst, graph).build_tour([1, 2, 3])
    refined, stats = refine_with_stats(tour, inst, graph, config=TwoOptConfig(improvement_epsilon=0.0))
    assert refined is tour
    assert stats.swaps == 0
    assert stats.passes == 1


def test_refine_rejects_foreign_tour(line_graph, lecture_graph):
    inst = TourInstance(start=LECTURE_START, stops=tuple(LECTURE_STOPS))
    other = greedy_tour(TourInstance.create((0, 0), [(1, 1), (2, 2)]), line_graph)
    with pytest.raises(InvalidInput):
        refine(other, inst, lecture_graph)

    partial = Tour(start=LECTURE_START, legs=list(greedy_tour(inst, lecture_graph).legs[1:]))
    with pytest.raises(InvalidInput):
        refine(partial, inst, lecture_graph)
