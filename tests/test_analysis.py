# tests/test_analysis.py
import json
import math

import pytest

from roadtour.experiments.analysis import (
    compare_greedy_two_opt,
    load_results,
    random_instances,
    summarize,
)
from roadtour.models.graph import MapGraph
from roadtour.models.problem import Location, TourInstance

L = Location


def test_random_instances_are_valid(grid_graph):
    instances = random_instances(grid_graph, 5, 6, seed=1)
    assert len(instances) == 5
    for inst in instances:
        assert inst.n_stops == 6
        assert inst.validate(grid_graph) == []

    again = random_instances(grid_graph, 5, 6, seed=1)
    assert [i.stops for i in instances] == [i.stops for i in again]


def test_random_instances_need_enough_vertices(line_graph):
    with pytest.raises(ValueError):
        random_instances(line_graph, 1, 4)


def test_compare_and_summarize():
    graph = MapGraph.create_grid(7, 7, seed=3)
    rows = compare_greedy_two_opt(graph, random_instances(graph, 8, 7, seed=4))
    assert len(rows) == 8
    for row in rows:
        assert row['feasible']
        assert row['two_opt_cost'] <= row['greedy_cost']
        assert row['improvement'] >= 0.0

    summary = summarize(rows)
    assert summary.n_instances == 8
    assert summary.n_infeasible == 0
    assert summary.mean_two_opt_cost <= summary.mean_greedy_cost
    assert summary.mean_passes >= 1.0
    if summary.wilcoxon_p_value is not None:
        assert 0.0 <= summary.wilcoxon_p_value <= 1.0


def test_infeasible_instances_are_counted():
    graph = MapGraph()
    graph.add_road(L(0, 0), L(1, 0))
    graph.add_vertex(L(5, 5))
    rows = compare_greedy_two_opt(graph, [
        TourInstance(start=L(0, 0), stops=(L(1, 0),), name="ok"),
        TourInstance(start=L(0, 0), stops=(L(5, 5),), name="island"),
    ])
    assert [r['feasible'] for r in rows] == [True, False]

    summary = summarize(rows)
    assert summary.n_infeasible == 1
    assert summary.mean_greedy_cost == pytest.approx(2.0)

    empty = summarize(rows[1:])
    assert math.isnan(empty.mean_greedy_cost)


def test_load_results(tmp_path):
    payload = {'score': 0.5, 'results': [{'case_name': 'a', 'passed': True}, {'case_name': 'b', 'passed': False}]}
    (tmp_path / "grading_1_results.json").write_text(json.dumps(payload))
    (tmp_path / "ignored.json").write_text("{}")
    results = load_results(tmp_path)
    assert [r['case_name'] for r in results] == ['a', 'b']
    assert results[0]['_file'].endswith("grading_1_results.json")
