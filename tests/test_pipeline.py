"""
Tests of the filter -> score -> select pipeline for single workloads
"""

import pytest
from sim_utils import FailingPlugin, FixedScorer, RecordingFilter

from kubesim.core import NodeScore, Workload
from kubesim.node import Node
from kubesim.scheduler import filter_nodes, schedule, score_nodes, select_node


def views(*names: str):
    return [Node(name, {"cpu": 1}).view() for name in names]


def test_filter_short_circuits():
    f1 = RecordingFilter({"b"})
    f2 = RecordingFilter({"c"})
    rv = filter_nodes([f1, f2], Workload(name="w"), views("a", "b", "c", "d"))
    assert [n.name for n in rv] == ["a", "d"]
    assert f1.seen == ["a", "b", "c", "d"]
    assert f2.seen == ["a", "c", "d"]


def test_filter_monotonic():
    nodes = views(*"abcdefgh")
    filters = [RecordingFilter(set(rejected)) for rejected in ["ab", "", "bcd", "h"]]
    previous = {n.name for n in nodes}
    for k in range(1, len(filters) + 1):
        current = {n.name for n in filter_nodes(filters[:k], Workload(name="w"), nodes)}
        assert current <= previous
        previous = current
    assert previous == {"e", "f", "g"}


def test_no_filters_keeps_all():
    nodes = views("a", "b")
    assert filter_nodes([], Workload(name="w"), nodes) == nodes


def test_score_aggregation():
    s1 = FixedScorer({"A": 1, "B": 3}, weight=2)
    s2 = FixedScorer({"A": 5, "B": 0}, weight=1)
    totals = score_nodes([s1, s2], Workload(name="w"), views("A", "B"))
    assert totals == {"A": 7, "B": 6}
    assert select_node(totals) == "A"
    assert schedule([], [s1, s2], Workload(name="w"), views("A", "B")) == "A"


def test_scores_of_non_candidates_ignored():
    class StrayScorer:
        def score(self, workload, nodes):
            return [NodeScore(node="a", score=1), NodeScore(node="zzz", score=100)], 1

    assert score_nodes([StrayScorer()], Workload(name="w"), views("a", "b")) == {"a": 1, "b": 0}


@pytest.mark.parametrize(
    "totals, expected",
    [
        [{"b": 1, "a": 1, "c": 0}, "a"],
        [{"c": 5, "b": 5, "a": 4}, "b"],
        [{"x": 0}, "x"],
        [{"b": -1, "a": -2}, "b"],
        [{}, None],
    ],
)
def test_select_tie_break(totals, expected):
    assert select_node(totals) == expected


def test_no_scorers_picks_first_name():
    assert schedule([], [], Workload(name="w"), views("c", "a", "b")) == "a"


def test_nothing_feasible():
    scorer = FixedScorer({"a": 1})
    assert schedule([RecordingFilter({"a"})], [scorer], Workload(name="w"), views("a")) is None
    assert scorer.seen == []


def test_errors_propagate():
    with pytest.raises(RuntimeError, match="filter failure"):
        schedule([FailingPlugin()], [], Workload(name="w"), views("a"))
    with pytest.raises(RuntimeError, match="scorer failure"):
        schedule([], [FailingPlugin()], Workload(name="w"), views("a"))
