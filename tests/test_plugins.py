import pytest

from kubesim.clock import Clock
from kubesim.core import (
    LABEL_OS,
    TOLERATE_ALL,
    NodeView,
    Taint,
    TaintEffect,
    Toleration,
    TolerationOperator,
    Workload,
)
from kubesim.plugins.api import Filter, Scorer, Submitter
from kubesim.plugins.filters import NodeSelectorFilter, ResourceFitFilter, TaintTolerationFilter
from kubesim.plugins.registry import build_filter, build_scorer
from kubesim.plugins.scorers import (
    FreeCapacityScorer,
    LeastAllocatedScorer,
    MostAllocatedScorer,
    TaintTolerationScorer,
)
from kubesim.plugins.submitters import ConstantSubmitter, RandomSubmitter


def view(name: str, capacity: dict, allocation: dict | None = None, taint: Taint | None = None, os: str = "linux") -> NodeView:
    return NodeView(
        name=name,
        capacity=capacity,
        allocation=allocation or {k: 0 for k in capacity},
        operating_system=os,
        taint=taint,
        labels={LABEL_OS: os},
    )


no_schedule = Taint(key="dedicated", value="gpu", effect=TaintEffect.no_schedule)
prefer_no = Taint(key="dedicated", value="gpu", effect=TaintEffect.prefer_no_schedule)


@pytest.mark.parametrize(
    "toleration, taint, expected",
    [
        [Toleration(key="dedicated", value="gpu"), no_schedule, True],
        [Toleration(key="dedicated", value="cpu"), no_schedule, False],
        [Toleration(key="dedicated", operator=TolerationOperator.exists), no_schedule, True],
        [Toleration(key="other", operator=TolerationOperator.exists), no_schedule, False],
        [Toleration(key="dedicated", value="gpu", effect=TaintEffect.no_execute), no_schedule, False],
        [Toleration(key="dedicated", value="gpu", effect=TaintEffect.no_schedule), no_schedule, True],
        [TOLERATE_ALL, no_schedule, True],
        [Toleration(), no_schedule, False],
    ],
)
def test_toleration(toleration, taint, expected):
    assert toleration.tolerates(taint) == expected


def test_resource_fit_filter():
    f = ResourceFitFilter()
    node = view("n", {"cpu": 4, "memory": 8}, {"cpu": 3, "memory": 0})
    assert f.filter(Workload(name="w", requests={"cpu": 1, "memory": 8}), node)
    assert not f.filter(Workload(name="w", requests={"cpu": 2}), node)
    assert not f.filter(Workload(name="w", requests={"gpu": 1}), node)


def test_taint_filter():
    f = TaintTolerationFilter()
    plain = Workload(name="w")
    tolerant = Workload(name="t", tolerations=[TOLERATE_ALL])
    assert f.filter(plain, view("n", {"cpu": 1}))
    assert not f.filter(plain, view("n", {"cpu": 1}, taint=no_schedule))
    assert f.filter(tolerant, view("n", {"cpu": 1}, taint=no_schedule))
    # PreferNoSchedule is left to the scorer
    assert f.filter(plain, view("n", {"cpu": 1}, taint=prefer_no))


def test_node_selector_filter():
    f = NodeSelectorFilter()
    windows = Workload(name="w", node_selector={LABEL_OS: "windows"})
    assert f.filter(windows, view("n", {"cpu": 1}, os="windows"))
    assert not f.filter(windows, view("n", {"cpu": 1}, os="linux"))
    assert f.filter(Workload(name="any"), view("n", {"cpu": 1}))


def test_free_capacity_scorer():
    nodes = [view("a", {"cpu": 4}, {"cpu": 1}), view("b", {"cpu": 2})]
    scores, weight = FreeCapacityScorer(weight=3).score(Workload(name="w", requests={"cpu": 1}), nodes)
    assert weight == 3
    assert {s.node: s.score for s in scores} == {"a": 2, "b": 1}


def test_least_and_most_allocated_scorers():
    nodes = [view("a", {"cpu": 4, "memory": 4}, {"cpu": 2, "memory": 0}), view("b", {"cpu": 2, "memory": 4})]
    workload = Workload(name="w", requests={"cpu": 1, "memory": 2})
    least, _ = LeastAllocatedScorer().score(workload, nodes)
    assert {s.node: s.score for s in least} == {"a": (25 + 50) / 2, "b": (50 + 50) / 2}
    most, _ = MostAllocatedScorer().score(workload, nodes)
    assert {s.node: s.score for s in most} == {"a": (75 + 50) / 2, "b": (50 + 50) / 2}


def test_taint_toleration_scorer():
    nodes = [view("a", {"cpu": 1}, taint=prefer_no), view("b", {"cpu": 1})]
    scores, _ = TaintTolerationScorer().score(Workload(name="w"), nodes)
    assert {s.node: s.score for s in scores} == {"a": 0, "b": 100}
    scores, _ = TaintTolerationScorer().score(Workload(name="w", tolerations=[TOLERATE_ALL]), nodes)
    assert {s.node: s.score for s in scores} == {"a": 100, "b": 100}


def test_constant_submitter():
    submitter = ConstantSubmitter({"cpu": 1}, per_tick=2, limit=5, prefix="job")
    batches = [submitter.submit(Clock.at(), []) for _ in range(4)]
    assert [[w.name for w in b] for b in batches] == [["job-0", "job-1"], ["job-2", "job-3"], ["job-4"], []]
    assert all(w.requests == {"cpu": 1} for b in batches for w in b)
    # every workload owns its requests
    batches[0][0].requests["cpu"] = 3
    assert batches[0][1].requests == {"cpu": 1}


def test_random_submitter_reproducible():
    def run(seed: int) -> list[tuple[str, dict]]:
        submitter = RandomSubmitter({"cpu": 2, "memory": 4}, rate=2.0, seed=seed)
        clock = Clock.at()
        rv = []
        for _ in range(10):
            clock = clock.advance(1)
            rv.extend((w.name, w.requests) for w in submitter.submit(clock, []))
        return rv

    first = run(7)
    assert first == run(7)
    assert first
    for _, requests in first:
        assert 1 <= requests["cpu"] <= 2
        assert 2 <= requests["memory"] <= 4


def test_random_submitter_limit():
    submitter = RandomSubmitter({"cpu": 1}, rate=5.0, seed=0, limit=3)
    total = sum(len(submitter.submit(Clock.at(), [])) for _ in range(10))
    assert total == 3


def test_protocols():
    assert isinstance(ConstantSubmitter({"cpu": 1}), Submitter)
    assert isinstance(build_filter("resource-fit"), Filter)
    assert isinstance(build_scorer("most-allocated", 2), Scorer)
    assert build_scorer("most-allocated", 2).weight == 2
    with pytest.raises(KeyError):
        build_filter("nope")
    with pytest.raises(KeyError):
        build_scorer("nope")
