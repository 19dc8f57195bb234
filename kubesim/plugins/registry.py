"""
Lookup of built-in filters and scorers by the names used in configuration files
"""

from typing import Callable

from kubesim.plugins.api import Filter, Scorer
from kubesim.plugins.filters import NodeSelectorFilter, ResourceFitFilter, TaintTolerationFilter
from kubesim.plugins.scorers import (
    FreeCapacityScorer,
    LeastAllocatedScorer,
    MostAllocatedScorer,
    TaintTolerationScorer,
)

FILTERS: dict[str, Callable[[], Filter]] = {
    "resource-fit": ResourceFitFilter,
    "taint-toleration": TaintTolerationFilter,
    "node-selector": NodeSelectorFilter,
}

SCORERS: dict[str, Callable[[int], Scorer]] = {
    "free-capacity": FreeCapacityScorer,
    "least-allocated": LeastAllocatedScorer,
    "most-allocated": MostAllocatedScorer,
    "taint-toleration": TaintTolerationScorer,
}


def build_filter(name: str) -> Filter:
    if name not in FILTERS:
        raise KeyError(f"unknown filter {name!r}, expected one of {sorted(FILTERS)}")
    return FILTERS[name]()


def build_scorer(name: str, weight: int = 1) -> Scorer:
    if name not in SCORERS:
        raise KeyError(f"unknown scorer {name!r}, expected one of {sorted(SCORERS)}")
    return SCORERS[name](weight)
