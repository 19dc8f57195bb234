"""
Plugin interfaces of the scheduling loop. Errors are reported by raising, and are
fatal to the run
"""

from typing import Protocol, runtime_checkable

from kubesim.clock import Clock
from kubesim.core import NodeScore, NodeView, Workload


@runtime_checkable
class Submitter(Protocol):
    def submit(self, clock: Clock, nodes: list[NodeView]) -> list[Workload]:
        """Produces zero or more new workloads, invoked once per tick"""
        raise NotImplementedError


@runtime_checkable
class Filter(Protocol):
    def filter(self, workload: Workload, node: NodeView) -> bool:
        """Whether the workload may be placed on the node"""
        raise NotImplementedError


@runtime_checkable
class Scorer(Protocol):
    def score(self, workload: Workload, nodes: list[NodeView]) -> tuple[list[NodeScore], int]:
        """Per-node desirability and the weight the scores are multiplied with"""
        raise NotImplementedError
