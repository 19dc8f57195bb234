"""
Built-in scorers. Ratio-based scorers use the 0..100 scale of the kube-scheduler
priority functions
"""

from kubesim.core import NodeScore, NodeView, TaintEffect, Workload

MAX_SCORE = 100


def _kinds(workload: Workload, node: NodeView) -> list[str]:
    # a workload with no requests is judged by every resource of the node
    return sorted(workload.requests) if workload.requests else sorted(node.capacity)


class FreeCapacityScorer:
    """Absolute capacity left over after the placement, summed over requested kinds"""

    def __init__(self, weight: int = 1) -> None:
        self.weight = weight

    def score(self, workload: Workload, nodes: list[NodeView]) -> tuple[list[NodeScore], int]:
        scores = [
            NodeScore(
                node=node.name,
                score=sum(node.free(k) - workload.requests.get(k, 0) for k in _kinds(workload, node)),
            )
            for node in nodes
        ]
        return scores, self.weight


class LeastAllocatedScorer:
    """Prefers nodes with the highest fraction of capacity unallocated after the placement"""

    def __init__(self, weight: int = 1) -> None:
        self.weight = weight

    @staticmethod
    def _ratio(workload: Workload, node: NodeView, kind: str) -> float:
        capacity = node.capacity.get(kind, 0)
        if capacity <= 0:
            return 0
        remaining = capacity - node.allocation.get(kind, 0) - workload.requests.get(kind, 0)
        return max(remaining, 0) * MAX_SCORE / capacity

    def score(self, workload: Workload, nodes: list[NodeView]) -> tuple[list[NodeScore], int]:
        scores = []
        for node in nodes:
            kinds = _kinds(workload, node)
            ratios = [self._ratio(workload, node, k) for k in kinds]
            scores.append(NodeScore(node=node.name, score=sum(ratios) / len(ratios) if ratios else 0))
        return scores, self.weight


class MostAllocatedScorer:
    """Bin packing -- prefers nodes with the highest fraction of capacity allocated after the placement"""

    def __init__(self, weight: int = 1) -> None:
        self.weight = weight

    @staticmethod
    def _ratio(workload: Workload, node: NodeView, kind: str) -> float:
        capacity = node.capacity.get(kind, 0)
        if capacity <= 0:
            return 0
        used = node.allocation.get(kind, 0) + workload.requests.get(kind, 0)
        return min(used, capacity) * MAX_SCORE / capacity

    def score(self, workload: Workload, nodes: list[NodeView]) -> tuple[list[NodeScore], int]:
        scores = []
        for node in nodes:
            kinds = _kinds(workload, node)
            ratios = [self._ratio(workload, node, k) for k in kinds]
            scores.append(NodeScore(node=node.name, score=sum(ratios) / len(ratios) if ratios else 0))
        return scores, self.weight


class TaintTolerationScorer:
    """Penalizes nodes whose PreferNoSchedule taint the workload does not tolerate"""

    def __init__(self, weight: int = 1) -> None:
        self.weight = weight

    def score(self, workload: Workload, nodes: list[NodeView]) -> tuple[list[NodeScore], int]:
        scores = []
        for node in nodes:
            taint = node.taint
            avoided = (
                taint is not None
                and taint.effect == TaintEffect.prefer_no_schedule
                and not workload.tolerates(taint)
            )
            scores.append(NodeScore(node=node.name, score=0 if avoided else MAX_SCORE))
        return scores, self.weight
