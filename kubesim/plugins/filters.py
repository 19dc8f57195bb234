"""
Built-in feasibility filters
"""

from kubesim.core import NodeView, TaintEffect, Workload

# effects which forbid placement of workloads that do not tolerate them
BLOCKING_EFFECTS = {TaintEffect.no_schedule, TaintEffect.no_execute}


class ResourceFitFilter:
    def filter(self, workload: Workload, node: NodeView) -> bool:
        return node.fits(workload.requests)


class TaintTolerationFilter:
    def filter(self, workload: Workload, node: NodeView) -> bool:
        if node.taint is None or node.taint.effect not in BLOCKING_EFFECTS:
            return True
        return workload.tolerates(node.taint)


class NodeSelectorFilter:
    def filter(self, workload: Workload, node: NodeView) -> bool:
        return all(node.labels.get(k) == v for k, v in workload.node_selector.items())
