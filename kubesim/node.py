"""
Node state and the registry holding it. The registry is the single mutable resource of a
simulation and is mutated via `bind` only
"""

import logging
from enum import Enum
from typing import Iterable, Iterator

from kubesim.clock import Clock
from kubesim.core import LABEL_HOSTNAME, LABEL_OS, NodeView, Resources, Taint, Workload, fits

logger = logging.getLogger(__name__)


class NodeNotFound(LookupError):
    pass


class BindResult(str, Enum):
    success = "success"
    capacity_exceeded = "capacity_exceeded"
    node_not_found = "node_not_found"


class Node:
    def __init__(
        self,
        name: str,
        capacity: Resources,
        operating_system: str = "linux",
        taint: Taint | None = None,
        labels: dict[str, str] | None = None,
    ) -> None:
        self.name = name
        self.capacity: Resources = dict(capacity)
        self.allocation: Resources = {kind: 0.0 for kind in capacity}
        self.operating_system = operating_system
        self.taint = taint
        self.labels = {**(labels or {}), LABEL_HOSTNAME: name, LABEL_OS: operating_system}
        self.workloads: list[tuple[Workload, Clock]] = []

    def fits(self, request: Resources) -> bool:
        return fits(self.allocation, request, self.capacity)

    def create_workload(self, clock: Clock, workload: Workload) -> bool:
        """Allocates the workload's requests if they fit, otherwise leaves the node untouched"""
        if not self.fits(workload.requests):
            return False
        workload.assign(self.name, clock.instant)
        for kind, quantity in workload.requests.items():
            self.allocation[kind] = self.allocation.get(kind, 0) + quantity
        self.workloads.append((workload, clock))
        return True

    def view(self) -> NodeView:
        return NodeView(
            name=self.name,
            capacity=dict(self.capacity),
            allocation=dict(self.allocation),
            operating_system=self.operating_system,
            taint=self.taint,
            labels=dict(self.labels),
            workloads=tuple(w.name for w, _ in self.workloads),
        )

    def __repr__(self) -> str:
        usage = ", ".join(f"{k}={self.allocation.get(k, 0):g}/{v:g}" for k, v in self.capacity.items())
        return f"Node({self.name}, {usage})"


class NodeRegistry:
    def __init__(self, nodes: Iterable[Node] = ()) -> None:
        self.nodes: dict[str, Node] = {}
        for node in nodes:
            if node.name in self.nodes:
                raise ValueError(f"duplicate node {node.name!r}")
            self.nodes[node.name] = node

    def snapshot(self) -> list[NodeView]:
        """Views of all nodes, sorted by name"""
        return [self.nodes[name].view() for name in sorted(self.nodes)]

    def bind(self, node_name: str, workload: Workload, clock: Clock) -> BindResult:
        if (node := self.nodes.get(node_name)) is None:
            return BindResult.node_not_found
        if not node.create_workload(clock, workload):
            logger.debug(f"{workload.requests=} does not fit {node!r}")
            return BindResult.capacity_exceeded
        return BindResult.success

    def get(self, name: str) -> Node:
        try:
            return self.nodes[name]
        except KeyError:
            raise NodeNotFound(f"node {name!r} not found") from None

    def names(self) -> list[str]:
        return sorted(self.nodes)

    def __contains__(self, name: object) -> bool:
        return name in self.nodes

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes[name] for name in sorted(self.nodes))
