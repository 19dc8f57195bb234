"""
Core data structures -- workloads, taints and node views as seen by plugins
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

Resources = dict[str, float]  # resource kind -> quantity

LABEL_HOSTNAME = "kubernetes.io/hostname"
LABEL_OS = "kubernetes.io/os"


def fits(allocation: Resources, request: Resources, capacity: Resources) -> bool:
    """True if every requested kind still fits. Kinds absent from capacity have capacity 0,
    negative quantities never fit"""
    return all(
        0 <= quantity and allocation.get(kind, 0) + quantity <= capacity.get(kind, 0)
        for kind, quantity in request.items()
    )


class TaintEffect(str, Enum):
    no_schedule = "NoSchedule"
    prefer_no_schedule = "PreferNoSchedule"
    no_execute = "NoExecute"


class TolerationOperator(str, Enum):
    equal = "Equal"
    exists = "Exists"


class Taint(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    value: str = ""
    effect: TaintEffect


class Toleration(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str = ""
    operator: TolerationOperator = TolerationOperator.equal
    value: str = ""
    effect: TaintEffect | None = Field(None, description="None tolerates every effect")

    def tolerates(self, taint: Taint) -> bool:
        if self.effect is not None and self.effect != taint.effect:
            return False
        if not self.key:
            # empty key with Exists is the wildcard toleration
            return self.operator == TolerationOperator.exists
        if self.key != taint.key:
            return False
        return self.operator == TolerationOperator.exists or self.value == taint.value


TOLERATE_ALL = Toleration(operator=TolerationOperator.exists)


class Workload(BaseModel):
    name: str
    requests: Resources = Field(default_factory=dict)
    tolerations: list[Toleration] = Field(default_factory=list)
    node_selector: dict[str, str] = Field(
        default_factory=dict, description="labels the node must carry, with equal values"
    )
    assigned_node: str | None = None
    bound_at: datetime | None = None
    attempts: int = Field(0, description="failed scheduling attempts so far")

    @field_validator("requests")
    @classmethod
    def _non_negative(cls, v: Resources) -> Resources:
        negative = sorted(kind for kind, quantity in v.items() if quantity < 0)
        if negative:
            raise ValueError(f"negative requests for {', '.join(negative)}")
        return v

    def tolerates(self, taint: Taint) -> bool:
        return any(t.tolerates(taint) for t in self.tolerations)

    def assign(self, node: str, at: datetime) -> None:
        if self.assigned_node is not None:
            raise ValueError(f"workload {self.name} already assigned to {self.assigned_node}")
        self.assigned_node = node
        self.bound_at = at


class NodeView(BaseModel):
    """Read-only copy of a node at the start of a tick"""

    model_config = ConfigDict(frozen=True)

    name: str
    capacity: Resources
    allocation: Resources
    operating_system: str
    taint: Taint | None = None
    labels: dict[str, str] = Field(default_factory=dict)
    workloads: tuple[str, ...] = ()

    def free(self, kind: str) -> float:
        return self.capacity.get(kind, 0) - self.allocation.get(kind, 0)

    def free_resources(self) -> Resources:
        return {kind: self.free(kind) for kind in self.capacity}

    def fits(self, request: Resources) -> bool:
        return fits(self.allocation, request, self.capacity)


class NodeScore(BaseModel):
    node: str
    score: float
