"""
Configuration of a simulation: the cluster, the tick and the plugins to run.

Read from a json file, eg
```
{
  "tick": 10,
  "cluster": {"nodes": [{"name": "node-0", "capacity": {"cpu": "4", "memory": "8Gi"}}]},
  "submitters": [{"kind": "constant", "requests": {"cpu": "500m"}}]
}
```
"""

import logging
import re
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from kubesim.clock import Clock
from kubesim.core import TOLERATE_ALL, Resources, Taint, TaintEffect
from kubesim.func import Either
from kubesim.logconfig import LEVELS
from kubesim.node import Node, NodeRegistry
from kubesim.plugins.api import Filter, Scorer, Submitter
from kubesim.plugins.registry import build_filter, build_scorer
from kubesim.plugins.submitters import ConstantSubmitter, RandomSubmitter

logger = logging.getLogger(__name__)

Quantity = str | float


class InvalidConfig(ValueError):
    pass


class TaintConfig(BaseModel):
    key: str
    value: str = ""
    effect: str = "NoSchedule"


DEFAULT_TAINT = TaintConfig(
    key="kubernetes-scheduler-simulator.io/kubelet",
    value="simulator",
    effect="NoSchedule",
)


class NodeConfig(BaseModel):
    name: str
    capacity: dict[str, Quantity]
    operating_system: str = "linux"
    taint: TaintConfig | None = Field(None, description="overrides the cluster-wide taint")
    labels: dict[str, str] = Field(default_factory=dict)


class ClusterConfig(BaseModel):
    nodes: list[NodeConfig] = Field(default_factory=list)


class ScorerConfig(BaseModel):
    name: str
    weight: int = 1


class SchedulerConfig(BaseModel):
    max_attempts: int | None = Field(1, description="None requeues unschedulable workloads forever")
    filters: list[str] = Field(default_factory=lambda: ["resource-fit", "taint-toleration", "node-selector"])
    scorers: list[ScorerConfig] = Field(default_factory=lambda: [ScorerConfig(name="least-allocated")])


class SubmitterConfig(BaseModel):
    kind: Literal["constant", "random"] = "constant"
    requests: dict[str, Quantity]
    per_tick: int = Field(1, description="constant only")
    rate: float = Field(1.0, description="random only, mean workloads per tick")
    seed: int | None = Field(None, description="random only")
    limit: int | None = None
    prefix: str = "pod"
    tolerate_all: bool = Field(True, description="whether workloads tolerate every taint")
    node_selector: dict[str, str] = Field(default_factory=dict)


class Config(BaseModel):
    log_level: str = "info"
    tick: float = Field(10, gt=0, description="seconds of virtual time per tick")
    start_clock: str = Field("", description="iso timestamp, empty for the epoch")
    taint: TaintConfig | None = DEFAULT_TAINT
    cluster: ClusterConfig = Field(default_factory=ClusterConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    submitters: list[SubmitterConfig] = Field(default_factory=list)

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        if v.lower() not in LEVELS:
            raise ValueError(f"log level {v!r} not supported")
        return v.lower()

    @field_validator("start_clock")
    @classmethod
    def _iso_clock(cls, v: str) -> str:
        try:
            Clock.at(v)
        except ValueError:
            raise ValueError(f"start clock {v!r} is not an iso timestamp") from None
        return v


def read_config(path: str | Path) -> Config:
    path = Path(path)
    logger.debug(f"using config file {path}")
    return Config.model_validate_json(path.read_text())


# Quantities, as in kubernetes resource notation
_SUFFIXES = {
    "": 1,
    "m": 1e-3,
    "k": 1e3,
    "M": 1e6,
    "G": 1e9,
    "T": 1e12,
    "P": 1e15,
    "E": 1e18,
    "Ki": 2**10,
    "Mi": 2**20,
    "Gi": 2**30,
    "Ti": 2**40,
    "Pi": 2**50,
    "Ei": 2**60,
}
_QUANTITY = re.compile(r"^([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)(Ki|Mi|Gi|Ti|Pi|Ei|m|k|M|G|T|P|E)?$")


def parse_quantity(value: Quantity) -> float:
    if isinstance(value, (int, float)):
        return float(value)
    match = _QUANTITY.match(value.strip())
    if match is None:
        raise InvalidConfig(f"invalid quantity {value!r}")
    number, suffix = match.groups()
    return float(number) * _SUFFIXES[suffix or ""]


def parse_resources(config: dict[str, Quantity]) -> Resources:
    rv: Resources = {}
    for kind, value in config.items():
        try:
            quantity = parse_quantity(value)
        except InvalidConfig:
            raise InvalidConfig(f"invalid {kind} value {value!r}") from None
        if quantity < 0:
            raise InvalidConfig(f"negative {kind} value {value!r}")
        rv[kind] = quantity
    return rv


def build_taint(config: TaintConfig) -> Taint:
    try:
        effect = TaintEffect(config.effect)
    except ValueError:
        raise InvalidConfig(f"taint effect {config.effect!r} is not supported") from None
    return Taint(key=config.key, value=config.value, effect=effect)


def build_node(config: NodeConfig, default_taint: TaintConfig | None) -> Node:
    taint_config = config.taint if config.taint is not None else default_taint
    return Node(
        name=config.name,
        capacity=parse_resources(config.capacity),
        operating_system=config.operating_system,
        taint=build_taint(taint_config) if taint_config is not None else None,
        labels=config.labels,
    )


def build_registry(config: Config) -> NodeRegistry:
    """Builds all nodes, reporting every invalid node at once"""
    nodes: list[Node] = []
    result: Either[list[Node]] = Either.ok(nodes)
    seen: set[str] = set()
    for node_config in config.cluster.nodes:
        if node_config.name in seen:
            result = result.append(f"node {node_config.name!r}: duplicate name")
            continue
        seen.add(node_config.name)
        try:
            nodes.append(build_node(node_config, config.taint))
        except InvalidConfig as e:
            result = result.append(f"node {node_config.name!r}: {e}")
    for node in result.get_or_raise(InvalidConfig):
        logger.debug(f"node {node!r} created")
    return NodeRegistry(nodes)


def build_submitter(config: SubmitterConfig) -> Submitter:
    requests = parse_resources(config.requests)
    tolerations = [TOLERATE_ALL] if config.tolerate_all else []
    if config.kind == "constant":
        return ConstantSubmitter(
            requests,
            per_tick=config.per_tick,
            limit=config.limit,
            prefix=config.prefix,
            tolerations=tolerations,
            node_selector=config.node_selector,
        )
    return RandomSubmitter(
        requests,
        rate=config.rate,
        seed=config.seed,
        limit=config.limit,
        prefix=config.prefix,
        tolerations=tolerations,
        node_selector=config.node_selector,
    )


def build_plugins(config: Config) -> tuple[list[Submitter], list[Filter], list[Scorer]]:
    try:
        filters = [build_filter(name) for name in config.scheduler.filters]
        scorers = [build_scorer(s.name, s.weight) for s in config.scheduler.scorers]
    except KeyError as e:
        raise InvalidConfig(e.args[0]) from None
    submitters = [build_submitter(s) for s in config.submitters]
    return submitters, filters, scorers
