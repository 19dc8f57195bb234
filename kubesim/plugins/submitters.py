"""
Built-in workload generators
"""

import logging
from typing import Iterable

import numpy as np

from kubesim.clock import Clock
from kubesim.core import NodeView, Resources, Toleration, Workload

logger = logging.getLogger(__name__)


class ConstantSubmitter:
    """Emits `per_tick` identical workloads every tick, until `limit` workloads were emitted in total"""

    def __init__(
        self,
        requests: Resources,
        per_tick: int = 1,
        limit: int | None = None,
        prefix: str = "pod",
        tolerations: Iterable[Toleration] = (),
        node_selector: dict[str, str] | None = None,
    ) -> None:
        self.requests = dict(requests)
        self.per_tick = per_tick
        self.limit = limit
        self.prefix = prefix
        self.tolerations = list(tolerations)
        self.node_selector = dict(node_selector or {})
        self.submitted = 0

    def _budget(self, wanted: int) -> int:
        if self.limit is None:
            return wanted
        return max(min(wanted, self.limit - self.submitted), 0)

    def _make(self, requests: Resources) -> Workload:
        workload = Workload(
            name=f"{self.prefix}-{self.submitted}",
            requests=requests,
            tolerations=list(self.tolerations),
            node_selector=dict(self.node_selector),
        )
        self.submitted += 1
        return workload

    def submit(self, clock: Clock, nodes: list[NodeView]) -> list[Workload]:
        return [self._make(dict(self.requests)) for _ in range(self._budget(self.per_tick))]


class RandomSubmitter(ConstantSubmitter):
    """Emits a Poisson distributed number of workloads per tick, each request scaled by a
    uniform factor in [0.5, 1.0]. Reproducible for a given seed"""

    def __init__(
        self,
        requests: Resources,
        rate: float = 1.0,
        seed: int | None = None,
        limit: int | None = None,
        prefix: str = "pod",
        tolerations: Iterable[Toleration] = (),
        node_selector: dict[str, str] | None = None,
    ) -> None:
        super().__init__(requests, 0, limit, prefix, tolerations, node_selector)
        self.rate = rate
        self.rng = np.random.default_rng(seed)

    def submit(self, clock: Clock, nodes: list[NodeView]) -> list[Workload]:
        n = self._budget(int(self.rng.poisson(self.rate)))
        rv = []
        for _ in range(n):
            factors = self.rng.uniform(0.5, 1.0, size=len(self.requests))
            requests = {k: float(v * f) for (k, v), f in zip(self.requests.items(), factors)}
            rv.append(self._make(requests))
        if rv:
            logger.debug(f"{clock}: submitting {len(rv)} workloads")
        return rv
