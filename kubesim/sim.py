"""
The scheduling loop. Each tick:
 - snapshots the nodes,
 - lets every submitter append workloads to the queue,
 - attempts to place the workload at the head of the queue via filters -> scorers -> bind.

At most one workload is scheduled per tick. Cancellation is observed between ticks only,
an attempt once started always runs to completion
"""

import logging
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum

from typing_extensions import Self

from kubesim.clock import Clock
from kubesim.config import Config, build_plugins, build_registry
from kubesim.core import NodeView, Workload
from kubesim.func import assert_never
from kubesim.node import BindResult, NodeNotFound, NodeRegistry
from kubesim.plugins.api import Filter, Scorer, Submitter
from kubesim.scheduler import schedule
from kubesim.ticker import CancelToken, Ticker, build_queue
from kubesim.workqueue import WorkloadQueue

logger = logging.getLogger(__name__)

TICK_LIMIT_CAUSE = "tick limit reached"


class Phase(str, Enum):
    idle = "idle"
    submitting = "submitting"
    scheduling = "scheduling"
    stopped = "stopped"


@dataclass
class Binding:
    workload: Workload
    node: str
    clock: Clock


class KubeSim:
    def __init__(
        self,
        registry: NodeRegistry,
        tick: float | timedelta = 10,
        start: Clock | None = None,
        max_attempts: int | None = 1,
    ) -> None:
        """`max_attempts` bounds how many times a workload is tried before it is dropped, None
        means it is requeued until it fits somewhere"""
        if isinstance(tick, timedelta):
            tick = tick.total_seconds()
        if tick <= 0:
            raise ValueError(f"tick must be positive, got {tick}")
        if max_attempts is not None and max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self.registry = registry
        self.tick = tick
        self.clock = start if start is not None else Clock.at()
        self.max_attempts = max_attempts
        self.pods = WorkloadQueue()
        self.phase = Phase.idle
        self.running = False

        self.submitters: list[Submitter] = []
        self.filters: list[Filter] = []
        self.scorers: list[Scorer] = []

        self.bindings: list[Binding] = []
        self.unschedulable: list[Workload] = []

    @classmethod
    def from_config(cls, config: Config) -> Self:
        sim = cls(
            build_registry(config),
            tick=config.tick,
            start=Clock.at(config.start_clock),
            max_attempts=config.scheduler.max_attempts,
        )
        submitters, filters, scorers = build_plugins(config)
        for submitter in submitters:
            sim.register_submitter(submitter)
        for f in filters:
            sim.register_filter(f)
        for scorer in scorers:
            sim.register_scorer(scorer)
        return sim

    def _ensure_setup(self) -> None:
        if self.running:
            raise RuntimeError("plugins can not be registered while the simulation runs")

    def register_submitter(self, submitter: Submitter) -> None:
        self._ensure_setup()
        self.submitters.append(submitter)

    def register_filter(self, f: Filter) -> None:
        self._ensure_setup()
        self.filters.append(f)

    def register_scorer(self, scorer: Scorer) -> None:
        self._ensure_setup()
        self.scorers.append(scorer)

    def submit(self, clock: Clock, nodes: list[NodeView]) -> None:
        for submitter in self.submitters:
            for workload in submitter.submit(clock, nodes):
                self.pods.append(workload)

    def _unschedulable(self, workload: Workload, reason: str) -> None:
        workload.attempts += 1
        if self.max_attempts is None or workload.attempts < self.max_attempts:
            logger.debug(f"requeuing {workload.name} after {workload.attempts} attempts: {reason}")
            self.pods.append(workload)
        else:
            logger.warning(f"dropping {workload.name} after {workload.attempts} attempts: {reason}")
            self.unschedulable.append(workload)

    def schedule_one(self, clock: Clock, nodes: list[NodeView]) -> Binding | None:
        """Tries to place the workload at the front of the queue, returns immediately if there is none"""
        workload = self.pods.pop_front()
        if workload is None:
            return None
        if workload.assigned_node is not None:
            logger.warning(f"skipping {workload.name}, already bound to {workload.assigned_node}")
            return None
        logger.debug(f"trying to schedule {workload.name} with {workload.requests=}")

        selected = schedule(self.filters, self.scorers, workload, nodes)
        if selected is None:
            self._unschedulable(workload, "no feasible node")
            return None
        logger.debug(f"selected node {selected} for {workload.name}")

        result = self.registry.bind(selected, workload, clock)
        if result == BindResult.success:
            binding = Binding(workload=workload, node=selected, clock=clock)
            self.bindings.append(binding)
            logger.info(f"{clock}: bound {workload.name} to {selected}")
            return binding
        elif result == BindResult.capacity_exceeded:
            self._unschedulable(workload, f"capacity of {selected} exceeded")
            return None
        elif result == BindResult.node_not_found:
            raise NodeNotFound(f"node {selected!r} not found")
        else:
            assert_never(result)

    def step(self, clock: Clock) -> Binding | None:
        """A single tick at `clock`"""
        logger.debug(f"clock {clock}")
        self.clock = clock
        nodes = self.registry.snapshot()

        self.phase = Phase.submitting
        self.submit(clock, nodes)

        self.phase = Phase.scheduling
        binding = self.schedule_one(clock, nodes)

        self.phase = Phase.idle
        return binding

    def run(self, token: CancelToken, max_ticks: int | None = None) -> str:
        """Blocks until `token` is cancelled, or `max_ticks` ticks elapsed, returning the cause.
        Plugin errors and a missing node are raised"""
        if self.running:
            raise RuntimeError("simulation is already running")
        self.running = True
        writer, reader = build_queue()
        ticker = Ticker(self.clock, self.tick, writer)
        ticker.start()
        ticks = 0
        try:
            while True:
                if max_ticks is not None and ticks >= max_ticks:
                    token.cancel(TICK_LIMIT_CAUSE)
                if token.cancelled:
                    break
                clock = reader.get(token)
                if clock is None:
                    break
                self.step(clock)
                ticks += 1
        except Exception:
            logger.error("crash in scheduling loop, shutting down")
            raise
        finally:
            ticker.stop.cancel()
            ticker.join()
            self.phase = Phase.stopped
            self.running = False
        logger.debug(f"stopped after {ticks} ticks: {token.cause}")
        return token.cause or "cancelled"
