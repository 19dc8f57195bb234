"""
Production of ticks for the scheduling loop, and cooperative cancellation.

A single Ticker thread writes successive clocks into a bounded queue and the loop is the only
reader. Two ends to the queue: the writer is held by the ticker thread, the reader by the loop.
Each end gives up once the token it is handed gets cancelled
"""

import logging
import threading
from queue import Empty, Full, Queue
from typing import cast

from kubesim.clock import Clock

logger = logging.getLogger(__name__)

# how often blocked ends of the queue look at their cancellation token
POLL_SECS = 0.05


class CancelToken:
    def __init__(self) -> None:
        self.event = threading.Event()
        self.cause: str | None = None

    def cancel(self, cause: str = "cancelled") -> None:
        # NOTE first cause wins, later cancels are no-ops
        if not self.event.is_set():
            self.cause = cause
            self.event.set()

    @property
    def cancelled(self) -> bool:
        return self.event.is_set()

    def wait(self, timeout_secs: float | None = None) -> bool:
        return self.event.wait(timeout_secs)


class Writer:
    def __init__(self, q: Queue) -> None:
        self.q = q

    def put(self, clock: Clock, token: CancelToken) -> bool:
        """Blocks while the queue is full. Returns False if cancelled before the clock got in"""
        while not token.cancelled:
            try:
                self.q.put(clock, True, POLL_SECS)
                return True
            except Full:
                continue
        return False


class Reader:
    def __init__(self, q: Queue) -> None:
        self.q = q

    def get(self, token: CancelToken) -> Clock | None:
        """Blocks until the next tick is available. Returns None once cancelled"""
        while not token.cancelled:
            try:
                rv = self.q.get(True, POLL_SECS)
            except Empty:
                continue
            self.q.task_done()
            return cast(Clock, rv)
        return None


def build_queue(maxsize: int = 1) -> tuple[Writer, Reader]:
    q: Queue = Queue(maxsize)
    return Writer(q), Reader(q)


class Ticker(threading.Thread):
    """Emits start + tick, start + 2 * tick, ... until `stop` is cancelled"""

    def __init__(self, start: Clock, tick_secs: float, writer: Writer) -> None:
        super().__init__(name="kubesim-ticker", daemon=True)
        if tick_secs <= 0:
            raise ValueError(f"tick must be positive, got {tick_secs}")
        self.clock = start
        self.tick_secs = tick_secs
        self.writer = writer
        self.stop = CancelToken()

    def run(self) -> None:
        while not self.stop.cancelled:
            clock = self.clock.advance(self.tick_secs)
            if not self.writer.put(clock, self.stop):
                break
            self.clock = clock
        logger.debug(f"ticker stopped at {self.clock}")
