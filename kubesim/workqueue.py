"""
FIFO of workloads awaiting scheduling. Owned by the orchestrator loop, thus no locking
"""

from collections import deque
from typing import Iterator

from kubesim.core import Workload


class WorkloadQueue:
    def __init__(self) -> None:
        self.q: deque[Workload] = deque()

    def append(self, workload: Workload) -> None:
        self.q.append(workload)

    def pop_front(self) -> Workload | None:
        """Returns None when nothing is pending -- never blocks"""
        if not self.q:
            return None
        return self.q.popleft()

    def empty(self) -> bool:
        return not self.q

    def __len__(self) -> int:
        return len(self.q)

    def __iter__(self) -> Iterator[Workload]:
        return iter(list(self.q))
