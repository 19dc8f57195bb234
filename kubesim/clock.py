"""
Virtual clock of the simulation. Not coupled to wall time, so that a run is
replayable given the same start and tick
"""

from datetime import datetime, timedelta, timezone
from functools import total_ordering

from typing_extensions import Self

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@total_ordering
class Clock:
    __slots__ = ("_instant",)

    def __init__(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self._instant = instant

    @classmethod
    def at(cls, iso: str | None = None) -> Self:
        """Parses an ISO 8601 timestamp. Empty or None yields the epoch"""
        if not iso:
            return cls(EPOCH)
        return cls(datetime.fromisoformat(iso))

    @property
    def instant(self) -> datetime:
        return self._instant

    def advance(self, d: timedelta | float | int) -> Self:
        """A new clock later by exactly `d`, given as a timedelta or seconds"""
        if not isinstance(d, timedelta):
            d = timedelta(seconds=d)
        if d <= timedelta(0):
            raise ValueError(f"clock can only advance by a positive duration, got {d}")
        return self.__class__(self._instant + d)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Clock):
            return NotImplemented
        return self._instant == other._instant

    def __lt__(self, other: "Clock") -> bool:
        return self._instant < other._instant

    def __hash__(self) -> int:
        return hash(self._instant)

    def __sub__(self, other: "Clock") -> timedelta:
        return self._instant - other._instant

    def __str__(self) -> str:
        return self._instant.isoformat()

    def __repr__(self) -> str:
        return f"Clock({self._instant.isoformat()})"
