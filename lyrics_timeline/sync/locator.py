from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from operator import attrgetter
from typing import Protocol, Sequence, TypeVar


class _Timed(Protocol):
    time: float


T = TypeVar("T", bound=_Timed)

_time = attrgetter("time")

# returned by LineTracker.changed_index when the active line did not move
NO_CHANGE = object()


def active_index(lines: Sequence[_Timed], time: float) -> int | None:
    """
    Greatest i with lines[i].time <= time, None before the first line.
    Pure; safe to call from a render loop.
    """
    i = bisect_right(lines, time, key=_time) - 1
    return i if i >= 0 else None


def active_line(lines: Sequence[T], time: float) -> T | None:
    i = active_index(lines, time)
    return None if i is None else lines[i]


@dataclass(slots=True)
class LineTracker:
    """
    Efficient lookup: O(log n) via bisect + update only on change.
    """

    times: list[float]
    last_idx: int | None = None
    _started: bool = False

    @classmethod
    def from_lines(cls, lines: Sequence[_Timed]) -> "LineTracker":
        return cls(times=[ln.time for ln in lines])

    def current_index(self, now: float) -> int | None:
        i = bisect_right(self.times, now) - 1
        return i if i >= 0 else None

    def changed_index(self, now: float) -> int | None | object:
        i = self.current_index(now)
        if not self._started or i != self.last_idx:
            self._started = True
            self.last_idx = i
            return i
        return NO_CHANGE
