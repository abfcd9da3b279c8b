from __future__ import annotations

import logging
import math
from bisect import bisect_left, bisect_right
from enum import Enum
from typing import Iterable, Iterator

from lyrics_timeline.errors import LineNotFound
from lyrics_timeline.lrc.model import EditableLine, Line
from lyrics_timeline.lrc.parse import parse_lrc
from lyrics_timeline.lrc.timefmt import format_time
from lyrics_timeline.lrc.tokenize import tokenize

logger = logging.getLogger(__name__)

MIN_GAP_S = 0.01


class Precision(str, Enum):
    FINE = "fine"
    NORMAL = "normal"
    COARSE = "coarse"

    @property
    def step(self) -> float:
        return _STEPS[self]


_STEPS = {Precision.FINE: 0.01, Precision.NORMAL: 0.1, Precision.COARSE: 1.0}


def _time_key(line: EditableLine) -> float:
    return line.time


def _stamp(t: float) -> str:
    return f"[{format_time(t)}]"


class Timeline:
    """
    Ordered, editable lyric lines.

    All changes go through the methods below so the list stays sorted by time;
    `retime` is the only place that enforces the minimum gap between lines.
    Not thread-safe: a host that shares a Timeline must hold one lock around it.
    """

    def __init__(self, lines: Iterable[EditableLine] = ()):
        self._lines: list[EditableLine] = sorted(lines, key=_time_key)
        self.revision = 0
        self.dirty = False

    @classmethod
    def from_lines(cls, lines: Iterable[Line]) -> "Timeline":
        return cls(EditableLine.from_line(ln) for ln in lines)

    @classmethod
    def parse(cls, document: str) -> "Timeline":
        return cls.from_lines(parse_lrc(document))

    # read access

    @property
    def lines(self) -> tuple[EditableLine, ...]:
        return tuple(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[EditableLine]:
        return iter(tuple(self._lines))

    def __getitem__(self, idx: int) -> EditableLine:
        return self._lines[idx]

    def index_of(self, line_id: str) -> int:
        for i, ln in enumerate(self._lines):
            if ln.id == line_id:
                return i
        raise LineNotFound(line_id)

    def get(self, line_id: str) -> EditableLine:
        return self._lines[self.index_of(line_id)]

    def selected_lines(self) -> list[EditableLine]:
        return [ln for ln in self._lines if ln.selected]

    def snapshot(self) -> list[Line]:
        return [ln.to_line() for ln in self._lines]

    def _touch(self) -> None:
        self.revision += 1
        self.dirty = True

    def mark_clean(self) -> None:
        self.dirty = False

    # mutation

    def insert(self, line: EditableLine) -> EditableLine:
        if line.time < 0:
            line.time = 0.0
            line.original_time_text = _stamp(0.0)
        for other in self._lines:
            other.selected = False
        line.selected = True
        # equal times land after the existing line; retime sorts it out later
        pos = bisect_right(self._lines, line.time, key=_time_key)
        self._lines.insert(pos, line)
        self._touch()
        return line

    def new_line(self, time: float, raw_text: str = "") -> EditableLine:
        segments = tuple(tokenize(raw_text))
        line = EditableLine.from_line(Line.build(max(time, 0.0), segments), draft=True)
        return self.insert(line)

    def _neighbors(self, idx: int, requested_time: float) -> tuple[EditableLine | None, EditableLine | None]:
        """
        Lines right before and after `requested_time` once the line at `idx`
        is taken out. A line sitting exactly at `requested_time` counts on the
        side the moving line comes from.
        """
        others = self._lines[:idx] + self._lines[idx + 1 :]
        first = bisect_left(others, requested_time, key=_time_key)
        last = bisect_right(others, requested_time, key=_time_key)
        split = min(max(idx, first), last)
        prev = others[split - 1] if split > 0 else None
        nxt = others[split] if split < len(others) else None
        return prev, nxt

    def retime(self, line_id: str, requested_time: float) -> float:
        idx = self.index_of(line_id)
        line = self._lines[idx]
        if not math.isfinite(requested_time):
            return line.time

        prev, nxt = self._neighbors(idx, requested_time)
        lo = prev.time + MIN_GAP_S if prev is not None else 0.0
        hi = nxt.time - MIN_GAP_S if nxt is not None else math.inf
        if lo - hi > 1e-9:
            logger.debug(
                "no room for %s between %.3f and %.3f, keeping %.3f", line_id, lo, hi, line.time
            )
            return line.time

        new_time = min(max(requested_time, lo), hi)
        if new_time != line.time:
            line.time = new_time
            line.original_time_text = _stamp(new_time)
            self._lines.sort(key=_time_key)
            self._touch()
        return line.time

    def delete(self, line_id: str) -> EditableLine:
        line = self._lines.pop(self.index_of(line_id))
        self._touch()
        return line

    def relative_adjust(self, line_id: str, direction: float, precision: Precision | str = Precision.NORMAL) -> float:
        step = Precision(precision).step
        line = self.get(line_id)
        return self.retime(line_id, line.time + direction * step)

    def adjust_selected(self, direction: float, precision: Precision | str = Precision.NORMAL) -> float | None:
        selected = self.selected_lines()
        if not selected:
            return None
        return self.relative_adjust(selected[0].id, direction, precision)

    def batch_adjust(self, delta: float) -> int:
        # move the leading edge first so a selected block never collides with itself
        targets = sorted(self.selected_lines(), key=_time_key, reverse=delta > 0)
        for line in targets:
            self.retime(line.id, line.time + delta)
        return len(targets)

    def set_text(self, line_id: str, raw_text: str) -> EditableLine:
        line = self.get(line_id)
        rebuilt = Line.build(line.time, tokenize(raw_text), original_time_text=line.original_time_text)
        line.segments = rebuilt.segments
        line.text = rebuilt.text
        line.draft = False
        self._touch()
        return line

    # selection

    def select(self, line_id: str) -> EditableLine:
        target = self.get(line_id)
        for ln in self._lines:
            ln.selected = ln is target
        return target

    def mark_selected(self, line_ids: Iterable[str]) -> None:
        wanted = set(line_ids)
        missing = wanted - {ln.id for ln in self._lines}
        if missing:
            raise LineNotFound(sorted(missing)[0])
        for ln in self._lines:
            ln.selected = ln.id in wanted

    def clear_selection(self) -> None:
        for ln in self._lines:
            ln.selected = False

    def _move_cursor(self, step: int) -> EditableLine | None:
        current = next((i for i, ln in enumerate(self._lines) if ln.selected), -1)
        target = current + step
        if current == -1 or not (0 <= target < len(self._lines)):
            return None
        return self.select(self._lines[target].id)

    def select_next(self) -> EditableLine | None:
        return self._move_cursor(1)

    def select_previous(self) -> EditableLine | None:
        return self._move_cursor(-1)
