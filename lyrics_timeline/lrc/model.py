from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Iterable

from .timefmt import format_time


@dataclass(frozen=True, slots=True)
class Segment:
    text: str
    singers: tuple[str, ...] = ()

    @property
    def is_blend(self) -> bool:
        return len(self.singers) > 1

    @property
    def singer(self) -> str | None:
        # first-listed singer is the primary one
        return self.singers[0] if self.singers else None


def flatten(segments: Iterable[Segment]) -> str:
    return " ".join(s.text for s in segments).strip()


@dataclass(frozen=True, slots=True)
class Line:
    time: float
    original_time_text: str
    text: str
    segments: tuple[Segment, ...] = ()

    @classmethod
    def build(cls, time: float, segments: Iterable[Segment], original_time_text: str | None = None) -> "Line":
        segs = tuple(segments)
        if original_time_text is None:
            original_time_text = f"[{format_time(time)}]"
        return cls(time=time, original_time_text=original_time_text, text=flatten(segs), segments=segs)


def _new_id() -> str:
    return f"line_{uuid.uuid4().hex}"


@dataclass(slots=True)
class EditableLine:
    """
    Editor-side line. Only `Timeline` should change `time`.
    """

    time: float
    original_time_text: str = ""
    text: str = ""
    segments: tuple[Segment, ...] = ()
    id: str = field(default_factory=_new_id)
    selected: bool = False
    draft: bool = True
    confidence: float | None = None

    def __post_init__(self) -> None:
        if self.confidence is not None and not (0.0 <= self.confidence <= 1.0):
            raise ValueError(f"confidence must be within [0, 1], got {self.confidence}")
        if not self.original_time_text:
            self.original_time_text = f"[{format_time(self.time)}]"

    @classmethod
    def from_line(cls, line: Line, *, line_id: str | None = None, draft: bool = False) -> "EditableLine":
        kw = {"id": line_id} if line_id else {}
        return cls(
            time=line.time,
            original_time_text=line.original_time_text,
            text=line.text,
            segments=line.segments,
            draft=draft,
            **kw,
        )

    def to_line(self) -> Line:
        return Line(
            time=self.time,
            original_time_text=self.original_time_text,
            text=self.text,
            segments=self.segments,
        )
