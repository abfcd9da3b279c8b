from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable

from lyrics_timeline.lrc.model import EditableLine, Segment, flatten

from .timeline import Timeline

if TYPE_CHECKING:
    from lyrics_timeline.store.sqlite import DraftStore

logger = logging.getLogger(__name__)

PROJECT_VERSION = "1.0.0"


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class ProjectSettings:
    auto_save: bool = True


@dataclass(slots=True)
class ProjectMetadata:
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)
    version: str = PROJECT_VERSION
    author: str | None = None
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "version": self.version,
            "author": self.author,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProjectMetadata":
        return cls(
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
            version=data.get("version") or PROJECT_VERSION,
            author=data.get("author"),
            description=data.get("description"),
        )


def _line_to_dict(ln: EditableLine) -> dict[str, Any]:
    return {
        "id": ln.id,
        "time": ln.time,
        "original_time_text": ln.original_time_text,
        "text": ln.text,
        "segments": [{"text": s.text, "singers": list(s.singers)} for s in ln.segments],
        "draft": ln.draft,
        "confidence": ln.confidence,
    }


def _line_from_dict(data: dict[str, Any]) -> EditableLine:
    segments = tuple(
        Segment(text=s["text"], singers=tuple(s.get("singers") or ())) for s in data.get("segments") or ()
    )
    return EditableLine(
        id=data["id"],
        time=float(data["time"]),
        original_time_text=data.get("original_time_text") or "",
        text=flatten(segments) if segments else (data.get("text") or ""),
        segments=segments,
        draft=bool(data.get("draft", False)),
        confidence=data.get("confidence"),
    )


@dataclass(slots=True)
class TimelineProject:
    name: str = "Untitled lyrics"
    timeline: Timeline = field(default_factory=Timeline)
    settings: ProjectSettings = field(default_factory=ProjectSettings)
    metadata: ProjectMetadata = field(default_factory=ProjectMetadata)
    id: str = field(default_factory=lambda: f"project_{uuid.uuid4().hex}")

    def touch(self) -> None:
        self.metadata.updated_at = _now()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "settings": {"auto_save": self.settings.auto_save},
            "metadata": self.metadata.to_dict(),
            "lyrics": [_line_to_dict(ln) for ln in self.timeline],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TimelineProject":
        settings = data.get("settings") or {}
        return cls(
            id=data["id"],
            name=data.get("name") or "Untitled lyrics",
            timeline=Timeline(_line_from_dict(d) for d in data.get("lyrics") or ()),
            settings=ProjectSettings(auto_save=bool(settings.get("auto_save", True))),
            metadata=ProjectMetadata.from_dict(data["metadata"]),
        )


class AutoSaver:
    """
    Debounced autosave: a dirty project is written once it has been left alone
    for `delay_s`. Poll `maybe_save` from the host loop.
    """

    def __init__(self, store: "DraftStore", delay_s: float = 5.0, clock: Callable[[], float] = time.monotonic):
        self.store = store
        self.delay_s = delay_s
        self.clock = clock
        self._seen_revision: int | None = None
        self._changed_at = 0.0

    def notice(self, project: TimelineProject) -> None:
        rev = project.timeline.revision
        if rev != self._seen_revision:
            self._seen_revision = rev
            self._changed_at = self.clock()
            if project.timeline.dirty:
                project.touch()

    def maybe_save(self, project: TimelineProject) -> bool:
        self.notice(project)
        if not project.settings.auto_save or not project.timeline.dirty:
            return False
        if self.clock() - self._changed_at < self.delay_s:
            return False
        self.store.save(project)
        project.timeline.mark_clean()
        logger.debug("autosaved %s (revision %s)", project.id, project.timeline.revision)
        return True
