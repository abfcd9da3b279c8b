from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterable, Protocol

from lyrics_timeline.errors import UnknownFormat

from .model import Segment, flatten
from .timefmt import format_srt_time, format_time
from .tokenize import render_tagged

if TYPE_CHECKING:
    from lyrics_timeline.edit.project import TimelineProject


class TimedLine(Protocol):
    time: float
    text: str
    segments: tuple[Segment, ...]


FORMATS: dict[str, str] = {
    "lrc": ".lrc",
    "enhanced_lrc": ".lrc",
    "json": ".json",
    "srt": ".srt",
    "txt": ".txt",
}

ENCODINGS = ("utf-8", "gbk")
LINE_ENDINGS = ("lf", "crlf")

SRT_LAST_LINE_S = 3.0


@dataclass(frozen=True, slots=True)
class ExportOptions:
    include_timestamps: bool = True
    include_singer_tags: bool = True
    encoding: str = "utf-8"  # applied by whoever writes the file
    line_ending: str = "lf"

    def __post_init__(self) -> None:
        if self.encoding not in ENCODINGS:
            raise ValueError(f"encoding must be one of: {', '.join(ENCODINGS)}")
        if self.line_ending not in LINE_ENDINGS:
            raise ValueError(f"line_ending must be one of: {', '.join(LINE_ENDINGS)}")


def normalize_format(fmt: str) -> str:
    key = (fmt or "").strip().lower().replace("-", "_")
    if key not in FORMATS:
        raise UnknownFormat(f"format must be one of: {', '.join(FORMATS)}")
    return key


def file_extension(fmt: str) -> str:
    return FORMATS[normalize_format(fmt)]


def export_filename(name: str, fmt: str) -> str:
    return f"{name or 'lyrics'}{file_extension(fmt)}"


def _plain(line: TimedLine) -> str:
    # tags stripped, rebuilt from segments so it never drifts from them
    return flatten(line.segments) if line.segments else line.text.strip()


def export_lrc(lines: Iterable[TimedLine]) -> str:
    return "\n".join(f"[{format_time(ln.time)}]{_plain(ln)}" for ln in lines)


def export_enhanced_lrc(lines: Iterable[TimedLine], include_singer_tags: bool = True) -> str:
    if not include_singer_tags:
        return export_lrc(lines)
    out: list[str] = []
    for ln in lines:
        body = render_tagged(ln.segments) if ln.segments else ln.text.strip()
        out.append(f"[{format_time(ln.time)}]{body}")
    return "\n".join(out)


def _segment_json(seg: Segment) -> dict[str, Any]:
    return {"text": seg.text, "singers": list(seg.singers), "is_blend": seg.is_blend}


def export_json(
    lines: Iterable[TimedLine],
    include_singer_tags: bool = True,
    project: "TimelineProject | None" = None,
) -> str:
    items: list[dict[str, Any]] = []
    for ln in lines:
        item: dict[str, Any] = {"time": ln.time, "text": _plain(ln)}
        if include_singer_tags:
            item["segments"] = [_segment_json(s) for s in ln.segments]
        items.append(item)

    data: dict[str, Any] = {}
    if project is not None:
        data["project"] = {"name": project.name, "metadata": project.metadata.to_dict()}
    data["lyrics"] = items
    return json.dumps(data, ensure_ascii=False, indent=2)


def export_srt(lines: Iterable[TimedLine], last_line_duration_s: float = SRT_LAST_LINE_S) -> str:
    """
    End time is next start time, last line ends at +last_line_duration_s.
    """
    ev = list(lines)
    if not ev:
        return ""
    out: list[str] = []
    for i, ln in enumerate(ev, start=1):
        start = ln.time
        end = ev[i].time if i < len(ev) else start + last_line_duration_s
        out.append(str(i))
        out.append(f"{format_srt_time(start)} --> {format_srt_time(end)}")
        out.append(_plain(ln))
        out.append("")
    return "\n".join(out)


def export_txt(lines: Iterable[TimedLine], include_timestamps: bool = True) -> str:
    if include_timestamps:
        return "\n".join(f"[{format_time(ln.time)}] {_plain(ln)}" for ln in lines)
    return "\n".join(_plain(ln) for ln in lines)


def export(
    lines: Iterable[TimedLine],
    fmt: str,
    options: ExportOptions | None = None,
    *,
    project: "TimelineProject | None" = None,
    srt_last_line_s: float = SRT_LAST_LINE_S,
) -> str:
    opts = options or ExportOptions()
    key = normalize_format(fmt)
    snapshot = list(lines)

    if key == "lrc":
        data = export_lrc(snapshot)
    elif key == "enhanced_lrc":
        data = export_enhanced_lrc(snapshot, include_singer_tags=opts.include_singer_tags)
    elif key == "json":
        data = export_json(snapshot, include_singer_tags=opts.include_singer_tags, project=project)
    elif key == "srt":
        data = export_srt(snapshot, last_line_duration_s=srt_last_line_s)
    else:
        data = export_txt(snapshot, include_timestamps=opts.include_timestamps)

    if opts.line_ending == "crlf":
        data = data.replace("\r\n", "\n").replace("\n", "\r\n")
    return data
