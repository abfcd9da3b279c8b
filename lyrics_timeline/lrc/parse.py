from __future__ import annotations

from dataclasses import dataclass, field
import logging
import re

from .model import Line
from .tokenize import tokenize

logger = logging.getLogger(__name__)

_TS_RE = re.compile(r"\[(\d{1,2}):(\d{2})(?:\.(\d{1,3}))?\]")  # [mm:ss] / [mm:ss.x] / [mm:ss.xx] / [mm:ss.xxx]
_META_RE = re.compile(r"^\[[a-zA-Z]+:")
_TAG_RE = re.compile(r"^\[([a-zA-Z]+):(.*)\]\s*$")


@dataclass(frozen=True, slots=True)
class LrcParseStats:
    lines_total: int
    lines_emitted: int
    lines_with_timestamps: int
    lines_ignored: int
    tags: dict[str, str] = field(default_factory=dict)


def _ts_to_seconds(m: re.Match[str]) -> float | None:
    mm = int(m.group(1))
    ss = int(m.group(2))
    if ss > 59:
        return None
    frac = m.group(3)
    # "5" -> 500ms, "50" -> 500ms, "505" -> 505ms
    ms = int(frac.ljust(3, "0")) if frac else 0
    return (mm * 60 + ss) + ms / 1000


def _scan(text: str) -> tuple[list[Line], LrcParseStats]:
    lines: list[Line] = []
    tags: dict[str, str] = {}
    total = 0
    with_ts = 0
    ignored = 0

    for raw in text.splitlines():
        total += 1
        line = raw.strip()
        if not line:
            ignored += 1
            continue

        if _META_RE.match(line):
            tag = _TAG_RE.match(line)
            if tag and tag.group(2).strip():
                tags[tag.group(1).lower()] = tag.group(2).strip()
            continue

        stamps = list(_TS_RE.finditer(line))
        if not stamps:
            ignored += 1
            continue

        with_ts += 1
        segments = tuple(tokenize(_TS_RE.sub("", line)))
        for m in stamps:
            t = _ts_to_seconds(m)
            if t is None:
                logger.debug("skipping bad timestamp %s", m.group(0))
                continue
            lines.append(Line.build(t, segments, original_time_text=m.group(0)))

    # list.sort is stable: equal times keep document order
    lines.sort(key=lambda ln: ln.time)
    stats = LrcParseStats(
        lines_total=total,
        lines_emitted=len(lines),
        lines_with_timestamps=with_ts,
        lines_ignored=ignored,
        tags=tags,
    )
    return lines, stats


def parse_lrc(text: str) -> list[Line]:
    """
    Supported:
    - [mm:ss], [mm:ss.xx] (and [mm:ss.x] / [mm:ss.xxx] as written by other tools)
    - multiple timestamps per line, one Line each
    - @singer@text and @a,b@text segments
    - metadata lines like [ar:...] are skipped

    Never raises on malformed lyrics; a document without timed lines gives [].
    """
    lines, _stats = _scan(text or "")
    return lines


def parse_lrc_with_stats(text: str) -> tuple[list[Line], LrcParseStats]:
    # thin wrapper for CLI diagnostics
    return _scan(text or "")
