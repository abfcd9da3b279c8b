from __future__ import annotations

import logging
import re

from lyrics_timeline.errors import FormatError

logger = logging.getLogger(__name__)

# user-typed: m:ss / mm:ss / m:ss.cc / mm:ss.cc, brackets optional
_TIME_RE = re.compile(r"^\s*\[?\s*(\d{1,2}):(\d{2})(?:\.(\d{2}))?\s*\]?\s*$")


def parse_time(text: str) -> float:
    m = _TIME_RE.match(text or "")
    if not m:
        raise FormatError(f"Invalid timestamp: {text!r}")
    mm, ss, cc = int(m.group(1)), int(m.group(2)), int(m.group(3) or 0)
    if ss > 59:
        raise FormatError(f"Invalid seconds: {ss}")
    return mm * 60 + ss + cc / 100


def parse_time_or(text: str, fallback: float) -> float:
    try:
        return parse_time(text)
    except FormatError as e:
        logger.debug("keeping %.2fs: %s", fallback, e)
        return fallback


def _centis(seconds: float) -> int:
    return max(int(round(seconds * 100)), 0)


def format_time(seconds: float) -> str:
    m, rem = divmod(_centis(seconds), 6_000)
    s, cs = divmod(rem, 100)
    return f"{m:02d}:{s:02d}.{cs:02d}"


def format_srt_time(seconds: float) -> str:
    # HH:MM:SS,mmm
    ms = max(int(round(seconds * 1000)), 0)
    h, rem = divmod(ms, 3_600_000)
    m, rem = divmod(rem, 60_000)
    s, ms2 = divmod(rem, 1_000)
    return f"{h:02d}:{m:02d}:{s:02d},{ms2:03d}"
