"""
Singer tag scanner.

    Hello @kaho@first part @kaho,sayaka@together

A tag is `@id@` or `@id1,id2@`; its text runs up to the next `@` or the end
of the line. Broken tags are kept as plain text.
"""

from __future__ import annotations

import logging
from typing import Iterable

from .model import Segment

logger = logging.getLogger(__name__)

TAG_MARK = "@"


def _split_singers(raw: str) -> tuple[str, ...]:
    out: list[str] = []
    for part in raw.split(","):
        name = part.strip()
        if name and name not in out:
            out.append(name)
    return tuple(out)


def tokenize(raw: str) -> list[Segment]:
    text = raw or ""
    if not text.strip():
        return []

    segments: list[Segment] = []
    plain_start = 0  # start of the pending untagged run
    pos = 0

    while True:
        at = text.find(TAG_MARK, pos)
        if at == -1:
            break
        close = text.find(TAG_MARK, at + 1)
        if close == -1:
            # unterminated tag: everything from plain_start on stays plain
            logger.debug("unterminated singer tag at %d in %r", at, text)
            break

        singers = _split_singers(text[at + 1 : close])
        if not singers:
            # "@@" or "@ , @": not a tag, keep the first mark as text
            pos = at + 1
            continue

        leading = text[plain_start:at].strip()
        if leading:
            segments.append(Segment(text=leading))

        end = text.find(TAG_MARK, close + 1)
        if end == -1:
            end = len(text)
        body = text[close + 1 : end].strip()
        if body:
            segments.append(Segment(text=body, singers=singers))

        plain_start = pos = end

    trailing = text[plain_start:].strip()
    if trailing:
        segments.append(Segment(text=trailing))
    return segments


def render_segment(seg: Segment) -> str:
    if seg.singers:
        return f"{TAG_MARK}{','.join(seg.singers)}{TAG_MARK}{seg.text}"
    return seg.text


def render_tagged(segments: Iterable[Segment]) -> str:
    return " ".join(render_segment(s) for s in segments)
