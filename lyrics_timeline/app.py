from __future__ import annotations

import logging
import signal
import time
from typing import Callable, Sequence

from lyrics_timeline.config import AppConfig
from lyrics_timeline.i18n import t
from lyrics_timeline.lrc.model import Line
from lyrics_timeline.render.ansi import AnsiRenderer
from lyrics_timeline.sync.locator import NO_CHANGE, LineTracker

logger = logging.getLogger(__name__)


def preview(
    cfg: AppConfig,
    lines: Sequence[Line],
    *,
    title: str,
    start: float = 0.0,
    speed: float = 1.0,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
    renderer: AnsiRenderer | None = None,
) -> int:
    """
    Preview loop:
    clock -> playback position -> bisect -> render on change.
    Ends once the last line has been on screen for srt_last_line_s.
    """
    if not lines:
        logger.info(t("no_lyrics"))
        return 0

    renderer = renderer or AnsiRenderer(use_alt_screen=cfg.use_alt_screen, singer_colors=cfg.singer_colors)
    renderer.enter()

    # Handle SIGINT (Ctrl+C) gracefully
    def _on_sigint(signum, frame):
        renderer.exit()
        raise KeyboardInterrupt

    previous = signal.signal(signal.SIGINT, _on_sigint)

    try:
        tracker = LineTracker.from_lines(lines)
        tick_s = 1.0 / max(cfg.refresh_hz, 1.0)
        stop_at = lines[-1].time + cfg.srt_last_line_s
        t0 = clock()

        while True:
            pos = start + (clock() - t0) * speed
            changed = tracker.changed_index(pos)
            if changed is not NO_CHANGE:
                logger.debug("position %.2fs -> line %s", pos, changed)
                renderer.render(title, lines, current_idx=changed, context_lines=cfg.context_lines)
            if pos >= stop_at:
                return 0
            sleep(tick_s)
    finally:
        signal.signal(signal.SIGINT, previous)
        renderer.exit()
