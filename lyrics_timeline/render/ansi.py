from __future__ import annotations

import shutil
import signal
import sys
from dataclasses import dataclass
from typing import Callable, Mapping, Sequence

from lyrics_timeline.lrc.model import Line, Segment


CSI = "\x1b["

# fallback singer colors, assigned in order of first appearance
DEFAULT_PALETTE = (35, 34, 32, 33, 31, 36)


def _sgr(*codes: int) -> str:
    return CSI + ";".join(str(c) for c in codes) + "m"


@dataclass(frozen=True, slots=True)
class Theme:
    title: str = _sgr(36, 1)  # cyan bold
    current: str = _sgr(1)  # bold
    dim: str = _sgr(90)  # bright black
    warning: str = _sgr(33, 1)  # yellow bold
    reset: str = _sgr(0)
    palette: tuple[int, ...] = DEFAULT_PALETTE


class SingerColors:
    """
    Singer id -> SGR color. Known ids come from config; unknown ids get the
    next palette color, so the same singer keeps one color for the session.
    """

    def __init__(self, known: Mapping[str, int] | None = None, palette: Sequence[int] = DEFAULT_PALETTE):
        self._colors = dict(known or {})
        self._palette = tuple(palette)
        self._next = 0

    def __call__(self, singer: str) -> int:
        if singer not in self._colors:
            self._colors[singer] = self._palette[self._next % len(self._palette)]
            self._next += 1
        return self._colors[singer]


def paint_segment(seg: Segment, color_of: Callable[[str], int], bold: bool = False) -> str:
    extra = (1,) if bold else ()
    if not seg.singers:
        return seg.text
    if not seg.is_blend:
        return _sgr(color_of(seg.singers[0]), *extra) + seg.text + _sgr(0)
    # blend: cycle through the singers per visible char, first-listed first
    colors = [color_of(s) for s in seg.singers]
    out: list[str] = []
    k = 0
    for ch in seg.text:
        if ch.isspace():
            out.append(ch)
            continue
        out.append(_sgr(colors[k % len(colors)], *extra) + ch)
        k += 1
    out.append(_sgr(0))
    return "".join(out)


class AnsiRenderer:
    def __init__(
        self,
        use_alt_screen: bool = True,
        theme: Theme | None = None,
        singer_colors: Mapping[str, int] | None = None,
    ):
        self.use_alt_screen = use_alt_screen
        self.theme = theme or Theme()
        self.color_of = SingerColors(singer_colors, self.theme.palette)
        self._entered = False
        self._resize_handler: Callable[..., None] | None = None
        self._last_render_args: tuple[str, Sequence[Line], int | None, int] | None = None

    def __enter__(self):
        self.enter()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.exit()

    def enter(self) -> None:
        if self._entered:
            return
        if self.use_alt_screen:
            sys.stdout.write(CSI + "?1049h")  # alt screen
        sys.stdout.write(CSI + "?25l")  # hide cursor
        sys.stdout.write(CSI + "H" + CSI + "2J")  # home + clear
        sys.stdout.flush()
        self._entered = True

        # Register SIGWINCH handler for resize
        def _on_resize(signum=None, frame=None):
            if self._last_render_args:
                title, lines, current_idx, context_lines = self._last_render_args
                self.render(title, lines, current_idx, context_lines)

        self._resize_handler = _on_resize
        signal.signal(signal.SIGWINCH, _on_resize)

    def exit(self) -> None:
        if not self._entered:
            return
        # Restore default SIGWINCH handler
        if self._resize_handler:
            signal.signal(signal.SIGWINCH, signal.SIG_DFL)
            self._resize_handler = None
        sys.stdout.write(self.theme.reset)
        sys.stdout.write(CSI + "?25h")  # show cursor
        if self.use_alt_screen:
            sys.stdout.write(CSI + "?1049l")  # normal screen
        sys.stdout.flush()
        self._entered = False
        self._last_render_args = None

    def format_line(self, line: Line, current: bool) -> str:
        if not current:
            return f"{self.theme.dim}{line.text}{self.theme.reset}"
        if not line.segments:
            return " "
        body = " ".join(self.theme.current + paint_segment(s, self.color_of, bold=True) for s in line.segments)
        return body + self.theme.reset

    def frame(
        self,
        title: str,
        lines: Sequence[Line],
        current_idx: int | None,
        context_lines: int = 1,
        rows: int = 24,
    ) -> list[str]:
        # reserve 1 line for title
        body_rows = max(rows - 1, 1)

        # window around current line, but keep within list
        if current_idx is None:
            start = 0
        else:
            start = max(current_idx - context_lines, 0)
        end = min(start + body_rows, len(lines))
        start = max(end - body_rows, 0)

        out = [f"{self.theme.title}♫ {title} ♫{self.theme.reset}"]
        for i in range(start, end):
            out.append(self.format_line(lines[i], current=(i == current_idx)))
        return out

    def render(
        self,
        title: str,
        lines: Sequence[Line],
        current_idx: int | None,
        context_lines: int = 1,
    ) -> None:
        # Store args for SIGWINCH redraw
        self._last_render_args = (title, lines, current_idx, context_lines)

        _cols, rows = shutil.get_terminal_size(fallback=(80, 24))
        out = self.frame(title, lines, current_idx, context_lines, rows=rows)

        # move home + clear, then print full frame
        sys.stdout.write(CSI + "H" + CSI + "2J")
        sys.stdout.write("\n".join(out))
        sys.stdout.write(self.theme.reset)
        sys.stdout.flush()
