import pytest

from lyrics_timeline.edit.timeline import Timeline
from lyrics_timeline.lrc.model import Line
from lyrics_timeline.lrc.parse import parse_lrc
from lyrics_timeline.sync.locator import NO_CHANGE, LineTracker, active_index, active_line

LINES = parse_lrc("[00:00.00]a\n[00:01.00]b\n[00:02.00]c\n")


@pytest.mark.parametrize("t", [-1.0, 0.0, 0.5, 100.0])
def test_empty_is_always_none(t):
    assert active_index([], t) is None


def test_single_line():
    lines = [Line.build(2.0, [])]
    assert active_index(lines, 1.99) is None
    assert active_index(lines, 2.0) == 0
    assert active_index(lines, 50.0) == 0


def test_boundaries():
    assert active_index(LINES, -0.01) is None
    assert active_index(LINES, 0.0) == 0
    assert active_index(LINES, 0.999) == 0
    assert active_index(LINES, 1.0) == 1
    assert active_index(LINES, 9.0) == 2


def test_monotonic():
    lines = parse_lrc("\n".join(f"[00:{s:02d}.{c:02d}]x" for s, c in [(1, 0), (1, 50), (3, 0), (7, 25), (7, 26)]))
    samples = [i * 0.05 for i in range(-10, 200)]
    indices = [active_index(lines, t) for t in samples]
    as_ints = [-1 if i is None else i for i in indices]
    assert as_ints == sorted(as_ints)


def test_active_line_on_timeline():
    tl = Timeline.from_lines(LINES)
    assert active_line(tl.lines, 1.5).text == "b"
    assert active_line(tl.lines, -1) is None


def test_tracker_changed_only_on_change():
    tr = LineTracker.from_lines(LINES)
    assert tr.changed_index(0) == 0
    assert tr.changed_index(0.01) is NO_CHANGE
    assert tr.changed_index(0.999) is NO_CHANGE
    assert tr.changed_index(1.0) == 1
    assert tr.changed_index(1.5) is NO_CHANGE
    assert tr.changed_index(2.5) == 2


def test_tracker_before_first_line():
    tr = LineTracker.from_lines(LINES[1:])
    assert tr.changed_index(0.0) is None
    assert tr.changed_index(0.5) is NO_CHANGE
    assert tr.current_index(1.0) == 0
