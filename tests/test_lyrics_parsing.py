import pytest

from lyrics_timeline.lrc.model import Segment, flatten
from lyrics_timeline.lrc.parse import parse_lrc, parse_lrc_with_stats


def test_parse_singer_segments():
    (line,) = parse_lrc("[00:01.50]@kaho@Hello @sayaka@World")
    assert line.time == pytest.approx(1.5)
    assert line.segments == (Segment("Hello", ("kaho",)), Segment("World", ("sayaka",)))
    assert line.text == "Hello World"
    assert line.original_time_text == "[00:01.50]"


def test_parse_multiple_timestamps():
    lines = parse_lrc("[00:00.00][00:05.00]La la\n")
    assert [ln.time for ln in lines] == [0.0, 5.0]
    assert [ln.text for ln in lines] == ["La la", "La la"]
    assert [ln.original_time_text for ln in lines] == ["[00:00.00]", "[00:05.00]"]
    assert lines[0].segments == lines[1].segments


def test_metadata_and_untimed_lines_are_skipped():
    doc = "[ar:Hasunosora]\n[ti:Dream Believers]\n\nno timestamp here\n[00:01.00]x\n"
    lines, stats = parse_lrc_with_stats(doc)
    assert [ln.text for ln in lines] == ["x"]
    assert stats.tags == {"ar": "Hasunosora", "ti": "Dream Believers"}
    assert stats.lines_total == 5
    assert stats.lines_ignored == 2
    assert stats.lines_with_timestamps == 1
    assert stats.lines_emitted == 1


def test_result_is_sorted_and_stable():
    lines = parse_lrc("[00:05.00]b\n[00:01.00]first\n[00:01.00]second\n")
    assert [ln.text for ln in lines] == ["first", "second", "b"]


def test_off_canonical_fractions():
    lines = parse_lrc("[00:02.5]a\n[1:02.505]b\n[00:03]c\n")
    assert [ln.time for ln in lines] == pytest.approx([2.5, 3.0, 62.505])


def test_timestamp_tags_anywhere_on_the_line_are_stripped():
    (line,) = parse_lrc("[00:01.00]@kaho@Hi[00:99.00]")
    assert line.text == "Hi"


def test_empty_document():
    assert parse_lrc("") == []
    assert parse_lrc("[ar:someone]\n\n") == []


def test_blank_timed_line_has_no_segments():
    (line,) = parse_lrc("[00:04.00]")
    assert line.segments == ()
    assert line.text == ""


def test_flatten_invariant():
    doc = "[00:01.00]Intro @kaho@a b @kaho,sayaka@c\n[00:02.00]@x@  spaced   \n[00:03.00]plain"
    for line in parse_lrc(doc):
        assert line.text == flatten(line.segments)
