import pytest

from lyrics_timeline.errors import FormatError
from lyrics_timeline.lrc.timefmt import format_srt_time, format_time, parse_time, parse_time_or


@pytest.mark.parametrize(
    "seconds, expected",
    [
        (0, "00:00.00"),
        (67.4, "01:07.40"),
        (187.4, "03:07.40"),
        (0.29, "00:00.29"),
        (59.999, "01:00.00"),
        (-1.0, "00:00.00"),
    ],
)
def test_format_time(seconds, expected):
    assert format_time(seconds) == expected


@pytest.mark.parametrize(
    "text, expected",
    [
        ("03:07.40", 187.4),
        ("1:05", 65.0),
        ("[00:01.50]", 1.5),
        (" 00:00.00 ", 0.0),
    ],
)
def test_parse_time(text, expected):
    assert parse_time(text) == pytest.approx(expected)


@pytest.mark.parametrize("text", ["-00:01.00", "1:5", "00:60.00", "00:01.5", "00:01.500", "abc", ""])
def test_parse_time_rejects(text):
    with pytest.raises(FormatError):
        parse_time(text)


def test_format_error_is_value_error():
    with pytest.raises(ValueError):
        parse_time("nope")


def test_parse_time_or_keeps_fallback():
    assert parse_time_or("12:3", 2.5) == 2.5
    assert parse_time_or("00:03.00", 2.5) == pytest.approx(3.0)


def test_format_normalizes_parsed_input():
    assert format_time(parse_time("3:07.40")) == "03:07.40"
    assert format_time(parse_time("3:07")) == "03:07.00"


def test_format_srt_time():
    assert format_srt_time(2.0) == "00:00:02,000"
    assert format_srt_time(3723.456) == "01:02:03,456"
