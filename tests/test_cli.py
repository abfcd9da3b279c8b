from __future__ import annotations

import pytest
from typer.testing import CliRunner

from lyrics_timeline.cli import app
from lyrics_timeline.i18n import set_lang

runner = CliRunner()

DOC = "[ti:Song]\n[00:01.00]@kaho@A\n[00:02.00]@kaho,sayaka@B\n[00:03.00]你好\n"


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for name in ("LYRICS_TIMELINE_LANG", "LYRICS_TIMELINE_LINE_ENDING", "LYRICS_TIMELINE_SRT_LAST_LINE"):
        monkeypatch.delenv(name, raising=False)
    yield
    set_lang("EN")


@pytest.fixture
def lrc(tmp_path):
    path = tmp_path / "song.lrc"
    path.write_text(DOC, encoding="utf-8")
    return path


def test_parse(lrc):
    result = runner.invoke(app, ["parse", str(lrc)])
    assert result.exit_code == 0
    assert "lines_emitted=3" in result.output
    assert "singers=['kaho', 'sayaka']" in result.output
    assert "'ti': 'Song'" in result.output


def test_export_srt_stdout(lrc):
    result = runner.invoke(app, ["export", str(lrc), "--format", "srt"])
    assert result.exit_code == 0
    assert "00:00:01,000 --> 00:00:02,000" in result.output
    assert "00:00:03,000 --> 00:00:06,000" in result.output


def test_export_enhanced_default(lrc):
    result = runner.invoke(app, ["export", str(lrc)])
    assert result.exit_code == 0
    assert "[00:02.00]@kaho,sayaka@B" in result.output


def test_export_gbk_crlf_file(lrc, tmp_path):
    out = tmp_path / "song.txt"
    result = runner.invoke(
        app,
        ["export", str(lrc), "--format", "txt", "--no-timestamps", "--encoding", "gbk", "--line-ending", "crlf", "--out", str(out)],
    )
    assert result.exit_code == 0
    assert out.read_bytes().decode("gbk") == "A\r\nB\r\n你好"


def test_export_bad_format(lrc):
    result = runner.invoke(app, ["export", str(lrc), "--format", "ass"])
    assert result.exit_code != 0


def test_missing_file(tmp_path):
    result = runner.invoke(app, ["parse", str(tmp_path / "missing.lrc")])
    assert result.exit_code == 1


def test_locate(lrc):
    result = runner.invoke(app, ["locate", str(lrc), "00:02.50"])
    assert result.exit_code == 0
    assert result.output.startswith("1\t[00:02.00]\tB")

    result = runner.invoke(app, ["locate", str(lrc), "0.5"])
    assert result.exit_code == 0
    assert "No active line at 00:00.50" in result.output

    result = runner.invoke(app, ["locate", str(lrc), "soon"])
    assert result.exit_code != 0


def test_shift(lrc, tmp_path):
    out = tmp_path / "shifted.lrc"
    result = runner.invoke(app, ["shift", str(lrc), "--by", "1", "--from", "00:02.00", "--out", str(out)])
    assert result.exit_code == 0
    assert out.read_text(encoding="utf-8") == "[00:01.00]@kaho@A\n[00:03.00]@kaho,sayaka@B\n[00:04.00]你好\n"


def test_drafts(tmp_path):
    result = runner.invoke(app, ["drafts"])
    assert result.exit_code == 0
    assert "No saved drafts" in result.output

    result = runner.invoke(app, ["drafts", "--clear"])
    assert result.exit_code == 0
    assert "Drafts cleared" in result.output


def test_lang(tmp_path):
    result = runner.invoke(app, ["lang", "zh"])
    assert result.exit_code == 0
    assert (tmp_path / "config" / "lyrics-timeline" / "config.json").exists()

    result = runner.invoke(app, ["drafts"])
    assert "没有已保存的草稿" in result.output

    result = runner.invoke(app, ["lang", "fr"])
    assert result.exit_code != 0
