from __future__ import annotations

from pathlib import Path
import typer

from lyrics_timeline.app import preview as preview_loop
from lyrics_timeline.config import AppConfig, LANGS, load_config, save_config_lang
from lyrics_timeline.edit.timeline import Timeline
from lyrics_timeline.errors import FormatError
from lyrics_timeline.i18n import set_lang, t
from lyrics_timeline.logging_setup import setup_logging
from lyrics_timeline.lrc.export import ExportOptions, export as export_lines, normalize_format
from lyrics_timeline.lrc.parse import parse_lrc, parse_lrc_with_stats
from lyrics_timeline.lrc.timefmt import format_time, parse_time
from lyrics_timeline.store.sqlite import DraftStore
from lyrics_timeline.sync.locator import active_index

app = typer.Typer(no_args_is_help=True, add_completion=False)


def _setup(debug: bool = False) -> AppConfig:
    cfg = load_config()
    set_lang(cfg.lang)
    setup_logging(debug)
    return cfg


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        typer.echo(t("read_failed", path=str(path), error=str(e)), err=True)
        raise typer.Exit(code=1)


def _time_arg(value: str) -> float:
    try:
        return parse_time(value)
    except FormatError:
        pass
    try:
        seconds = float(value)
    except ValueError:
        raise typer.BadParameter(t("bad_time", value=value))
    if seconds < 0:
        raise typer.BadParameter(t("bad_time", value=value))
    return seconds


@app.command()
def parse(lrc_path: Path, debug: bool = typer.Option(False, "--debug", help="Enable debug logging")):
    """Parse a tagged LRC file and print stats."""
    _setup(debug)
    lines, stats = parse_lrc_with_stats(_read(lrc_path))
    typer.echo(f"lines_total={stats.lines_total}")
    typer.echo(f"lines_with_timestamps={stats.lines_with_timestamps}")
    typer.echo(f"lines_ignored={stats.lines_ignored}")
    typer.echo(f"lines_emitted={stats.lines_emitted}")
    typer.echo(f"singers={sorted({s for ln in lines for seg in ln.segments for s in seg.singers})}")
    typer.echo(f"tags={stats.tags}")


@app.command()
def export(
    lrc_path: Path,
    fmt: str = typer.Option("enhanced_lrc", "--format", case_sensitive=False, help="lrc|enhanced_lrc|json|srt|txt"),
    out: Path | None = typer.Option(None, "--out", help="Output file (default: stdout)"),
    no_singer_tags: bool = typer.Option(False, "--no-singer-tags", help="Drop @singer@ tags / JSON segments"),
    no_timestamps: bool = typer.Option(False, "--no-timestamps", help="txt only: omit [mm:ss.cc] prefixes"),
    line_ending: str | None = typer.Option(None, "--line-ending", help="lf|crlf"),
    encoding: str = typer.Option("utf-8", "--encoding", help="utf-8|gbk (used when writing --out)"),
):
    """Export tagged LRC to LRC/enhanced LRC/JSON/SRT/TXT."""
    cfg = _setup()
    try:
        key = normalize_format(fmt)
        opts = ExportOptions(
            include_timestamps=not no_timestamps,
            include_singer_tags=not no_singer_tags,
            encoding=encoding.lower(),
            line_ending=(line_ending or cfg.line_ending).lower(),
        )
    except ValueError as e:
        raise typer.BadParameter(str(e))

    lines = parse_lrc(_read(lrc_path))
    data = export_lines(lines, key, opts, srt_last_line_s=cfg.srt_last_line_s)

    if out:
        try:
            # newline="" keeps CRLF exactly as exported
            with out.open("w", encoding=opts.encoding, newline="") as fh:
                fh.write(data)
        except (OSError, UnicodeEncodeError) as e:
            typer.echo(t("write_failed", path=str(out), error=str(e)), err=True)
            raise typer.Exit(code=1)
        typer.echo(t("exported", count=len(lines), path=str(out)))
    else:
        typer.echo(data, nl=False)


@app.command()
def locate(lrc_path: Path, at: str = typer.Argument(..., help="Playback time: mm:ss.cc or seconds")):
    """Print the line active at a playback time."""
    _setup()
    lines = parse_lrc(_read(lrc_path))
    pos = _time_arg(at)
    idx = active_index(lines, pos)
    if idx is None:
        typer.echo(t("no_active_line", time=format_time(pos)))
        return
    ln = lines[idx]
    typer.echo(f"{idx}\t[{format_time(ln.time)}]\t{ln.text}")


@app.command()
def shift(
    lrc_path: Path,
    by: float = typer.Option(..., "--by", help="Seconds to add (negative moves earlier)"),
    since: str | None = typer.Option(None, "--from", help="Only shift lines at or after this time"),
    out: Path | None = typer.Option(None, "--out", help="Output file (default: stdout)"),
):
    """Shift line timestamps, keeping order and the 0.01s minimum gap."""
    cfg = _setup()
    timeline = Timeline.parse(_read(lrc_path))
    start = _time_arg(since) if since else 0.0
    timeline.mark_selected(ln.id for ln in timeline if ln.time >= start)
    moved = timeline.batch_adjust(by)
    data = export_lines(timeline, "enhanced_lrc", ExportOptions(line_ending=cfg.line_ending)) + "\n"

    if out:
        out.write_text(data, encoding="utf-8", newline="")
        typer.echo(t("shifted", count=moved, path=str(out)))
    else:
        typer.echo(data, nl=False)


@app.command()
def preview(
    lrc_path: Path,
    start: str = typer.Option("0", "--start", help="Start position: mm:ss.cc or seconds"),
    speed: float = typer.Option(1.0, "--speed", min=0.1, help="Playback speed multiplier"),
    no_alt_screen: bool = typer.Option(False, "--no-alt-screen", help="Do not use alternate screen buffer"),
    context_lines: int | None = typer.Option(None, "--context", help="Lines above the current line"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
):
    """
    Play the lyrics against a wall clock in the terminal.
    """
    cfg = _setup(debug)
    if context_lines is not None:
        cfg = cfg.__class__(**{**cfg.__dict__, "context_lines": context_lines})
    if no_alt_screen:
        cfg = cfg.__class__(**{**cfg.__dict__, "use_alt_screen": False})

    lines = parse_lrc(_read(lrc_path))
    if not lines:
        typer.echo(t("no_lyrics"))
        raise typer.Exit(code=0)
    raise typer.Exit(code=preview_loop(cfg, lines, title=lrc_path.stem, start=_time_arg(start), speed=speed))


@app.command()
def drafts(
    clear: bool = typer.Option(False, "--clear", help="Delete all saved drafts"),
):
    """List or clear autosaved editor drafts."""
    cfg = _setup()
    store = DraftStore(cfg.drafts_db_path)

    if clear:
        store.clear()
        typer.echo(t("drafts_cleared", path=str(cfg.drafts_db_path)))
        return

    saved = store.list()
    if not saved:
        typer.echo(t("no_drafts"))
        return
    for info in saved:
        stamp = info.updated_at.strftime("%Y-%m-%d %H:%M") if info.updated_at else "?"
        typer.echo(f"{info.project_id}\t{info.name}\t{info.lyrics_count}\t{stamp}")


@app.command()
def lang(value: str = typer.Argument(..., help="EN|ZH")):
    """Set the interface language."""
    if value.upper() not in LANGS:
        raise typer.BadParameter("lang must be one of: " + ", ".join(LANGS))
    save_config_lang(value)
    set_lang(value)
    typer.echo(t("lang_saved", lang=value.upper()))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
