from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
import os
from pathlib import Path

logger = logging.getLogger(__name__)

LANGS = ("EN", "ZH")


def _config_dir() -> Path:
    xdg = os.getenv("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "lyrics-timeline"
    return Path.home() / ".config" / "lyrics-timeline"


def _config_file() -> Path:
    return _config_dir() / "config.json"


@dataclass(frozen=True)
class AppConfig:
    # Storage
    data_dir: Path
    drafts_db_path: Path
    config_dir: Path

    # Locale
    lang: str

    # Editing
    autosave_delay_s: float

    # Export
    srt_last_line_s: float
    line_ending: str  # lf | crlf

    # Preview
    refresh_hz: float
    context_lines: int  # lines above/below current
    use_alt_screen: bool
    singer_colors: dict[str, int] = field(default_factory=dict)  # singer id -> SGR color code


def _parse_singer_colors(raw: str) -> dict[str, int]:
    # "kaho=35,sayaka=34"
    out: dict[str, int] = {}
    for pair in raw.split(","):
        name, sep, code = pair.partition("=")
        if not sep or not name.strip():
            continue
        try:
            out[name.strip()] = int(code)
        except ValueError:
            logger.warning("ignoring singer color %r", pair)
    return out


def load_config() -> AppConfig:
    # XDG base dir fallback
    xdg = os.getenv("XDG_DATA_HOME")
    data_dir = Path(xdg) if xdg else Path.home() / ".local" / "share"
    data_dir = data_dir / "lyrics-timeline"

    line_ending = os.getenv("LYRICS_TIMELINE_LINE_ENDING", "lf").lower()
    if line_ending not in ("lf", "crlf"):
        line_ending = "lf"

    config_dir = _config_dir()
    lang = _load_lang(config_dir)

    return AppConfig(
        data_dir=data_dir,
        drafts_db_path=data_dir / "drafts.sqlite3",
        config_dir=config_dir,
        lang=lang,
        autosave_delay_s=float(os.getenv("LYRICS_TIMELINE_AUTOSAVE_DELAY", "5.0")),
        srt_last_line_s=float(os.getenv("LYRICS_TIMELINE_SRT_LAST_LINE", "3.0")),
        line_ending=line_ending,
        refresh_hz=float(os.getenv("LYRICS_TIMELINE_REFRESH_HZ", "30.0")),
        context_lines=int(os.getenv("LYRICS_TIMELINE_CONTEXT_LINES", "2")),
        use_alt_screen=os.getenv("LYRICS_TIMELINE_ALT_SCREEN", "1") not in ("0", "false", "False"),
        singer_colors=_parse_singer_colors(os.getenv("LYRICS_TIMELINE_SINGER_COLORS", "")),
    )


def _load_lang(config_dir: Path) -> str:
    # Priority: config.json → LYRICS_TIMELINE_LANG → "EN"
    cfg_path = config_dir / "config.json"
    if cfg_path.exists():
        try:
            data = json.loads(cfg_path.read_text(encoding="utf-8"))
            raw = (data.get("lang") or "en").upper()
            if raw in LANGS:
                return raw
        except (OSError, ValueError) as e:
            logger.warning("unreadable config %s: %s", cfg_path, e)
    env_lang = os.getenv("LYRICS_TIMELINE_LANG")
    if env_lang and env_lang.upper() in LANGS:
        return env_lang.upper()
    return "EN"


def save_config_lang(lang: str) -> None:
    cfg_path = _config_file()
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    data: dict[str, str] = {}
    if cfg_path.exists():
        try:
            data = json.loads(cfg_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("overwriting unreadable config %s: %s", cfg_path, e)
    data["lang"] = lang.upper()
    cfg_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
