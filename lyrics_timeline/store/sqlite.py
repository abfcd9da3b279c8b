from __future__ import annotations

import json
import logging
import sqlite3
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from lyrics_timeline.edit.project import TimelineProject

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SavedProjectInfo:
    exists: bool
    project_id: str | None = None
    name: str | None = None
    updated_at: datetime | None = None
    lyrics_count: int = 0


class DraftStore:
    """Unsaved editor projects, one row per project id."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        con = sqlite3.connect(self.db_path)
        con.row_factory = sqlite3.Row
        return con

    def _init_db(self) -> None:
        with self._connect() as con:
            con.execute(
                """
                CREATE TABLE IF NOT EXISTS drafts (
                    project_id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    lyrics_count INTEGER NOT NULL,
                    payload TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );
                """
            )
            con.execute("CREATE INDEX IF NOT EXISTS idx_drafts_updated_at ON drafts(updated_at);")

    def save(self, project: TimelineProject) -> None:
        payload = json.dumps(project.to_dict(), ensure_ascii=False)
        with self._connect() as con:
            con.execute(
                """
                INSERT INTO drafts(project_id, name, lyrics_count, payload, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(project_id) DO UPDATE SET
                    name=excluded.name,
                    lyrics_count=excluded.lyrics_count,
                    payload=excluded.payload,
                    updated_at=excluded.updated_at
                """,
                (
                    project.id,
                    project.name,
                    len(project.timeline),
                    payload,
                    project.metadata.updated_at.isoformat(),
                ),
            )
        logger.debug("saved draft %s (%d lines)", project.id, len(project.timeline))

    def _row(self, con: sqlite3.Connection, project_id: str | None, columns: str) -> sqlite3.Row | None:
        if project_id is None:
            return con.execute(
                f"SELECT {columns} FROM drafts ORDER BY updated_at DESC LIMIT 1"
            ).fetchone()
        return con.execute(f"SELECT {columns} FROM drafts WHERE project_id=?", (project_id,)).fetchone()

    def load(self, project_id: str | None = None) -> TimelineProject | None:
        """
        Returns the project, the most recently updated one when no id is given,
        or None if there is nothing to restore.
        """
        with self._connect() as con:
            row = self._row(con, project_id, "payload")
        if row is None:
            return None
        return TimelineProject.from_dict(json.loads(row["payload"]))

    def info(self, project_id: str | None = None) -> SavedProjectInfo:
        with self._connect() as con:
            row = self._row(con, project_id, "project_id, name, lyrics_count, updated_at")
        if row is None:
            return SavedProjectInfo(exists=False)
        return SavedProjectInfo(
            exists=True,
            project_id=row["project_id"],
            name=row["name"],
            updated_at=datetime.fromisoformat(row["updated_at"]),
            lyrics_count=row["lyrics_count"],
        )

    def list(self) -> list[SavedProjectInfo]:
        with self._connect() as con:
            rows = con.execute(
                "SELECT project_id, name, lyrics_count, updated_at FROM drafts ORDER BY updated_at DESC"
            ).fetchall()
        return [
            SavedProjectInfo(
                exists=True,
                project_id=r["project_id"],
                name=r["name"],
                updated_at=datetime.fromisoformat(r["updated_at"]),
                lyrics_count=r["lyrics_count"],
            )
            for r in rows
        ]

    def delete(self, project_id: str) -> None:
        with self._connect() as con:
            con.execute("DELETE FROM drafts WHERE project_id=?", (project_id,))

    def clear(self) -> None:
        with self._connect() as con:
            con.execute("DELETE FROM drafts")
