"""SQLite persistence for haiku history and user settings."""
from __future__ import annotations

import sqlite3
import uuid
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from .models import Counts, HaikuRecord

MAX_HISTORY_SIZE = 50

SCHEMA = """
PRAGMA foreign_keys = ON;

CREATE TABLE IF NOT EXISTS haikus (
    id TEXT PRIMARY KEY,
    line1 TEXT NOT NULL,
    line2 TEXT NOT NULL,
    line3 TEXT NOT NULL,
    theme TEXT NOT NULL,
    syllables1 INTEGER NOT NULL,
    syllables2 INTEGER NOT NULL,
    syllables3 INTEGER NOT NULL,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS keywords (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    haiku_id TEXT NOT NULL,
    position INTEGER NOT NULL,
    keyword TEXT NOT NULL,
    FOREIGN KEY(haiku_id) REFERENCES haikus(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS settings (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_haikus_created_at ON haikus(created_at);
CREATE INDEX IF NOT EXISTS idx_keywords_haiku_id ON keywords(haiku_id);
"""


class HistoryDatabase:
    """Most recent haiku, newest first, capped at ``max_size`` entries."""

    def __init__(self, path: str | Path, max_size: int = MAX_HISTORY_SIZE):
        self.path = Path(path)
        self.max_size = max_size
        self.conn = sqlite3.connect(self.path)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA foreign_keys = ON")

    def close(self) -> None:
        self.conn.close()

    def initialize(self) -> None:
        """Create schema if it does not already exist."""

        with self.conn:
            self.conn.executescript(SCHEMA)

    # ------------------------------------------------------------------
    # history
    # ------------------------------------------------------------------
    def add(
        self,
        lines: Sequence[str],
        theme: str,
        keywords: Iterable[str],
        syllables: Counts,
        created_at: Optional[datetime] = None,
    ) -> HaikuRecord:
        """Persist a haiku and drop entries beyond the size cap."""

        if len(lines) != 3:
            raise ValueError(f"A haiku has exactly three lines, got {len(lines)}")
        record = HaikuRecord(
            id=str(uuid.uuid4()),
            lines=(lines[0], lines[1], lines[2]),
            theme=theme,
            keywords=list(keywords),
            syllables=syllables,
            created_at=created_at or datetime.now(),
        )
        with self.conn:
            self.conn.execute(
                """
                INSERT INTO haikus (
                    id, line1, line2, line3, theme,
                    syllables1, syllables2, syllables3, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.id,
                    *record.lines,
                    record.theme,
                    *record.syllables,
                    record.created_at.isoformat(),
                ),
            )
            self.conn.executemany(
                "INSERT INTO keywords(haiku_id, position, keyword) VALUES (?, ?, ?)",
                [(record.id, position, keyword) for position, keyword in enumerate(record.keywords)],
            )
            self._trim()
        return record

    def _trim(self) -> None:
        self.conn.execute(
            """
            DELETE FROM haikus WHERE id NOT IN (
                SELECT id FROM haikus ORDER BY created_at DESC, rowid DESC LIMIT ?
            )
            """,
            (self.max_size,),
        )

    def get(self, haiku_id: str) -> Optional[HaikuRecord]:
        row = self.conn.execute("SELECT * FROM haikus WHERE id = ?", (haiku_id,)).fetchone()
        if row is None:
            return None
        return self._records([row])[0]

    def remove(self, haiku_id: str) -> bool:
        with self.conn:
            cur = self.conn.execute("DELETE FROM haikus WHERE id = ?", (haiku_id,))
        return cur.rowcount > 0

    def clear(self) -> None:
        with self.conn:
            self.conn.execute("DELETE FROM haikus")

    def __len__(self) -> int:
        return int(self.conn.execute("SELECT COUNT(*) FROM haikus").fetchone()[0])

    # ------------------------------------------------------------------
    # query helpers
    # ------------------------------------------------------------------
    def recent(self, limit: Optional[int] = None) -> List[HaikuRecord]:
        query = "SELECT * FROM haikus ORDER BY created_at DESC, rowid DESC"
        params: tuple = ()
        if limit is not None:
            query += " LIMIT ?"
            params = (limit,)
        return self._records(self.conn.execute(query, params).fetchall())

    def recent_keywords(self, limit: int = 10) -> List[str]:
        """Unique keywords, most recently used first."""

        seen: List[str] = []
        for record in self.recent():
            for keyword in record.keywords:
                if keyword not in seen:
                    seen.append(keyword)
        return seen[:limit]

    def recent_themes(self, limit: int = 10) -> List[str]:
        seen: List[str] = []
        for record in self.recent():
            if record.theme not in seen:
                seen.append(record.theme)
        return seen[:limit]

    def find_by_theme(self, theme: str) -> List[HaikuRecord]:
        wanted = theme.casefold()
        return [record for record in self.recent() if wanted in record.theme.casefold()]

    def find_by_keyword(self, keyword: str) -> List[HaikuRecord]:
        wanted = keyword.casefold()
        return [
            record
            for record in self.recent()
            if any(wanted in existing.casefold() for existing in record.keywords)
        ]

    def _records(self, rows: Sequence[sqlite3.Row]) -> List[HaikuRecord]:
        if not rows:
            return []
        ids = [row["id"] for row in rows]
        keywords = self._load_keywords(ids)
        return [
            HaikuRecord(
                id=row["id"],
                lines=(row["line1"], row["line2"], row["line3"]),
                theme=row["theme"],
                keywords=keywords.get(row["id"], []),
                syllables=(row["syllables1"], row["syllables2"], row["syllables3"]),
                created_at=datetime.fromisoformat(row["created_at"]),
            )
            for row in rows
        ]

    def _load_keywords(self, haiku_ids: Sequence[str]) -> Dict[str, List[str]]:
        placeholders = ",".join("?" for _ in haiku_ids)
        query = f"""
            SELECT haiku_id, keyword FROM keywords
            WHERE haiku_id IN ({placeholders})
            ORDER BY haiku_id, position
        """
        result: Dict[str, List[str]] = {}
        for row in self.conn.execute(query, tuple(haiku_ids)):
            result.setdefault(row["haiku_id"], []).append(row["keyword"])
        return result

    # ------------------------------------------------------------------
    # settings
    # ------------------------------------------------------------------
    def get_setting(self, key: str) -> Optional[str]:
        row = self.conn.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()
        return None if row is None else str(row[0])

    def set_setting(self, key: str, value: str) -> None:
        with self.conn:
            self.conn.execute(
                "INSERT INTO settings(key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, value),
            )

    def delete_setting(self, key: str) -> None:
        with self.conn:
            self.conn.execute("DELETE FROM settings WHERE key = ?", (key,))

    def settings(self) -> Dict[str, str]:
        rows = self.conn.execute("SELECT key, value FROM settings ORDER BY key")
        return {row["key"]: row["value"] for row in rows}
