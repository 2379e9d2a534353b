"""SQLite-backed key/value persistence for serialized app configuration."""

from __future__ import annotations

import sqlite3
from datetime import UTC, datetime
from pathlib import Path

from text_essence.core.analysis_errors import ConfigPersistenceError


class SQLiteConfigPersistence:
    """Persist versioned configuration documents in one SQLite database."""

    def __init__(self, db_path: Path) -> None:
        self._db_path = db_path
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._initialize_schema()

    @property
    def db_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(str(self._db_path))
        connection.row_factory = sqlite3.Row
        return connection

    def _initialize_schema(self) -> None:
        with self._connect() as connection:
            connection.execute(
                """
                CREATE TABLE IF NOT EXISTS settings (
                    key TEXT PRIMARY KEY,
                    value_json TEXT NOT NULL,
                    updated_at_utc TEXT NOT NULL
                )
                """
            )

    def load(self, key: str) -> str | None:
        try:
            with self._connect() as connection:
                row = connection.execute(
                    "SELECT value_json FROM settings WHERE key = ?",
                    (key,),
                ).fetchone()
        except sqlite3.Error as exc:
            raise ConfigPersistenceError(f"Could not read setting {key!r}: {exc}") from exc
        if row is None:
            return None
        return str(row["value_json"])

    def save(self, key: str, value: str) -> None:
        try:
            with self._connect() as connection:
                connection.execute(
                    """
                    INSERT INTO settings (key, value_json, updated_at_utc)
                    VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value_json = excluded.value_json,
                        updated_at_utc = excluded.updated_at_utc
                    """,
                    (key, value, datetime.now(UTC).isoformat()),
                )
        except sqlite3.Error as exc:
            raise ConfigPersistenceError(f"Could not write setting {key!r}: {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            with self._connect() as connection:
                connection.execute("DELETE FROM settings WHERE key = ?", (key,))
        except sqlite3.Error as exc:
            raise ConfigPersistenceError(f"Could not delete setting {key!r}: {exc}") from exc


class InMemoryConfigPersistence:
    """Process-local persistence used by the relay and tests."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def load(self, key: str) -> str | None:
        return self._values.get(key)

    def save(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)
