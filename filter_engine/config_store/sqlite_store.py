"""
SQLite implementation of ConfigStore.

This module owns the on-disk format for filter settings, rule slots and
history slots.

Threading
---------
sqlite3 connections are not shared across threads. The engine is
single-threaded; a GUI that moves engine work to a worker thread must create
and use the store entirely within that thread.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from pathlib import Path

from ..errors import ConfigStoreError
from .schema import SCHEMA_V1, SCHEMA_VERSION
from .values import format_bool, parse_bool, parse_int

CONFIG_DB_NAME = "filtering.sqlite"


def config_db_path(data_root: Path) -> Path:
    """
    Return the canonical path of the ConfigStore database.

    Parameters
    ----------
    data_root:
        Engine data root.

    Returns
    -------
    pathlib.Path
        Path to the SQLite database directly under data_root.
    """
    return data_root / CONFIG_DB_NAME


def _ensure_schema(conn: sqlite3.Connection) -> None:
    row = conn.execute("SELECT value FROM store_meta WHERE key = 'schema_version'").fetchone()
    if row is None:
        conn.execute(
            "INSERT INTO store_meta(key, value) VALUES('schema_version', ?)",
            (SCHEMA_VERSION,),
        )


@dataclass(frozen=True, slots=True)
class SqliteConfigStore:
    """
    SQLite-backed ConfigStore.

    Parameters
    ----------
    db_path:
        Path to the SQLite database.

    Notes
    -----
    The database file is created if absent. The parent directory is created as
    needed. Each write commits immediately; there is no transactional grouping
    across keys.
    """

    db_path: Path

    def __post_init__(self) -> None:
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            with self._connect() as conn:
                conn.executescript(SCHEMA_V1)
                _ensure_schema(conn)
        except (OSError, sqlite3.Error) as exc:
            raise ConfigStoreError(f"Cannot open config store at {self.db_path}: {exc}") from exc

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _read(self, key: str) -> str | None:
        with self._connect() as conn:
            row = conn.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()
        return None if row is None else str(row["value"])

    def _write(self, key: str, value: str) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO settings(key, value) VALUES(?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, value),
            )

    def has(self, key: str) -> bool:
        """See ConfigStore.has."""
        return self._read(key) is not None

    def get_int(self, key: str, default: int = 0) -> int:
        """See ConfigStore.get_int."""
        return parse_int(self._read(key), default)

    def set_int(self, key: str, value: int) -> None:
        """See ConfigStore.set_int."""
        self._write(key, str(int(value)))

    def get_string(self, key: str, default: str = "") -> str:
        """See ConfigStore.get_string."""
        raw = self._read(key)
        return default if raw is None else raw

    def set_string(self, key: str, value: str) -> None:
        """See ConfigStore.set_string."""
        self._write(key, str(value))

    def get_bool(self, key: str, default: bool = False) -> bool:
        """See ConfigStore.get_bool."""
        return parse_bool(self._read(key), default)

    def set_bool(self, key: str, value: bool) -> None:
        """See ConfigStore.set_bool."""
        self._write(key, format_bool(value))

    def keys(self, prefix: str = "") -> list[str]:
        """See ConfigStore.keys."""
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT key FROM settings WHERE key LIKE ? ESCAPE '\\' ORDER BY key ASC",
                (_like_prefix(prefix),),
            ).fetchall()
        return [str(r["key"]) for r in rows]


def open_config_store(data_root: Path) -> SqliteConfigStore:
    """
    Convenience constructor for the store under a data root.

    Parameters
    ----------
    data_root:
        Engine data root. Created if missing.

    Returns
    -------
    SqliteConfigStore
        Ready-to-use store.
    """
    return SqliteConfigStore(db_path=config_db_path(data_root))


def _like_prefix(prefix: str) -> str:
    escaped = prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return escaped + "%"
