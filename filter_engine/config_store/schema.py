"""SQLite schema for the ConfigStore.

Notes
-----
Every value is stored as TEXT. Typed accessors parse on read, so a value
written by an older or newer build never makes a read fail.
"""

from __future__ import annotations

SCHEMA_V1 = """
PRAGMA journal_mode = WAL;

CREATE TABLE IF NOT EXISTS store_meta (
    key   TEXT PRIMARY KEY,
    value TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS settings (
    key   TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""

SCHEMA_VERSION = "1"
