from __future__ import annotations

from typing import Iterable

from .connection import DatabaseConnection
from .sqlite_base import db_cursor

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS sync_queue (
    seq INTEGER PRIMARY KEY AUTOINCREMENT,
    item_id TEXT NOT NULL UNIQUE,
    action TEXT NOT NULL,
    payload TEXT NOT NULL,
    created_at TEXT NOT NULL,
    attempt_count INTEGER NOT NULL DEFAULT 0,
    last_error TEXT,
    last_attempt_at TEXT,
    status TEXT NOT NULL DEFAULT 'pending'
);

CREATE INDEX IF NOT EXISTS ix_sync_queue_status ON sync_queue(status);

CREATE TABLE IF NOT EXISTS sync_meta (
    meta_key TEXT PRIMARY KEY,
    meta_value TEXT
);
"""


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Schema holds no string literals with ';' so a plain split is enough.
    for stmt in sql.split(";"):
        stmt = stmt.strip()
        if stmt:
            yield stmt


def apply_schema(conn_factory: DatabaseConnection) -> None:
    """Create the local tables (idempotent: CREATE IF NOT EXISTS)."""

    with db_cursor(conn_factory) as (_, cur):
        for stmt in _iter_sql_statements(SCHEMA_SQL):
            cur.execute(stmt)


def list_tables(conn_factory: DatabaseConnection) -> list[str]:
    with db_cursor(conn_factory) as (_, cur):
        cur.execute("SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%' ORDER BY name")
        return [row[0] for row in cur.fetchall()]
