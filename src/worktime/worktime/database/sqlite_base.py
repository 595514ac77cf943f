from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection) -> Iterator[Tuple[sqlite3.Connection, sqlite3.Cursor]]:
    conn = conn_factory.connect()
    try:
        cur = conn.cursor()
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur: sqlite3.Cursor) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return dict(row) if row else None


def fetchall(cur: sqlite3.Cursor) -> List[Dict[str, Any]]:
    return [dict(r) for r in cur.fetchall() or []]


def to_db_datetime(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def from_db_datetime(value: Any) -> Optional[datetime]:
    """Normalize stored timestamps (ISO text) back to datetime."""

    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        return datetime.fromisoformat(value)
    raise TypeError(f"Unsupported stored datetime type: {type(value)!r}")
