from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..core.enums import SyncAction, SyncItemStatus
from ..database.connection import DatabaseConnection
from ..database.sqlite_base import db_cursor, fetchall, fetchone, from_db_datetime, to_db_datetime
from .model import SyncQueueItem
from .repository import SyncQueueRepository

_COLUMNS = "item_id, action, payload, created_at, attempt_count, last_error, status, last_attempt_at"


class SQLiteSyncQueueRepository(SyncQueueRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_item(r: Dict[str, Any]) -> SyncQueueItem:
        return SyncQueueItem(
            item_id=r["item_id"],
            action=SyncAction(r["action"]),
            payload=json.loads(r["payload"]),
            created_at=from_db_datetime(r["created_at"]),
            attempt_count=int(r["attempt_count"] or 0),
            last_error=r.get("last_error"),
            status=SyncItemStatus(r["status"]),
            last_attempt_at=from_db_datetime(r.get("last_attempt_at")),
        )

    def append(self, item: SyncQueueItem) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO sync_queue({_COLUMNS}) VALUES(?,?,?,?,?,?,?,?)",
                (
                    item.item_id,
                    item.action.value,
                    json.dumps(item.payload),
                    to_db_datetime(item.created_at),
                    int(item.attempt_count),
                    item.last_error,
                    item.status.value,
                    to_db_datetime(item.last_attempt_at),
                ),
            )

    def get(self, item_id: str) -> Optional[SyncQueueItem]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM sync_queue WHERE item_id=?", (item_id,))
            r = fetchone(cur)
            return self._to_item(r) if r else None

    def list_items(self, statuses: Optional[Sequence[SyncItemStatus]] = None) -> Sequence[SyncQueueItem]:
        sql = f"SELECT {_COLUMNS} FROM sync_queue"
        params: list = []
        if statuses:
            sql += " WHERE status IN (" + ",".join("?" for _ in statuses) + ")"
            params.extend(s.value for s in statuses)
        sql += " ORDER BY seq ASC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [self._to_item(r) for r in fetchall(cur)]

    def count(self, status: Optional[SyncItemStatus] = None) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            if status is None:
                cur.execute("SELECT COUNT(*) AS n FROM sync_queue")
            else:
                cur.execute("SELECT COUNT(*) AS n FROM sync_queue WHERE status=?", (status.value,))
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def mark_syncing(self, item_id: str, *, now: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE sync_queue SET status=?, last_attempt_at=? WHERE item_id=?",
                (SyncItemStatus.SYNCING.value, to_db_datetime(now), item_id),
            )
            return cur.rowcount > 0

    def mark_failed(self, item_id: str, *, error: str, now: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE sync_queue
                SET status=?, attempt_count=attempt_count + 1, last_error=?, last_attempt_at=?
                WHERE item_id=?
                """,
                (SyncItemStatus.FAILED.value, error, to_db_datetime(now), item_id),
            )
            return cur.rowcount > 0

    def remove(self, item_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM sync_queue WHERE item_id=?", (item_id,))
            return cur.rowcount > 0

    def reset_syncing(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE sync_queue SET status=? WHERE status=?",
                (SyncItemStatus.PENDING.value, SyncItemStatus.SYNCING.value),
            )
            return cur.rowcount

    def _get_meta(self, cur, key: str) -> Optional[str]:
        cur.execute("SELECT meta_value FROM sync_meta WHERE meta_key=?", (key,))
        r = fetchone(cur)
        return r["meta_value"] if r else None

    def _set_meta(self, cur, key: str, value: str) -> None:
        cur.execute(
            """
            INSERT INTO sync_meta(meta_key, meta_value) VALUES(?,?)
            ON CONFLICT(meta_key) DO UPDATE SET meta_value=excluded.meta_value
            """,
            (key, value),
        )

    def record_synced(self, count: int, *, now: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            total = int(self._get_meta(cur, "total_synced") or 0) + int(count)
            self._set_meta(cur, "total_synced", str(total))
            self._set_meta(cur, "last_sync_time", to_db_datetime(now))

    def get_total_synced(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            return int(self._get_meta(cur, "total_synced") or 0)

    def get_last_sync_time(self) -> Optional[datetime]:
        with db_cursor(self._conn_factory) as (_, cur):
            return from_db_datetime(self._get_meta(cur, "last_sync_time"))
