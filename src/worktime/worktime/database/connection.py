from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from pathlib import Path


@dataclass
class DBConfig:
    path: str
    timeout: float = 5.0


class DatabaseConnection:
    """Connection factory for the agent's local SQLite file.

    Note: We create short-lived connections per operation, so the factory is
    safe to share between the Flask request threads and the host loop.
    """

    def __init__(self, config: DBConfig):
        self._config = config

    @property
    def path(self) -> str:
        return self._config.path

    def connect(self) -> sqlite3.Connection:
        if self._config.path != ":memory:":
            Path(self._config.path).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self._config.path, timeout=self._config.timeout)
        conn.row_factory = sqlite3.Row
        return conn
