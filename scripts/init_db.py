from __future__ import annotations

import sys
from pathlib import Path

import importlib

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.worktime.worktime.database.bootstrap import apply_schema, list_tables
from src.worktime.worktime.database.connection import DBConfig, DatabaseConnection


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_path = str(settings.AGENT_CONFIG["sync_db_path"])

    conn = DatabaseConnection(DBConfig(path=db_path))
    apply_schema(conn)
    tables = list_tables(conn)
    print(f"OK: local queue ready -> {db_path} (tables={', '.join(tables)})")


if __name__ == "__main__":
    main()
