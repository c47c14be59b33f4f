from __future__ import annotations

import sys
from pathlib import Path

import importlib

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from school_attendance.database.bootstrap import apply_remote_schema, ensure_local_schema, list_remote_tables
from school_attendance.database.connection import DBConfig, DatabaseConnection
from school_attendance.database.sqlite_base import LocalDatabase


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    local_db = LocalDatabase(settings.LOCAL_DB_PATH)
    ensure_local_schema(local_db)
    print(f"OK: Local store ready -> {local_db.path}")

    if "--local-only" in sys.argv[1:]:
        return

    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    schema_path = REPO_ROOT / "database" / "schema.sql"
    apply_remote_schema(conn, schema_path=schema_path)
    tables = list_remote_tables(conn)
    print(
        "OK: Applied schema.sql -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')} "
        f"(tables={len(tables)})"
    )


if __name__ == "__main__":
    main()
