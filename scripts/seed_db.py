from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from school_attendance.database.bootstrap import ensure_local_schema, seed_demo_roster
from school_attendance.database.sqlite_base import LocalDatabase


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    teacher_id = getattr(settings, "TEACHER_ID", None)

    local_db = LocalDatabase(settings.LOCAL_DB_PATH)
    ensure_local_schema(local_db)
    added = seed_demo_roster(local_db, teacher_id=teacher_id)

    if added:
        print(f"OK: Seeded {added} demo students -> {local_db.path} (teacher={teacher_id or 'shared'})")
    else:
        print(f"SKIP: Local roster already populated -> {local_db.path}")


if __name__ == "__main__":
    main()
