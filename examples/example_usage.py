"""Example: drive the services directly (no Flask).

Controllers stay thin; every rule lives in the services. The remote store is
never contacted here: the sync coordinator is left offline, so all marks stay
queued on the device.
"""

import importlib
import tempfile
from pathlib import Path

from config import get_settings_module

from school_attendance.container import build_container
from school_attendance.database.bootstrap import ensure_local_schema, seed_demo_roster


def main():
    settings = importlib.import_module(get_settings_module())
    local_path = Path(tempfile.mkdtemp()) / "example.sqlite3"
    container = build_container(db_config=settings.DB_CONFIG, local_db_path=str(local_path))

    ensure_local_schema(container.local_db)
    seed_demo_roster(container.local_db)

    service = container.attendance_service
    print(service.record_scan("1", "entry", "present").message)
    print(service.record_scan("1", "exit", "present").message)
    print(service.record_scan("2", "entry", "absent").message)
    print(service.edit_today("2", "present").message)

    print(service.today_stats().as_dict())
    print(container.sync_coordinator.status().as_dict())
    print(container.report_service.student_history("1", limit=5))


if __name__ == "__main__":
    main()
