from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.policy import ScanPolicy
from .attendance.repository import RemoteAttendanceStore
from .common.logging_setup import configure_logging
from .container import build_container
from .database.bootstrap import apply_remote_schema, ensure_local_schema, list_remote_tables, seed_demo_roster
from .attendance.controller import register as register_attendance

logger = logging.getLogger(__name__)


def create_app(
    *,
    remote_store: RemoteAttendanceStore | None = None,
    start_sync: bool | None = None,
) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["LOW_ATTENDANCE_THRESHOLD"] = int(getattr(settings, "LOW_ATTENDANCE_THRESHOLD", 75))

    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"), getattr(settings, "LOG_DIR", None))
    logger.info(
        "settings=%s remote=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    container = build_container(
        db_config=db_config,
        local_db_path=getattr(settings, "LOCAL_DB_PATH"),
        policy=ScanPolicy.from_settings(settings),
        teacher_id=getattr(settings, "TEACHER_ID", None),
        sync_interval_seconds=int(getattr(settings, "SYNC_INTERVAL_SECONDS", 30)),
        remote_store=remote_store,
    )

    ensure_local_schema(container.local_db)
    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
        apply_remote_schema(container.conn, schema_path=schema_path)
        logger.info("remote schema ready (tables=%d)", len(list_remote_tables(container.conn)))
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        seed_demo_roster(container.local_db, teacher_id=getattr(settings, "TEACHER_ID", None))

    register_attendance(app, container)
    app.extensions["school_attendance"] = container

    if start_sync is None:
        start_sync = not app.config["TESTING"]
    if start_sync:
        container.sync_coordinator.start()

    return app
