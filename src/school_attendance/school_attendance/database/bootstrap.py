from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Sequence

from .connection import DatabaseConnection
from .mysql_base import db_cursor
from .sqlite_base import LocalDatabase, local_cursor

logger = logging.getLogger(__name__)

LOCAL_SCHEMA = """
CREATE TABLE IF NOT EXISTS students (
    student_id    TEXT PRIMARY KEY,
    name          TEXT NOT NULL,
    roll_number   TEXT NOT NULL,
    class_id      TEXT NOT NULL DEFAULT '',
    section_id    TEXT NOT NULL DEFAULT '',
    school_name   TEXT NOT NULL DEFAULT '',
    teacher_id    TEXT,
    present_days  INTEGER NOT NULL DEFAULT 0,
    absent_days   INTEGER NOT NULL DEFAULT 0,
    total_days    INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS attendance_events (
    event_id      INTEGER PRIMARY KEY AUTOINCREMENT,
    student_id    TEXT NOT NULL REFERENCES students(student_id),
    event_date    TEXT NOT NULL,
    entry_time    TEXT,
    exit_time     TEXT,
    outcome       TEXT NOT NULL,
    marked_by     TEXT,
    acknowledged  INTEGER NOT NULL DEFAULT 0,
    revision      INTEGER NOT NULL DEFAULT 1,
    UNIQUE (student_id, event_date)
);

CREATE INDEX IF NOT EXISTS idx_attendance_events_date ON attendance_events(event_date);
CREATE INDEX IF NOT EXISTS idx_attendance_events_ack ON attendance_events(acknowledged);
"""

DEMO_ROSTER: Sequence[dict] = (
    {"student_id": "1", "name": "Rahul Kumar", "roll_number": "501", "class_id": "5", "section_id": "A"},
    {"student_id": "2", "name": "Priya Sharma", "roll_number": "502", "class_id": "5", "section_id": "A"},
    {"student_id": "3", "name": "Amit Singh", "roll_number": "503", "class_id": "5", "section_id": "A"},
    {"student_id": "4", "name": "Neha Patel", "roll_number": "504", "class_id": "5", "section_id": "A"},
    {"student_id": "5", "name": "Vikram Rao", "roll_number": "505", "class_id": "5", "section_id": "A"},
    {"student_id": "6", "name": "Anjali Verma", "roll_number": "506", "class_id": "5", "section_id": "A"},
    {"student_id": "7", "name": "Rohit Mehta", "roll_number": "507", "class_id": "5", "section_id": "A"},
    {"student_id": "8", "name": "Kavya Reddy", "roll_number": "508", "class_id": "5", "section_id": "A"},
)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema files (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_local_schema(db: LocalDatabase) -> None:
    conn = db.connect()
    try:
        conn.executescript(LOCAL_SCHEMA)
        conn.commit()
    finally:
        conn.close()


def seed_demo_roster(db: LocalDatabase, *, teacher_id: str | None = None) -> int:
    """Insert the demo roster if the local snapshot is empty. Returns rows added."""

    with local_cursor(db, immediate=True) as (_, cur):
        cur.execute("SELECT COUNT(*) FROM students")
        if int(cur.fetchone()[0]) > 0:
            return 0
        for s in DEMO_ROSTER:
            cur.execute(
                """
                INSERT INTO students(student_id, name, roll_number, class_id, section_id, school_name, teacher_id)
                VALUES(?,?,?,?,?,?,?)
                """,
                (s["student_id"], s["name"], s["roll_number"], s["class_id"], s["section_id"], "Demo School", teacher_id),
            )
    logger.info("Seeded %d demo students into %s", len(DEMO_ROSTER), db.path)
    return len(DEMO_ROSTER)


def apply_remote_schema(conn_factory: DatabaseConnection, *, schema_path: str | Path) -> None:
    target = conn_factory.config
    sql = _strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8"))

    bootstrap_conn = conn_factory.connect(with_database=False)
    try:
        cur = bootstrap_conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        bootstrap_conn.commit()
    finally:
        bootstrap_conn.close()

    with db_cursor(conn_factory, dictionary=False) as (_, cur):
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)


def list_remote_tables(conn_factory: DatabaseConnection) -> list[str]:
    with db_cursor(conn_factory, dictionary=False) as (_, cur):
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
