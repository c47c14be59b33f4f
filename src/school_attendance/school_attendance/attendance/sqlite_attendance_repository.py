from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Mapping, Optional, Sequence

from ..common.datetime_utils import date_key, parse_iso_date
from ..core.enums import Outcome
from ..core.exceptions import AlreadyMarked, StudentNotFound, SyncConflict
from ..database.sqlite_base import LocalDatabase, local_cursor, row_to_dict, rows_to_dicts
from ..students.model import CounterDelta
from .model import AttendanceEvent
from .repository import AttendanceRepository

_COLUMNS = "event_id, student_id, event_date, entry_time, exit_time, outcome, marked_by, acknowledged, revision"


def _ts(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _parse_ts(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def event_from_row(r: dict) -> AttendanceEvent:
    return AttendanceEvent(
        event_id=int(r["event_id"]),
        student_id=str(r["student_id"]),
        event_date=parse_iso_date(r["event_date"]),
        entry_time=_parse_ts(r.get("entry_time")),
        exit_time=_parse_ts(r.get("exit_time")),
        outcome=Outcome(r["outcome"]),
        marked_by=r.get("marked_by"),
        acknowledged=bool(r.get("acknowledged")),
        revision=int(r.get("revision") or 1),
    )


class SQLiteAttendanceRepository(AttendanceRepository):
    def __init__(self, db: LocalDatabase):
        self._db = db

    def get_for_student_and_date(self, student_id: str, event_date: date) -> Optional[AttendanceEvent]:
        with local_cursor(self._db) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_events WHERE student_id=? AND event_date=?",
                (str(student_id), date_key(event_date)),
            )
            r = row_to_dict(cur.fetchone())
            return event_from_row(r) if r else None

    def insert(self, event: AttendanceEvent, *, delta: CounterDelta = CounterDelta()) -> AttendanceEvent:
        existing = self.get_for_student_and_date(event.student_id, event.event_date)
        if existing:
            raise AlreadyMarked(
                f"A record already exists for student {event.student_id} on {date_key(event.event_date)}"
            )
        return self.save_event(event, delta=delta, expected_revision=None)

    def save_event(
        self,
        event: AttendanceEvent,
        *,
        delta: CounterDelta,
        expected_revision: Optional[int] = None,
    ) -> AttendanceEvent:
        if not event.is_consistent():
            raise ValueError(f"Inconsistent attendance record: {event!r}")

        key = (str(event.student_id), date_key(event.event_date))
        with local_cursor(self._db, immediate=True) as (_, cur):
            cur.execute("SELECT 1 FROM students WHERE student_id=?", (key[0],))
            if cur.fetchone() is None:
                raise StudentNotFound(key[0])

            cur.execute("SELECT event_id, revision FROM attendance_events WHERE student_id=? AND event_date=?", key)
            current = row_to_dict(cur.fetchone())
            current_revision = int(current["revision"]) if current else None
            if current_revision != expected_revision:
                raise SyncConflict(
                    f"Record for student {key[0]} on {key[1]} changed concurrently; reload and retry"
                )

            if current:
                cur.execute(
                    """
                    UPDATE attendance_events
                    SET entry_time=?, exit_time=?, outcome=?, marked_by=?, acknowledged=0, revision=revision+1
                    WHERE event_id=?
                    """,
                    (
                        _ts(event.entry_time),
                        _ts(event.exit_time),
                        event.outcome.value,
                        event.marked_by,
                        int(current["event_id"]),
                    ),
                )
            else:
                cur.execute(
                    """
                    INSERT INTO attendance_events(student_id, event_date, entry_time, exit_time, outcome, marked_by)
                    VALUES(?,?,?,?,?,?)
                    """,
                    (*key, _ts(event.entry_time), _ts(event.exit_time), event.outcome.value, event.marked_by),
                )

            if not delta.is_zero:
                cur.execute(
                    """
                    UPDATE students
                    SET present_days=MAX(0, present_days + ?),
                        absent_days=MAX(0, absent_days + ?),
                        total_days=MAX(0, total_days + ?)
                    WHERE student_id=?
                    """,
                    (int(delta.present), int(delta.absent), int(delta.total), key[0]),
                )

            cur.execute(f"SELECT {_COLUMNS} FROM attendance_events WHERE student_id=? AND event_date=?", key)
            return event_from_row(row_to_dict(cur.fetchone()))

    def query(self, event_date: date) -> Sequence[AttendanceEvent]:
        with local_cursor(self._db) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_events WHERE event_date=? ORDER BY event_id",
                (date_key(event_date),),
            )
            return [event_from_row(r) for r in rows_to_dicts(cur.fetchall())]

    def query_range(
        self,
        *,
        start: date,
        end: date,
        student_ids: Optional[Iterable[str]] = None,
    ) -> Sequence[AttendanceEvent]:
        clauses = ["event_date BETWEEN ? AND ?"]
        params: list[object] = [date_key(start), date_key(end)]
        if student_ids is not None:
            ids = [str(s) for s in student_ids]
            if not ids:
                return []
            clauses.append(f"student_id IN ({','.join('?' for _ in ids)})")
            params.extend(ids)

        where = " AND ".join(clauses)
        with local_cursor(self._db) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_events WHERE {where} ORDER BY event_date ASC, student_id ASC",
                tuple(params),
            )
            return [event_from_row(r) for r in rows_to_dicts(cur.fetchall())]

    def get_recent_for_student(self, student_id: str, limit: int) -> Sequence[AttendanceEvent]:
        with local_cursor(self._db) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_events
                WHERE student_id=?
                ORDER BY event_date DESC
                LIMIT ?
                """,
                (str(student_id), int(limit)),
            )
            return [event_from_row(r) for r in rows_to_dicts(cur.fetchall())]

    def query_unacknowledged(self) -> Sequence[AttendanceEvent]:
        with local_cursor(self._db) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_events WHERE acknowledged=0 ORDER BY event_id")
            return [event_from_row(r) for r in rows_to_dicts(cur.fetchall())]

    def count_unacknowledged(self) -> int:
        with local_cursor(self._db) as (_, cur):
            cur.execute("SELECT COUNT(*) FROM attendance_events WHERE acknowledged=0")
            return int(cur.fetchone()[0])

    def mark_acknowledged(self, ids: Iterable[int], *, revisions: Optional[Mapping[int, int]] = None) -> int:
        """Acknowledge pushed rows. With `revisions`, a row rewritten after it was
        pushed keeps acknowledged=0 and goes out again on the next pass."""

        ids = [int(i) for i in ids]
        if not ids:
            return 0

        updated = 0
        with local_cursor(self._db, immediate=True) as (_, cur):
            for event_id in ids:
                if revisions is not None and event_id in revisions:
                    cur.execute(
                        "UPDATE attendance_events SET acknowledged=1 WHERE event_id=? AND revision=?",
                        (event_id, int(revisions[event_id])),
                    )
                else:
                    cur.execute("UPDATE attendance_events SET acknowledged=1 WHERE event_id=?", (event_id,))
                updated += cur.rowcount
        return updated
