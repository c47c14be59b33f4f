from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import Outcome
from ..core.exceptions import StudentNotFound
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from ..students.model import CounterDelta, Student
from ..students.mysql_student_repository import MySQLStudentRepository
from .model import AttendanceEvent
from .repository import RemoteAttendanceStore
from .status import counter_delta


def _to_event(r: dict) -> AttendanceEvent:
    return AttendanceEvent(
        student_id=str(r["student_id"]),
        event_date=r["attendance_date"],
        entry_time=r.get("entry_time"),
        exit_time=r.get("exit_time"),
        outcome=Outcome(r["status"]),
        marked_by=r.get("marked_by"),
        acknowledged=True,
        event_id=int(r["attendance_id"]),
    )


class MySQLAttendanceRepository(RemoteAttendanceStore):
    """Remote store. The counter delta for an upsert is computed from the
    server's own previous row, so replaying the same push changes nothing."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory
        self._students = MySQLStudentRepository(conn_factory)

    def _upsert(self, cur, *, student_id, event_date, outcome, entry_time, exit_time, marked_by) -> CounterDelta:
        cur.execute("SELECT student_id FROM students WHERE student_id=%s", (str(student_id),))
        if not fetchone(cur):
            raise StudentNotFound(str(student_id))

        cur.execute(
            """
            SELECT status FROM student_attendance
            WHERE student_id=%s AND attendance_date=%s
            FOR UPDATE
            """,
            (str(student_id), event_date),
        )
        prev = fetchone(cur)
        delta = counter_delta(Outcome(prev["status"]) if prev else None, outcome)

        cur.execute(
            """
            INSERT INTO student_attendance(student_id, attendance_date, entry_time, exit_time, status, marked_by)
            VALUES(%s,%s,%s,%s,%s,%s)
            ON DUPLICATE KEY UPDATE
                entry_time=VALUES(entry_time),
                exit_time=VALUES(exit_time),
                status=VALUES(status),
                marked_by=VALUES(marked_by)
            """,
            (str(student_id), event_date, entry_time, exit_time, outcome.value, marked_by),
        )

        if not delta.is_zero:
            self._adjust(cur, student_id=student_id, delta=delta)
        return delta

    @staticmethod
    def _adjust(cur, *, student_id: str, delta: CounterDelta) -> int:
        cur.execute(
            """
            UPDATE students
            SET present_days=GREATEST(0, present_days + %s),
                absent_days=GREATEST(0, absent_days + %s),
                total_days=GREATEST(0, total_days + %s)
            WHERE student_id=%s
            """,
            (int(delta.present), int(delta.absent), int(delta.total), str(student_id)),
        )
        return cur.rowcount

    def upsert_event(
        self,
        *,
        student_id: str,
        event_date: date,
        outcome: Outcome,
        entry_time: Optional[datetime],
        exit_time: Optional[datetime],
        marked_by: Optional[str],
    ) -> CounterDelta:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._upsert(
                cur,
                student_id=student_id,
                event_date=event_date,
                outcome=outcome,
                entry_time=entry_time,
                exit_time=exit_time,
                marked_by=marked_by,
            )

    def adjust_student_counters(
        self,
        *,
        student_id: str,
        present_delta: int,
        absent_delta: int,
        total_delta: int,
    ) -> bool:
        delta = CounterDelta(present=present_delta, absent=absent_delta, total=total_delta)
        with db_cursor(self._conn_factory) as (_, cur):
            return self._adjust(cur, student_id=student_id, delta=delta) > 0

    def push_events(self, events: Sequence[AttendanceEvent]) -> int:
        if not events:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            for e in events:
                self._upsert(
                    cur,
                    student_id=e.student_id,
                    event_date=e.event_date,
                    outcome=e.outcome,
                    entry_time=e.entry_time,
                    exit_time=e.exit_time,
                    marked_by=e.marked_by,
                )
        return len(events)

    def list_events(
        self,
        event_date: date,
        *,
        student_id: Optional[str] = None,
        teacher_id: Optional[str] = None,
    ) -> Sequence[AttendanceEvent]:
        where = ["a.attendance_date=%s"]
        params: list[object] = [event_date]
        if student_id is not None:
            where.append("a.student_id=%s")
            params.append(str(student_id))
        if teacher_id is not None:
            where.append("s.teacher_id=%s")
            params.append(str(teacher_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT a.attendance_id, a.student_id, a.attendance_date, a.entry_time, a.exit_time,
                       a.status, a.marked_by
                FROM student_attendance a
                JOIN students s ON s.student_id = a.student_id
                WHERE {' AND '.join(where)}
                ORDER BY s.roll_number
                """,
                tuple(params),
            )
            return [_to_event(r) for r in fetchall(cur)]

    def list_students(self, teacher_id: Optional[str]) -> Sequence[Student]:
        return self._students.list_for_teacher(teacher_id)

    def server_now(self) -> datetime:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT NOW() AS now")
            return fetchone(cur)["now"]

    def ping(self) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS ok")
            return bool(fetchone(cur))
