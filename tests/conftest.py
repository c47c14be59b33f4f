from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional, Sequence

import pytest

from school_attendance.attendance.model import AttendanceEvent
from school_attendance.attendance.status import counter_delta
from school_attendance.core.enums import Outcome
from school_attendance.core.exceptions import NetworkError, StudentNotFound
from school_attendance.database.bootstrap import ensure_local_schema, seed_demo_roster
from school_attendance.database.sqlite_base import LocalDatabase
from school_attendance.students.model import CounterDelta, Student


def apply_delta(student: Student, delta: CounterDelta) -> Student:
    """Counters never go below zero, matching the GREATEST(0, ...) floors in SQL."""
    return replace(
        student,
        present_days=max(0, student.present_days + delta.present),
        absent_days=max(0, student.absent_days + delta.absent),
        total_days=max(0, student.total_days + delta.total),
    )


class FakeRemoteStore:
    """In-memory remote store with the same upsert/counter rules as MySQL."""

    def __init__(self, students: Sequence[Student] = ()):
        self.students: dict[str, Student] = {s.student_id: s for s in students}
        self.rows: dict[tuple[str, date], AttendanceEvent] = {}
        self.fail_with: Optional[Exception] = None
        self.push_calls = 0
        self.now = datetime(2025, 3, 10, 9, 0, 0)

    def _upsert(self, *, student_id, event_date, outcome, entry_time, exit_time, marked_by) -> CounterDelta:
        if student_id not in self.students:
            raise StudentNotFound(student_id)
        prev = self.rows.get((student_id, event_date))
        delta = counter_delta(prev.outcome if prev else None, outcome)
        self.rows[(student_id, event_date)] = AttendanceEvent(
            student_id=student_id,
            event_date=event_date,
            outcome=outcome,
            entry_time=entry_time,
            exit_time=exit_time,
            marked_by=marked_by,
            acknowledged=True,
        )
        self.students[student_id] = apply_delta(self.students[student_id], delta)
        return delta

    def upsert_event(self, *, student_id, event_date, outcome, entry_time, exit_time, marked_by) -> CounterDelta:
        if self.fail_with:
            raise self.fail_with
        return self._upsert(
            student_id=student_id,
            event_date=event_date,
            outcome=outcome,
            entry_time=entry_time,
            exit_time=exit_time,
            marked_by=marked_by,
        )

    def adjust_student_counters(self, *, student_id, present_delta, absent_delta, total_delta) -> bool:
        if student_id not in self.students:
            return False
        delta = CounterDelta(present=present_delta, absent=absent_delta, total=total_delta)
        self.students[student_id] = apply_delta(self.students[student_id], delta)
        return True

    def push_events(self, events: Sequence[AttendanceEvent]) -> int:
        self.push_calls += 1
        if self.fail_with:
            raise self.fail_with
        # All-or-nothing, like the single MySQL transaction.
        for e in events:
            if e.student_id not in self.students:
                raise StudentNotFound(e.student_id)
        for e in events:
            self._upsert(
                student_id=e.student_id,
                event_date=e.event_date,
                outcome=e.outcome,
                entry_time=e.entry_time,
                exit_time=e.exit_time,
                marked_by=e.marked_by,
            )
        return len(events)

    def list_events(self, event_date, *, student_id=None, teacher_id=None):
        out = []
        for (sid, d), e in sorted(self.rows.items()):
            if d != event_date or (student_id is not None and sid != student_id):
                continue
            if teacher_id is not None and self.students[sid].teacher_id != teacher_id:
                continue
            out.append(e)
        return out

    def list_students(self, teacher_id):
        return [s for s in self.students.values() if teacher_id is None or s.teacher_id == teacher_id]

    def server_now(self) -> datetime:
        if self.fail_with:
            raise self.fail_with
        return self.now

    def ping(self) -> bool:
        if isinstance(self.fail_with, NetworkError):
            raise self.fail_with
        return True


def make_student(student_id: str, *, teacher_id: Optional[str] = "t1", **counters) -> Student:
    return Student(
        student_id=student_id,
        name=f"Student {student_id}",
        roll_number=str(500 + int(student_id)),
        class_id="5",
        section_id="A",
        teacher_id=teacher_id,
        **counters,
    )


@pytest.fixture
def fixed_now():
    return datetime(2025, 3, 10, 8, 0, 0)


@pytest.fixture
def local_db(tmp_path):
    db = LocalDatabase(tmp_path / "attendance.sqlite3")
    ensure_local_schema(db)
    return db


@pytest.fixture
def seeded_db(local_db):
    seed_demo_roster(local_db, teacher_id="t1")
    return local_db


@pytest.fixture
def fake_remote():
    return FakeRemoteStore([make_student(str(i)) for i in range(1, 9)])

