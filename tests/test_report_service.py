from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from school_attendance.attendance.service import AttendanceService
from school_attendance.attendance.sqlite_attendance_repository import SQLiteAttendanceRepository
from school_attendance.core.exceptions import StudentNotFound, ValidationError
from school_attendance.reports.service import AttendanceReportService, percent
from school_attendance.students.sqlite_student_repository import SQLiteStudentRepository

MON = datetime(2025, 3, 10, 8, 0)


@pytest.fixture
def services(seeded_db):
    attendance = SQLiteAttendanceRepository(seeded_db)
    students = SQLiteStudentRepository(seeded_db)
    return AttendanceService(attendance, students), AttendanceReportService(attendance, students)


def _complete(svc: AttendanceService, student_id: str, now: datetime):
    svc.record_scan(student_id, "entry", "present", now=now)
    svc.record_scan(student_id, "exit", "present", now=now + timedelta(hours=6))


def test_percent_rounds_halves_up():
    assert percent(1, 2) == 50
    assert percent(1, 8) == 13
    assert percent(2, 3) == 67
    assert percent(0, 0) == 0


def test_period_summary_counts_only_complete_days_as_attended(services):
    svc, reports = services
    for day in range(3):
        _complete(svc, "1", MON + timedelta(days=day))
    svc.record_scan("2", "entry", "present", now=MON)
    svc.record_scan("2", "entry", "absent", now=MON + timedelta(days=1))

    summary = reports.period_summary(start=date(2025, 3, 10), end=date(2025, 3, 12), teacher_id="t1")
    rows = {r["student_id"]: r for r in summary.rows}

    assert rows["1"]["percentage"] == 100
    assert rows["2"] == {
        "student_id": "2",
        "name": "Priya Sharma",
        "roll_number": "502",
        "present": 0,
        "absent": 1,
        "total": 2,
        "percentage": 0,
    }
    assert summary.working_days == 3
    assert summary.average_attendance == 60
    assert reports.period_summary(start=date(2025, 3, 10), end=date(2025, 3, 12), teacher_id="t2").rows == []


def test_low_attendance_sorted_ascending(services):
    svc, reports = services
    for day in range(4):
        now = MON + timedelta(days=day)
        _complete(svc, "1", now)
        if day < 2:
            _complete(svc, "2", now)
        else:
            svc.record_scan("2", "entry", "absent", now=now)
        if day == 0:
            _complete(svc, "3", now)
        else:
            svc.record_scan("3", "entry", "absent", now=now)

    low = reports.low_attendance(start=date(2025, 3, 10), end=date(2025, 3, 13), threshold=75)

    assert [(r["student_id"], r["percentage"]) for r in low] == [("3", 25), ("2", 50)]


def test_meal_counts_per_date(services):
    svc, reports = services
    _complete(svc, "1", MON)
    _complete(svc, "2", MON)
    svc.record_scan("3", "entry", "present", now=MON)
    _complete(svc, "1", MON + timedelta(days=1))

    assert reports.meal_counts(start=date(2025, 3, 1), end=date(2025, 3, 31)) == {
        "2025-03-10": 2,
        "2025-03-11": 1,
    }


def test_student_history_newest_first(services):
    svc, reports = services
    _complete(svc, "1", MON)
    svc.record_scan("1", "entry", "absent", now=MON + timedelta(days=1))

    history = reports.student_history("1", limit=30)

    assert [h["date"] for h in history] == ["2025-03-11", "2025-03-10"]
    assert [h["status"] for h in history] == ["absent", "complete"]
    assert history[1]["entry_time"] == "08:00:00"
    assert history[1]["synced"] is False


def test_student_history_validation(services):
    _, reports = services

    with pytest.raises(StudentNotFound):
        reports.student_history("404")
    with pytest.raises(StudentNotFound):
        reports.student_history("1", teacher_id="t2")
    with pytest.raises(ValidationError):
        reports.student_history("1", limit=0)
    with pytest.raises(ValidationError):
        reports.period_summary(start=date(2025, 3, 2), end=date(2025, 3, 1))
