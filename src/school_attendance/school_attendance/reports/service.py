from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..attendance.status import derive_status
from ..common.datetime_utils import date_key
from ..core.constants import DEFAULT_HISTORY_LIMIT, DEFAULT_LOW_ATTENDANCE_THRESHOLD
from ..core.enums import DerivedStatus
from ..core.exceptions import StudentNotFound, ValidationError
from ..students.repository import StudentRepository


def percent(part: int, whole: int) -> int:
    """Whole-number percentage, halves rounded up. 0 for an empty period."""
    if whole <= 0:
        return 0
    return (200 * int(part) + int(whole)) // (2 * int(whole))


@dataclass(frozen=True)
class PeriodSummary:
    rows: list[dict]
    average_attendance: int
    working_days: int

    def as_dict(self) -> dict:
        return {
            "rows": self.rows,
            "averageAttendance": self.average_attendance,
            "workingDays": self.working_days,
        }


class AttendanceReportService:
    """Read-only views over the local store.

    A record counts as attended only when it is Complete; entry-only and
    exit-only days count toward the total but not toward attendance.
    """

    def __init__(self, attendance: AttendanceRepository, students: StudentRepository):
        self._attendance = attendance
        self._students = students

    def student_history(
        self,
        student_id: str,
        *,
        limit: int = DEFAULT_HISTORY_LIMIT,
        teacher_id: Optional[str] = None,
    ) -> list[dict]:
        student = self._students.get_by_id(student_id)
        if not student or not student.is_owned_by(teacher_id):
            raise StudentNotFound(student_id)
        if int(limit) <= 0:
            raise ValidationError("limit must be positive")

        rows = self._attendance.get_recent_for_student(student_id, int(limit))
        return [
            {
                "date": date_key(r.event_date),
                "status": derive_status(r).value,
                "entry_time": r.entry_time.strftime("%H:%M:%S") if r.entry_time else None,
                "exit_time": r.exit_time.strftime("%H:%M:%S") if r.exit_time else None,
                "synced": r.acknowledged,
            }
            for r in rows
        ]

    def period_summary(self, *, start: date, end: date, teacher_id: Optional[str] = None) -> PeriodSummary:
        if end < start:
            raise ValidationError("end must not be before start")

        roster = {s.student_id: s for s in self._students.list_for_teacher(teacher_id)}
        records = self._attendance.query_range(start=start, end=end, student_ids=list(roster))

        summary_map: dict[str, dict] = {}
        dates: set[date] = set()
        attended = 0
        for r in records:
            dates.add(r.event_date)
            status = derive_status(r)

            s = summary_map.get(r.student_id)
            if not s:
                student = roster[r.student_id]
                s = {
                    "student_id": student.student_id,
                    "name": student.name,
                    "roll_number": student.roll_number,
                    "present": 0,
                    "absent": 0,
                    "total": 0,
                }
                summary_map[r.student_id] = s
            s["total"] += 1
            if status == DerivedStatus.COMPLETE:
                s["present"] += 1
                attended += 1
            elif status == DerivedStatus.ABSENT:
                s["absent"] += 1

        rows = []
        for s in summary_map.values():
            rows.append({**s, "percentage": percent(s["present"], s["total"])})
        rows.sort(key=lambda x: x["roll_number"])

        return PeriodSummary(
            rows=rows,
            average_attendance=percent(attended, len(records)),
            working_days=len(dates),
        )

    def low_attendance(
        self,
        *,
        start: date,
        end: date,
        teacher_id: Optional[str] = None,
        threshold: int = DEFAULT_LOW_ATTENDANCE_THRESHOLD,
    ) -> list[dict]:
        summary = self.period_summary(start=start, end=end, teacher_id=teacher_id)
        low = [r for r in summary.rows if r["percentage"] < int(threshold)]
        low.sort(key=lambda x: x["percentage"])
        return low

    def meal_counts(self, *, start: date, end: date, teacher_id: Optional[str] = None) -> dict[str, int]:
        """Students with a Complete day, per date (midday meal headcount)."""

        if end < start:
            raise ValidationError("end must not be before start")

        roster_ids = [s.student_id for s in self._students.list_for_teacher(teacher_id)]
        counts: dict[str, int] = {}
        for r in self._attendance.query_range(start=start, end=end, student_ids=roster_ids):
            if derive_status(r) == DerivedStatus.COMPLETE:
                key = date_key(r.event_date)
                counts[key] = counts.get(key, 0) + 1
        return dict(sorted(counts.items()))
