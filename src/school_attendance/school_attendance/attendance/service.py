from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import AttendanceClock, date_key
from ..common.validators import require_enum, require_non_empty
from ..core.enums import PRESENT_STATUSES, DerivedStatus, MarkOutcome, Outcome, ScanKind
from ..core.exceptions import NoOpChange, NoRecordToday, StudentNotFound, ValidationError
from ..students.model import Student
from ..students.repository import StudentRepository
from .factory import ScanStrategyFactory
from .model import AttendanceEvent, AttendanceStats, MutationResult
from .policy import ScanPolicy
from .repository import AttendanceRepository
from .status import aggregate, counter_delta, derive_status

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StudentDayRow:
    student: Student
    event: Optional[AttendanceEvent]
    status: DerivedStatus

    def as_dict(self) -> dict:
        e = self.event
        return {
            "student_id": self.student.student_id,
            "name": self.student.name,
            "roll_number": self.student.roll_number,
            "status": self.status.value,
            "entry_time": e.entry_time.isoformat() if e and e.entry_time else None,
            "exit_time": e.exit_time.isoformat() if e and e.exit_time else None,
            "synced": bool(e.acknowledged) if e else None,
        }


class AttendanceService:
    """Event Mutation Service.

    recordScan/editToday for the current day only. Each accepted mutation is one
    local write carrying the record and the counter delta together; the sync
    coordinator ships it to the remote store later.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        *,
        policy: ScanPolicy | None = None,
        strategy_factory: ScanStrategyFactory | None = None,
        clock: AttendanceClock | None = None,
    ):
        self._attendance = attendance
        self._students = students
        self._policy = policy or ScanPolicy()
        self._factory = strategy_factory or ScanStrategyFactory()
        self._clock = clock or AttendanceClock()

    @property
    def policy(self) -> ScanPolicy:
        return self._policy

    def today(self) -> date:
        return self._clock.today()

    def _require_student(self, student_id: str, teacher_id: Optional[str]) -> Student:
        student = self._students.get_by_id(student_id)
        if not student or not student.is_owned_by(teacher_id):
            raise StudentNotFound(student_id)
        return student

    def record_scan(
        self,
        student_id: str,
        kind: ScanKind | str,
        outcome: MarkOutcome | str,
        *,
        teacher_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> MutationResult:
        student_id = require_non_empty(str(student_id or ""), "student_id")
        kind = require_enum(kind, ScanKind, "kind")
        outcome = require_enum(outcome, MarkOutcome, "outcome")
        now = now or self._clock.now()
        today = self._clock.today(now)

        self._require_student(student_id, teacher_id)
        current = self._attendance.get_for_student_and_date(student_id, today)
        status = derive_status(current)

        strategy = self._factory.for_scan(kind=kind, policy=self._policy)
        try:
            decision = strategy.decide(
                student_id=student_id,
                current=current,
                status=status,
                outcome=outcome,
                now=now,
                policy=self._policy,
            )
        except ValidationError as e:
            logger.debug("Scan rejected student=%s kind=%s outcome=%s: %s", student_id, kind.value, outcome.value, e)
            raise

        event = AttendanceEvent(
            student_id=student_id,
            event_date=today,
            outcome=decision.outcome,
            entry_time=decision.entry_time,
            exit_time=decision.exit_time,
            marked_by=teacher_id,
        )
        delta = counter_delta(current.outcome if current else None, decision.outcome)
        saved = self._attendance.save_event(
            event,
            delta=delta,
            expected_revision=current.revision if current else None,
        )
        new_status = derive_status(saved)

        logger.info(
            "Scan recorded student=%s date=%s kind=%s %s -> %s",
            student_id,
            date_key(today),
            kind.value,
            status.value,
            new_status.value,
        )
        return MutationResult(
            event=saved,
            previous_status=status,
            status=new_status,
            message=self._scan_message(kind, new_status),
            created=current is None,
            details={"delta": delta},
        )

    def edit_today(
        self,
        student_id: str,
        new_outcome: MarkOutcome | str,
        *,
        teacher_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> MutationResult:
        student_id = require_non_empty(str(student_id or ""), "student_id")
        new_outcome = require_enum(new_outcome, MarkOutcome, "new_outcome")
        now = now or self._clock.now()
        today = self._clock.today(now)

        self._require_student(student_id, teacher_id)
        current = self._attendance.get_for_student_and_date(student_id, today)
        status = derive_status(current)

        if current is None or status == DerivedStatus.UNMARKED:
            logger.debug("Edit rejected student=%s: no record today", student_id)
            raise NoRecordToday(student_id)

        is_present = status in PRESENT_STATUSES
        is_absent = status == DerivedStatus.ABSENT
        if (new_outcome == MarkOutcome.PRESENT and is_present) or (new_outcome == MarkOutcome.ABSENT and is_absent):
            logger.debug("Edit rejected student=%s: already %s", student_id, new_outcome.value)
            raise NoOpChange(f"Student {student_id} is already marked as {new_outcome.value}")

        if new_outcome == MarkOutcome.ABSENT:
            event = AttendanceEvent(student_id=student_id, event_date=today, outcome=Outcome.ABSENT, marked_by=teacher_id)
        elif self._policy.require_double_verification:
            event = AttendanceEvent(
                student_id=student_id,
                event_date=today,
                outcome=Outcome.ENTRY_ONLY,
                entry_time=now,
                marked_by=teacher_id,
            )
        else:
            event = AttendanceEvent(
                student_id=student_id,
                event_date=today,
                outcome=Outcome.COMPLETE,
                entry_time=now,
                exit_time=now,
                marked_by=teacher_id,
            )

        delta = counter_delta(current.outcome, event.outcome)
        saved = self._attendance.save_event(event, delta=delta, expected_revision=current.revision)
        new_status = derive_status(saved)

        logger.info(
            "Attendance edited student=%s date=%s %s -> %s",
            student_id,
            date_key(today),
            status.value,
            new_status.value,
        )
        return MutationResult(
            event=saved,
            previous_status=status,
            status=new_status,
            message=f"Attendance changed to {new_outcome.value}",
            details={"delta": delta},
        )

    def get_today_status(self, student_id: str, *, now: Optional[datetime] = None) -> DerivedStatus:
        today = self._clock.today(now)
        return derive_status(self._attendance.get_for_student_and_date(student_id, today))

    def today_rows(self, *, teacher_id: Optional[str] = None, now: Optional[datetime] = None) -> list[StudentDayRow]:
        today = self._clock.today(now)
        roster = self._students.list_for_teacher(teacher_id)
        events = {e.student_id: e for e in self._attendance.query(today)}
        return [
            StudentDayRow(student=s, event=events.get(s.student_id), status=derive_status(events.get(s.student_id)))
            for s in roster
        ]

    def today_stats(self, *, teacher_id: Optional[str] = None, now: Optional[datetime] = None) -> AttendanceStats:
        today = self._clock.today(now)
        roster = self._students.list_for_teacher(teacher_id)
        events = {e.student_id: e for e in self._attendance.query(today)}
        return aggregate(
            roster,
            events,
            exit_only_counts_as_marked=self._policy.exit_only_counts_as_marked,
        )

    @staticmethod
    def _scan_message(kind: ScanKind, status: DerivedStatus) -> str:
        return {
            DerivedStatus.ENTRY_ONLY: "Entry marked; exit scan pending",
            DerivedStatus.EXIT_ONLY: "Exit marked; entry scan pending",
            DerivedStatus.COMPLETE: "Attendance complete for today",
            DerivedStatus.ABSENT: "Marked absent",
        }.get(status, f"{kind.value.capitalize()} recorded")
