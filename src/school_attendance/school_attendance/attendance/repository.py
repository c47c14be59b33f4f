from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Mapping, Optional, Protocol, Sequence

from ..core.enums import Outcome
from ..students.model import CounterDelta, Student
from .model import AttendanceEvent


class AttendanceRepository(Protocol):
    """Local durable store.

    Writes must survive a process restart once the call returns. Every write
    leaves the row unacknowledged until the sync coordinator confirms it.
    """

    def get_for_student_and_date(self, student_id: str, event_date: date) -> Optional[AttendanceEvent]:
        raise NotImplementedError

    def insert(self, event: AttendanceEvent, *, delta: CounterDelta = CounterDelta()) -> AttendanceEvent:
        raise NotImplementedError

    def save_event(
        self,
        event: AttendanceEvent,
        *,
        delta: CounterDelta,
        expected_revision: Optional[int] = None,
    ) -> AttendanceEvent:
        """Upsert the (student, date) record and apply `delta` to the student's
        counters in one transaction. expected_revision=None means no record is
        expected to exist yet."""
        raise NotImplementedError

    def query(self, event_date: date) -> Sequence[AttendanceEvent]:
        raise NotImplementedError

    def query_range(
        self,
        *,
        start: date,
        end: date,
        student_ids: Optional[Iterable[str]] = None,
    ) -> Sequence[AttendanceEvent]:
        raise NotImplementedError

    def get_recent_for_student(self, student_id: str, limit: int) -> Sequence[AttendanceEvent]:
        raise NotImplementedError

    def query_unacknowledged(self) -> Sequence[AttendanceEvent]:
        raise NotImplementedError

    def count_unacknowledged(self) -> int:
        raise NotImplementedError

    def mark_acknowledged(self, ids: Iterable[int], *, revisions: Optional[Mapping[int, int]] = None) -> int:
        raise NotImplementedError


class RemoteAttendanceStore(Protocol):
    """Server-side store. Upserts are keyed by (student_id, date) and idempotent."""

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
        raise NotImplementedError

    def adjust_student_counters(
        self,
        *,
        student_id: str,
        present_delta: int,
        absent_delta: int,
        total_delta: int,
    ) -> bool:
        raise NotImplementedError

    def push_events(self, events: Sequence[AttendanceEvent]) -> int:
        """Apply a batch in one transaction: all rows or none."""
        raise NotImplementedError

    def list_events(
        self,
        event_date: date,
        *,
        student_id: Optional[str] = None,
        teacher_id: Optional[str] = None,
    ) -> Sequence[AttendanceEvent]:
        raise NotImplementedError

    def list_students(self, teacher_id: Optional[str]) -> Sequence[Student]:
        raise NotImplementedError

    def server_now(self) -> datetime:
        raise NotImplementedError

    def ping(self) -> bool:
        raise NotImplementedError
