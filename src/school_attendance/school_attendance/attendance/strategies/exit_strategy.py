from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import DerivedStatus, MarkOutcome, Outcome
from ...core.exceptions import AlreadyMarked, EntryRequired, InvalidTransition
from ..model import AttendanceEvent
from ..policy import ScanPolicy
from .base import ScanDecision, ScanStrategy


class ExitScanStrategy(ScanStrategy):
    """Exit scan under double verification."""

    def decide(
        self,
        *,
        student_id: str,
        current: Optional[AttendanceEvent],
        status: DerivedStatus,
        outcome: MarkOutcome,
        now: datetime,
        policy: ScanPolicy,
    ) -> ScanDecision:
        if status == DerivedStatus.UNMARKED:
            if outcome == MarkOutcome.ABSENT:
                return ScanDecision(outcome=Outcome.ABSENT)
            if not policy.allow_exit_without_entry:
                raise EntryRequired(student_id)
            return ScanDecision(outcome=Outcome.EXIT_ONLY, exit_time=now)

        self.reject_terminal(status, student_id)

        if status == DerivedStatus.EXIT_ONLY:
            raise AlreadyMarked(f"Exit already marked today for student {student_id}")

        # EntryOnly
        if outcome == MarkOutcome.ABSENT:
            raise InvalidTransition(
                f"Entry already recorded for student {student_id}; use edit to mark absent"
            )
        return ScanDecision(outcome=Outcome.COMPLETE, entry_time=current.entry_time, exit_time=now)
