from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import DerivedStatus, MarkOutcome, Outcome
from ...core.exceptions import AlreadyMarked, InvalidTransition
from ..model import AttendanceEvent
from ..policy import ScanPolicy
from .base import ScanDecision, ScanStrategy


class EntryScanStrategy(ScanStrategy):
    """Entry scan under double verification."""

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
            return ScanDecision(outcome=Outcome.ENTRY_ONLY, entry_time=now)

        self.reject_terminal(status, student_id)

        if status == DerivedStatus.ENTRY_ONLY:
            raise AlreadyMarked(f"Entry already marked today for student {student_id}")

        # ExitOnly: the missing entry completes the day.
        if outcome == MarkOutcome.ABSENT:
            raise InvalidTransition(
                f"Exit already recorded for student {student_id}; use edit to mark absent"
            )
        return ScanDecision(outcome=Outcome.COMPLETE, entry_time=now, exit_time=current.exit_time)
