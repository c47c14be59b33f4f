from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import DerivedStatus, MarkOutcome, Outcome
from ...core.exceptions import InvalidTransition
from ..model import AttendanceEvent
from ..policy import ScanPolicy
from .base import ScanDecision, ScanStrategy


class SingleTapStrategy(ScanStrategy):
    """One Present tap completes the day (double verification off).

    Both timestamps are set to the tap time. Records left half-done by an
    earlier double-verification session are completed by the next tap.
    """

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
            return ScanDecision(outcome=Outcome.COMPLETE, entry_time=now, exit_time=now)

        self.reject_terminal(status, student_id)

        if outcome == MarkOutcome.ABSENT:
            raise InvalidTransition(
                f"Presence already recorded for student {student_id}; use edit to mark absent"
            )
        return ScanDecision(
            outcome=Outcome.COMPLETE,
            entry_time=current.entry_time or now,
            exit_time=current.exit_time or now,
        )
