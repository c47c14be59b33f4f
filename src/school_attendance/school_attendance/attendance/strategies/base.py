from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...core.enums import DerivedStatus, MarkOutcome, Outcome
from ...core.exceptions import AlreadyMarked
from ..model import AttendanceEvent
from ..policy import ScanPolicy


@dataclass(frozen=True)
class ScanDecision:
    outcome: Outcome
    entry_time: Optional[datetime] = None
    exit_time: Optional[datetime] = None


class ScanStrategy(ABC):
    """Strategy Pattern: decide the next record state for one kind of scan.

    Implementations raise a ValidationError subclass when the scan is not
    allowed from the current status; they never touch storage.
    """

    @abstractmethod
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
        raise NotImplementedError

    @staticmethod
    def reject_terminal(status: DerivedStatus, student_id: str) -> None:
        if status == DerivedStatus.COMPLETE:
            raise AlreadyMarked(f"Attendance already complete today for student {student_id}")
        if status == DerivedStatus.ABSENT:
            raise AlreadyMarked(
                f"Student {student_id} is already marked absent today; use edit to change it"
            )
