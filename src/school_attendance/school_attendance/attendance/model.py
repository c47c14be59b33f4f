from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import DerivedStatus, Outcome


@dataclass(frozen=True)
class AttendanceEvent:
    """Domain entity: the single attendance record of a student for one date.

    event_id is the local store id (None before it is persisted). revision grows
    on every local write and lets the sync coordinator acknowledge only the
    version it actually pushed.
    """

    student_id: str
    event_date: date
    outcome: Outcome
    entry_time: Optional[datetime] = None
    exit_time: Optional[datetime] = None
    marked_by: Optional[str] = None
    acknowledged: bool = False
    event_id: Optional[int] = None
    revision: int = 1

    def is_consistent(self) -> bool:
        has_entry = self.entry_time is not None
        has_exit = self.exit_time is not None
        if self.outcome == Outcome.ABSENT:
            return not has_entry and not has_exit
        if self.outcome == Outcome.COMPLETE:
            return has_entry and has_exit
        if self.outcome == Outcome.ENTRY_ONLY:
            return has_entry and not has_exit
        return has_exit and not has_entry


@dataclass(frozen=True)
class AttendanceStats:
    """Aggregate counts for a roster on one date.

    exit_only is reported on its own; whether it is also folded into not_marked
    depends on the scan policy.
    """

    total: int = 0
    complete: int = 0
    entry_only: int = 0
    exit_only: int = 0
    absent: int = 0
    not_marked: int = 0

    def as_dict(self) -> dict:
        return {
            "total": self.total,
            "complete": self.complete,
            "entryOnly": self.entry_only,
            "exitOnly": self.exit_only,
            "absent": self.absent,
            "notMarked": self.not_marked,
        }


@dataclass(frozen=True)
class MutationResult:
    """What a scan/edit produced, for the caller to display."""

    event: AttendanceEvent
    previous_status: DerivedStatus
    status: DerivedStatus
    message: str
    created: bool = False
    details: dict = field(default_factory=dict)
