from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Student:
    """Domain entity: a student on a teacher's roster.

    present_days/absent_days/total_days are a materialized cache of the event
    history and are only changed together with an attendance event write.
    """

    student_id: str
    name: str
    roll_number: str
    class_id: str = ""
    section_id: str = ""
    school_name: str = ""
    teacher_id: Optional[str] = None
    present_days: int = 0
    absent_days: int = 0
    total_days: int = 0

    def is_owned_by(self, teacher_id: Optional[str]) -> bool:
        """Ownership check. With no teacher (local-only mode) the roster is shared."""
        if teacher_id is None:
            return True
        return self.teacher_id == teacher_id


@dataclass(frozen=True)
class CounterDelta:
    present: int = 0
    absent: int = 0
    total: int = 0

    @property
    def is_zero(self) -> bool:
        return self.present == 0 and self.absent == 0 and self.total == 0
