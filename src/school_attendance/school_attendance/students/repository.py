from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from .model import Student


class StudentRepository(Protocol):
    """Roster provider.

    Note (DIP): services depend on this interface, not on a concrete database.
    Counter columns are written only through the attendance repositories.
    """

    def get_by_id(self, student_id: str) -> Optional[Student]:
        raise NotImplementedError

    def list_for_teacher(self, teacher_id: Optional[str]) -> Sequence[Student]:
        """Students owned by teacher_id; every student when teacher_id is None."""
        raise NotImplementedError


class RosterSnapshotRepository(StudentRepository, Protocol):
    def replace_roster(
        self,
        students: Iterable[Student],
        *,
        teacher_id: Optional[str],
        only_if_drained: bool = False,
    ) -> Optional[int]:
        """Replace the local snapshot. With only_if_drained nothing is written
        (and None is returned) while unacknowledged attendance events exist."""
        raise NotImplementedError
