from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..database.sqlite_base import LocalDatabase, local_cursor, row_to_dict, rows_to_dicts
from .model import Student
from .repository import RosterSnapshotRepository

_COLUMNS = (
    "student_id, name, roll_number, class_id, section_id, school_name, teacher_id, "
    "present_days, absent_days, total_days"
)


def student_from_row(r: dict) -> Student:
    return Student(
        student_id=str(r["student_id"]),
        name=r["name"],
        roll_number=str(r["roll_number"]),
        class_id=r.get("class_id") or "",
        section_id=r.get("section_id") or "",
        school_name=r.get("school_name") or "",
        teacher_id=r.get("teacher_id"),
        present_days=int(r.get("present_days") or 0),
        absent_days=int(r.get("absent_days") or 0),
        total_days=int(r.get("total_days") or 0),
    )


class SQLiteStudentRepository(RosterSnapshotRepository):
    """Local roster snapshot used while offline."""

    def __init__(self, db: LocalDatabase):
        self._db = db

    def get_by_id(self, student_id: str) -> Optional[Student]:
        with local_cursor(self._db) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE student_id=?", (str(student_id),))
            r = row_to_dict(cur.fetchone())
            return student_from_row(r) if r else None

    def list_for_teacher(self, teacher_id: Optional[str]) -> Sequence[Student]:
        with local_cursor(self._db) as (_, cur):
            if teacher_id is None:
                cur.execute(f"SELECT {_COLUMNS} FROM students ORDER BY roll_number")
            else:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM students WHERE teacher_id=? ORDER BY roll_number",
                    (str(teacher_id),),
                )
            return [student_from_row(r) for r in rows_to_dicts(cur.fetchall())]

    def replace_roster(
        self,
        students: Iterable[Student],
        *,
        teacher_id: Optional[str],
        only_if_drained: bool = False,
    ) -> Optional[int]:
        """Overwrite the snapshot (including counters) with the server's roster.

        Students that left the teacher's roster are detached, not deleted, so
        their local history stays readable.
        """

        students = list(students)
        with local_cursor(self._db, immediate=True) as (_, cur):
            if only_if_drained:
                cur.execute("SELECT COUNT(*) FROM attendance_events WHERE acknowledged=0")
                if int(cur.fetchone()[0]) > 0:
                    return None

            keep = [s.student_id for s in students]
            if teacher_id is not None:
                placeholders = ",".join("?" for _ in keep) or "''"
                cur.execute(
                    f"UPDATE students SET teacher_id=NULL WHERE teacher_id=? AND student_id NOT IN ({placeholders})",
                    (str(teacher_id), *keep),
                )
            for s in students:
                cur.execute(
                    f"""
                    INSERT INTO students({_COLUMNS}) VALUES(?,?,?,?,?,?,?,?,?,?)
                    ON CONFLICT(student_id) DO UPDATE SET
                        name=excluded.name,
                        roll_number=excluded.roll_number,
                        class_id=excluded.class_id,
                        section_id=excluded.section_id,
                        school_name=excluded.school_name,
                        teacher_id=excluded.teacher_id,
                        present_days=excluded.present_days,
                        absent_days=excluded.absent_days,
                        total_days=excluded.total_days
                    """,
                    (
                        s.student_id,
                        s.name,
                        s.roll_number,
                        s.class_id,
                        s.section_id,
                        s.school_name,
                        s.teacher_id,
                        int(s.present_days),
                        int(s.absent_days),
                        int(s.total_days),
                    ),
                )
        return len(students)
