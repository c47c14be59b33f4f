from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Student
from .repository import StudentRepository

_SELECT = """
    SELECT student_id, name, roll_number, class_id, section_id, school_name, teacher_id,
           present_days, absent_days, total_days
    FROM students
"""


def _to_student(r: dict) -> Student:
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


class MySQLStudentRepository(StudentRepository):
    """Server-side roster (authoritative counters)."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, student_id: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE student_id=%s", (str(student_id),))
            r = fetchone(cur)
            return _to_student(r) if r else None

    def list_for_teacher(self, teacher_id: Optional[str]) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            if teacher_id is None:
                cur.execute(_SELECT + " ORDER BY roll_number")
            else:
                cur.execute(_SELECT + " WHERE teacher_id=%s ORDER BY roll_number", (str(teacher_id),))
            return [_to_student(r) for r in fetchall(cur)]
