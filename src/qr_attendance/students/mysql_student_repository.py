from __future__ import annotations

from typing import Any, Dict, Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Student
from .repository import StudentRepository


def _to_student(row: Dict[str, Any]) -> Student:
    return Student(
        id=str(row["id"]),
        display_name=row["full_name"],
        school_id=str(row["school_id"]),
        year_level=row.get("year_level"),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_school_id(self, school_id: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, school_id, full_name, year_level
                FROM students
                WHERE school_id=%s
                """,
                (school_id,),
            )
            row = fetchone(cur)
            return _to_student(row) if row else None

    def get_by_id(self, student_id: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, school_id, full_name, year_level
                FROM students
                WHERE id=%s
                """,
                (student_id,),
            )
            row = fetchone(cur)
            return _to_student(row) if row else None
