from __future__ import annotations

from datetime import date, time
from typing import Any, Dict, Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, normalize_mysql_time
from .model import AttendanceRecord
from .repository import AttendanceRepository

_SELECT = """
    SELECT id, student_id, attendance_date, time_in, time_out, recorded_by
    FROM attendance_records
    WHERE student_id=%s AND attendance_date=%s
"""


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=int(r["id"]),
        student_id=str(r["student_id"]),
        attendance_date=r["attendance_date"],
        time_in=normalize_mysql_time(r.get("time_in")),
        time_out=normalize_mysql_time(r.get("time_out")),
        recorded_by=r.get("recorded_by"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_student_and_date(self, student_id: str, attendance_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT, (student_id, attendance_date))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def insert_record(
        self,
        *,
        student_id: str,
        attendance_date: date,
        time_in: Optional[time],
        time_out: Optional[time],
        recorded_by: str,
    ) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(student_id, attendance_date, time_in, time_out, recorded_by)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (student_id, attendance_date, time_in, time_out, recorded_by),
            )
            return AttendanceRecord(
                record_id=int(cur.lastrowid),
                student_id=student_id,
                attendance_date=attendance_date,
                time_in=time_in,
                time_out=time_out,
                recorded_by=recorded_by,
            )

    def set_time_in_if_absent(self, *, student_id: str, attendance_date: date, time_in: time) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET time_in=%s
                WHERE student_id=%s AND attendance_date=%s AND time_in IS NULL
                """,
                (time_in, student_id, attendance_date),
            )
            if cur.rowcount != 1:
                return None
            cur.execute(_SELECT, (student_id, attendance_date))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def set_time_out_if_absent(self, *, student_id: str, attendance_date: date, time_out: time) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET time_out=%s
                WHERE student_id=%s AND attendance_date=%s
                  AND time_out IS NULL
                """,
                (time_out, student_id, attendance_date),
            )
            if cur.rowcount != 1:
                return None
            cur.execute(_SELECT, (student_id, attendance_date))
            r = fetchone(cur)
            return _to_record(r) if r else None
