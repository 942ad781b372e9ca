from __future__ import annotations

from datetime import date, time
from typing import Optional, Protocol

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Attendance store with a uniqueness constraint on (student_id, attendance_date).

    Implementations raise DuplicateRecordError from `insert_record` when the
    row already exists, and StorageUnavailableError on transport failures.
    """

    def get_for_student_and_date(self, student_id: str, attendance_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def insert_record(
        self,
        *,
        student_id: str,
        attendance_date: date,
        time_in: Optional[time],
        time_out: Optional[time],
        recorded_by: str,
    ) -> AttendanceRecord:
        raise NotImplementedError

    def set_time_in_if_absent(self, *, student_id: str, attendance_date: date, time_in: time) -> Optional[AttendanceRecord]:
        """Set time_in only while it is NULL. Returns None when nothing changed."""

        raise NotImplementedError

    def set_time_out_if_absent(self, *, student_id: str, attendance_date: date, time_out: time) -> Optional[AttendanceRecord]:
        """Set time_out only while it is NULL. Returns None when nothing changed.

        Normally the row already has time_in. A row with both fields empty is
        filled too, the same as inserting a bare time-out.
        """

        raise NotImplementedError
