from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time
from typing import Optional

import pytest

from qr_attendance.attendance.model import AttendanceRecord
from qr_attendance.common.datetime_utils import FixedClock
from qr_attendance.container import wire
from qr_attendance.core.exceptions import DuplicateRecordError
from qr_attendance.students.model import Student

DAY = date(2025, 3, 3)


def at(hour: int, minute: int = 0, second: int = 0, day: date = DAY) -> datetime:
    return datetime.combine(day, time(hour, minute, second))


@dataclass
class InMemoryStudents:
    by_id: dict[str, Student] = field(default_factory=dict)
    lookups: int = 0

    def add(self, student: Student) -> Student:
        self.by_id[student.id] = student
        return student

    def get_by_school_id(self, school_id: str) -> Optional[Student]:
        self.lookups += 1
        return next((s for s in self.by_id.values() if s.school_id == school_id), None)

    def get_by_id(self, student_id: str) -> Optional[Student]:
        self.lookups += 1
        return self.by_id.get(student_id)


class InMemoryAttendance:
    """Store with a unique (student_id, attendance_date) key, like the real table."""

    def __init__(self):
        self._rows: dict[tuple[str, date], AttendanceRecord] = {}
        self._lock = threading.Lock()
        self._id = 0
        self.writes = 0

    def put(self, record: AttendanceRecord) -> AttendanceRecord:
        self._rows[(record.student_id, record.attendance_date)] = record
        return record

    def get_for_student_and_date(self, student_id: str, attendance_date: date) -> Optional[AttendanceRecord]:
        return self._rows.get((student_id, attendance_date))

    def insert_record(self, *, student_id, attendance_date, time_in, time_out, recorded_by) -> AttendanceRecord:
        with self._lock:
            key = (student_id, attendance_date)
            if key in self._rows:
                raise DuplicateRecordError(f"duplicate {key}")
            self._id += 1
            self.writes += 1
            rec = AttendanceRecord(
                record_id=self._id,
                student_id=student_id,
                attendance_date=attendance_date,
                time_in=time_in,
                time_out=time_out,
                recorded_by=recorded_by,
            )
            self._rows[key] = rec
            return rec

    def set_time_in_if_absent(self, *, student_id, attendance_date, time_in) -> Optional[AttendanceRecord]:
        with self._lock:
            rec = self._rows.get((student_id, attendance_date))
            if rec is None or rec.time_in is not None:
                return None
            self.writes += 1
            rec = self._rows[(student_id, attendance_date)] = replace(rec, time_in=time_in)
            return rec

    def set_time_out_if_absent(self, *, student_id, attendance_date, time_out) -> Optional[AttendanceRecord]:
        with self._lock:
            rec = self._rows.get((student_id, attendance_date))
            if rec is None or rec.time_out is not None:
                return None
            self.writes += 1
            rec = self._rows[(student_id, attendance_date)] = replace(rec, time_out=time_out)
            return rec


@pytest.fixture
def student() -> Student:
    return Student(id="stu-001", display_name="Juan Dela Cruz", school_id="2021-00123")


@pytest.fixture
def students_repo(student) -> InMemoryStudents:
    repo = InMemoryStudents()
    repo.add(student)
    return repo


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(at(8, 0))


@pytest.fixture
def container(students_repo, attendance_repo, clock):
    c = wire(students_repo=students_repo, attendance_repo=attendance_repo, clock=clock, timeout=2.0)
    yield c
    c.close()
