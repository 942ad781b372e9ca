from __future__ import annotations

from datetime import time

import pytest

from qr_attendance.attendance.model import AttendanceRecord
from qr_attendance.core.enums import CaptureKind
from qr_attendance.core.exceptions import StorageUnavailableError
from qr_attendance.scanning.outcomes import (
    AlreadyComplete,
    AlreadyTimedInDuringTimeInWindow,
    InvalidPayload,
    OutsideWindow,
    ReadyToRecord,
    StudentNotFound,
)
from qr_attendance.scanning.resolver import ScanResolver
from qr_attendance.students.service import StudentDirectory

from conftest import DAY, at


@pytest.fixture
def resolver(students_repo, attendance_repo):
    return ScanResolver(StudentDirectory(students_repo).find_by_payload, attendance_repo.get_for_student_and_date)


def test_unknown_payload_is_student_not_found(resolver):
    outcome = resolver.resolve("ZZZZ", now=at(8, 0))
    assert type(outcome) is StudentNotFound
    assert outcome.payload == "ZZZZ"


@pytest.mark.parametrize("raw", ["", "   ", "\n\t"])
def test_blank_payload_is_invalid_not_unknown(resolver, students_repo, raw):
    outcome = resolver.resolve(raw, now=at(8, 0))

    assert isinstance(outcome, InvalidPayload)
    assert isinstance(outcome, StudentNotFound)
    assert students_repo.lookups == 0


def test_payload_is_trimmed_and_matched_by_school_id(resolver, student):
    outcome = resolver.resolve("  2021-00123 \n", now=at(8, 0))
    assert outcome == ReadyToRecord(student=student, kind=CaptureKind.TIME_IN)


def test_payload_falls_back_to_internal_id(resolver, student):
    outcome = resolver.resolve("stu-001", now=at(8, 0))
    assert isinstance(outcome, ReadyToRecord)
    assert outcome.student == student


def test_outside_window_before_seven(resolver, student):
    outcome = resolver.resolve("2021-00123", now=at(6, 59, 59))
    assert outcome == OutsideWindow(student=student, scanned_at=at(6, 59, 59))


def test_lunch_break_is_outside_window(resolver):
    assert isinstance(resolver.resolve("2021-00123", now=at(11, 30, 1)), OutsideWindow)
    assert isinstance(resolver.resolve("2021-00123", now=at(12, 59, 59)), OutsideWindow)


def test_first_scan_at_seven_is_ready_for_time_in(resolver):
    outcome = resolver.resolve("2021-00123", now=at(7, 0, 0))
    assert isinstance(outcome, ReadyToRecord)
    assert outcome.kind is CaptureKind.TIME_IN
    assert outcome.existing_record is None


def test_first_scan_in_afternoon_is_ready_for_bare_time_out(resolver):
    outcome = resolver.resolve("2021-00123", now=at(13, 0))
    assert isinstance(outcome, ReadyToRecord)
    assert outcome.kind is CaptureKind.TIME_OUT
    assert outcome.existing_record is None


def test_timed_in_student_rescanned_in_morning_is_rejected(resolver, attendance_repo):
    rec = attendance_repo.put(AttendanceRecord(student_id="stu-001", attendance_date=DAY, time_in=time(7, 10)))

    outcome = resolver.resolve("2021-00123", now=at(9, 0))

    assert isinstance(outcome, AlreadyTimedInDuringTimeInWindow)
    assert outcome.record == rec


def test_timed_in_student_in_afternoon_is_ready_for_time_out(resolver, attendance_repo):
    rec = attendance_repo.put(AttendanceRecord(student_id="stu-001", attendance_date=DAY, time_in=time(7, 10)))

    outcome = resolver.resolve("2021-00123", now=at(14, 0))

    assert isinstance(outcome, ReadyToRecord)
    assert outcome.kind is CaptureKind.TIME_OUT
    assert outcome.existing_record == rec


@pytest.mark.parametrize("hour", [8, 14])
def test_complete_record_is_already_complete_in_either_window(resolver, attendance_repo, hour):
    attendance_repo.put(
        AttendanceRecord(student_id="stu-001", attendance_date=DAY, time_in=time(7, 10), time_out=time(13, 30))
    )
    assert isinstance(resolver.resolve("2021-00123", now=at(hour, 0)), AlreadyComplete)


def test_bare_time_out_closes_the_day(resolver, attendance_repo):
    attendance_repo.put(AttendanceRecord(student_id="stu-001", attendance_date=DAY, time_out=time(13, 30)))
    assert isinstance(resolver.resolve("2021-00123", now=at(15, 0)), AlreadyComplete)


def test_yesterdays_record_does_not_count(resolver, attendance_repo):
    attendance_repo.put(
        AttendanceRecord(student_id="stu-001", attendance_date=DAY.replace(day=2), time_in=time(7, 10))
    )
    outcome = resolver.resolve("2021-00123", now=at(9, 0))
    assert isinstance(outcome, ReadyToRecord)


def test_student_lookup_happens_before_window_check(students_repo, attendance_repo):
    resolver = ScanResolver(StudentDirectory(students_repo).find_by_payload, attendance_repo.get_for_student_and_date)
    assert type(resolver.resolve("ZZZZ", now=at(3, 0))) is StudentNotFound


def test_lookup_failure_propagates(students_repo):
    def broken(student_id, day):
        raise StorageUnavailableError("down")

    resolver = ScanResolver(StudentDirectory(students_repo).find_by_payload, broken)
    with pytest.raises(StorageUnavailableError):
        resolver.resolve("2021-00123", now=at(8, 0))
