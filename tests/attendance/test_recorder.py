from __future__ import annotations

import threading
import time as _time
from datetime import time

import pytest

from qr_attendance.attendance.model import AttendanceRecord
from qr_attendance.attendance.recorder import AttendanceRecorder
from qr_attendance.common.timeouts import BoundedCaller
from qr_attendance.core.enums import CaptureKind
from qr_attendance.core.exceptions import AlreadyRecordedError, StorageTimeoutError, StorageUnavailableError

from conftest import DAY, InMemoryAttendance, at


def test_time_in_inserts_new_record(attendance_repo):
    rec = AttendanceRecorder(attendance_repo).record("s1", DAY, CaptureKind.TIME_IN, at(7, 10, 5))

    assert rec.time_in == time(7, 10, 5)
    assert rec.time_out is None
    assert rec.recorded_by == "sbo"
    assert attendance_repo.get_for_student_and_date("s1", DAY) == rec


def test_microseconds_are_dropped(attendance_repo):
    now = at(7, 10, 5).replace(microsecond=123456)
    rec = AttendanceRecorder(attendance_repo).record("s1", DAY, CaptureKind.TIME_IN, now)
    assert rec.time_in == time(7, 10, 5)


def test_time_out_falls_back_to_update_when_row_exists(attendance_repo):
    recorder = AttendanceRecorder(attendance_repo, recorded_by="officer-7")
    recorder.record("s1", DAY, CaptureKind.TIME_IN, at(7, 10))

    rec = recorder.record("s1", DAY, CaptureKind.TIME_OUT, at(14, 0))

    assert rec.time_in == time(7, 10)
    assert rec.time_out == time(14, 0)
    assert rec.recorded_by == "officer-7"


def test_bare_time_out_is_inserted(attendance_repo):
    rec = AttendanceRecorder(attendance_repo).record("s1", DAY, CaptureKind.TIME_OUT, at(13, 5))
    assert rec.time_in is None
    assert rec.time_out == time(13, 5)


def test_repeated_time_in_reports_already_recorded_and_keeps_first_value(attendance_repo):
    recorder = AttendanceRecorder(attendance_repo)
    first = recorder.record("s1", DAY, CaptureKind.TIME_IN, at(7, 10))

    with pytest.raises(AlreadyRecordedError):
        recorder.record("s1", DAY, CaptureKind.TIME_IN, at(7, 11))

    assert attendance_repo.get_for_student_and_date("s1", DAY) == first
    assert attendance_repo.writes == 1


def test_time_out_never_overwritten(attendance_repo):
    recorder = AttendanceRecorder(attendance_repo)
    recorder.record("s1", DAY, CaptureKind.TIME_IN, at(7, 10))
    recorder.record("s1", DAY, CaptureKind.TIME_OUT, at(14, 0))

    with pytest.raises(AlreadyRecordedError):
        recorder.record("s1", DAY, CaptureKind.TIME_OUT, at(15, 0))

    assert attendance_repo.get_for_student_and_date("s1", DAY).time_out == time(14, 0)


def test_second_bare_time_out_is_already_recorded(attendance_repo):
    recorder = AttendanceRecorder(attendance_repo)
    recorder.record("s1", DAY, CaptureKind.TIME_OUT, at(13, 5))

    with pytest.raises(AlreadyRecordedError):
        recorder.record("s1", DAY, CaptureKind.TIME_OUT, at(13, 6))


@pytest.mark.parametrize("kind", [CaptureKind.TIME_IN, CaptureKind.TIME_OUT])
def test_concurrent_records_write_each_field_once(kind):
    repo = InMemoryAttendance()
    if kind is CaptureKind.TIME_OUT:
        repo.put(AttendanceRecord(student_id="s1", attendance_date=DAY, time_in=time(7, 0)))
    recorder = AttendanceRecorder(repo)

    start = threading.Barrier(8)
    results: list[object] = []
    lock = threading.Lock()

    def scan(minute: int):
        start.wait()
        try:
            out: object = recorder.record("s1", DAY, kind, at(14 if kind is CaptureKind.TIME_OUT else 8, minute))
        except AlreadyRecordedError as e:
            out = e
        with lock:
            results.append(out)

    threads = [threading.Thread(target=scan, args=(m,)) for m in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    successes = [r for r in results if isinstance(r, AttendanceRecord)]
    assert len(successes) == 1
    assert sum(isinstance(r, AlreadyRecordedError) for r in results) == 7

    stored = repo.get_for_student_and_date("s1", DAY)
    assert stored.value_for(kind) == successes[0].value_for(kind)
    if kind is CaptureKind.TIME_OUT:
        assert stored.time_in == time(7, 0)


class _Unavailable(InMemoryAttendance):
    def insert_record(self, **kwargs):
        raise StorageUnavailableError("connection refused")


def test_storage_errors_propagate():
    with pytest.raises(StorageUnavailableError):
        AttendanceRecorder(_Unavailable()).record("s1", DAY, CaptureKind.TIME_IN, at(8, 0))


class _Slow(InMemoryAttendance):
    def insert_record(self, **kwargs):
        _time.sleep(0.5)
        return super().insert_record(**kwargs)


def test_slow_write_surfaces_timeout():
    recorder = AttendanceRecorder(_Slow(), bounded=BoundedCaller(timeout=0.05))
    with pytest.raises(StorageTimeoutError):
        recorder.record("s1", DAY, CaptureKind.TIME_IN, at(8, 0))


def test_time_out_fills_row_with_no_times(attendance_repo):
    attendance_repo.put(AttendanceRecord(student_id="s1", attendance_date=DAY))

    rec = AttendanceRecorder(attendance_repo).record("s1", DAY, CaptureKind.TIME_OUT, at(14, 0))

    assert rec.time_in is None
    assert rec.time_out == time(14, 0)
