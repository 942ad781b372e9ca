from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional

from ..common.timeouts import BoundedCaller
from ..core.constants import DEFAULT_RECORDED_BY
from ..core.enums import CaptureKind
from ..core.exceptions import AlreadyRecordedError, DuplicateRecordError
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceRecorder:
    """Write one time-in or time-out, safely under concurrent scans.

    The insert is tried first. When the store reports that the day's row
    already exists, the recorder falls back to a conditional update that only
    fills the target field while it is still empty. A field that is already
    set is never overwritten; the call fails with AlreadyRecordedError so the
    caller can report "already recorded" rather than a false success.

    The store's uniqueness constraint on (student_id, attendance_date) is the
    only arbitration point, so no lock is held across devices.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        bounded: Optional[BoundedCaller] = None,
        recorded_by: str = DEFAULT_RECORDED_BY,
    ):
        self._attendance = attendance
        self._bounded = bounded or BoundedCaller(timeout=None)
        self._recorded_by = recorded_by

    def record(self, student_id: str, attendance_date: date, kind: CaptureKind, now: datetime) -> AttendanceRecord:
        stamp = now.time().replace(microsecond=0)

        try:
            record = self._bounded.call(
                self._attendance.insert_record,
                student_id=student_id,
                attendance_date=attendance_date,
                time_in=stamp if kind is CaptureKind.TIME_IN else None,
                time_out=stamp if kind is CaptureKind.TIME_OUT else None,
                recorded_by=self._recorded_by,
            )
            logger.info("inserted %s for student=%s date=%s at %s", kind.value, student_id, attendance_date, stamp)
            return record
        except DuplicateRecordError:
            logger.info("row exists for student=%s date=%s, updating %s if absent", student_id, attendance_date, kind.value)

        if kind is CaptureKind.TIME_IN:
            updated = self._bounded.call(
                self._attendance.set_time_in_if_absent,
                student_id=student_id,
                attendance_date=attendance_date,
                time_in=stamp,
            )
        else:
            updated = self._bounded.call(
                self._attendance.set_time_out_if_absent,
                student_id=student_id,
                attendance_date=attendance_date,
                time_out=stamp,
            )

        if updated is None:
            logger.warning("%s already recorded for student=%s date=%s", kind.value, student_id, attendance_date)
            raise AlreadyRecordedError(f"{kind.value} already recorded for {student_id} on {attendance_date.isoformat()}")

        logger.info("updated %s for student=%s date=%s at %s", kind.value, student_id, attendance_date, stamp)
        return updated
