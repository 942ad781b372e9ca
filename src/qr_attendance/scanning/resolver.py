from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Optional

from ..attendance.model import AttendanceRecord
from ..attendance.time_window import TimeWindowPolicy
from ..common.timeouts import BoundedCaller
from ..core.enums import CaptureKind, CaptureWindow
from ..students.model import Student
from .outcomes import (
    AlreadyComplete,
    AlreadyTimedInDuringTimeInWindow,
    InvalidPayload,
    OutsideWindow,
    ReadyToRecord,
    ResolutionOutcome,
    StudentNotFound,
)

logger = logging.getLogger(__name__)

StudentLookup = Callable[[str], Optional[Student]]
TodayRecordLookup = Callable[[str, date], Optional[AttendanceRecord]]


class ScanResolver:
    """Classify a scan against the time windows and today's record.

    This is the only place that decides whether a scan may be written.
    Lookups are read-only; a record that changes after resolution is the
    recorder's problem, not ours. StorageUnavailableError and
    StorageTimeoutError from a lookup propagate to the caller.
    """

    def __init__(
        self,
        lookup_student: StudentLookup,
        lookup_today_record: TodayRecordLookup,
        *,
        policy: Optional[TimeWindowPolicy] = None,
        bounded: Optional[BoundedCaller] = None,
    ):
        self._lookup_student = lookup_student
        self._lookup_today_record = lookup_today_record
        self._policy = policy or TimeWindowPolicy()
        self._bounded = bounded or BoundedCaller(timeout=None)

    def resolve(self, raw_payload: str, *, now: datetime) -> ResolutionOutcome:
        payload = (raw_payload or "").strip()
        if not payload:
            return InvalidPayload(payload=raw_payload or "")

        student = self._bounded.call(self._lookup_student, payload)
        if student is None:
            return StudentNotFound(payload=payload)

        decision = self._policy.classify(now)
        if not decision.can_capture:
            return OutsideWindow(student=student, scanned_at=now)

        record = self._bounded.call(self._lookup_today_record, student.id, now.date())
        outcome = self._decide(student, decision.window, record)
        logger.debug("resolved %r -> %s", payload, type(outcome).__name__)
        return outcome

    @staticmethod
    def _decide(student: Student, window: CaptureWindow, record: Optional[AttendanceRecord]) -> ResolutionOutcome:
        if record is None or (record.time_in is None and record.time_out is None):
            kind = CaptureKind.TIME_IN if window is CaptureWindow.TIME_IN else CaptureKind.TIME_OUT
            return ReadyToRecord(student=student, kind=kind, existing_record=record)

        # A time-out on file closes the day, with or without a time-in.
        if record.time_out is not None:
            return AlreadyComplete(student=student, record=record)

        if window is CaptureWindow.TIME_IN:
            return AlreadyTimedInDuringTimeInWindow(student=student, record=record)
        return ReadyToRecord(student=student, kind=CaptureKind.TIME_OUT, existing_record=record)
