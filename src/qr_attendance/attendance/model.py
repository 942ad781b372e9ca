from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Optional

from ..core.enums import CaptureKind


@dataclass(frozen=True)
class AttendanceRecord:
    """Thực thể miền (domain): one attendance row per (student, day).

    `time_out` is normally written after `time_in`; a bare time-out row is
    allowed when the first scan of the day lands in the time-out window.
    """

    student_id: str
    attendance_date: date
    time_in: Optional[time] = None
    time_out: Optional[time] = None
    recorded_by: Optional[str] = None
    record_id: Optional[int] = None

    @property
    def is_complete(self) -> bool:
        return self.time_in is not None and self.time_out is not None

    def value_for(self, kind: CaptureKind) -> Optional[time]:
        return self.time_in if kind is CaptureKind.TIME_IN else self.time_out
