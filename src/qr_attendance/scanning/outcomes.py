"""Resolution outcomes.

Every scan resolves to exactly one of these before anything is written.
Only ReadyToRecord is actionable; the rest are terminal rejections that the
caller renders as-is.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from ..attendance.model import AttendanceRecord
from ..core.enums import CaptureKind
from ..students.model import Student


@dataclass(frozen=True)
class StudentNotFound:
    payload: str

    actionable = False

    @property
    def message(self) -> str:
        return "Student not found"


@dataclass(frozen=True)
class InvalidPayload(StudentNotFound):
    """Payload was empty after trimming: a bad scan, not an unknown student."""

    @property
    def message(self) -> str:
        return "QR code is empty or unreadable"


@dataclass(frozen=True)
class OutsideWindow:
    student: Student
    scanned_at: datetime

    actionable = False

    @property
    def message(self) -> str:
        return "Outside scanning hours"


@dataclass(frozen=True)
class AlreadyComplete:
    student: Student
    record: AttendanceRecord

    actionable = False

    @property
    def message(self) -> str:
        return "Attendance already complete for today"


@dataclass(frozen=True)
class AlreadyTimedInDuringTimeInWindow:
    student: Student
    record: AttendanceRecord

    actionable = False

    @property
    def message(self) -> str:
        return "Student already timed in today"


@dataclass(frozen=True)
class ReadyToRecord:
    student: Student
    kind: CaptureKind
    existing_record: Optional[AttendanceRecord] = None

    actionable = True

    @property
    def message(self) -> str:
        label = "time-in" if self.kind is CaptureKind.TIME_IN else "time-out"
        return f"Student found and ready for {label}"


ResolutionOutcome = Union[
    StudentNotFound,
    OutsideWindow,
    AlreadyComplete,
    AlreadyTimedInDuringTimeInWindow,
    ReadyToRecord,
]


def outcome_name(outcome: ResolutionOutcome) -> str:
    return type(outcome).__name__


def outcome_student(outcome: ResolutionOutcome) -> Optional[Student]:
    return getattr(outcome, "student", None)
