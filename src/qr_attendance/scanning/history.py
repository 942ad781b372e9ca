from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from ..core.constants import DEFAULT_SCAN_HISTORY_LIMIT
from ..core.enums import ScanState
from ..core.exceptions import AlreadyRecordedError, StorageTimeoutError, StorageUnavailableError
from .state_machine import ScanSnapshot


def error_message(error: Optional[Exception]) -> str:
    if isinstance(error, AlreadyRecordedError):
        return "Attendance already recorded"
    if isinstance(error, StorageTimeoutError):
        return "Request timed out, please scan again"
    if isinstance(error, StorageUnavailableError):
        return "Attendance service unavailable, please scan again"
    return "Failed to process QR code"


def snapshot_message(snap: ScanSnapshot) -> str:
    if snap.state is ScanState.COMMITTED:
        return "Attendance recorded"
    if snap.state is ScanState.CANCELLED:
        return "Scan cancelled"
    if snap.state is ScanState.FAILED:
        return error_message(snap.error)
    if snap.outcome is not None:
        return snap.outcome.message
    return ""


@dataclass(frozen=True)
class ScanHistoryEntry:
    payload: str
    scanned_at: datetime
    status: ScanState
    message: str
    school_id: Optional[str] = None
    student_name: Optional[str] = None
    attendance_recorded: bool = False


class ScanHistory:
    """Most recent finished scans of one device, newest first. Memory only."""

    def __init__(self, limit: int = DEFAULT_SCAN_HISTORY_LIMIT):
        self._entries: deque[ScanHistoryEntry] = deque(maxlen=max(1, int(limit)))
        self._lock = threading.Lock()

    def add(self, snap: ScanSnapshot) -> ScanHistoryEntry:
        attempt = snap.attempt
        student = attempt.resolved_student if attempt else None
        entry = ScanHistoryEntry(
            payload=attempt.raw_payload if attempt else "",
            scanned_at=attempt.timestamp if attempt else datetime.now(),
            status=snap.state,
            message=snapshot_message(snap),
            school_id=student.school_id if student else None,
            student_name=student.display_name if student else None,
            attendance_recorded=snap.state is ScanState.COMMITTED,
        )
        with self._lock:
            self._entries.appendleft(entry)
        return entry

    def entries(self) -> List[ScanHistoryEntry]:
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
