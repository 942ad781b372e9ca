from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from ..attendance.model import AttendanceRecord
from ..attendance.recorder import AttendanceRecorder
from ..attendance.time_window import TimeWindowPolicy
from ..common.datetime_utils import Clock
from ..core.enums import CaptureKind, CaptureWindow, ScanState
from ..core.exceptions import InvalidTransitionError, RecordError
from ..students.model import Student
from .outcomes import OutsideWindow, ReadyToRecord, ResolutionOutcome, outcome_student
from .resolver import ScanResolver

logger = logging.getLogger(__name__)

_WINDOW_FOR_KIND = {
    CaptureKind.TIME_IN: CaptureWindow.TIME_IN,
    CaptureKind.TIME_OUT: CaptureWindow.TIME_OUT,
}


@dataclass(frozen=True)
class ScanAttempt:
    """One scan, from raw payload to its outcome. Never persisted."""

    raw_payload: str
    timestamp: datetime
    outcome: Optional[ResolutionOutcome] = None
    error: Optional[Exception] = None

    @property
    def resolved_student(self) -> Optional[Student]:
        return outcome_student(self.outcome) if self.outcome is not None else None


@dataclass(frozen=True)
class ScanSnapshot:
    """Read-only view of a machine for rendering."""

    state: ScanState
    attempt: Optional[ScanAttempt] = None
    record: Optional[AttendanceRecord] = None
    cancel_requested: bool = False

    @property
    def outcome(self) -> Optional[ResolutionOutcome]:
        return self.attempt.outcome if self.attempt else None

    @property
    def error(self) -> Optional[Exception]:
        return self.attempt.error if self.attempt else None


class ScanConfirmationStateMachine:
    """Lifecycle of a single scan.

    IDLE -> DECODING -> RESOLVED -> CONFIRMING -> COMMITTED | FAILED
                                 -> REJECTED | CANCELLED

    Non-actionable outcomes go straight to REJECTED. The only write happens
    in CONFIRMING, which is reachable only from RESOLVED with a ReadyToRecord
    outcome. An instance is single-use: build a new one for every scan.
    """

    def __init__(
        self,
        resolver: ScanResolver,
        recorder: AttendanceRecorder,
        clock: Clock,
        *,
        policy: Optional[TimeWindowPolicy] = None,
    ):
        self._resolver = resolver
        self._recorder = recorder
        self._clock = clock
        self._policy = policy or TimeWindowPolicy()
        self._lock = threading.RLock()

        self._state = ScanState.IDLE
        self._attempt: Optional[ScanAttempt] = None
        self._record: Optional[AttendanceRecord] = None
        self._cancel_requested = False
        self._confirm_at: Optional[datetime] = None

    @property
    def state(self) -> ScanState:
        return self._state

    def snapshot(self) -> ScanSnapshot:
        with self._lock:
            return ScanSnapshot(
                state=self._state,
                attempt=self._attempt,
                record=self._record,
                cancel_requested=self._cancel_requested,
            )

    def _require(self, expected: ScanState, action: str) -> None:
        if self._state is not expected:
            raise InvalidTransitionError(f"cannot {action} in state {self._state.value}")

    def _fail(self, error: Exception) -> None:
        with self._lock:
            self._attempt = replace(self._attempt, error=error)
            self._state = ScanState.FAILED

    def begin(self, raw_payload: str) -> ScanSnapshot:
        with self._lock:
            if self._state is not ScanState.IDLE:
                raise InvalidTransitionError("scan state machine is single-use; create a new one per scan")
            self._attempt = ScanAttempt(raw_payload=raw_payload, timestamp=self._clock.now())
            self._state = ScanState.DECODING
            return self.snapshot()

    def resolve(self) -> ScanSnapshot:
        with self._lock:
            self._require(ScanState.DECODING, "resolve")
            attempt = self._attempt

        try:
            outcome = self._resolver.resolve(attempt.raw_payload, now=attempt.timestamp)
        except RecordError as e:
            logger.warning("resolution failed for %r: %s", attempt.raw_payload, e)
            self._fail(e)
            return self.snapshot()
        except Exception as e:
            logger.exception("unexpected error resolving %r", attempt.raw_payload)
            self._fail(e)
            raise

        with self._lock:
            self._attempt = replace(attempt, outcome=outcome)
            self._state = ScanState.RESOLVED if outcome.actionable else ScanState.REJECTED
            logger.info("scan %r resolved to %s (%s)", attempt.raw_payload, type(outcome).__name__, self._state.value)
            return self.snapshot()

    def submit(self, raw_payload: str) -> ScanSnapshot:
        self.begin(raw_payload)
        return self.resolve()

    @property
    def can_confirm(self) -> bool:
        with self._lock:
            return self._state is ScanState.RESOLVED and isinstance(self._attempt.outcome, ReadyToRecord)

    def mark_confirming(self) -> ScanSnapshot:
        """RESOLVED -> CONFIRMING, or -> REJECTED if the window has closed since resolution."""

        with self._lock:
            if not self.can_confirm:
                raise InvalidTransitionError(f"cannot confirm in state {self._state.value}")

            outcome = self._attempt.outcome
            now = self._clock.now()
            decision = self._policy.classify(now)
            if decision.window is not _WINDOW_FOR_KIND[outcome.kind] or now.date() != self._attempt.timestamp.date():
                logger.info("window closed before confirmation of %s for %s", outcome.kind.value, outcome.student.id)
                self._attempt = replace(self._attempt, outcome=OutsideWindow(student=outcome.student, scanned_at=now))
                self._state = ScanState.REJECTED
                return self.snapshot()

            self._confirm_at = now
            self._state = ScanState.CONFIRMING
            return self.snapshot()

    def write(self) -> ScanSnapshot:
        with self._lock:
            self._require(ScanState.CONFIRMING, "write")
            outcome: ReadyToRecord = self._attempt.outcome
            now = self._confirm_at

        try:
            record = self._recorder.record(outcome.student.id, now.date(), outcome.kind, now)
        except RecordError as e:
            logger.warning("write failed for student=%s: %s", outcome.student.id, e)
            self._fail(e)
            return self.snapshot()
        except Exception as e:
            logger.exception("unexpected error writing attendance for student=%s", outcome.student.id)
            self._fail(e)
            raise

        with self._lock:
            self._record = record
            self._state = ScanState.COMMITTED
            if self._cancel_requested:
                logger.info("cancel requested during write for student=%s ignored; write settled", outcome.student.id)
            return self.snapshot()

    def confirm(self) -> ScanSnapshot:
        snap = self.mark_confirming()
        if snap.state is not ScanState.CONFIRMING:
            return snap
        return self.write()

    def cancel(self) -> bool:
        """Cancel a pending confirmation. Returns False (no-op) outside RESOLVED."""

        with self._lock:
            if self.can_confirm:
                self._state = ScanState.CANCELLED
                logger.info("scan %r cancelled", self._attempt.raw_payload)
                return True

            if self._state is ScanState.CONFIRMING:
                self._cancel_requested = True
                logger.info("cancel during write queued as no-op")
                return False

            logger.warning("cancel ignored in state %s", self._state.value)
            return False
