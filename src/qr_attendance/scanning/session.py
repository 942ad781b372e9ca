from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional

from ..common.validators import require_text
from ..core.constants import DEFAULT_DEVICE_ID, DEFAULT_SCAN_HISTORY_LIMIT
from ..core.enums import ScanState
from ..core.exceptions import BusyError, InvalidTransitionError
from .history import ScanHistory
from .state_machine import ScanConfirmationStateMachine, ScanSnapshot

logger = logging.getLogger(__name__)

EVENTS = ("resolved", "committed", "rejected", "cancelled", "failed")

MachineFactory = Callable[[], ScanConfirmationStateMachine]


class ScanSession:
    """Caller-facing entry point for one scanning device.

    Each scan gets a fresh state machine. Only one scan may be in flight
    (DECODING, RESOLVED or CONFIRMING) at a time; a new submit_scan while
    one is pending raises BusyError. Work runs on a single worker thread so
    submit_scan and confirm return futures.

    Events, with the argument passed to handlers:
        resolved(outcome), committed(record), rejected(outcome),
        cancelled(), failed(error)
    """

    def __init__(
        self,
        machine_factory: MachineFactory,
        *,
        device_id: str = DEFAULT_DEVICE_ID,
        history_limit: int = DEFAULT_SCAN_HISTORY_LIMIT,
    ):
        self._machine_factory = machine_factory
        self._device_id = device_id
        self._history = ScanHistory(history_limit)
        self._worker = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"scan-{device_id}")
        self._lock = threading.Lock()
        self._machine: Optional[ScanConfirmationStateMachine] = None
        self._handlers: Dict[str, List[Callable[..., Any]]] = {name: [] for name in EVENTS}

    @property
    def device_id(self) -> str:
        return self._device_id

    @property
    def history(self) -> ScanHistory:
        return self._history

    @property
    def state(self) -> ScanState:
        machine = self._machine
        return machine.state if machine else ScanState.IDLE

    def snapshot(self) -> ScanSnapshot:
        machine = self._machine
        return machine.snapshot() if machine else ScanSnapshot(state=ScanState.IDLE)

    def on(self, event: str, handler: Callable[..., Any]) -> Callable[..., Any]:
        if event not in self._handlers:
            raise ValueError(f"unknown scan event {event!r}")
        self._handlers[event].append(handler)
        return handler

    def _emit(self, event: str, *args: Any) -> None:
        for handler in list(self._handlers[event]):
            try:
                handler(*args)
            except Exception:
                # A broken listener must not take the scan down with it.
                logger.exception("scan event handler for %s failed", event)

    def _finish(self, snap: ScanSnapshot) -> ScanSnapshot:
        if snap.state is ScanState.COMMITTED:
            self._emit("committed", snap.record)
        elif snap.state is ScanState.REJECTED:
            self._emit("rejected", snap.outcome)
        elif snap.state is ScanState.FAILED:
            self._emit("failed", snap.error)
        elif snap.state is ScanState.CANCELLED:
            self._emit("cancelled")

        if snap.state.is_terminal:
            self._history.add(snap)
        return snap

    def submit_scan(self, raw_payload: Any) -> "Future[ScanSnapshot]":
        """Start resolving a decoded payload. The future completes once RESOLVED or terminal."""

        raw = require_text(raw_payload, "payload")

        with self._lock:
            if self._machine is not None and self._machine.state.is_in_flight:
                logger.info("device %s busy (%s), scan %r rejected", self._device_id, self._machine.state.value, raw)
                raise BusyError(f"device {self._device_id} is already processing a scan")
            machine = self._machine_factory()
            machine.begin(raw)
            self._machine = machine

        logger.info("device %s scan submitted: %r", self._device_id, raw)
        return self._worker.submit(self._run_resolution, machine)

    def _run_resolution(self, machine: ScanConfirmationStateMachine) -> ScanSnapshot:
        try:
            snap = machine.resolve()
        except Exception:
            # already logged and marked FAILED by the machine
            return self._finish(machine.snapshot())
        if snap.outcome is not None:
            self._emit("resolved", snap.outcome)
        return self._finish(snap)

    def confirm(self) -> "Future[ScanSnapshot]":
        """Write the pending ReadyToRecord resolution. Future completes COMMITTED, FAILED or REJECTED."""

        with self._lock:
            machine = self._machine
            if machine is None:
                raise InvalidTransitionError("no scan to confirm")
            snap = machine.mark_confirming()

        if snap.state is not ScanState.CONFIRMING:
            done: Future = Future()
            done.set_result(self._finish(snap))
            return done

        return self._worker.submit(self._run_write, machine)

    def _run_write(self, machine: ScanConfirmationStateMachine) -> ScanSnapshot:
        try:
            snap = machine.write()
        except Exception:
            return self._finish(machine.snapshot())
        return self._finish(snap)

    def cancel(self) -> bool:
        with self._lock:
            machine = self._machine
            if machine is None:
                logger.warning("cancel ignored on device %s: no scan", self._device_id)
                return False
            cancelled = machine.cancel()

        if cancelled:
            self._finish(machine.snapshot())
        return cancelled

    def close(self) -> None:
        self._worker.shutdown(wait=True)


class ScanSessionRegistry:
    """One ScanSession per device id, created on first use."""

    def __init__(self, session_factory: Callable[[str], ScanSession]):
        self._session_factory = session_factory
        self._sessions: Dict[str, ScanSession] = {}
        self._lock = threading.Lock()

    def get(self, device_id: Optional[str] = None) -> ScanSession:
        key = (device_id or DEFAULT_DEVICE_ID).strip() or DEFAULT_DEVICE_ID
        with self._lock:
            session = self._sessions.get(key)
            if session is None:
                session = self._session_factory(key)
                self._sessions[key] = session
            return session

    def close(self) -> None:
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            session.close()
