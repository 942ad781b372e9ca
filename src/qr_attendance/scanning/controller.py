from __future__ import annotations

from concurrent.futures import TimeoutError as FutureTimeout
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request

from ..attendance.model import AttendanceRecord
from ..core.enums import ScanState
from ..core.exceptions import BusyError, InputError, InvalidTransitionError
from ..container import Container
from .history import ScanHistoryEntry, snapshot_message
from .outcomes import ResolutionOutcome, outcome_name
from .state_machine import ScanSnapshot


def _record_to_dict(r: Optional[AttendanceRecord]) -> Optional[Dict[str, Any]]:
    if r is None:
        return None
    return {
        "student_id": r.student_id,
        "date": r.attendance_date.strftime("%Y-%m-%d"),
        "time_in": r.time_in.strftime("%H:%M:%S") if r.time_in else None,
        "time_out": r.time_out.strftime("%H:%M:%S") if r.time_out else None,
        "recorded_by": r.recorded_by,
    }


def _outcome_to_dict(outcome: Optional[ResolutionOutcome]) -> Optional[Dict[str, Any]]:
    if outcome is None:
        return None
    student = getattr(outcome, "student", None)
    data: Dict[str, Any] = {
        "type": outcome_name(outcome),
        "message": outcome.message,
        "actionable": bool(outcome.actionable),
        "student": (
            {"id": student.id, "school_id": student.school_id, "full_name": student.display_name}
            if student
            else None
        ),
    }
    if hasattr(outcome, "kind"):
        data["kind"] = outcome.kind.value
    record = getattr(outcome, "record", None) or getattr(outcome, "existing_record", None)
    data["record"] = _record_to_dict(record)
    return data


def snapshot_to_dict(snap: ScanSnapshot) -> Dict[str, Any]:
    attempt = snap.attempt
    return {
        "state": snap.state.value,
        "payload": attempt.raw_payload if attempt else None,
        "scanned_at": attempt.timestamp.isoformat() if attempt else None,
        "outcome": _outcome_to_dict(snap.outcome),
        "record": _record_to_dict(snap.record),
        "error": type(snap.error).__name__ if snap.error else None,
        "message": snapshot_message(snap),
    }


def _history_to_dict(e: ScanHistoryEntry) -> Dict[str, Any]:
    return {
        "payload": e.payload,
        "scanned_at": e.scanned_at.isoformat(),
        "status": e.status.value,
        "message": e.message,
        "school_id": e.school_id,
        "student_name": e.student_name,
        "attendance_recorded": e.attendance_recorded,
    }


def register(app: Flask, container: Container) -> None:
    def _session():
        return container.sessions.get(request.headers.get("X-Device-Id"))

    def _wait_seconds() -> float:
        # Two bounded store calls at most per request, plus headroom.
        timeout = container.bounded.timeout or 10.0
        return timeout * 2 + 1.0

    def _error(message: str, status: int, **extra):
        body = {"success": False, "message": message}
        body.update(extra)
        return jsonify(body), status

    def _respond(snap: ScanSnapshot):
        body = snapshot_to_dict(snap)
        body["success"] = snap.state in (ScanState.RESOLVED, ScanState.COMMITTED, ScanState.CANCELLED)
        return jsonify(body), 200

    @app.route("/api/scan", methods=["POST"], endpoint="scan_submit")
    def scan_submit():
        data = request.get_json(silent=True) or {}
        session = _session()
        try:
            future = session.submit_scan(data.get("payload"))
        except InputError as e:
            return _error(str(e), 400)
        except BusyError as e:
            return _error(str(e), 409, state=session.state.value)

        try:
            snap = future.result(timeout=_wait_seconds())
        except FutureTimeout:
            return _error("Scan is still being processed", 202, state=session.state.value)
        return _respond(snap)

    @app.route("/api/scan/confirm", methods=["POST"], endpoint="scan_confirm")
    def scan_confirm():
        session = _session()
        try:
            future = session.confirm()
        except InvalidTransitionError as e:
            return _error(str(e), 409, state=session.state.value)

        try:
            snap = future.result(timeout=_wait_seconds())
        except FutureTimeout:
            return _error("Attendance is still being recorded", 202, state=session.state.value)
        return _respond(snap)

    @app.route("/api/scan/cancel", methods=["POST"], endpoint="scan_cancel")
    def scan_cancel():
        session = _session()
        cancelled = session.cancel()
        return jsonify({"success": cancelled, "cancelled": cancelled, "state": session.state.value}), (200 if cancelled else 409)

    @app.route("/api/scan/state", methods=["GET"], endpoint="scan_state")
    def scan_state():
        return jsonify(snapshot_to_dict(_session().snapshot())), 200

    @app.route("/api/scan/history", methods=["GET"], endpoint="scan_history")
    def scan_history():
        return jsonify([_history_to_dict(e) for e in _session().history.entries()]), 200

    @app.route("/api/scan/history", methods=["DELETE"], endpoint="scan_history_clear")
    def scan_history_clear():
        _session().history.clear()
        return jsonify({"success": True}), 200

    @app.route("/api/scan/window", methods=["GET"], endpoint="scan_window")
    def scan_window():
        now = container.clock.now()
        decision = container.policy.classify(now)
        return jsonify(
            {
                "time": now.strftime("%H:%M"),
                "window": decision.window.value,
                "can_capture": decision.can_capture,
                "message": container.policy.describe(now),
            }
        ), 200
