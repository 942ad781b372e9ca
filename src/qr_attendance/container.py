from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.recorder import AttendanceRecorder
from .attendance.repository import AttendanceRepository
from .attendance.time_window import TimeWindowPolicy
from .common.datetime_utils import Clock, SystemClock, resolve_timezone
from .common.timeouts import BoundedCaller
from .core.constants import DEFAULT_RECORDED_BY, DEFAULT_SCAN_HISTORY_LIMIT, DEFAULT_SCAN_TIMEOUT_SECONDS
from .database.connection import DatabaseConnection, db_config_from_dict
from .scanning.resolver import ScanResolver
from .scanning.session import ScanSession, ScanSessionRegistry
from .scanning.state_machine import ScanConfirmationStateMachine
from .students.mysql_student_repository import MySQLStudentRepository
from .students.repository import StudentRepository
from .students.service import StudentDirectory


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    students_repo: StudentRepository
    attendance_repo: AttendanceRepository

    clock: Clock
    policy: TimeWindowPolicy
    bounded: BoundedCaller
    students: StudentDirectory
    resolver: ScanResolver
    recorder: AttendanceRecorder
    sessions: ScanSessionRegistry

    def close(self) -> None:
        """Stop every session worker, then the store-call pool."""

        self.sessions.close()
        self.bounded.shutdown()


def wire(
    *,
    students_repo: StudentRepository,
    attendance_repo: AttendanceRepository,
    clock: Clock,
    conn: Optional[DatabaseConnection] = None,
    timeout: Optional[float] = DEFAULT_SCAN_TIMEOUT_SECONDS,
    history_limit: int = DEFAULT_SCAN_HISTORY_LIMIT,
    recorded_by: str = DEFAULT_RECORDED_BY,
) -> Container:
    """Assemble the scan engine around any pair of repositories."""

    policy = TimeWindowPolicy()
    bounded = BoundedCaller(timeout=timeout)
    students = StudentDirectory(students_repo)
    resolver = ScanResolver(
        students.find_by_payload,
        attendance_repo.get_for_student_and_date,
        policy=policy,
        bounded=bounded,
    )
    recorder = AttendanceRecorder(attendance_repo, bounded=bounded, recorded_by=recorded_by)

    def new_machine() -> ScanConfirmationStateMachine:
        return ScanConfirmationStateMachine(resolver, recorder, clock, policy=policy)

    def make_session(device_id: str) -> ScanSession:
        return ScanSession(new_machine, device_id=device_id, history_limit=history_limit)

    return Container(
        conn=conn,
        students_repo=students_repo,
        attendance_repo=attendance_repo,
        clock=clock,
        policy=policy,
        bounded=bounded,
        students=students,
        resolver=resolver,
        recorder=recorder,
        sessions=ScanSessionRegistry(make_session),
    )


def build_container(*, db_config: dict, settings=None) -> Container:
    conn = DatabaseConnection.get_instance(db_config_from_dict(db_config))

    return wire(
        students_repo=MySQLStudentRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        clock=SystemClock(resolve_timezone(getattr(settings, "INSTITUTION_TIMEZONE", ""))),
        conn=conn,
        timeout=float(getattr(settings, "SCAN_TIMEOUT_SECONDS", DEFAULT_SCAN_TIMEOUT_SECONDS)),
        history_limit=int(getattr(settings, "SCAN_HISTORY_LIMIT", DEFAULT_SCAN_HISTORY_LIMIT)),
        recorded_by=str(getattr(settings, "RECORDED_BY", DEFAULT_RECORDED_BY)),
    )
