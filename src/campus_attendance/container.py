from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.scan import ScanService
from .attendance.service import AttendanceService
from .common.datetime_utils import now_utc
from .core.constants import DEFAULT_EVENT_TIMEZONE
from .database.connection import DBConfig, DatabaseConnection
from .events.mysql_event_repository import MySQLEventRepository
from .events.repository import EventRepository
from .events.service import EventService
from .reports.service import AttendanceExportService
from .sessions.conflicts import SessionConflictChecker
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.repository import SessionRepository
from .sessions.service import SessionService
from .sessions.windows import WindowRules
from .students.mysql_student_repository import MySQLStudentRepository
from .students.repository import StudentRepository
from .users.mysql_organizer_repository import MySQLOrganizerRepository
from .users.repository import OrganizerRepository
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    events_repo: EventRepository
    sessions_repo: SessionRepository
    students_repo: StudentRepository
    organizers_repo: OrganizerRepository
    attendance_repo: AttendanceRepository

    auth_service: AuthService
    event_service: EventService
    session_service: SessionService
    scan_service: ScanService
    attendance_service: AttendanceService
    export_service: AttendanceExportService


def wire(
    *,
    events_repo: EventRepository,
    sessions_repo: SessionRepository,
    students_repo: StudentRepository,
    organizers_repo: OrganizerRepository,
    attendance_repo: AttendanceRepository,
    rules: WindowRules = WindowRules(),
    timezone: str = DEFAULT_EVENT_TIMEZONE,
    clock: Callable[[], datetime] = now_utc,
) -> Container:
    """Build every service on top of the given repositories (MySQL or in-memory)."""

    checker = SessionConflictChecker(sessions_repo, rules=rules)
    attendance_service = AttendanceService(attendance_repo, events_repo, sessions_repo, students_repo)

    return Container(
        events_repo=events_repo,
        sessions_repo=sessions_repo,
        students_repo=students_repo,
        organizers_repo=organizers_repo,
        attendance_repo=attendance_repo,
        auth_service=AuthService(organizers_repo),
        event_service=EventService(events_repo),
        session_service=SessionService(
            sessions_repo, events_repo, attendance_repo, students_repo, checker, clock=clock
        ),
        scan_service=ScanService(
            attendance_repo, sessions_repo, events_repo, students_repo, organizers_repo, clock=clock
        ),
        attendance_service=attendance_service,
        export_service=AttendanceExportService(attendance_service, events_repo, timezone=timezone),
    )


def build_container(
    *,
    db_config: dict,
    rules: WindowRules = WindowRules(),
    timezone: str = DEFAULT_EVENT_TIMEZONE,
) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))

    return wire(
        events_repo=MySQLEventRepository(conn),
        sessions_repo=MySQLSessionRepository(conn),
        students_repo=MySQLStudentRepository(conn),
        organizers_repo=MySQLOrganizerRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        rules=rules,
        timezone=timezone,
    )
