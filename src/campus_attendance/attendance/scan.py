from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_utc
from ..core.constants import RECENT_SCANS_LIMIT
from ..core.enums import Role, ScanType
from ..core.exceptions import AuthorizationError, NotFoundError, ScanSequenceError, ValidationError
from ..events.model import Event
from ..events.repository import EventRepository
from ..sessions.model import Session
from ..sessions.repository import SessionRepository
from ..students.model import Student
from ..students.repository import StudentRepository
from ..users.repository import OrganizerRepository
from .model import AttendanceRecord, RecentScan
from .qr import parse_qr_data
from .repository import AttendanceRepository
from .status import derive_attendance_status

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanDecision:
    allowed: bool
    scan_type: Optional[ScanType] = None
    reason: str = ""


def determine_scan_type(session: Session, event: Event, now: datetime) -> ScanDecision:
    """Pick time-in or time-out from the session windows and the clock.

    Time-in stays open after its window closes (until the time-out window
    opens) so late arrivals are still recorded.
    """

    if not session.is_active or not event.is_active:
        return ScanDecision(allowed=False, reason="Session is not active")

    if now < session.time_in.start:
        return ScanDecision(allowed=False, reason="Time-in has not opened yet for this session")

    if session.time_out is not None:
        if session.time_out.contains(now):
            return ScanDecision(allowed=True, scan_type=ScanType.TIME_OUT)
        if now >= session.time_out.end:
            return ScanDecision(allowed=False, reason="Scanning is closed for this session")

    return ScanDecision(allowed=True, scan_type=ScanType.TIME_IN)


@dataclass(frozen=True)
class ScanResult:
    scan_type: ScanType
    record: AttendanceRecord
    student: Student
    session: Session
    timestamp: datetime

    @property
    def message(self) -> str:
        return f"Successfully processed {self.scan_type.value} scan"


@dataclass(frozen=True)
class ScanStatus:
    session: Session
    event: Event
    total_scans: int
    recent_scans: Sequence[RecentScan]


class ScanService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        sessions: SessionRepository,
        events: EventRepository,
        students: StudentRepository,
        organizers: OrganizerRepository,
        *,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._attendance = attendance
        self._sessions = sessions
        self._events = events
        self._students = students
        self._organizers = organizers
        self._clock = clock

    def _load_context(self, *, session_id: int, organizer_id: int) -> tuple[Session, Event]:
        organizer = self._organizers.get_by_id(int(organizer_id))
        if not organizer or not organizer.is_active:
            raise AuthorizationError("Organizer not found or inactive")

        session = self._sessions.get_by_id(int(session_id))
        if not session:
            raise NotFoundError("Session not found")

        event = self._events.get_by_id(session.event_id)
        if not event:
            raise NotFoundError("Event not found")

        # Admins may scan for any event; organizers only for their assigned ones.
        if organizer.role != Role.ADMIN and not self._organizers.is_assigned_to_event(
            organizer_id=organizer.organizer_id, event_id=event.event_id
        ):
            raise AuthorizationError("You are not authorized to manage this session")

        return session, event

    def process_scan(
        self,
        *,
        qr_data: str,
        session_id: int,
        organizer_id: int,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ScanResult:
        """Record a time-in or time-out for the student in `qr_data`.

        Out-of-order and repeated scans are rejected here; the stored record is
        never patched up to hide them.
        """

        parsed = parse_qr_data(qr_data)
        session, event = self._load_context(session_id=session_id, organizer_id=organizer_id)

        student = self._students.get_by_id(parsed.student_id)
        if not student or not student.is_active:
            raise NotFoundError("The student associated with this QR code is not found or inactive")

        now = now or self._clock()
        decision = determine_scan_type(session, event, now)
        if not decision.allowed:
            raise ValidationError(decision.reason)

        existing = self._attendance.get_for_student_and_session(
            student_id=student.student_id, session_id=session.session_id
        )

        if decision.scan_type == ScanType.TIME_IN:
            if existing and existing.time_in:
                raise ScanSequenceError("Already checked in for this session", duplicate=True)
            attendance_id = self._attendance.create_time_in(
                student_id=student.student_id,
                session_id=session.session_id,
                event_id=event.event_id,
                scanned_by=int(organizer_id),
                time_in=now,
                ip_address=ip_address,
                user_agent=user_agent,
            )
            record = AttendanceRecord(
                attendance_id=attendance_id,
                student_id=student.student_id,
                session_id=session.session_id,
                event_id=event.event_id,
                scan_type=ScanType.TIME_IN,
                time_in=now,
                scanned_by=int(organizer_id),
            )
        else:
            if not existing or not existing.time_in:
                raise ScanSequenceError("Cannot scan time-out without first scanning time-in for this session")
            if existing.time_out:
                raise ScanSequenceError("Already checked out for this session", duplicate=True)
            if not self._attendance.record_time_out(
                attendance_id=existing.attendance_id,
                scanned_by=int(organizer_id),
                time_out=now,
                ip_address=ip_address,
                user_agent=user_agent,
            ):
                raise ScanSequenceError("Already checked out for this session", duplicate=True)
            record = AttendanceRecord(
                attendance_id=existing.attendance_id,
                student_id=existing.student_id,
                session_id=existing.session_id,
                event_id=existing.event_id,
                scan_type=ScanType.TIME_OUT,
                time_in=existing.time_in,
                time_out=now,
                scanned_by=int(organizer_id),
            )

        logger.info(
            "Recorded %s for student %s in session %s (%s)",
            decision.scan_type.value,
            student.student_id,
            session.session_id,
            derive_attendance_status(record.time_in, record.time_out, session.time_in.end).value,
        )
        return ScanResult(
            scan_type=decision.scan_type,
            record=record,
            student=student,
            session=session,
            timestamp=now,
        )

    def scan_status(self, *, session_id: int, organizer_id: int) -> ScanStatus:
        session, event = self._load_context(session_id=session_id, organizer_id=organizer_id)
        time_in_count, _ = self._attendance.scan_counts(session.session_id)
        return ScanStatus(
            session=session,
            event=event,
            total_scans=time_in_count,
            recent_scans=self._attendance.recent_for_session(session.session_id, RECENT_SCANS_LIMIT),
        )

    def get_student(self, student_id: int) -> Student:
        student = self._students.get_by_id(int(student_id))
        if not student:
            raise NotFoundError("Student not found")
        return student
