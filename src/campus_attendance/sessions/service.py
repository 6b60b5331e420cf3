from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_utc, to_iso
from ..common.validators import require_min_length
from ..core.enums import Role, SessionPhase
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError
from ..events.repository import EventRepository
from ..students.repository import StudentRepository
from .conflicts import ConflictResult, SessionConflictChecker
from .model import Session, SessionDraft
from .repository import SessionRepository
from .windows import validate_windows

logger = logging.getLogger(__name__)

CONFLICT_MESSAGE = "Time windows conflict with existing sessions"


def session_phase(session: Session, now: datetime) -> SessionPhase:
    """Where `session` stands relative to `now` (both naive UTC).

    A session whose time-in falls on an earlier day is over regardless of
    its windows.
    """

    start = session.time_in.start
    if start.date() < now.date():
        return SessionPhase.COMPLETED
    if start.date() == now.date():
        if session.time_out is not None:
            if start <= now <= session.time_out.end:
                return SessionPhase.ACTIVE
            if now > session.time_out.end:
                return SessionPhase.COMPLETED
        elif now >= start:
            return SessionPhase.ACTIVE
    return SessionPhase.UPCOMING


@dataclass(frozen=True)
class SessionDetail:
    session: Session
    event_name: str
    phase: SessionPhase
    time_in_count: int
    time_out_count: int
    expected_attendance: int

    def to_dict(self) -> dict[str, Any]:
        s = self.session
        return {
            "id": s.session_id,
            "eventId": s.event_id,
            "eventName": self.event_name,
            "name": s.name,
            "description": s.description,
            "isActive": s.is_active,
            "timeInStart": to_iso(s.time_in.start),
            "timeInEnd": to_iso(s.time_in.end),
            "timeOutStart": to_iso(s.time_out.start) if s.time_out else None,
            "timeOutEnd": to_iso(s.time_out.end) if s.time_out else None,
            "status": self.phase.value,
            "timeInCount": self.time_in_count,
            "timeOutCount": self.time_out_count,
            "expectedAttendance": self.expected_attendance,
        }


class SessionService:
    def __init__(
        self,
        sessions: SessionRepository,
        events: EventRepository,
        attendance: AttendanceRepository,
        students: StudentRepository,
        checker: SessionConflictChecker,
        *,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._sessions = sessions
        self._events = events
        self._attendance = attendance
        self._students = students
        self._checker = checker
        self._clock = clock

    def check_conflicts(self, draft: SessionDraft, *, exclude_session_id: Optional[int] = None) -> ConflictResult:
        return self._checker.check(
            event_id=draft.event_id,
            time_in=draft.time_in,
            time_out=draft.time_out,
            exclude_session_id=exclude_session_id,
        )

    def _validate(self, draft: SessionDraft, *, exclude_session_id: Optional[int] = None) -> SessionDraft:
        name = require_min_length(draft.name, "Session name", 3)
        validate_windows(draft.time_in, draft.time_out, self._checker.rules)
        if not self._events.get_by_id(int(draft.event_id)):
            raise NotFoundError("Event not found")

        # Authoritative re-check; the form's debounced check is advisory only.
        result = self.check_conflicts(draft, exclude_session_id=exclude_session_id)
        if result.has_conflict:
            raise ConflictError(CONFLICT_MESSAGE, conflicting_sessions=result.conflicting_sessions)

        description = draft.description.strip() if draft.description else None
        return SessionDraft(
            event_id=int(draft.event_id),
            name=name,
            time_in=draft.time_in,
            time_out=draft.time_out,
            description=description or None,
            is_active=draft.is_active,
        )

    def create(self, *, current_role: Role, draft: SessionDraft) -> int:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can create sessions")
        clean = self._validate(draft)
        session_id = self._sessions.create(clean)
        logger.info("Created session %s (%s) for event %s", session_id, clean.name, clean.event_id)
        return session_id

    def update(self, *, current_role: Role, session_id: int, draft: SessionDraft) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can change sessions")
        if not self._sessions.get_by_id(int(session_id)):
            raise NotFoundError("Session not found")
        clean = self._validate(draft, exclude_session_id=int(session_id))
        self._sessions.update(int(session_id), clean)

    def delete(self, *, current_role: Role, session_id: int) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can delete sessions")
        if not self._sessions.delete(int(session_id)):
            raise NotFoundError("Session not found")

    def list_for_event(self, event_id: int) -> Sequence[Session]:
        return self._sessions.list_for_event(int(event_id))

    def detail(self, session_id: int, *, now: Optional[datetime] = None) -> SessionDetail:
        session = self._sessions.get_by_id(int(session_id))
        if not session:
            raise NotFoundError("Session not found")
        event = self._events.get_by_id(session.event_id)
        if not event:
            raise NotFoundError("Event not found")

        time_in_count, time_out_count = self._attendance.scan_counts(session.session_id)
        return SessionDetail(
            session=session,
            event_name=event.name,
            phase=session_phase(session, now or self._clock()),
            time_in_count=time_in_count,
            time_out_count=time_out_count,
            expected_attendance=self._students.count(),
        )
