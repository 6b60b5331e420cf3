from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence

from ..common.validators import require_min_length
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import Event
from .repository import EventRepository


@dataclass(frozen=True)
class EventStats:
    total_events: int
    active_events: int
    inactive_events: int
    total_sessions: int
    total_organizers: int
    events_with_sessions: int
    events_with_attendance: int
    events_without_sessions: int
    events_without_attendance: int

    def to_dict(self) -> dict:
        return {
            "totalEvents": self.total_events,
            "activeEvents": self.active_events,
            "inactiveEvents": self.inactive_events,
            "totalSessions": self.total_sessions,
            "totalOrganizers": self.total_organizers,
            "eventsWithSessions": self.events_with_sessions,
            "eventsWithAttendance": self.events_with_attendance,
            "eventsWithoutSessions": self.events_without_sessions,
            "eventsWithoutAttendance": self.events_without_attendance,
        }


class EventService:
    def __init__(self, events: EventRepository):
        self._events = events

    def get(self, event_id: int) -> Event:
        event = self._events.get_by_id(int(event_id))
        if not event:
            raise NotFoundError("Event not found")
        return event

    def list_events(self, *, active_only: bool = False) -> Sequence[Event]:
        return self._events.list_all(active_only=active_only)

    def create(
        self,
        *,
        current_role: Role,
        name: str,
        start_date: date,
        end_date: date,
        description: Optional[str] = None,
    ) -> int:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can create events")

        name = require_min_length(name, "Event name", 3)
        if end_date < start_date:
            raise ValidationError("Event end date must not be before its start date")

        description = (description or "").strip() or None
        return self._events.create(name=name, start_date=start_date, end_date=end_date, description=description)

    def set_active(self, *, current_role: Role, event_id: int, is_active: bool) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can change events")
        self.get(event_id)
        self._events.set_active(int(event_id), is_active=is_active)

    def stats(self) -> EventStats:
        c = self._events.get_counts()
        return EventStats(
            total_events=c.total_events,
            active_events=c.active_events,
            inactive_events=c.total_events - c.active_events,
            total_sessions=c.total_sessions,
            total_organizers=c.total_organizers,
            events_with_sessions=c.events_with_sessions,
            events_with_attendance=c.events_with_attendance,
            events_without_sessions=c.total_events - c.events_with_sessions,
            events_without_attendance=c.total_events - c.events_with_attendance,
        )
