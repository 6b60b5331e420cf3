from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class Event:
    """Domain entity: a campus event made of one or more sessions."""

    event_id: int
    name: str
    start_date: date
    end_date: date
    is_active: bool = True
    description: Optional[str] = None


@dataclass(frozen=True)
class EventCounts:
    """Raw counters read from storage for the admin dashboard."""

    total_events: int
    active_events: int
    total_sessions: int
    total_organizers: int
    events_with_sessions: int
    events_with_attendance: int
