from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional


@dataclass(frozen=True)
class TimeWindow:
    """Half-open interval `[start, end)` of naive UTC datetimes."""

    start: datetime
    end: datetime

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def overlaps(self, other: "TimeWindow") -> bool:
        return self.start < other.end and other.start < self.end

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end


@dataclass(frozen=True)
class Session:
    """Domain entity: a scheduled block of an event with its own scan windows."""

    session_id: int
    event_id: int
    name: str
    time_in: TimeWindow
    time_out: Optional[TimeWindow] = None
    is_active: bool = True
    description: Optional[str] = None


@dataclass(frozen=True)
class SessionDraft:
    """Candidate session as submitted by the admin form (not yet persisted)."""

    event_id: int
    name: str
    time_in: TimeWindow
    time_out: Optional[TimeWindow] = None
    description: Optional[str] = None
    is_active: bool = True
