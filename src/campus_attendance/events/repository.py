from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Event, EventCounts


class EventRepository(Protocol):
    def get_by_id(self, event_id: int) -> Optional[Event]:
        raise NotImplementedError

    def list_all(self, *, active_only: bool = False) -> Sequence[Event]:
        raise NotImplementedError

    def create(
        self,
        *,
        name: str,
        start_date: date,
        end_date: date,
        description: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def set_active(self, event_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError

    def get_counts(self) -> EventCounts:
        raise NotImplementedError
