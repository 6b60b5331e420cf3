from __future__ import annotations

from typing import Optional, Protocol

from .model import Organizer


class OrganizerRepository(Protocol):
    """Repository interface for organizer accounts.

    Services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, organizer_id: int) -> Optional[Organizer]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Organizer]:
        raise NotImplementedError

    def is_assigned_to_event(self, *, organizer_id: int, event_id: int) -> bool:
        raise NotImplementedError
