from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Session, SessionDraft


class SessionRepository(Protocol):
    def get_by_id(self, session_id: int) -> Optional[Session]:
        raise NotImplementedError

    def list_active_for_event(self, event_id: int) -> Sequence[Session]:
        """Active sessions of one event; the conflict checker reads only this."""

        raise NotImplementedError

    def list_for_event(self, event_id: int) -> Sequence[Session]:
        raise NotImplementedError

    def create(self, draft: SessionDraft) -> int:
        raise NotImplementedError

    def update(self, session_id: int, draft: SessionDraft) -> bool:
        raise NotImplementedError

    def delete(self, session_id: int) -> bool:
        raise NotImplementedError
