"""Detect time-window overlaps between a candidate session and the sessions
already scheduled for the same event."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from .model import Session, TimeWindow
from .repository import SessionRepository
from .windows import WindowRules, validate_windows

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConflictResult:
    has_conflict: bool
    conflicting_sessions: Sequence[str] = ()

    @classmethod
    def none(cls) -> "ConflictResult":
        return cls(has_conflict=False)


def sessions_overlap(
    time_in: TimeWindow,
    time_out: Optional[TimeWindow],
    existing: Session,
) -> bool:
    """Compare time-in with time-in and time-out with time-out (half-open)."""

    if time_in.overlaps(existing.time_in):
        return True
    if time_out is not None and existing.time_out is not None:
        return time_out.overlaps(existing.time_out)
    return False


class SessionConflictChecker:
    def __init__(self, sessions: SessionRepository, *, rules: WindowRules = WindowRules()):
        self._sessions = sessions
        self._rules = rules

    @property
    def rules(self) -> WindowRules:
        return self._rules

    def check(
        self,
        *,
        event_id: int,
        time_in: TimeWindow,
        time_out: Optional[TimeWindow] = None,
        exclude_session_id: Optional[int] = None,
    ) -> ConflictResult:
        """Raise ValidationError for malformed windows, else report overlaps.

        A failure to read existing sessions is logged and reported as no conflict:
        the check is advisory, so storage trouble must not block the admin.
        """

        validate_windows(time_in, time_out, self._rules)

        try:
            existing = self._sessions.list_active_for_event(int(event_id))
        except Exception:
            logger.exception("Conflict check could not load sessions for event %s", event_id)
            return ConflictResult.none()

        names: list[str] = []
        for other in existing:
            if exclude_session_id is not None and other.session_id == exclude_session_id:
                continue
            if not other.is_active:
                continue
            if sessions_overlap(time_in, time_out, other) and other.name not in names:
                names.append(other.name)

        if not names:
            return ConflictResult.none()
        return ConflictResult(has_conflict=True, conflicting_sessions=tuple(names))
