from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Account roles used for authorization."""

    ADMIN = "admin"
    ORGANIZER = "organizer"


class AttendanceStatus(str, Enum):
    """Derived attendance label. Computed from scan times, never stored."""

    PRESENT = "present"
    CHECKED_IN_ONLY = "checked-in-only"
    LATE = "late"
    ABSENT = "absent"

    @classmethod
    def parse(cls, value: str) -> "AttendanceStatus":
        """Accept the current labels plus the legacy dashboard vocabulary."""

        value = (value or "").strip().lower()
        legacy = {
            "checked-in": cls.CHECKED_IN_ONLY,
            "checked-out": cls.ABSENT,
        }
        if value in legacy:
            return legacy[value]
        return cls(value)


class ScanType(str, Enum):
    TIME_IN = "time_in"
    TIME_OUT = "time_out"


class SessionPhase(str, Enum):
    UPCOMING = "upcoming"
    ACTIVE = "active"
    COMPLETED = "completed"


class SubmitState(str, Enum):
    """States of a form/scan submission as seen by the client."""

    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    ERROR = "error"
    CONFLICT = "conflict"
