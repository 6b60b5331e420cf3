from __future__ import annotations

from dataclasses import dataclass

from werkzeug.security import check_password_hash

from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from .repository import OrganizerRepository


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    organizer_id: int
    full_name: str
    email: str
    role: Role


class AuthService:
    """Use case: authenticate an admin or organizer (login)."""

    def __init__(self, organizers: OrganizerRepository):
        self._organizers = organizers

    def authenticate(self, email: str, password: str) -> SessionUser:
        email = require_non_empty(email, "Email").lower()
        organizer = self._organizers.get_by_email(email)
        if not organizer or not organizer.is_active or not organizer.password_hash:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(organizer.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")

        return SessionUser(
            organizer_id=organizer.organizer_id,
            full_name=organizer.full_name,
            email=organizer.email,
            role=organizer.role,
        )
