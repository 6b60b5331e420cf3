from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Organizer:
    """Domain entity: an admin or organizer account.

    Plain data object (no DB access code).
    """

    organizer_id: int
    email: str
    full_name: str
    role: Role
    password_hash: Optional[str] = None
    is_active: bool = True
