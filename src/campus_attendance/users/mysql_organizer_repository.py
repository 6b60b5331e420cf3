from __future__ import annotations

from typing import Any, Dict, Optional

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Organizer
from .repository import OrganizerRepository


def _to_organizer(r: Dict[str, Any]) -> Organizer:
    return Organizer(
        organizer_id=int(r["organizer_id"]),
        email=r["email"],
        full_name=r["full_name"],
        role=Role(r["role"]),
        password_hash=r.get("password_hash"),
        is_active=bool(r["is_active"]),
    )


class MySQLOrganizerRepository(OrganizerRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, organizer_id: int) -> Optional[Organizer]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT organizer_id, email, full_name, role, password_hash, is_active
                FROM organizers
                WHERE organizer_id=%s
                """,
                (int(organizer_id),),
            )
            r = fetchone(cur)
            return _to_organizer(r) if r else None

    def get_by_email(self, email: str) -> Optional[Organizer]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT organizer_id, email, full_name, role, password_hash, is_active
                FROM organizers
                WHERE email=%s
                """,
                (email.strip().lower(),),
            )
            r = fetchone(cur)
            return _to_organizer(r) if r else None

    def is_assigned_to_event(self, *, organizer_id: int, event_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS ok FROM organizer_assignments WHERE organizer_id=%s AND event_id=%s",
                (int(organizer_id), int(event_id)),
            )
            return fetchone(cur) is not None
