from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Event, EventCounts
from .repository import EventRepository


def _to_event(r: Dict[str, Any]) -> Event:
    return Event(
        event_id=int(r["event_id"]),
        name=r["name"],
        description=r.get("description"),
        start_date=r["start_date"],
        end_date=r["end_date"],
        is_active=bool(r["is_active"]),
    )


class MySQLEventRepository(EventRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, event_id: int) -> Optional[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT event_id, name, description, start_date, end_date, is_active
                FROM events
                WHERE event_id=%s
                """,
                (int(event_id),),
            )
            r = fetchone(cur)
            return _to_event(r) if r else None

    def list_all(self, *, active_only: bool = False) -> Sequence[Event]:
        where = "WHERE is_active=1" if active_only else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT event_id, name, description, start_date, end_date, is_active
                FROM events
                {where}
                ORDER BY start_date DESC, event_id DESC
                """
            )
            return [_to_event(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        name: str,
        start_date: date,
        end_date: date,
        description: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO events(name, description, start_date, end_date)
                VALUES(%s,%s,%s,%s)
                """,
                (name, description, start_date, end_date),
            )
            return int(cur.lastrowid)

    def set_active(self, event_id: int, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE events SET is_active=%s WHERE event_id=%s", (1 if is_active else 0, int(event_id)))
            return cur.rowcount > 0

    def get_counts(self) -> EventCounts:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT
                    (SELECT COUNT(*) FROM events) AS total_events,
                    (SELECT COUNT(*) FROM events WHERE is_active=1) AS active_events,
                    (SELECT COUNT(*) FROM sessions) AS total_sessions,
                    (SELECT COUNT(*) FROM organizers WHERE is_active=1) AS total_organizers,
                    (SELECT COUNT(DISTINCT event_id) FROM sessions) AS events_with_sessions,
                    (SELECT COUNT(DISTINCT event_id) FROM attendance) AS events_with_attendance
                """
            )
            r = fetchone(cur) or {}
            return EventCounts(
                total_events=int(r.get("total_events") or 0),
                active_events=int(r.get("active_events") or 0),
                total_sessions=int(r.get("total_sessions") or 0),
                total_organizers=int(r.get("total_organizers") or 0),
                events_with_sessions=int(r.get("events_with_sessions") or 0),
                events_with_attendance=int(r.get("events_with_attendance") or 0),
            )
