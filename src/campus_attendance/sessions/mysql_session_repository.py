from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Session, SessionDraft, TimeWindow
from .repository import SessionRepository

_COLUMNS = """
    session_id, event_id, name, description,
    time_in_start, time_in_end, time_out_start, time_out_end, is_active
"""


def _to_session(r: Dict[str, Any]) -> Session:
    time_out = None
    if r.get("time_out_start") and r.get("time_out_end"):
        time_out = TimeWindow(start=r["time_out_start"], end=r["time_out_end"])
    return Session(
        session_id=int(r["session_id"]),
        event_id=int(r["event_id"]),
        name=r["name"],
        description=r.get("description"),
        time_in=TimeWindow(start=r["time_in_start"], end=r["time_in_end"]),
        time_out=time_out,
        is_active=bool(r["is_active"]),
    )


def _draft_params(draft: SessionDraft) -> tuple:
    return (
        int(draft.event_id),
        draft.name,
        draft.description,
        draft.time_in.start,
        draft.time_in.end,
        draft.time_out.start if draft.time_out else None,
        draft.time_out.end if draft.time_out else None,
        1 if draft.is_active else 0,
    )


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, session_id: int) -> Optional[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM sessions WHERE session_id=%s", (int(session_id),))
            r = fetchone(cur)
            return _to_session(r) if r else None

    def list_active_for_event(self, event_id: int) -> Sequence[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM sessions
                WHERE event_id=%s AND is_active=1
                ORDER BY time_in_start ASC
                """,
                (int(event_id),),
            )
            return [_to_session(r) for r in fetchall(cur)]

    def list_for_event(self, event_id: int) -> Sequence[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM sessions WHERE event_id=%s ORDER BY time_in_start ASC",
                (int(event_id),),
            )
            return [_to_session(r) for r in fetchall(cur)]

    def create(self, draft: SessionDraft) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO sessions(
                    event_id, name, description,
                    time_in_start, time_in_end, time_out_start, time_out_end, is_active
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                _draft_params(draft),
            )
            return int(cur.lastrowid)

    def update(self, session_id: int, draft: SessionDraft) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE sessions
                SET event_id=%s, name=%s, description=%s,
                    time_in_start=%s, time_in_end=%s, time_out_start=%s, time_out_end=%s, is_active=%s
                WHERE session_id=%s
                """,
                _draft_params(draft) + (int(session_id),),
            )
            return cur.rowcount > 0

    def delete(self, session_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM sessions WHERE session_id=%s", (int(session_id),))
            return cur.rowcount > 0
