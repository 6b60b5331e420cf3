from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from ..core.constants import EXPORT_BATCH_SIZE
from ..core.enums import ScanType
from ..core.exceptions import ScanSequenceError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import AttendanceRecord, AttendanceRow, RecentScan
from .repository import AttendanceRepository


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection, *, batch_size: int = EXPORT_BATCH_SIZE):
        self._conn_factory = conn_factory
        self._batch_size = int(batch_size)

    def get_for_student_and_session(self, *, student_id: int, session_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT attendance_id, student_id, session_id, event_id, scan_type, scanned_by, time_in, time_out
                FROM attendance
                WHERE student_id=%s AND session_id=%s
                ORDER BY created_at DESC
                LIMIT 1
                """,
                (int(student_id), int(session_id)),
            )
            r = fetchone(cur)
            if not r:
                return None
            return AttendanceRecord(
                attendance_id=int(r["attendance_id"]),
                student_id=int(r["student_id"]),
                session_id=int(r["session_id"]),
                event_id=int(r["event_id"]),
                scan_type=ScanType(r["scan_type"]),
                scanned_by=r.get("scanned_by"),
                time_in=r.get("time_in"),
                time_out=r.get("time_out"),
            )

    def create_time_in(
        self,
        *,
        student_id: int,
        session_id: int,
        event_id: int,
        scanned_by: int,
        time_in: datetime,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> int:
        """Insert the time-in record; a concurrent duplicate hits uq_attendance_student_session."""

        try:
            return self._insert_time_in(
                student_id=student_id,
                session_id=session_id,
                event_id=event_id,
                scanned_by=scanned_by,
                time_in=time_in,
                ip_address=ip_address,
                user_agent=user_agent,
            )
        except IntegrityError as exc:
            if exc.errno == errorcode.ER_DUP_ENTRY:
                raise ScanSequenceError("Already checked in for this session", duplicate=True) from exc
            raise

    def _insert_time_in(
        self,
        *,
        student_id: int,
        session_id: int,
        event_id: int,
        scanned_by: int,
        time_in: datetime,
        ip_address: Optional[str],
        user_agent: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance(
                    student_id, session_id, event_id, scan_type, scanned_by, time_in, ip_address, user_agent
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(student_id),
                    int(session_id),
                    int(event_id),
                    ScanType.TIME_IN.value,
                    int(scanned_by),
                    time_in,
                    ip_address,
                    user_agent,
                ),
            )
            return int(cur.lastrowid)

    def record_time_out(
        self,
        *,
        attendance_id: int,
        scanned_by: int,
        time_out: datetime,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance
                SET time_out=%s, scan_type=%s, scanned_by=%s, ip_address=%s, user_agent=%s
                WHERE attendance_id=%s AND time_out IS NULL
                """,
                (time_out, ScanType.TIME_OUT.value, int(scanned_by), ip_address, user_agent, int(attendance_id)),
            )
            return cur.rowcount > 0

    def scan_counts(self, session_id: int) -> tuple[int, int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT
                    COALESCE(SUM(time_in IS NOT NULL), 0) AS time_in_count,
                    COALESCE(SUM(time_out IS NOT NULL), 0) AS time_out_count
                FROM attendance
                WHERE session_id=%s
                """,
                (int(session_id),),
            )
            r = fetchone(cur) or {}
            return int(r.get("time_in_count") or 0), int(r.get("time_out_count") or 0)

    def recent_for_session(self, session_id: int, limit: int) -> Sequence[RecentScan]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT a.attendance_id, a.scan_type, a.created_at, a.time_in, a.time_out,
                       s.student_number, s.first_name, s.last_name
                FROM attendance a
                JOIN students s ON s.student_id = a.student_id
                WHERE a.session_id=%s
                ORDER BY COALESCE(a.time_out, a.time_in, a.created_at) DESC
                LIMIT %s
                """,
                (int(session_id), int(limit)),
            )
            return [
                RecentScan(
                    attendance_id=int(r["attendance_id"]),
                    student_number=r["student_number"],
                    student_name=f"{r['first_name']} {r['last_name']}".strip(),
                    scan_type=ScanType(r["scan_type"]),
                    timestamp=r.get("time_out") or r.get("time_in") or r["created_at"],
                )
                for r in fetchall(cur)
            ]

    def list_rows_for_event(
        self,
        event_id: int,
        *,
        session_ids: Sequence[int] = (),
        program_ids: Sequence[int] = (),
        years: Sequence[int] = (),
        scan_types: Sequence[ScanType] = (),
    ) -> Sequence[AttendanceRow]:
        clauses = ["a.event_id=%s"]
        params: list[object] = [int(event_id)]

        if session_ids:
            clauses.append(f"a.session_id IN ({in_clause(session_ids)})")
            params.extend(int(x) for x in session_ids)
        if program_ids:
            clauses.append(f"st.program_id IN ({in_clause(program_ids)})")
            params.extend(int(x) for x in program_ids)
        if years:
            clauses.append(f"st.year IN ({in_clause(years)})")
            params.extend(int(x) for x in years)
        if scan_types:
            clauses.append(f"a.scan_type IN ({in_clause(scan_types)})")
            params.extend(ScanType(x).value for x in scan_types)

        where = " AND ".join(clauses)
        out: list[AttendanceRow] = []
        last_id = 0

        # Keyset batches keep memory flat on large events.
        with db_cursor(self._conn_factory) as (_, cur):
            while True:
                cur.execute(
                    f"""
                    SELECT
                        a.attendance_id, a.student_id, a.session_id, a.time_in, a.time_out,
                        st.first_name, st.last_name, st.email, st.student_number, st.year,
                        p.name AS program_name,
                        se.name AS session_name, se.time_in_end
                    FROM attendance a
                    JOIN students st ON st.student_id = a.student_id
                    JOIN sessions se ON se.session_id = a.session_id
                    LEFT JOIN programs p ON p.program_id = st.program_id
                    WHERE {where} AND a.attendance_id > %s
                    ORDER BY a.attendance_id ASC
                    LIMIT %s
                    """,
                    tuple(params) + (last_id, self._batch_size),
                )
                rows = fetchall(cur)
                for r in rows:
                    out.append(
                        AttendanceRow(
                            attendance_id=int(r["attendance_id"]),
                            student_id=int(r["student_id"]),
                            first_name=r.get("first_name") or "",
                            last_name=r.get("last_name") or "",
                            email=r.get("email") or "",
                            student_number=r.get("student_number") or "",
                            program_name=r.get("program_name"),
                            year=r.get("year"),
                            session_id=int(r["session_id"]),
                            session_name=r.get("session_name") or "",
                            time_in_window_end=r.get("time_in_end"),
                            time_in=r.get("time_in"),
                            time_out=r.get("time_out"),
                        )
                    )
                if len(rows) < self._batch_size:
                    break
                last_id = out[-1].attendance_id
        return out
