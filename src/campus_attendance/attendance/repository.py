from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ScanType
from .model import AttendanceRecord, AttendanceRow, RecentScan


class AttendanceRepository(Protocol):
    def get_for_student_and_session(self, *, student_id: int, session_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

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
        raise NotImplementedError

    def record_time_out(
        self,
        *,
        attendance_id: int,
        scanned_by: int,
        time_out: datetime,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def scan_counts(self, session_id: int) -> tuple[int, int]:
        """(records with a time-in, records with a time-out) for one session."""

        raise NotImplementedError

    def recent_for_session(self, session_id: int, limit: int) -> Sequence[RecentScan]:
        raise NotImplementedError

    def list_rows_for_event(
        self,
        event_id: int,
        *,
        session_ids: Sequence[int] = (),
        program_ids: Sequence[int] = (),
        years: Sequence[int] = (),
        scan_types: Sequence[ScanType] = (),
    ) -> Sequence[AttendanceRow]:
        raise NotImplementedError
