from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import ScanType


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one student's scans for one session.

    Created by the time-in scan, completed by the time-out scan.
    """

    attendance_id: int
    student_id: int
    session_id: int
    event_id: int
    scan_type: ScanType
    time_in: Optional[datetime] = None
    time_out: Optional[datetime] = None
    scanned_by: Optional[int] = None


@dataclass(frozen=True)
class AttendanceRow:
    """Read-model for listings and exports (student and session joined in)."""

    attendance_id: int
    student_id: int
    first_name: str
    last_name: str
    email: str
    student_number: str
    program_name: Optional[str]
    year: Optional[int]
    session_id: int
    session_name: str
    time_in_window_end: Optional[datetime]
    time_in: Optional[datetime]
    time_out: Optional[datetime]

    @property
    def student_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p).strip()


@dataclass(frozen=True)
class RecentScan:
    attendance_id: int
    student_number: str
    student_name: str
    scan_type: ScanType
    timestamp: datetime
