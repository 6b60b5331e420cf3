from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Sequence

from ..common.datetime_utils import to_iso
from ..common.validators import clamp
from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..core.enums import AttendanceStatus, ScanType
from ..core.exceptions import NotFoundError, ValidationError
from ..events.repository import EventRepository
from ..sessions.repository import SessionRepository
from ..students.repository import StudentRepository
from .model import AttendanceRow
from .repository import AttendanceRepository
from .status import counts_as_attended, derive_attendance_status

SORT_FIELDS = ("name", "status", "checkInAt")

_STATUS_ORDER = {
    AttendanceStatus.PRESENT: 0,
    AttendanceStatus.LATE: 1,
    AttendanceStatus.CHECKED_IN_ONLY: 2,
    AttendanceStatus.ABSENT: 3,
}


@dataclass(frozen=True)
class AttendanceQuery:
    session_ids: Sequence[int] = ()
    statuses: Sequence[AttendanceStatus] = ()
    q: str = ""
    sort: str = "name"
    order: str = "asc"
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    program_ids: Sequence[int] = ()
    years: Sequence[int] = ()
    scan_types: Sequence[ScanType] = ()

    def normalized(self) -> "AttendanceQuery":
        if self.sort not in SORT_FIELDS:
            raise ValidationError(f"Unsupported sort field: {self.sort}")
        order = (self.order or "asc").lower()
        if order not in ("asc", "desc"):
            raise ValidationError(f"Unsupported sort order: {self.order}")
        return AttendanceQuery(
            session_ids=tuple(self.session_ids),
            statuses=tuple(self.statuses),
            q=(self.q or "").strip(),
            sort=self.sort,
            order=order,
            page=max(int(self.page), 1),
            page_size=clamp(int(self.page_size), 1, MAX_PAGE_SIZE),
            program_ids=tuple(self.program_ids),
            years=tuple(self.years),
            scan_types=tuple(self.scan_types),
        )


@dataclass(frozen=True)
class StatusedRow:
    row: AttendanceRow
    status: AttendanceStatus

    def to_dict(self) -> dict[str, Any]:
        r = self.row
        return {
            "id": r.attendance_id,
            "studentId": r.student_id,
            "studentNumber": r.student_number,
            "name": r.student_name,
            "email": r.email,
            "program": r.program_name,
            "year": r.year,
            "sessionId": r.session_id,
            "sessionName": r.session_name,
            "checkInAt": to_iso(r.time_in),
            "checkOutAt": to_iso(r.time_out),
            "status": self.status.value,
        }


@dataclass(frozen=True)
class AttendanceKpis:
    registered: int
    present: int
    checked_in_only: int
    late: int
    absent: int
    attendance_rate_percent: int

    def to_dict(self) -> dict[str, int]:
        return {
            "registered": self.registered,
            "present": self.present,
            "checkedInOnly": self.checked_in_only,
            "late": self.late,
            "absent": self.absent,
            "attendanceRatePercent": self.attendance_rate_percent,
        }


@dataclass(frozen=True)
class SessionAggregate:
    session_id: int
    name: str
    present: int = 0
    checked_in_only: int = 0
    late: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "name": self.name,
            "present": self.present,
            "checkedInOnly": self.checked_in_only,
            "late": self.late,
        }


@dataclass(frozen=True)
class AttendancePage:
    items: Sequence[StatusedRow]
    total: int
    page: int
    page_size: int
    kpis: AttendanceKpis
    sessions: Sequence[SessionAggregate] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [i.to_dict() for i in self.items],
            "total": self.total,
            "page": self.page,
            "pageSize": self.page_size,
            "kpis": self.kpis.to_dict(),
            "sessions": [s.to_dict() for s in self.sessions],
        }


def compute_kpis(rows: Iterable[StatusedRow], registered: int) -> AttendanceKpis:
    present = checked_in_only = late = 0
    attended: set[int] = set()
    for item in rows:
        if item.status == AttendanceStatus.PRESENT:
            present += 1
        elif item.status == AttendanceStatus.CHECKED_IN_ONLY:
            checked_in_only += 1
        elif item.status == AttendanceStatus.LATE:
            late += 1
        if counts_as_attended(item.status):
            attended.add(item.row.student_id)

    registered = max(int(registered), 0)
    rate = 0
    if registered:
        rate = min(round(len(attended) / registered * 100), 100)
    return AttendanceKpis(
        registered=registered,
        present=present,
        checked_in_only=checked_in_only,
        late=late,
        absent=max(registered - len(attended), 0),
        attendance_rate_percent=rate,
    )


def _matches(item: StatusedRow, needle: str) -> bool:
    r = item.row
    haystack = (r.student_name, r.email, r.student_number)
    return any(needle in (h or "").lower() for h in haystack)


def _sort_key(sort: str):
    if sort == "status":
        return lambda i: (_STATUS_ORDER[i.status], i.row.last_name.lower(), i.row.first_name.lower())
    return lambda i: (i.row.last_name.lower(), i.row.first_name.lower())


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        events: EventRepository,
        sessions: SessionRepository,
        students: StudentRepository,
    ):
        self._attendance = attendance
        self._events = events
        self._sessions = sessions
        self._students = students

    def filtered_rows(self, event_id: int, query: Optional[AttendanceQuery] = None) -> list[StatusedRow]:
        """All rows of an event matching `query`, sorted, without paging."""

        query = (query or AttendanceQuery()).normalized()
        if not self._events.get_by_id(int(event_id)):
            raise NotFoundError("Event not found")

        rows = self._attendance.list_rows_for_event(
            int(event_id),
            session_ids=query.session_ids,
            program_ids=query.program_ids,
            years=query.years,
            scan_types=query.scan_types,
        )
        items = [StatusedRow(r, derive_attendance_status(r.time_in, r.time_out, r.time_in_window_end)) for r in rows]

        if query.statuses:
            wanted = set(query.statuses)
            items = [i for i in items if i.status in wanted]
        if query.q:
            needle = query.q.lower()
            items = [i for i in items if _matches(i, needle)]

        if query.sort == "checkInAt":
            # Rows without a time-in always go last.
            with_time = sorted(
                (i for i in items if i.row.time_in),
                key=lambda i: i.row.time_in,
                reverse=query.order == "desc",
            )
            items = with_time + [i for i in items if not i.row.time_in]
        else:
            items.sort(key=_sort_key(query.sort), reverse=query.order == "desc")
        return items

    def list_for_event(self, event_id: int, query: Optional[AttendanceQuery] = None) -> AttendancePage:
        query = (query or AttendanceQuery()).normalized()
        items = self.filtered_rows(event_id, query)
        # KPIs and per-session panels describe the whole event, not the current filter.
        everything = self.filtered_rows(event_id, AttendanceQuery())

        start = (query.page - 1) * query.page_size
        return AttendancePage(
            items=items[start : start + query.page_size],
            total=len(items),
            page=query.page,
            page_size=query.page_size,
            kpis=compute_kpis(everything, self._students.count()),
            sessions=self.session_aggregates(event_id, everything),
        )

    def session_aggregates(self, event_id: int, items: Sequence[StatusedRow]) -> list[SessionAggregate]:
        counts: dict[int, dict[AttendanceStatus, int]] = {}
        for i in items:
            bucket = counts.setdefault(i.row.session_id, {})
            bucket[i.status] = bucket.get(i.status, 0) + 1

        out: list[SessionAggregate] = []
        for s in self._sessions.list_for_event(int(event_id)):
            bucket = counts.get(s.session_id, {})
            out.append(
                SessionAggregate(
                    session_id=s.session_id,
                    name=s.name,
                    present=bucket.get(AttendanceStatus.PRESENT, 0),
                    checked_in_only=bucket.get(AttendanceStatus.CHECKED_IN_ONLY, 0),
                    late=bucket.get(AttendanceStatus.LATE, 0),
                )
            )
        return out
