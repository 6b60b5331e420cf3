from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..attendance.service import AttendanceQuery, AttendanceService, StatusedRow
from ..common.datetime_utils import format_in_timezone
from ..core.constants import DEFAULT_EVENT_TIMEZONE
from ..core.exceptions import NotFoundError, ValidationError
from ..events.repository import EventRepository
from .writers import CSV_MIMETYPE, XLSX_MIMETYPE, sanitize_filename, write_csv, write_xlsx

logger = logging.getLogger(__name__)

FORMATS = ("csv", "xlsx")

_STATUS_LABELS = {
    "present": "Present",
    "checked-in-only": "Checked in only",
    "late": "Late",
    "absent": "Absent",
}


@dataclass(frozen=True)
class ExportFile:
    filename: str
    mimetype: str
    content: bytes


class AttendanceExportService:
    def __init__(self, attendance: AttendanceService, events: EventRepository, *, timezone: str = DEFAULT_EVENT_TIMEZONE):
        self._attendance = attendance
        self._events = events
        self._timezone = timezone

    def _to_export_row(self, item: StatusedRow) -> dict[str, object]:
        r = item.row
        return {
            "Name": r.student_name,
            "Email": r.email,
            "Student/ID": r.student_number,
            "Program": r.program_name or "",
            "Year": r.year if r.year is not None else "",
            "Status": _STATUS_LABELS[item.status.value],
            "Check-in": format_in_timezone(r.time_in, self._timezone),
            "Check-out": format_in_timezone(r.time_out, self._timezone),
            "Session": r.session_name,
        }

    def build_export(self, event_id: int, query: Optional[AttendanceQuery] = None, fmt: str = "csv") -> ExportFile:
        fmt = (fmt or "csv").lower()
        if fmt not in FORMATS:
            raise ValidationError(f"Unsupported export format: {fmt}")

        event = self._events.get_by_id(int(event_id))
        if not event:
            raise NotFoundError("Event not found")

        items = self._attendance.filtered_rows(event.event_id, query)
        stem = f"attendance-{sanitize_filename(event.name)}"
        logger.info("Exporting %d attendance rows for event %s as %s", len(items), event.event_id, fmt)

        if fmt == "csv":
            content = write_csv([self._to_export_row(i) for i in items])
            return ExportFile(filename=f"{stem}.csv", mimetype=CSV_MIMETYPE, content=content)

        by_session: dict[int, list[StatusedRow]] = {}
        for i in items:
            by_session.setdefault(i.row.session_id, []).append(i)

        if len(by_session) <= 1:
            sheets = [("Attendance", [self._to_export_row(i) for i in items])]
        else:
            sheets = [
                (rows[0].row.session_name, [self._to_export_row(i) for i in rows]) for rows in by_session.values()
            ]
        return ExportFile(filename=f"{stem}.xlsx", mimetype=XLSX_MIMETYPE, content=write_xlsx(sheets))
