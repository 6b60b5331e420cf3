"""Attendance status derivation.

The label is computed from the two scan timestamps and, when known, the end of
the session's time-in window. It is never stored.
"""
from __future__ import annotations

from ..common.datetime_utils import TimestampLike, coerce_timestamp
from ..core.enums import AttendanceStatus


def derive_attendance_status(
    time_in: TimestampLike,
    time_out: TimestampLike,
    window_end: TimestampLike = None,
) -> AttendanceStatus:
    """Map scan times to a status label.

    Unparseable values count as missing. A record holding only a time-out is
    reported as absent rather than partially present.
    """

    checked_in = coerce_timestamp(time_in)
    checked_out = coerce_timestamp(time_out)
    deadline = coerce_timestamp(window_end)

    if checked_in is None:
        return AttendanceStatus.ABSENT

    if deadline is not None and checked_in > deadline:
        return AttendanceStatus.LATE

    if checked_out is not None:
        return AttendanceStatus.PRESENT
    return AttendanceStatus.CHECKED_IN_ONLY


def counts_as_attended(status: AttendanceStatus) -> bool:
    return status in (AttendanceStatus.PRESENT, AttendanceStatus.CHECKED_IN_ONLY, AttendanceStatus.LATE)
