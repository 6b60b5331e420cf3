from __future__ import annotations

from datetime import datetime

import pytest

from campus_attendance.attendance.status import counts_as_attended, derive_attendance_status
from campus_attendance.core.enums import AttendanceStatus

T_IN = datetime(2026, 3, 10, 9, 5)
T_OUT = datetime(2026, 3, 10, 11, 10)
WINDOW_END = datetime(2026, 3, 10, 9, 30)


def test_both_scans_is_present():
    assert derive_attendance_status(T_IN, T_OUT) == AttendanceStatus.PRESENT


def test_time_in_only_is_checked_in_only():
    assert derive_attendance_status(T_IN, None) == AttendanceStatus.CHECKED_IN_ONLY


def test_time_out_only_is_absent():
    assert derive_attendance_status(None, T_OUT) == AttendanceStatus.ABSENT


def test_no_scans_is_absent():
    assert derive_attendance_status(None, None) == AttendanceStatus.ABSENT


@pytest.mark.parametrize("time_out", [None, T_OUT])
def test_time_in_after_window_end_is_late(time_out):
    late = datetime(2026, 3, 10, 9, 31)
    assert derive_attendance_status(late, time_out, WINDOW_END) == AttendanceStatus.LATE


def test_time_in_exactly_at_window_end_is_not_late():
    assert derive_attendance_status(WINDOW_END, T_OUT, WINDOW_END) == AttendanceStatus.PRESENT


def test_iso_strings_are_accepted():
    assert derive_attendance_status("2026-03-10T09:05:00Z", "2026-03-10T11:10:00Z") == AttendanceStatus.PRESENT
    assert derive_attendance_status("2026-03-10T09:45:00Z", None, "2026-03-10T09:30:00Z") == AttendanceStatus.LATE


def test_unparseable_values_count_as_missing():
    assert derive_attendance_status("not-a-date", T_OUT) == AttendanceStatus.ABSENT
    assert derive_attendance_status(T_IN, "garbage") == AttendanceStatus.CHECKED_IN_ONLY
    assert derive_attendance_status(T_IN, T_OUT, "") == AttendanceStatus.PRESENT


def test_legacy_labels_map_onto_current_vocabulary():
    assert AttendanceStatus.parse("checked-in") == AttendanceStatus.CHECKED_IN_ONLY
    assert AttendanceStatus.parse("checked-out") == AttendanceStatus.ABSENT
    assert AttendanceStatus.parse(" Late ") == AttendanceStatus.LATE
    with pytest.raises(ValueError):
        AttendanceStatus.parse("excused")


def test_attended_statuses():
    assert counts_as_attended(AttendanceStatus.LATE)
    assert counts_as_attended(AttendanceStatus.CHECKED_IN_ONLY)
    assert not counts_as_attended(AttendanceStatus.ABSENT)
