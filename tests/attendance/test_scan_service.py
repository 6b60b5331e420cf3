from __future__ import annotations

from dataclasses import replace
from datetime import timedelta

import pytest

from campus_attendance.attendance.scan import ScanService, determine_scan_type
from campus_attendance.core.enums import ScanType
from campus_attendance.core.exceptions import AuthorizationError, NotFoundError, ScanSequenceError, ValidationError
from tests.fakes import DAY, EVENT, ORGANIZER, Store, morning_session


def _service(store: Store) -> ScanService:
    return ScanService(store.attendance, store.sessions, store.events, store.students, store.organizers)


def at(hhmm: str):
    h, m = (int(x) for x in hhmm.split(":"))
    return DAY.replace(hour=h, minute=m)


@pytest.mark.parametrize(
    "now, allowed, scan_type",
    [
        ("08:59", False, None),
        ("09:00", True, ScanType.TIME_IN),
        ("09:45", True, ScanType.TIME_IN),
        ("11:00", True, ScanType.TIME_OUT),
        ("11:29", True, ScanType.TIME_OUT),
        ("11:30", False, None),
    ],
)
def test_determine_scan_type(now, allowed, scan_type):
    decision = determine_scan_type(morning_session(), EVENT, at(now))
    assert decision.allowed is allowed
    assert decision.scan_type == scan_type


def test_inactive_session_or_event_blocks_scans():
    session = morning_session()
    assert not determine_scan_type(replace(session, is_active=False), EVENT, at("09:10")).allowed
    assert not determine_scan_type(session, replace(EVENT, is_active=False), at("09:10")).allowed


def test_session_without_time_out_window_stays_on_time_in():
    session = replace(morning_session(), time_out=None)
    assert determine_scan_type(session, EVENT, at("17:00")).scan_type == ScanType.TIME_IN


def test_time_in_then_time_out():
    store = Store()
    svc = _service(store)

    first = svc.process_scan(qr_data="DTP:STUDENT:1", session_id=1, organizer_id=ORGANIZER.organizer_id, now=at("09:10"))
    assert first.scan_type == ScanType.TIME_IN
    assert first.record.time_in == at("09:10")
    assert first.message == "Successfully processed time_in scan"

    second = svc.process_scan(qr_data="dtp:student:1", session_id=1, organizer_id=ORGANIZER.organizer_id, now=at("11:05"))
    assert second.scan_type == ScanType.TIME_OUT
    assert second.record.attendance_id == first.record.attendance_id

    stored = store.attendance.get_for_student_and_session(student_id=1, session_id=1)
    assert stored.time_in == at("09:10")
    assert stored.time_out == at("11:05")


def test_duplicate_time_in_is_rejected_as_duplicate():
    svc = _service(Store())
    svc.process_scan(qr_data="DTP:STUDENT:1", session_id=1, organizer_id=2, now=at("09:10"))

    with pytest.raises(ScanSequenceError) as exc:
        svc.process_scan(qr_data="DTP:STUDENT:1", session_id=1, organizer_id=2, now=at("09:12"))
    assert exc.value.duplicate


def test_time_out_without_time_in_is_out_of_order():
    store = Store()
    with pytest.raises(ScanSequenceError) as exc:
        _service(store).process_scan(qr_data="DTP:STUDENT:1", session_id=1, organizer_id=2, now=at("11:05"))

    assert not exc.value.duplicate
    assert store.attendance.get_for_student_and_session(student_id=1, session_id=1) is None


def test_duplicate_time_out_is_rejected():
    store = Store()
    store.attendance.add(student_id=1, session_id=1, event_id=1, time_in=at("09:05"), time_out=at("11:01"))

    with pytest.raises(ScanSequenceError) as exc:
        _service(store).process_scan(qr_data="DTP:STUDENT:1", session_id=1, organizer_id=2, now=at("11:10"))
    assert exc.value.duplicate


def test_scan_outside_windows_is_a_validation_error():
    with pytest.raises(ValidationError):
        _service(Store()).process_scan(qr_data="DTP:STUDENT:1", session_id=1, organizer_id=2, now=at("08:00"))


@pytest.mark.parametrize("qr", ["", "hello", "DTP:EVENT:1", "DTP:STUDENT:abc", "XYZ:STUDENT:1"])
def test_bad_qr_codes(qr):
    with pytest.raises(ValidationError):
        _service(Store()).process_scan(qr_data=qr, session_id=1, organizer_id=2, now=at("09:10"))


def test_unknown_student():
    with pytest.raises(NotFoundError):
        _service(Store()).process_scan(qr_data="DTP:STUDENT:999", session_id=1, organizer_id=2, now=at("09:10"))


def test_unknown_session():
    with pytest.raises(NotFoundError):
        _service(Store()).process_scan(qr_data="DTP:STUDENT:1", session_id=42, organizer_id=2, now=at("09:10"))


def test_unassigned_organizer_is_forbidden():
    store = Store(assignments=())
    with pytest.raises(AuthorizationError):
        _service(store).process_scan(qr_data="DTP:STUDENT:1", session_id=1, organizer_id=2, now=at("09:10"))


def test_admin_may_scan_any_event():
    store = Store(assignments=())
    result = _service(store).process_scan(qr_data="DTP:STUDENT:1", session_id=1, organizer_id=1, now=at("09:10"))
    assert result.scan_type == ScanType.TIME_IN


def test_unknown_organizer_is_forbidden():
    with pytest.raises(AuthorizationError):
        _service(Store()).process_scan(qr_data="DTP:STUDENT:1", session_id=1, organizer_id=77, now=at("09:10"))


def test_scan_status_lists_recent_scans_newest_first():
    store = Store()
    svc = _service(store)
    for i, sid in enumerate((1, 2, 3)):
        svc.process_scan(
            qr_data=f"DTP:STUDENT:{sid}",
            session_id=1,
            organizer_id=2,
            now=at("09:05") + timedelta(minutes=i),
        )

    status = svc.scan_status(session_id=1, organizer_id=2)
    assert status.total_scans == 3
    assert [r.student_number for r in status.recent_scans] == ["2021-0003", "2021-0002", "2021-0001"]
    assert status.event.name == EVENT.name


def test_default_clock_is_used_when_now_is_omitted():
    store = Store()
    svc = ScanService(
        store.attendance,
        store.sessions,
        store.events,
        store.students,
        store.organizers,
        clock=lambda: at("09:20"),
    )
    result = svc.process_scan(qr_data="DTP:STUDENT:4", session_id=1, organizer_id=2)
    assert result.timestamp == at("09:20")
