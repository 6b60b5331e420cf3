from __future__ import annotations

import pytest

from campus_attendance.attendance.service import AttendanceQuery, AttendanceService, compute_kpis
from campus_attendance.core.enums import AttendanceStatus
from campus_attendance.core.exceptions import NotFoundError, ValidationError
from campus_attendance.sessions.model import Session
from tests.fakes import DAY, Store, morning_session, window


def at(hhmm: str):
    h, m = (int(x) for x in hhmm.split(":"))
    return DAY.replace(hour=h, minute=m)


@pytest.fixture
def store() -> Store:
    afternoon = Session(
        session_id=2,
        event_id=1,
        name="Afternoon Workshop",
        time_in=window(DAY, "13:00", "13:30"),
        time_out=window(DAY, "15:00", "15:30"),
    )
    s = Store(sessions=[morning_session(), afternoon])
    # Ana: present, Ben: late (still in), Carla: checked-in only. Dan never came.
    s.attendance.add(student_id=1, session_id=1, event_id=1, time_in=at("09:05"), time_out=at("11:05"))
    s.attendance.add(student_id=2, session_id=1, event_id=1, time_in=at("09:40"))
    s.attendance.add(student_id=3, session_id=1, event_id=1, time_in=at("09:10"))
    s.attendance.add(student_id=1, session_id=2, event_id=1, time_in=at("13:01"), time_out=at("15:02"))
    return s


def _service(store: Store) -> AttendanceService:
    return AttendanceService(store.attendance, store.events, store.sessions, store.students)


def test_listing_derives_status_with_session_deadline(store):
    page = _service(store).list_for_event(1)
    by_key = {(i.row.student_number, i.row.session_id): i.status for i in page.items}

    assert by_key[("2021-0001", 1)] == AttendanceStatus.PRESENT
    assert by_key[("2021-0002", 1)] == AttendanceStatus.LATE
    assert by_key[("2021-0003", 1)] == AttendanceStatus.CHECKED_IN_ONLY
    assert page.total == 4


def test_kpis(store):
    kpis = _service(store).list_for_event(1).kpis
    assert kpis.registered == 4
    assert kpis.present == 2
    assert kpis.late == 1
    assert kpis.checked_in_only == 1
    # three distinct students attended out of four
    assert kpis.absent == 1
    assert kpis.attendance_rate_percent == 75


def test_kpis_with_no_registered_students():
    kpis = compute_kpis([], 0)
    assert kpis.absent == 0
    assert kpis.attendance_rate_percent == 0


def test_filter_by_status_and_session(store):
    svc = _service(store)
    page = svc.list_for_event(1, AttendanceQuery(statuses=[AttendanceStatus.PRESENT]))
    assert {(i.row.student_id, i.row.session_id) for i in page.items} == {(1, 1), (1, 2)}

    page = svc.list_for_event(1, AttendanceQuery(session_ids=[2]))
    assert [i.row.session_name for i in page.items] == ["Afternoon Workshop"]


def test_search_matches_name_email_and_student_number(store):
    svc = _service(store)
    assert {i.row.student_id for i in svc.list_for_event(1, AttendanceQuery(q="CARLA")).items} == {3}
    assert {i.row.student_id for i in svc.list_for_event(1, AttendanceQuery(q="ben@")).items} == {2}
    assert {i.row.student_id for i in svc.list_for_event(1, AttendanceQuery(q="0001")).items} == {1}
    assert svc.list_for_event(1, AttendanceQuery(q="nobody")).total == 0


def test_sort_by_name_uses_last_name(store):
    items = _service(store).list_for_event(1, AttendanceQuery(session_ids=[1])).items
    assert [i.row.last_name for i in items] == ["Cruz", "Reyes", "Santos"]


def test_sort_by_status(store):
    items = _service(store).list_for_event(1, AttendanceQuery(session_ids=[1], sort="status")).items
    assert [i.status for i in items] == [
        AttendanceStatus.PRESENT,
        AttendanceStatus.LATE,
        AttendanceStatus.CHECKED_IN_ONLY,
    ]


def test_sort_by_check_in_desc(store):
    items = _service(store).list_for_event(1, AttendanceQuery(sort="checkInAt", order="desc")).items
    assert [i.row.time_in for i in items] == [at("13:01"), at("09:40"), at("09:10"), at("09:05")]


def test_paging_and_page_size_clamp(store):
    svc = _service(store)
    page = svc.list_for_event(1, AttendanceQuery(page=2, page_size=3))
    assert page.total == 4
    assert len(page.items) == 1

    assert svc.list_for_event(1, AttendanceQuery(page_size=500)).page_size == 100
    assert svc.list_for_event(1, AttendanceQuery(page_size=0)).page_size == 1
    assert svc.list_for_event(1, AttendanceQuery(page=-3)).page == 1


def test_per_session_aggregates(store):
    sessions = {s.session_id: s for s in _service(store).list_for_event(1).sessions}
    assert sessions[1].present == 1
    assert sessions[1].late == 1
    assert sessions[1].checked_in_only == 1
    assert sessions[2].present == 1


def test_kpis_and_session_panels_ignore_list_filters(store):
    svc = _service(store)
    unfiltered = svc.list_for_event(1)

    for query in (
        AttendanceQuery(statuses=[AttendanceStatus.PRESENT]),
        AttendanceQuery(q="ben"),
        AttendanceQuery(session_ids=[2], q="nobody"),
    ):
        page = svc.list_for_event(1, query)
        assert page.kpis == unfiltered.kpis
        assert page.sessions == unfiltered.sessions

    assert svc.list_for_event(1, AttendanceQuery(q="ben")).total == 1


def test_unknown_sort_is_rejected(store):
    with pytest.raises(ValidationError):
        _service(store).list_for_event(1, AttendanceQuery(sort="email"))


def test_unknown_event(store):
    with pytest.raises(NotFoundError):
        _service(store).list_for_event(999)


def test_page_serializes_camel_case(store):
    body = _service(store).list_for_event(1, AttendanceQuery(session_ids=[1], q="ana")).to_dict()
    assert body["kpis"]["checkedInOnly"] == 1
    assert body["items"][0]["checkInAt"] == "2026-03-10T09:05:00Z"
    assert body["items"][0]["status"] == "present"
