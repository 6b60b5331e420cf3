"""In-memory repositories shared by the service and HTTP tests."""
from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime

from campus_attendance.attendance.model import AttendanceRecord, AttendanceRow, RecentScan
from campus_attendance.core.enums import Role, ScanType
from campus_attendance.events.model import Event, EventCounts
from campus_attendance.sessions.model import Session, SessionDraft, TimeWindow
from campus_attendance.students.model import Student
from campus_attendance.users.model import Organizer


def window(day: datetime, start: str, end: str) -> TimeWindow:
    """`window(DAY, "09:00", "09:30")` on the given date."""

    sh, sm = (int(x) for x in start.split(":"))
    eh, em = (int(x) for x in end.split(":"))
    return TimeWindow(day.replace(hour=sh, minute=sm), day.replace(hour=eh, minute=em))


class FakeEventsRepo:
    def __init__(self, events=()):
        self._events = {e.event_id: e for e in events}
        self._next_id = max(self._events, default=0) + 1
        self.counts = EventCounts(0, 0, 0, 0, 0, 0)

    def get_by_id(self, event_id):
        return self._events.get(int(event_id))

    def list_all(self, *, active_only=False):
        return [e for e in self._events.values() if e.is_active or not active_only]

    def create(self, *, name, start_date, end_date, description=None):
        eid = self._next_id
        self._next_id += 1
        self._events[eid] = Event(eid, name, start_date, end_date, True, description)
        return eid

    def set_active(self, event_id, *, is_active):
        self._events[int(event_id)] = replace(self._events[int(event_id)], is_active=is_active)
        return True

    def get_counts(self):
        return self.counts


class FakeSessionsRepo:
    def __init__(self, sessions=()):
        self._sessions = {s.session_id: s for s in sessions}
        self._next_id = max(self._sessions, default=0) + 1
        self.fail_reads = False

    def get_by_id(self, session_id):
        return self._sessions.get(int(session_id))

    def list_active_for_event(self, event_id):
        if self.fail_reads:
            raise ConnectionError("database unavailable")
        return [s for s in self._sessions.values() if s.event_id == int(event_id) and s.is_active]

    def list_for_event(self, event_id):
        return [s for s in self._sessions.values() if s.event_id == int(event_id)]

    def create(self, draft: SessionDraft):
        sid = self._next_id
        self._next_id += 1
        self._sessions[sid] = Session(
            session_id=sid,
            event_id=draft.event_id,
            name=draft.name,
            time_in=draft.time_in,
            time_out=draft.time_out,
            is_active=draft.is_active,
            description=draft.description,
        )
        return sid

    def update(self, session_id, draft: SessionDraft):
        if int(session_id) not in self._sessions:
            return False
        self._sessions[int(session_id)] = Session(
            session_id=int(session_id),
            event_id=draft.event_id,
            name=draft.name,
            time_in=draft.time_in,
            time_out=draft.time_out,
            is_active=draft.is_active,
            description=draft.description,
        )
        return True

    def delete(self, session_id):
        return self._sessions.pop(int(session_id), None) is not None

    def count(self):
        return len(self._sessions)


class FakeStudentsRepo:
    def __init__(self, students=()):
        self._students = {s.student_id: s for s in students}

    def get_by_id(self, student_id):
        return self._students.get(int(student_id))

    def count(self):
        return sum(1 for s in self._students.values() if s.is_active)


class FakeOrganizersRepo:
    def __init__(self, organizers=(), assignments=()):
        self._organizers = {o.organizer_id: o for o in organizers}
        self._assignments = set(assignments)

    def get_by_id(self, organizer_id):
        return self._organizers.get(int(organizer_id))

    def get_by_email(self, email):
        for o in self._organizers.values():
            if o.email == email:
                return o
        return None

    def is_assigned_to_event(self, *, organizer_id, event_id):
        return (int(organizer_id), int(event_id)) in self._assignments


class FakeAttendanceRepo:
    def __init__(self, students: FakeStudentsRepo, sessions: FakeSessionsRepo):
        self._students = students
        self._sessions = sessions
        self._records: dict[int, AttendanceRecord] = {}
        self._next_id = 1

    def add(self, *, student_id, session_id, event_id, time_in=None, time_out=None):
        """Test helper: store a record directly."""

        rid = self._next_id
        self._next_id += 1
        self._records[rid] = AttendanceRecord(
            attendance_id=rid,
            student_id=student_id,
            session_id=session_id,
            event_id=event_id,
            scan_type=ScanType.TIME_OUT if time_out else ScanType.TIME_IN,
            time_in=time_in,
            time_out=time_out,
        )
        return rid

    def get_for_student_and_session(self, *, student_id, session_id):
        for r in self._records.values():
            if r.student_id == int(student_id) and r.session_id == int(session_id):
                return r
        return None

    def create_time_in(self, *, student_id, session_id, event_id, scanned_by, time_in, ip_address=None, user_agent=None):
        rid = self.add(student_id=student_id, session_id=session_id, event_id=event_id, time_in=time_in)
        self._records[rid] = replace(self._records[rid], scanned_by=scanned_by)
        return rid

    def record_time_out(self, *, attendance_id, scanned_by, time_out, ip_address=None, user_agent=None):
        r = self._records.get(int(attendance_id))
        if r is None or r.time_out is not None:
            return False
        self._records[r.attendance_id] = replace(r, time_out=time_out, scan_type=ScanType.TIME_OUT, scanned_by=scanned_by)
        return True

    def scan_counts(self, session_id):
        rows = [r for r in self._records.values() if r.session_id == int(session_id)]
        return sum(1 for r in rows if r.time_in), sum(1 for r in rows if r.time_out)

    def recent_for_session(self, session_id, limit):
        rows = [r for r in self._records.values() if r.session_id == int(session_id)]
        rows.sort(key=lambda r: r.time_out or r.time_in, reverse=True)
        out = []
        for r in rows[:limit]:
            st = self._students.get_by_id(r.student_id)
            out.append(RecentScan(r.attendance_id, st.student_number, st.full_name, r.scan_type, r.time_out or r.time_in))
        return out

    def list_rows_for_event(self, event_id, *, session_ids=(), program_ids=(), years=(), scan_types=()):
        out = []
        for r in self._records.values():
            if r.event_id != int(event_id):
                continue
            if session_ids and r.session_id not in session_ids:
                continue
            if scan_types and r.scan_type not in scan_types:
                continue
            st = self._students.get_by_id(r.student_id)
            if years and st.year not in years:
                continue
            se = self._sessions.get_by_id(r.session_id)
            out.append(
                AttendanceRow(
                    attendance_id=r.attendance_id,
                    student_id=st.student_id,
                    first_name=st.first_name,
                    last_name=st.last_name,
                    email=st.email,
                    student_number=st.student_number,
                    program_name=st.program_name,
                    year=st.year,
                    session_id=r.session_id,
                    session_name=se.name,
                    time_in_window_end=se.time_in.end,
                    time_in=r.time_in,
                    time_out=r.time_out,
                )
            )
        return out


DAY = datetime(2026, 3, 10)
EVENT = Event(1, "Tech Week 2026", date(2026, 3, 10), date(2026, 3, 12))
ADMIN = Organizer(1, "admin@example.edu", "Ada Admin", Role.ADMIN)
ORGANIZER = Organizer(2, "org@example.edu", "Oscar Organizer", Role.ORGANIZER)
STUDENTS = (
    Student(1, "2021-0001", "Ana", "Reyes", "ana@example.edu", "BSIT", 3),
    Student(2, "2021-0002", "Ben", "Cruz", "ben@example.edu", "BSCPE", 2),
    Student(3, "2021-0003", "Carla", "Santos", "carla@example.edu", "BSIT", 1),
    Student(4, "2021-0004", "Dan", "Lim", "dan@example.edu", "BSIT", 4),
)


def morning_session(session_id=1, name="Morning Keynote"):
    return Session(
        session_id=session_id,
        event_id=EVENT.event_id,
        name=name,
        time_in=window(DAY, "09:00", "09:30"),
        time_out=window(DAY, "11:00", "11:30"),
    )


class Store:
    """All fake repositories for one test, pre-filled with a small event."""

    def __init__(self, *, sessions=None, assignments=((2, 1),)):
        self.events = FakeEventsRepo([EVENT])
        self.sessions = FakeSessionsRepo([morning_session()] if sessions is None else sessions)
        self.students = FakeStudentsRepo(STUDENTS)
        self.organizers = FakeOrganizersRepo([ADMIN, ORGANIZER], assignments)
        self.attendance = FakeAttendanceRepo(self.students, self.sessions)
