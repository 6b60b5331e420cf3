from __future__ import annotations

import pytest

from campus_attendance.core.enums import SubmitState
from campus_attendance.core.exceptions import ConflictError, ValidationError
from campus_attendance.sessions.conflicts import ConflictResult
from campus_attendance.sessions.form import DebouncedConflictCheck, SubmissionFlow
from campus_attendance.sessions.model import SessionDraft
from tests.fakes import DAY, EVENT, window


class FakeTimer:
    """Stands in for threading.Timer; tests fire it by hand."""

    created: list["FakeTimer"] = []

    def __init__(self, interval, function, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = args or ()
        self.kwargs = kwargs or {}
        self.daemon = False
        self.started = False
        self.cancelled = False
        FakeTimer.created.append(self)

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled:
            self.function(*self.args, **self.kwargs)


@pytest.fixture(autouse=True)
def _reset_timers():
    FakeTimer.created = []
    yield


def _draft(start="09:00", end="09:30"):
    return SessionDraft(event_id=EVENT.event_id, name="Keynote", time_in=window(DAY, start, end))


def test_schedule_waits_for_the_debounce_delay():
    calls, results = [], []
    debouncer = DebouncedConflictCheck(
        lambda d: calls.append(d) or ConflictResult.none(),
        results.append,
        timer_factory=FakeTimer,
    )

    assert debouncer.schedule(_draft())
    assert calls == []
    assert FakeTimer.created[0].interval == 0.5
    assert FakeTimer.created[0].daemon

    FakeTimer.created[0].fire()
    assert len(calls) == 1
    assert results == [ConflictResult.none()]
    assert not debouncer.pending


def test_new_schedule_cancels_pending_check():
    calls = []
    debouncer = DebouncedConflictCheck(lambda d: calls.append(d) or ConflictResult.none(), lambda r: None, timer_factory=FakeTimer)

    debouncer.schedule(_draft("09:00", "09:30"))
    debouncer.schedule(_draft("09:00", "09:45"))

    first, second = FakeTimer.created
    assert first.cancelled
    first.fire()
    second.fire()
    assert [d.time_in.end.minute for d in calls] == [45]


def test_unchanged_windows_are_not_rechecked():
    calls = []
    debouncer = DebouncedConflictCheck(lambda d: calls.append(d) or ConflictResult.none(), lambda r: None, timer_factory=FakeTimer)

    debouncer.schedule(_draft())
    FakeTimer.created[0].fire()

    assert debouncer.schedule(_draft()) is False
    assert len(FakeTimer.created) == 1


def test_trigger_during_in_flight_check_is_dropped():
    results = []
    holder = {}

    def check(draft):
        # a second timer fires while this check is still running
        holder["debouncer"].schedule(_draft("10:00", "10:30"))
        FakeTimer.created[-1].fire()
        return ConflictResult(has_conflict=True, conflicting_sessions=("Session A",))

    debouncer = DebouncedConflictCheck(check, results.append, timer_factory=FakeTimer)
    holder["debouncer"] = debouncer

    debouncer.schedule(_draft())
    FakeTimer.created[0].fire()

    assert results == [ConflictResult(has_conflict=True, conflicting_sessions=("Session A",))]
    assert not debouncer.in_flight


def test_validation_error_is_not_reported_as_conflict():
    results = []

    def check(draft):
        raise ValidationError("Invalid session time windows", details=["Time-in window must be at least 15 minutes"])

    debouncer = DebouncedConflictCheck(check, results.append, timer_factory=FakeTimer)
    debouncer.schedule(_draft("09:00", "09:05"))
    FakeTimer.created[0].fire()

    assert results == [ConflictResult.none()]


def test_cancel_drops_pending_check():
    debouncer = DebouncedConflictCheck(lambda d: ConflictResult.none(), lambda r: None, timer_factory=FakeTimer)
    debouncer.schedule(_draft())
    debouncer.cancel()
    assert FakeTimer.created[0].cancelled
    assert not debouncer.pending


def test_submission_success_then_auto_reset():
    states = []
    flow = SubmissionFlow(timer_factory=FakeTimer, on_change=states.append)

    assert flow.submit(lambda: 42) == 42
    assert flow.state == SubmitState.SUCCESS
    assert FakeTimer.created[-1].interval == 1.5

    FakeTimer.created[-1].fire()
    assert flow.state == SubmitState.IDLE
    assert states == [SubmitState.SUBMITTING, SubmitState.SUCCESS, SubmitState.IDLE]


@pytest.mark.parametrize(
    "error, state, delay",
    [
        (ConflictError("Time windows conflict with existing sessions", ["Session A"]), SubmitState.CONFLICT, 2.0),
        (RuntimeError("boom"), SubmitState.ERROR, 3.0),
    ],
)
def test_submission_failures_set_state_and_reraise(error, state, delay):
    flow = SubmissionFlow(timer_factory=FakeTimer)

    def action():
        raise error

    with pytest.raises(type(error)):
        flow.submit(action)

    assert flow.state == state
    assert FakeTimer.created[-1].interval == delay


def test_second_submit_while_submitting_is_ignored():
    flow = SubmissionFlow(timer_factory=FakeTimer)
    inner = []

    def action():
        inner.append(flow.submit(lambda: "nested"))
        return "outer"

    assert flow.submit(action) == "outer"
    assert inner == [None]


def test_resubmit_cancels_pending_reset():
    flow = SubmissionFlow(timer_factory=FakeTimer)
    flow.submit(lambda: None)
    reset_timer = FakeTimer.created[-1]

    assert flow.begin()
    assert reset_timer.cancelled
    assert flow.state == SubmitState.SUBMITTING


def test_finish_requires_terminal_state_and_running_submission():
    flow = SubmissionFlow(timer_factory=FakeTimer)
    with pytest.raises(RuntimeError):
        flow.finish(SubmitState.SUCCESS)
    flow.begin()
    with pytest.raises(ValueError):
        flow.finish(SubmitState.IDLE)
