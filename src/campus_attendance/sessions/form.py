"""Client-side helpers for the session form: debounced conflict re-checks and
the submit-button state machine.

Both take a `timer_factory` with the `threading.Timer` signature so callers
(and tests) control when scheduled work actually runs.
"""
from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, TypeVar

from ..core.constants import (
    CONFLICT_CHECK_DEBOUNCE_SECONDS,
    CONFLICT_RESET_SECONDS,
    ERROR_RESET_SECONDS,
    SUCCESS_RESET_SECONDS,
)
from ..core.enums import SubmitState
from ..core.exceptions import ConflictError, ValidationError
from .conflicts import ConflictResult
from .model import SessionDraft

logger = logging.getLogger(__name__)

T = TypeVar("T")
TimerFactory = Callable[..., threading.Timer]


def _window_key(draft: SessionDraft) -> tuple:
    time_out = (draft.time_out.start, draft.time_out.end) if draft.time_out else None
    return (draft.event_id, draft.time_in.start, draft.time_in.end, time_out)


class DebouncedConflictCheck:
    """Re-run the conflict check a short while after the time fields stop changing.

    Each `schedule()` cancels the pending run. Only one check runs at a time; a
    timer that fires while another check is in flight is dropped.
    """

    def __init__(
        self,
        check: Callable[[SessionDraft], ConflictResult],
        on_result: Callable[[ConflictResult], None],
        *,
        delay: float = CONFLICT_CHECK_DEBOUNCE_SECONDS,
        timer_factory: TimerFactory = threading.Timer,
    ):
        self._check = check
        self._on_result = on_result
        self._delay = delay
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._pending: Optional[threading.Timer] = None
        self._in_flight = False
        self._last_key: Optional[tuple] = None

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def schedule(self, draft: SessionDraft) -> bool:
        """Returns False when the windows equal the last checked ones."""

        with self._lock:
            if self._pending is not None:
                self._pending.cancel()
                self._pending = None

            if _window_key(draft) == self._last_key:
                return False

            timer = self._timer_factory(self._delay, self._run, args=(draft,))
            timer.daemon = True
            self._pending = timer
        timer.start()
        return True

    def cancel(self) -> None:
        with self._lock:
            if self._pending is not None:
                self._pending.cancel()
                self._pending = None

    def _run(self, draft: SessionDraft) -> None:
        with self._lock:
            if self._in_flight:
                return
            self._in_flight = True
            self._pending = None

        try:
            result = self._check(draft)
            self._last_key = _window_key(draft)
        except ValidationError:
            # Invalid windows are reported by the form itself, not as a conflict.
            result = ConflictResult.none()
        except Exception:
            logger.exception("Debounced conflict check failed")
            result = ConflictResult.none()
        finally:
            with self._lock:
                self._in_flight = False

        self._on_result(result)


class SubmissionFlow:
    """idle -> submitting -> {success | error | conflict} -> idle (after a delay)."""

    RESET_DELAYS = {
        SubmitState.SUCCESS: SUCCESS_RESET_SECONDS,
        SubmitState.CONFLICT: CONFLICT_RESET_SECONDS,
        SubmitState.ERROR: ERROR_RESET_SECONDS,
    }

    def __init__(
        self,
        *,
        timer_factory: TimerFactory = threading.Timer,
        on_change: Optional[Callable[[SubmitState], None]] = None,
    ):
        self._timer_factory = timer_factory
        self._on_change = on_change
        self._lock = threading.Lock()
        self._state = SubmitState.IDLE
        self._reset_timer: Optional[threading.Timer] = None

    @property
    def state(self) -> SubmitState:
        return self._state

    def _set(self, state: SubmitState) -> None:
        self._state = state
        if self._on_change:
            self._on_change(state)

    def begin(self) -> bool:
        """Enter `submitting`; False while a submission is already running."""

        with self._lock:
            if self._state == SubmitState.SUBMITTING:
                return False
            self._cancel_reset()
            self._set(SubmitState.SUBMITTING)
            return True

    def finish(self, outcome: SubmitState) -> None:
        if outcome not in self.RESET_DELAYS:
            raise ValueError(f"Not a terminal submit state: {outcome!r}")

        with self._lock:
            if self._state != SubmitState.SUBMITTING:
                raise RuntimeError("finish() called without a running submission")
            self._set(outcome)
            timer = self._timer_factory(self.RESET_DELAYS[outcome], self.reset)
            timer.daemon = True
            self._reset_timer = timer
        timer.start()

    def reset(self) -> None:
        with self._lock:
            self._cancel_reset()
            self._set(SubmitState.IDLE)

    def submit(self, action: Callable[[], T]) -> Optional[T]:
        """Run `action` inside the state machine. Returns None if already submitting."""

        if not self.begin():
            return None
        try:
            result = action()
        except ConflictError:
            self.finish(SubmitState.CONFLICT)
            raise
        except Exception:
            self.finish(SubmitState.ERROR)
            raise
        self.finish(SubmitState.SUCCESS)
        return result

    def _cancel_reset(self) -> None:
        if self._reset_timer is not None:
            self._reset_timer.cancel()
            self._reset_timer = None
