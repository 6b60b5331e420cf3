from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from ..core.constants import MAX_WINDOW_MINUTES, MIN_WINDOW_GAP_MINUTES, MIN_WINDOW_MINUTES
from ..core.exceptions import ValidationError
from .model import TimeWindow


@dataclass(frozen=True)
class WindowRules:
    min_minutes: int = MIN_WINDOW_MINUTES
    max_minutes: int = MAX_WINDOW_MINUTES
    min_gap_minutes: int = MIN_WINDOW_GAP_MINUTES


def _duration_issue(label: str, window: TimeWindow, rules: WindowRules) -> Optional[str]:
    minutes = window.duration / timedelta(minutes=1)
    if minutes < rules.min_minutes:
        return f"{label} window must be at least {rules.min_minutes} minutes"
    if minutes > rules.max_minutes:
        return f"{label} window cannot exceed {rules.max_minutes // 60} hours"
    return None


def window_issues(time_in: TimeWindow, time_out: Optional[TimeWindow], rules: WindowRules = WindowRules()) -> list[str]:
    """Collect every rule the windows break; empty list means valid."""

    issues: list[str] = []

    if time_in.end <= time_in.start:
        issues.append("Time-in end must be after time-in start")
    else:
        issue = _duration_issue("Time-in", time_in, rules)
        if issue:
            issues.append(issue)

    if time_out is not None:
        if time_out.end <= time_out.start:
            issues.append("Time-out end must be after time-out start")
        else:
            issue = _duration_issue("Time-out", time_out, rules)
            if issue:
                issues.append(issue)

        gap = time_out.start - time_in.end
        if gap < timedelta(minutes=rules.min_gap_minutes):
            issues.append(
                f"There must be at least {rules.min_gap_minutes} minutes between time-in and time-out windows"
            )

    return issues


def validate_windows(time_in: TimeWindow, time_out: Optional[TimeWindow], rules: WindowRules = WindowRules()) -> None:
    issues = window_issues(time_in, time_out, rules)
    if issues:
        raise ValidationError("Invalid session time windows", details=issues)
