from __future__ import annotations

from datetime import date
from typing import Any

from src.catalog.store import ANY_OPTION
from src.tracker.status import ApplicationStatus

STATUS_COLUMN_TITLES = {
    ApplicationStatus.SAVED: "Saved",
    ApplicationStatus.IN_PROGRESS: "In Progress",
    ApplicationStatus.APPLIED: "Applied",
}

EMPTY_COLUMN_TEXT = {
    ApplicationStatus.SAVED: "No saved scholarships yet",
    ApplicationStatus.IN_PROGRESS: "No applications in progress",
    ApplicationStatus.APPLIED: "No applications submitted yet",
}

NEXT_ACTION_LABELS = {
    ApplicationStatus.SAVED: "Start Application",
    ApplicationStatus.IN_PROGRESS: "Mark as Applied",
}


def format_deadline(value: Any) -> str:
    deadline = _coerce_date(value)
    if deadline is None:
        return "Unknown"
    return f"{deadline.strftime('%b')} {deadline.day}, {deadline.year}"


def format_short_deadline(value: Any) -> str:
    deadline = _coerce_date(value)
    if deadline is None:
        return "Unknown"
    return f"{deadline.strftime('%b')} {deadline.day}"


def format_days_remaining(days: int) -> str:
    if days < 0:
        return "Closed"
    if days == 0:
        return "Due today"
    if days == 1:
        return "1 day left"
    return f"{days} days left"


def format_match_score(score: Any) -> str:
    return f"{int(score)}% Match"


def result_count_text(count: int) -> str:
    noun = "scholarship" if count == 1 else "scholarships"
    return f"Found {count} {noun}"


def option_label(value: str, any_label: str) -> str:
    return any_label if value == ANY_OPTION else value


def _coerce_date(value: Any) -> date | None:
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None
