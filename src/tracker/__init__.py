from __future__ import annotations

from .status import (
    TRACKED_STATUSES,
    ApplicationStatus,
    InvalidTransitionError,
    StatusBoard,
    list_by_status,
    status_counts,
)

__all__ = [
    "TRACKED_STATUSES",
    "ApplicationStatus",
    "InvalidTransitionError",
    "StatusBoard",
    "list_by_status",
    "status_counts",
]
