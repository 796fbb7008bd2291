from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

import pandas as pd

logger = logging.getLogger(__name__)


class ApplicationStatus(str, Enum):
    UNTRACKED = "untracked"
    SAVED = "saved"
    IN_PROGRESS = "in-progress"
    APPLIED = "applied"

    @classmethod
    def parse(cls, value: ApplicationStatus | str) -> ApplicationStatus:
        try:
            return cls(value)
        except ValueError:
            allowed = ", ".join(status.value for status in cls)
            raise ValueError(f"Unknown application status {value!r} (expected one of {allowed}).") from None


TRACKED_STATUSES = (
    ApplicationStatus.SAVED,
    ApplicationStatus.IN_PROGRESS,
    ApplicationStatus.APPLIED,
)

_NEXT_STATUS = {
    ApplicationStatus.SAVED: ApplicationStatus.IN_PROGRESS,
    ApplicationStatus.IN_PROGRESS: ApplicationStatus.APPLIED,
}


class InvalidTransitionError(ValueError):
    def __init__(
        self,
        scholarship_id: int,
        current: ApplicationStatus,
        target: ApplicationStatus | None,
        reason: str,
    ) -> None:
        self.scholarship_id = scholarship_id
        self.current = current
        self.target = target
        super().__init__(f"Scholarship {scholarship_id}: {reason}")


@dataclass(frozen=True, slots=True)
class StatusBoard:
    """Immutable snapshot of the tracker. Ids without an entry are untracked.

    Every transition returns a new board; the caller keeps whichever snapshot
    is current.
    """

    entries: Mapping[int, ApplicationStatus] = field(default_factory=dict)

    def __post_init__(self) -> None:
        cleaned: dict[int, ApplicationStatus] = {}
        for scholarship_id, status in self.entries.items():
            parsed = ApplicationStatus.parse(status)
            if parsed is ApplicationStatus.UNTRACKED:
                continue
            cleaned[int(scholarship_id)] = parsed
        object.__setattr__(self, "entries", MappingProxyType(cleaned))

    def status_of(self, scholarship_id: int) -> ApplicationStatus:
        return self.entries.get(scholarship_id, ApplicationStatus.UNTRACKED)

    def is_saved(self, scholarship_id: int) -> bool:
        return scholarship_id in self.entries

    def toggle_save(self, scholarship_id: int) -> StatusBoard:
        current = self.status_of(scholarship_id)
        if current is ApplicationStatus.UNTRACKED:
            logger.debug("Saved scholarship %s", scholarship_id)
            return self._with(scholarship_id, ApplicationStatus.SAVED)
        if current is ApplicationStatus.SAVED:
            logger.debug("Unsaved scholarship %s", scholarship_id)
            return self._without(scholarship_id)

        logger.warning(
            "Rejected unsave of scholarship %s while %s", scholarship_id, current.value
        )
        raise InvalidTransitionError(
            scholarship_id,
            current,
            None,
            f"cannot unsave an application that is already {current.value}.",
        )

    def advance(
        self, scholarship_id: int, target: ApplicationStatus | str
    ) -> StatusBoard:
        target_status = ApplicationStatus.parse(target)
        current = self.status_of(scholarship_id)
        expected = _NEXT_STATUS.get(current)

        if expected is None or target_status is not expected:
            if current is ApplicationStatus.UNTRACKED:
                reason = "save the scholarship before tracking progress."
            elif expected is None:
                reason = f"{current.value} is final."
            else:
                reason = (
                    f"cannot move from {current.value} to {target_status.value}; "
                    f"next step is {expected.value}."
                )
            logger.warning(
                "Rejected move of scholarship %s from %s to %s",
                scholarship_id,
                current.value,
                target_status.value,
            )
            raise InvalidTransitionError(scholarship_id, current, target_status, reason)

        logger.debug(
            "Moved scholarship %s from %s to %s",
            scholarship_id,
            current.value,
            target_status.value,
        )
        return self._with(scholarship_id, target_status)

    def _with(self, scholarship_id: int, status: ApplicationStatus) -> StatusBoard:
        updated = dict(self.entries)
        updated[scholarship_id] = status
        return StatusBoard(updated)

    def _without(self, scholarship_id: int) -> StatusBoard:
        updated = dict(self.entries)
        updated.pop(scholarship_id, None)
        return StatusBoard(updated)


def _statuses_for(catalog: pd.DataFrame, board: StatusBoard) -> pd.Series:
    return catalog["id"].map(lambda scholarship_id: board.status_of(int(scholarship_id)))


def list_by_status(
    catalog: pd.DataFrame,
    board: StatusBoard,
    status: ApplicationStatus | str,
) -> pd.DataFrame:
    """Tracked catalog rows currently at ``status``, in catalog order."""

    wanted = ApplicationStatus.parse(status)
    if wanted not in TRACKED_STATUSES:
        raise ValueError(f"Only tracked statuses can be listed (received {wanted.value!r}).")
    if catalog.empty:
        return catalog.copy()
    mask = _statuses_for(catalog, board).eq(wanted)
    return catalog[mask].reset_index(drop=True)


def status_counts(catalog: pd.DataFrame, board: StatusBoard) -> dict[ApplicationStatus, int]:
    counts = {status: 0 for status in TRACKED_STATUSES}
    if catalog.empty:
        return counts
    for status in _statuses_for(catalog, board):
        if status in counts:
            counts[status] += 1
    return counts
