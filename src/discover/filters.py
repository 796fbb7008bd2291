from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, tzinfo
from enum import Enum
from typing import Iterable

import pandas as pd

from src.catalog.store import ANY_OPTION

ANY = ANY_OPTION
SEARCH_COLUMNS = ("title", "country", "provider")
_SECONDS_PER_DAY = 24 * 60 * 60


class DeadlineBucket(str, Enum):
    WITHIN_30_DAYS = "30days"
    WITHIN_3_MONTHS = "3months"

    @property
    def max_days(self) -> int:
        return 30 if self is DeadlineBucket.WITHIN_30_DAYS else 90

    @property
    def label(self) -> str:
        return "Within 30 days" if self is DeadlineBucket.WITHIN_30_DAYS else "Within 3 months"


@dataclass(frozen=True, slots=True)
class FilterState:
    """Snapshot of the Discover filters. Cleared by default."""

    search_text: str = ""
    country: str = ANY
    major: str = ANY
    deadline_buckets: frozenset[DeadlineBucket] = field(default_factory=frozenset)
    regions: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "deadline_buckets",
            frozenset(DeadlineBucket(bucket) for bucket in self.deadline_buckets),
        )
        object.__setattr__(self, "regions", frozenset(self.regions))

    def with_bucket_toggled(self, bucket: DeadlineBucket | str) -> FilterState:
        return replace(
            self,
            deadline_buckets=_toggled(self.deadline_buckets, DeadlineBucket(bucket)),
        )

    def with_region_toggled(self, region: str) -> FilterState:
        return replace(self, regions=_toggled(self.regions, region))

    @property
    def is_cleared(self) -> bool:
        return (
            self.search_text == ""
            and self.country == ANY
            and self.major == ANY
            and not self.deadline_buckets
            and not self.regions
        )


def _toggled(values: frozenset, value: object) -> frozenset:
    if value in values:
        return values - {value}
    return values | {value}


def _as_datetime(value: date, tz: tzinfo | None) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min, tzinfo=tz)


def days_remaining(deadline: date, today: date) -> int:
    """Whole days from ``today`` until ``deadline``, rounded up. Negative once passed."""

    if isinstance(deadline, datetime) or isinstance(today, datetime):
        tz = deadline.tzinfo if isinstance(deadline, datetime) else today.tzinfo
        delta = _as_datetime(deadline, tz) - _as_datetime(today, tz)
        return math.ceil(delta.total_seconds() / _SECONDS_PER_DAY)
    return (deadline - today).days


def _search_mask(catalog: pd.DataFrame, search_text: str) -> pd.Series:
    needle = search_text.lower()
    mask = pd.Series(False, index=catalog.index)
    for column in SEARCH_COLUMNS:
        mask |= catalog[column].str.lower().str.contains(needle, regex=False)
    return mask


def _deadline_mask(
    catalog: pd.DataFrame, buckets: Iterable[DeadlineBucket], today: date
) -> pd.Series:
    remaining = catalog["deadline"].apply(lambda deadline: days_remaining(deadline, today))
    mask = pd.Series(False, index=catalog.index)
    for bucket in buckets:
        mask |= remaining.le(bucket.max_days)
    return mask


def apply_filters(
    catalog: pd.DataFrame,
    state: FilterState,
    *,
    today: date | None = None,
) -> pd.DataFrame:
    """Return the catalog rows passing every active filter, in catalog order.

    Categories combine with AND; selections inside the deadline and region
    categories combine with OR. The input frame is never modified.
    """

    if catalog.empty:
        return catalog.copy()

    effective_today = today or date.today()
    mask = pd.Series(True, index=catalog.index)

    if state.search_text:
        mask &= _search_mask(catalog, state.search_text)

    if state.country != ANY:
        mask &= catalog["country"].eq(state.country)

    if state.major != ANY:
        major = state.major
        mask &= catalog["eligible_fields"].apply(lambda fields: major in fields).astype(bool)

    if state.deadline_buckets:
        mask &= _deadline_mask(catalog, state.deadline_buckets, effective_today)

    if state.regions:
        mask &= catalog["region"].isin(sorted(state.regions))

    return catalog[mask].reset_index(drop=True)
