from __future__ import annotations

from .filters import ANY, DeadlineBucket, FilterState, apply_filters, days_remaining

__all__ = ["ANY", "DeadlineBucket", "FilterState", "apply_filters", "days_remaining"]
