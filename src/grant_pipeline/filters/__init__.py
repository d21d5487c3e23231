"""Funding record filters."""

from .base import AllOf, FilterResult, RecordFilter
from .record_filters import (
    DeadlineWindowFilter,
    PriorityFilter,
    StatusFilter,
    normalize_selector,
)

__all__ = [
    "AllOf",
    "DeadlineWindowFilter",
    "FilterResult",
    "PriorityFilter",
    "RecordFilter",
    "StatusFilter",
    "normalize_selector",
]
