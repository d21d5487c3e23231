from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Iterable, Union

from grant_pipeline.models import FundingRecord
from grant_pipeline.utils.datetime_utils import parse_datetime_utc, window_bounds

from .base import FilterResult, RecordFilter

ValueSelector = Union[str, Enum, Iterable[Union[str, Enum]]]


def normalize_selector(values: ValueSelector) -> frozenset[str]:
    """Accept a single status/priority or a collection of them."""
    if isinstance(values, (str, Enum)):
        return frozenset({_plain_value(values)})
    return frozenset(_plain_value(value) for value in values)


def _plain_value(value: str | Enum) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


class StatusFilter(RecordFilter):
    def __init__(self, statuses: ValueSelector) -> None:
        self.statuses = normalize_selector(statuses)

    def evaluate(self, record: FundingRecord) -> FilterResult:
        if record.status in self.statuses:
            return FilterResult(matched=True, reasons=[f"status: {record.status}"])
        return FilterResult(matched=False, reasons=[f"status {record.status!r} not selected"])


class PriorityFilter(RecordFilter):
    def __init__(self, priorities: ValueSelector) -> None:
        self.priorities = normalize_selector(priorities)

    def evaluate(self, record: FundingRecord) -> FilterResult:
        if record.priority is not None and record.priority in self.priorities:
            return FilterResult(matched=True, reasons=[f"priority: {record.priority}"])
        return FilterResult(
            matched=False,
            reasons=[f"priority {record.priority!r} not selected"],
        )


class DeadlineWindowFilter(RecordFilter):
    """Match records whose deadline lies in the closed window [now, now + days]."""

    def __init__(self, now: datetime, window_days: int = 30) -> None:
        if window_days < 0:
            raise ValueError("window_days must be >= 0")
        self.window_days = window_days
        self.start, self.end = window_bounds(now, window_days)

    def evaluate(self, record: FundingRecord) -> FilterResult:
        deadline = parse_datetime_utc(record.deadline_date)
        if deadline is None:
            return FilterResult(matched=False, reasons=["missing deadline"])
        if deadline < self.start:
            return FilterResult(matched=False, reasons=["deadline already passed"])
        if deadline > self.end:
            return FilterResult(
                matched=False,
                reasons=[f"deadline beyond {self.window_days}-day window"],
            )

        days_left = int((deadline - self.start).total_seconds() // 86400)
        return FilterResult(matched=True, reasons=[f"deadline in {days_left} days"])
