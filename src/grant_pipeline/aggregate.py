"""Derived dashboard views over a snapshot of funding records.

Everything here is a pure function of its arguments: the reference time is
always passed in, never read from the system clock.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Sequence

from grant_pipeline.filters import (
    DeadlineWindowFilter,
    PriorityFilter,
    RecordFilter,
    StatusFilter,
)
from grant_pipeline.filters.record_filters import ValueSelector
from grant_pipeline.models import (
    ACTIVE_STATUSES,
    DECIDED_STATUSES,
    FundingRecord,
    GrantStatus,
    Priority,
    SummaryStatistics,
)
from grant_pipeline.utils.datetime_utils import parse_datetime_utc
from grant_pipeline.utils.money import coerce_amount

DEFAULT_WINDOW_DAYS = 30


def compute_summary(
    records: Sequence[FundingRecord],
    now: datetime,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> SummaryStatistics:
    total_requested = sum((coerce_amount(record.amount_requested) for record in records), 0.0)
    total_awarded = sum((coerce_amount(record.amount_awarded) for record in records), 0.0)

    awarded_count = sum(1 for record in records if record.status == GrantStatus.AWARDED.value)
    decided_count = sum(1 for record in records if record.status in DECIDED_STATUSES)
    active_applications = sum(1 for record in records if record.status in ACTIVE_STATUSES)

    deadline_filter = DeadlineWindowFilter(now, window_days)
    upcoming = sum(1 for record in records if deadline_filter.matches(record))

    success_rate = (awarded_count / decided_count) * 100 if decided_count > 0 else 0.0

    return SummaryStatistics(
        total_grants=len(records),
        total_requested=total_requested,
        total_awarded=total_awarded,
        success_rate=success_rate,
        active_applications=active_applications,
        upcoming_deadlines=upcoming,
        awarded_count=awarded_count,
        decided_count=decided_count,
    )


def apply_filter(records: Sequence[FundingRecord], record_filter: RecordFilter) -> list[FundingRecord]:
    return [record for record in records if record_filter.matches(record)]


def filter_by_status(records: Sequence[FundingRecord], statuses: ValueSelector) -> list[FundingRecord]:
    return apply_filter(records, StatusFilter(statuses))


def filter_by_priority(
    records: Sequence[FundingRecord],
    priorities: ValueSelector,
) -> list[FundingRecord]:
    return apply_filter(records, PriorityFilter(priorities))


def upcoming_deadlines(
    records: Sequence[FundingRecord],
    now: datetime,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> list[FundingRecord]:
    """Records due within ``window_days`` of ``now``, earliest first.

    Records without a deadline never appear. ``sorted`` is stable, so equal
    deadlines keep their input order.
    """
    matching = apply_filter(records, DeadlineWindowFilter(now, window_days))
    dated = [(parse_datetime_utc(record.deadline_date), record) for record in matching]
    return [record for _, record in sorted(dated, key=lambda item: item[0])]


def sort_by_priority(records: Sequence[FundingRecord]) -> list[FundingRecord]:
    """Most urgent priority first; unknown or missing priorities go last.

    Ties keep their input order.
    """
    ranked: list[tuple[Priority, FundingRecord]] = []
    unranked: list[FundingRecord] = []
    for record in records:
        priority = _known_priority(record.priority)
        if priority is None:
            unranked.append(record)
        else:
            ranked.append((priority, record))

    ranked.sort(key=lambda item: item[0], reverse=True)
    return [record for _, record in ranked] + unranked


def _known_priority(value: str | None) -> Priority | None:
    try:
        return Priority(value)
    except ValueError:
        return None


class AggregateViewComputer:
    """Bind the derived views to one snapshot of records and a clock."""

    def __init__(
        self,
        records: Sequence[FundingRecord],
        *,
        clock: Callable[[], datetime],
        window_days: int = DEFAULT_WINDOW_DAYS,
    ) -> None:
        self.records = tuple(records)
        self.clock = clock
        self.window_days = window_days

    def summary(self) -> SummaryStatistics:
        return compute_summary(self.records, self.clock(), self.window_days)

    def by_status(self, statuses: ValueSelector) -> list[FundingRecord]:
        return filter_by_status(self.records, statuses)

    def by_priority(self, priorities: ValueSelector) -> list[FundingRecord]:
        return filter_by_priority(self.records, priorities)

    def upcoming(self, window_days: int | None = None) -> list[FundingRecord]:
        days = self.window_days if window_days is None else window_days
        return upcoming_deadlines(self.records, self.clock(), days)
