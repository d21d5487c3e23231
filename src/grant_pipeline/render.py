from __future__ import annotations

from datetime import datetime
from typing import Sequence

from grant_pipeline.filters import RecordFilter
from grant_pipeline.models import FundingRecord, SummaryStatistics, TemplateRecord
from grant_pipeline.utils.datetime_utils import format_datetime, to_utc
from grant_pipeline.utils.money import coerce_amount, format_amount


def render_summary_text(summary: SummaryStatistics, *, window_days: int) -> str:
    return "\n".join(
        [
            f"Total grants: {summary.total_grants}",
            f"Total requested: {format_amount(summary.total_requested)}",
            f"Total awarded: {format_amount(summary.total_awarded)}",
            f"Success rate: {summary.success_rate:.1f}% "
            f"({summary.awarded_count}/{summary.decided_count} decided)",
            f"Active applications: {summary.active_applications}",
            f"Deadlines in next {window_days} days: {summary.upcoming_deadlines}",
        ]
    )


def render_grant_line(record: FundingRecord) -> str:
    parts = [
        record.name,
        f"status={_format_optional_text(record.status)}",
        f"priority={_format_optional_text(record.priority)}",
        f"deadline={_format_optional_datetime(record.deadline_date)}",
    ]
    requested = coerce_amount(record.amount_requested)
    if requested:
        parts.append(f"requested={format_amount(requested)}")
    return f"[{record.id}] " + " | ".join(parts)


def render_grant_detail(record: FundingRecord) -> str:
    return "\n".join(
        [
            f"{record.name} ({record.id})",
            f"Funder: {_format_optional_text(record.funder)}",
            f"Status: {_format_optional_text(record.status)}",
            f"Priority: {_format_optional_text(record.priority)}",
            f"Requested: {_format_optional_amount(record.amount_requested)}",
            f"Awarded: {_format_optional_amount(record.amount_awarded)}",
            f"Deadline: {_format_optional_datetime(record.deadline_date)}",
        ]
    )


def render_grant_list(records: Sequence[FundingRecord]) -> str:
    if not records:
        return "(no matching grants)"
    return "\n".join(render_grant_line(record) for record in records)


def render_upcoming_list(
    records: Sequence[FundingRecord],
    deadline_filter: RecordFilter,
) -> str:
    """List upcoming grants with how far off each deadline is."""
    if not records:
        return "(no upcoming deadlines)"
    return "\n".join(
        f"{render_grant_line(record)} | {deadline_filter.evaluate(record).reason_text()}"
        for record in records
    )


def render_template_list(templates: Sequence[TemplateRecord]) -> str:
    if not templates:
        return "(no active templates)"
    return "\n".join(
        f"[{template.id}] {template.name} | used {template.times_used}x"
        for template in templates
    )


def _format_optional_text(value: str | None) -> str:
    normalized = (value or "").strip()
    return normalized or "Not specified"


def _format_optional_amount(value: object) -> str:
    if value is None:
        return "Not specified"
    return format_amount(coerce_amount(value))


def _format_optional_datetime(value: datetime | None) -> str:
    if value is None:
        return "Not specified"
    value_utc = to_utc(value)
    if (
        value_utc.hour == 0
        and value_utc.minute == 0
        and value_utc.second == 0
        and value_utc.microsecond == 0
    ):
        return value_utc.strftime("%Y-%m-%d")
    return format_datetime(value_utc)
