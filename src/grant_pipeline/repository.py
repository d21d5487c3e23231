from __future__ import annotations

import logging
import math
from typing import Any

from grant_pipeline.backends import OrderBy, Row, TableClient, eq, is_null, is_true
from grant_pipeline.config import TableSettings
from grant_pipeline.models import (
    FundingRecord,
    PipelineRecord,
    ProgressRecord,
    TemplateRecord,
)
from grant_pipeline.utils.datetime_utils import parse_datetime_utc

logger = logging.getLogger(__name__)


class GrantRepository:
    """The read-only queries the dashboard consumes, mapped to record types."""

    def __init__(self, client: TableClient, tables: TableSettings | None = None) -> None:
        self.client = client
        self.tables = tables or TableSettings()

    def fetch_grants(self) -> list[FundingRecord]:
        rows = self.client.select(
            self.tables.grants,
            filters=[is_null("deleted_at")],
            order=[OrderBy("deadline_date", ascending=True)],
        )
        return [row_to_funding_record(row) for row in rows]

    def fetch_opportunities(self) -> list[PipelineRecord]:
        rows = self.client.select(self.tables.opportunities)
        return [row_to_pipeline_record(row) for row in rows]

    def fetch_bid_progress(self) -> list[ProgressRecord]:
        rows = self.client.select(self.tables.bid_progress)
        return [row_to_progress_record(row) for row in rows]

    def fetch_grant(self, grant_id: str) -> FundingRecord | None:
        row = self.client.select_single(
            self.tables.grants,
            filters=[eq("id", grant_id), is_null("deleted_at")],
        )
        if row is None:
            logger.info("Grant %s not found", grant_id)
            return None
        return row_to_funding_record(row)

    def fetch_active_templates(self) -> list[TemplateRecord]:
        rows = self.client.select(
            self.tables.templates,
            filters=[is_true("is_active")],
            order=[OrderBy("times_used", ascending=False)],
        )
        return [row_to_template_record(row) for row in rows]


def row_to_funding_record(row: Row) -> FundingRecord:
    return FundingRecord(
        id=_text(row.get("id")) or "",
        name=_text(row.get("name")) or _text(row.get("title")) or "Untitled grant",
        status=_text(row.get("status")) or "",
        priority=_lower_text(row.get("priority")),
        funder=_text(row.get("funder")) or _text(row.get("funder_name")),
        amount_requested=row.get("amount_requested"),
        amount_awarded=row.get("amount_awarded"),
        deadline_date=parse_datetime_utc(row.get("deadline_date")),
        raw=dict(row),
    )


def row_to_pipeline_record(row: Row) -> PipelineRecord:
    return PipelineRecord(
        id=_text(row.get("id")) or "",
        grant_id=_text(row.get("grant_id")),
        stage=_text(row.get("stage")) or _text(row.get("status")),
        raw=dict(row),
    )


def row_to_progress_record(row: Row) -> ProgressRecord:
    return ProgressRecord(
        id=_text(row.get("id")) or "",
        grant_id=_text(row.get("grant_id")),
        section=_text(row.get("section")) or _text(row.get("section_name")),
        completion_percentage=_optional_float(row.get("completion_percentage")),
        raw=dict(row),
    )


def row_to_template_record(row: Row) -> TemplateRecord:
    times_used = _optional_float(row.get("times_used"))
    return TemplateRecord(
        id=_text(row.get("id")) or "",
        name=_text(row.get("name")) or _text(row.get("title")) or "Untitled template",
        is_active=row.get("is_active") is not False,
        times_used=int(times_used) if times_used is not None else 0,
        raw=dict(row),
    )


def _text(value: Any) -> str | None:
    if value is None:
        return None
    normalized = str(value).strip()
    return normalized or None


def _lower_text(value: Any) -> str | None:
    normalized = _text(value)
    return normalized.lower() if normalized else None


def _optional_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    return parsed if math.isfinite(parsed) else None
