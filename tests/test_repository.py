from __future__ import annotations

from datetime import datetime, timezone

import pytest

from grant_pipeline.repository import (
    row_to_funding_record,
    row_to_progress_record,
    row_to_template_record,
)


def test_funding_row_maps_to_record() -> None:
    row = {
        "id": 42,
        "name": "  Rural broadband pilot ",
        "status": "under_review",
        "priority": "HIGH",
        "funder": "DCMS",
        "amount_requested": "75000.00",
        "amount_awarded": None,
        "deadline_date": "2026-04-30",
        "deleted_at": None,
    }

    record = row_to_funding_record(row)

    assert record.id == "42"
    assert record.name == "Rural broadband pilot"
    assert record.status == "under_review"
    assert record.priority == "high"
    assert record.funder == "DCMS"
    assert record.amount_requested == "75000.00"
    assert record.deadline_date == datetime(2026, 4, 30, tzinfo=timezone.utc)
    assert record.raw == row


def test_funding_row_tolerates_missing_and_malformed_fields() -> None:
    record = row_to_funding_record(
        {"id": "g-9", "title": "Fallback title", "deadline_date": "next spring"}
    )

    assert record.name == "Fallback title"
    assert record.status == ""
    assert record.priority is None
    assert record.deadline_date is None


@pytest.mark.parametrize("text", ["Friday", "10", "March 5", "5th of May"])
def test_non_iso_deadline_text_is_not_a_deadline(text: str) -> None:
    record = row_to_funding_record({"id": "x", "status": "submitted", "deadline_date": text})

    assert record.deadline_date is None


def test_timestamp_deadlines_are_converted_to_utc() -> None:
    record = row_to_funding_record(
        {"id": "g-1", "name": "x", "deadline_date": "2026-04-30T17:00:00+01:00"}
    )

    assert record.deadline_date == datetime(2026, 4, 30, 16, 0, tzinfo=timezone.utc)


def test_progress_and_template_rows_coerce_numbers() -> None:
    progress = row_to_progress_record({"id": "b-1", "completion_percentage": "not started"})
    template = row_to_template_record({"id": "t-1", "name": "Cover letter", "times_used": "7"})

    assert progress.completion_percentage is None
    assert template.times_used == 7
    assert template.is_active is True
