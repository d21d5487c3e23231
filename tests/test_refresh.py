from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Sequence

import pytest

from grant_pipeline.backends import (
    ColumnFilter,
    OrderBy,
    PostgrestClient,
    QueryError,
    Row,
    TableClient,
)
from grant_pipeline.repository import GrantRepository
from grant_pipeline.service import FetchFailure, FetchSuccess, GrantPipelineService
from grant_pipeline.state import DashboardState, GrantDetailState, TemplateListState

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class StaticTableClient(TableClient):
    def __init__(self, tables: dict[str, list[Row]], failing: Sequence[str] = ()) -> None:
        super().__init__(backend_id="static")
        self.tables = tables
        self.failing = set(failing)
        self.calls: list[str] = []

    def select(
        self,
        table: str,
        *,
        filters: Sequence[ColumnFilter] = (),
        order: Sequence[OrderBy] = (),
    ) -> list[Row]:
        self.calls.append(table)
        if table in self.failing:
            raise QueryError(f"Query on {table} failed (500): upstream unavailable")

        rows = [row for row in self.tables.get(table, []) if _matches(row, filters)]
        for item in reversed(order):
            rows.sort(key=lambda row: row.get(item.column), reverse=not item.ascending)
        return rows

    def select_single(
        self,
        table: str,
        *,
        filters: Sequence[ColumnFilter] = (),
    ) -> Row | None:
        rows = self.select(table, filters=filters)
        return rows[0] if len(rows) == 1 else None


def _matches(row: Row, filters: Sequence[ColumnFilter]) -> bool:
    for column_filter in filters:
        value: Any = row.get(column_filter.column)
        if column_filter.operator == "eq" and str(value) != column_filter.value:
            return False
        if column_filter.operator == "is" and column_filter.value == "null" and value is not None:
            return False
        if column_filter.operator == "is" and column_filter.value == "true" and value is not True:
            return False
    return True


def _tables() -> dict[str, list[Row]]:
    return {
        "grants": [
            {
                "id": "g-2",
                "name": "Community energy fund",
                "status": "submitted",
                "priority": "high",
                "amount_requested": "12000",
                "deadline_date": (NOW + timedelta(days=20)).date().isoformat(),
                "deleted_at": None,
            },
            {
                "id": "g-1",
                "name": "Arts council project grant",
                "status": "awarded",
                "priority": "medium",
                "amount_requested": 5000,
                "amount_awarded": 4500,
                "deadline_date": (NOW + timedelta(days=5)).date().isoformat(),
                "deleted_at": None,
            },
            {
                "id": "g-3",
                "name": "Archived heritage grant",
                "status": "declined",
                "deadline_date": None,
                "deleted_at": "2026-01-01T00:00:00+00:00",
            },
        ],
        "opportunity_pipeline": [{"id": "p-1", "grant_id": "g-2", "stage": "qualified"}],
        "bid_writing_progress": [
            {"id": "b-1", "grant_id": "g-2", "section": "budget", "completion_percentage": 40},
        ],
        "bid_writing_templates": [
            {"id": "t-1", "name": "Budget narrative", "is_active": True, "times_used": 3},
            {"id": "t-2", "name": "Retired cover letter", "is_active": False, "times_used": 9},
            {"id": "t-3", "name": "Impact statement", "is_active": True, "times_used": 11},
        ],
    }


def _service(client: TableClient) -> GrantPipelineService:
    return GrantPipelineService(repository=GrantRepository(client), clock=lambda: NOW)


def test_refresh_returns_snapshot_with_summary() -> None:
    client = StaticTableClient(_tables())

    result = asyncio.run(_service(client).refresh())

    assert isinstance(result, FetchSuccess)
    snapshot = result.value
    assert [grant.id for grant in snapshot.grants] == ["g-1", "g-2"]
    assert len(snapshot.opportunities) == 1
    assert snapshot.bid_progress[0].completion_percentage == 40
    assert snapshot.fetched_at == NOW
    assert snapshot.summary.total_grants == 2
    assert snapshot.summary.total_requested == 17000
    assert snapshot.summary.total_awarded == 4500
    assert snapshot.summary.success_rate == 100
    assert snapshot.summary.active_applications == 1
    assert snapshot.summary.upcoming_deadlines == 2
    assert sorted(client.calls) == ["bid_writing_progress", "grants", "opportunity_pipeline"]


def test_refresh_fails_as_a_whole_when_one_query_fails() -> None:
    client = StaticTableClient(_tables(), failing=["bid_writing_progress"])

    result = asyncio.run(_service(client).refresh())

    assert isinstance(result, FetchFailure)
    assert result.ok is False
    assert "bid_writing_progress" in result.message


def test_refresh_reports_missing_configuration() -> None:
    client = PostgrestClient(None, None)

    result = asyncio.run(_service(client).refresh())

    assert isinstance(result, FetchFailure)
    assert "not configured" in result.message


def test_failed_refresh_clears_previous_snapshot() -> None:
    client = StaticTableClient(_tables())
    state = DashboardState(_service(client))

    asyncio.run(state.refresh())
    assert len(state.grants) == 2
    assert state.summary is not None
    assert state.error is None

    client.failing.add("opportunity_pipeline")
    asyncio.run(state.refresh())

    assert state.error
    assert state.grants == []
    assert state.opportunities == []
    assert state.bid_progress == []
    assert state.summary is None
    assert state.fetched_at is None
    assert state.loading is False


def test_loading_flag_is_set_only_while_fetching() -> None:
    state = DashboardState(_service(StaticTableClient(_tables())))
    observed: list[bool] = []
    unsubscribe = state.subscribe(lambda current: observed.append(current.loading))

    assert state.loading is False
    asyncio.run(state.refresh())
    unsubscribe()
    asyncio.run(state.refresh())

    assert observed == [True, False]
    assert state.loading is False


def test_state_views_use_service_clock_and_window() -> None:
    state = DashboardState(_service(StaticTableClient(_tables())))
    asyncio.run(state.refresh())

    assert [grant.id for grant in state.upcoming_deadlines()] == ["g-1", "g-2"]
    assert [grant.id for grant in state.upcoming_deadlines(10)] == ["g-1"]
    assert [grant.id for grant in state.grants_by_status("submitted")] == ["g-2"]
    assert [grant.id for grant in state.grants_by_priority(["medium"])] == ["g-1"]


def test_state_views_stay_pinned_to_fetch_time() -> None:
    ticks = iter([NOW, NOW + timedelta(days=6)])
    service = GrantPipelineService(
        repository=GrantRepository(StaticTableClient(_tables())),
        clock=lambda: next(ticks),
    )
    state = DashboardState(service)
    asyncio.run(state.refresh())

    upcoming = state.upcoming_deadlines()

    assert state.summary is not None
    assert state.summary.upcoming_deadlines == len(upcoming) == 2
    assert [grant.id for grant in upcoming] == ["g-1", "g-2"]
    assert state.views().summary() == state.summary


def test_service_rejects_negative_window() -> None:
    with pytest.raises(ValueError, match="window_days"):
        GrantPipelineService(
            repository=GrantRepository(StaticTableClient(_tables())),
            window_days=-1,
        )


def test_grant_lookup_not_found_is_not_an_error() -> None:
    service = _service(StaticTableClient(_tables()))

    result = asyncio.run(service.fetch_grant("g-3"))
    detail = GrantDetailState(service, "missing")
    asyncio.run(detail.load())

    assert isinstance(result, FetchSuccess)
    assert result.value is None
    assert detail.grant is None
    assert detail.error is None
    assert detail.loading is False


def test_grant_lookup_returns_record() -> None:
    detail = GrantDetailState(_service(StaticTableClient(_tables())), "g-2")

    asyncio.run(detail.load())

    assert detail.grant is not None
    assert detail.grant.name == "Community energy fund"


def test_grant_lookup_failure_sets_error() -> None:
    client = StaticTableClient(_tables(), failing=["grants"])
    detail = GrantDetailState(_service(client), "g-2")

    asyncio.run(detail.load())

    assert detail.grant is None
    assert detail.error and "grants" in detail.error


def test_templates_are_active_and_most_used_first() -> None:
    templates = TemplateListState(_service(StaticTableClient(_tables())))

    asyncio.run(templates.load())

    assert [template.id for template in templates.templates] == ["t-3", "t-1"]
    assert templates.error is None


def test_template_failure_clears_templates() -> None:
    client = StaticTableClient(_tables())
    templates = TemplateListState(_service(client))
    asyncio.run(templates.load())

    client.failing.add("bid_writing_templates")
    asyncio.run(templates.load())

    assert templates.templates == []
    assert templates.error
