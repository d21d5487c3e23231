"""Observable holders that bind fetch results to a UI.

Each holder keeps the latest successful data or an error message, never both,
and notifies subscribers whenever its state changes.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from grant_pipeline.aggregate import AggregateViewComputer
from grant_pipeline.filters.record_filters import ValueSelector
from grant_pipeline.models import (
    FundingRecord,
    PipelineRecord,
    ProgressRecord,
    SummaryStatistics,
    TemplateRecord,
)
from grant_pipeline.service import FetchSuccess, GrantPipelineService


class _Observable:
    def __init__(self) -> None:
        self.loading = False
        self.error: str | None = None
        self._subscribers: list[Callable[[_Observable], None]] = []

    def subscribe(self, callback: Callable[..., None]) -> Callable[[], None]:
        """Register ``callback``; the returned function unsubscribes it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            callback(self)

    def _begin(self) -> None:
        self.loading = True
        self.error = None
        self._notify()


class DashboardState(_Observable):
    def __init__(self, service: GrantPipelineService) -> None:
        super().__init__()
        self.service = service
        self.grants: list[FundingRecord] = []
        self.opportunities: list[PipelineRecord] = []
        self.bid_progress: list[ProgressRecord] = []
        self.summary: SummaryStatistics | None = None
        self.fetched_at: datetime | None = None

    async def refresh(self) -> None:
        self._begin()
        try:
            result = await self.service.refresh()
            if isinstance(result, FetchSuccess):
                snapshot = result.value
                self.grants = snapshot.grants
                self.opportunities = snapshot.opportunities
                self.bid_progress = snapshot.bid_progress
                self.summary = snapshot.summary
                self.fetched_at = snapshot.fetched_at
            else:
                self.error = result.message
                self._clear()
        finally:
            self.loading = False
            self._notify()

    def _clear(self) -> None:
        self.grants = []
        self.opportunities = []
        self.bid_progress = []
        self.summary = None
        self.fetched_at = None

    def views(self) -> AggregateViewComputer:
        """Views over the held snapshot, evaluated at the time it was fetched."""
        fetched_at = self.fetched_at
        clock = self.service.clock if fetched_at is None else (lambda: fetched_at)
        return AggregateViewComputer(
            self.grants,
            clock=clock,
            window_days=self.service.window_days,
        )

    def grants_by_status(self, statuses: ValueSelector) -> list[FundingRecord]:
        return self.views().by_status(statuses)

    def grants_by_priority(self, priorities: ValueSelector) -> list[FundingRecord]:
        return self.views().by_priority(priorities)

    def upcoming_deadlines(self, days: int | None = None) -> list[FundingRecord]:
        return self.views().upcoming(days)


class GrantDetailState(_Observable):
    def __init__(self, service: GrantPipelineService, grant_id: str) -> None:
        super().__init__()
        self.service = service
        self.grant_id = grant_id
        self.grant: FundingRecord | None = None

    async def load(self) -> None:
        if not self.grant_id:
            return

        self._begin()
        try:
            result = await self.service.fetch_grant(self.grant_id)
            if isinstance(result, FetchSuccess):
                self.grant = result.value
            else:
                self.error = result.message
                self.grant = None
        finally:
            self.loading = False
            self._notify()


class TemplateListState(_Observable):
    def __init__(self, service: GrantPipelineService) -> None:
        super().__init__()
        self.service = service
        self.templates: list[TemplateRecord] = []

    async def load(self) -> None:
        self._begin()
        try:
            result = await self.service.fetch_templates()
            if isinstance(result, FetchSuccess):
                self.templates = result.value
            else:
                self.error = result.message
                self.templates = []
        finally:
            self.loading = False
            self._notify()
