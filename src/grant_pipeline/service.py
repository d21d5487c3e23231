from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Generic, TypeVar, Union

from grant_pipeline.aggregate import DEFAULT_WINDOW_DAYS, compute_summary
from grant_pipeline.models import DashboardSnapshot, FundingRecord, TemplateRecord
from grant_pipeline.repository import GrantRepository
from grant_pipeline.utils.datetime_utils import to_utc

logger = logging.getLogger(__name__)

T = TypeVar("T")

REFRESH_FAILED_MESSAGE = "Failed to fetch grant data"
GRANT_FAILED_MESSAGE = "Failed to fetch grant"
TEMPLATES_FAILED_MESSAGE = "Failed to fetch templates"


@dataclass(frozen=True)
class FetchSuccess(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class FetchFailure:
    message: str

    @property
    def ok(self) -> bool:
        return False


RefreshResult = Union[FetchSuccess[DashboardSnapshot], FetchFailure]
GrantResult = Union[FetchSuccess[Union[FundingRecord, None]], FetchFailure]
TemplatesResult = Union[FetchSuccess[list[TemplateRecord]], FetchFailure]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class GrantPipelineService:
    def __init__(
        self,
        *,
        repository: GrantRepository,
        clock: Callable[[], datetime] = utc_now,
        window_days: int = DEFAULT_WINDOW_DAYS,
    ) -> None:
        if window_days < 0:
            raise ValueError("window_days must be >= 0")
        self.repository = repository
        self.clock = clock
        self.window_days = window_days

    async def refresh(self) -> RefreshResult:
        """Fetch grants, pipeline and progress rows together.

        All three queries must succeed; otherwise the result is a single
        failure and none of the fetched rows are returned.
        """
        try:
            grants, opportunities, bid_progress = await asyncio.gather(
                asyncio.to_thread(self.repository.fetch_grants),
                asyncio.to_thread(self.repository.fetch_opportunities),
                asyncio.to_thread(self.repository.fetch_bid_progress),
            )
        except Exception as exc:  # noqa: BLE001
            logger.exception("Error fetching grant data: %s", exc)
            return FetchFailure(_error_message(exc, REFRESH_FAILED_MESSAGE))

        logger.info(
            "Refresh complete | grants=%d opportunities=%d bid_progress=%d",
            len(grants),
            len(opportunities),
            len(bid_progress),
        )

        fetched_at = to_utc(self.clock())
        snapshot = DashboardSnapshot(
            grants=grants,
            opportunities=opportunities,
            bid_progress=bid_progress,
            summary=compute_summary(grants, fetched_at, self.window_days),
            fetched_at=fetched_at,
        )
        return FetchSuccess(snapshot)

    async def fetch_grant(self, grant_id: str) -> GrantResult:
        try:
            grant = await asyncio.to_thread(self.repository.fetch_grant, grant_id)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Error fetching grant %s: %s", grant_id, exc)
            return FetchFailure(_error_message(exc, GRANT_FAILED_MESSAGE))
        return FetchSuccess(grant)

    async def fetch_templates(self) -> TemplatesResult:
        try:
            templates = await asyncio.to_thread(self.repository.fetch_active_templates)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Error fetching templates: %s", exc)
            return FetchFailure(_error_message(exc, TEMPLATES_FAILED_MESSAGE))
        return FetchSuccess(templates)


def _error_message(exc: BaseException, fallback: str) -> str:
    message = str(exc).strip()
    return message or fallback
