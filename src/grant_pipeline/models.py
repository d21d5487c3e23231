from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class GrantStatus(str, Enum):
    RESEARCHING = "researching"
    ELIGIBLE = "eligible"
    PREPARING = "preparing"
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    AWARDED = "awarded"
    DECLINED = "declined"
    WITHDRAWN = "withdrawn"


ACTIVE_STATUSES = frozenset(
    {
        GrantStatus.RESEARCHING.value,
        GrantStatus.ELIGIBLE.value,
        GrantStatus.PREPARING.value,
        GrantStatus.SUBMITTED.value,
        GrantStatus.UNDER_REVIEW.value,
    }
)
DECIDED_STATUSES = frozenset({GrantStatus.AWARDED.value, GrantStatus.DECLINED.value})


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANKS[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Priority):
            return NotImplemented
        return self.rank < other.rank


_PRIORITY_RANKS = {
    Priority.LOW: 0,
    Priority.MEDIUM: 1,
    Priority.HIGH: 2,
    Priority.CRITICAL: 3,
}


@dataclass(slots=True)
class FundingRecord:
    id: str
    name: str
    status: str
    priority: str | None = None
    funder: str | None = None
    amount_requested: Any = None
    amount_awarded: Any = None
    deadline_date: datetime | None = None
    raw: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class PipelineRecord:
    id: str
    grant_id: str | None = None
    stage: str | None = None
    raw: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class ProgressRecord:
    id: str
    grant_id: str | None = None
    section: str | None = None
    completion_percentage: float | None = None
    raw: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class TemplateRecord:
    id: str
    name: str
    is_active: bool = True
    times_used: int = 0
    raw: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class SummaryStatistics:
    total_grants: int = 0
    total_requested: float = 0.0
    total_awarded: float = 0.0
    success_rate: float = 0.0
    active_applications: int = 0
    upcoming_deadlines: int = 0
    awarded_count: int = 0
    decided_count: int = 0


@dataclass(frozen=True, slots=True)
class DashboardSnapshot:
    grants: list[FundingRecord]
    opportunities: list[PipelineRecord]
    bid_progress: list[ProgressRecord]
    summary: SummaryStatistics
    fetched_at: datetime
