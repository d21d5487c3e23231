from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from grant_pipeline.models import FundingRecord


@dataclass(slots=True)
class FilterResult:
    matched: bool
    reasons: list[str] = field(default_factory=list)

    def reason_text(self) -> str:
        return "; ".join(self.reasons) if self.reasons else "no specific reason"


class RecordFilter(ABC):
    @abstractmethod
    def evaluate(self, record: FundingRecord) -> FilterResult:
        """Decide whether a grant belongs in a view, with the reasons shown to users."""

    def matches(self, record: FundingRecord) -> bool:
        return self.evaluate(record).matched


class AllOf(RecordFilter):
    """Match grants accepted by every wrapped filter.

    With no filters every grant matches. The reasons of a match are those of
    each filter; a miss reports only the filters that rejected the grant.
    """

    def __init__(self, *filters: RecordFilter) -> None:
        self.filters = filters

    def evaluate(self, record: FundingRecord) -> FilterResult:
        results = [record_filter.evaluate(record) for record_filter in self.filters]
        rejected = [result for result in results if not result.matched]
        if rejected:
            return FilterResult(
                matched=False,
                reasons=[reason for result in rejected for reason in result.reasons],
            )
        return FilterResult(
            matched=True,
            reasons=[reason for result in results for reason in result.reasons],
        )
