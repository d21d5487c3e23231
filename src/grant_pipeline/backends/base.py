from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Sequence

Row = dict[str, Any]


class BackendError(RuntimeError):
    """Base class for failures talking to the tabular backend."""


class BackendNotConfiguredError(BackendError):
    """Raised when the backend URL or API key is missing."""


class QueryError(BackendError):
    """Raised when the backend rejects a query or cannot be reached."""

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.status_code = status_code


@dataclass(frozen=True, slots=True)
class ColumnFilter:
    column: str
    operator: str
    value: str

    def to_param(self) -> str:
        return f"{self.operator}.{self.value}"


@dataclass(frozen=True, slots=True)
class OrderBy:
    column: str
    ascending: bool = True

    def to_param(self) -> str:
        return f"{self.column}.{'asc' if self.ascending else 'desc'}"


def eq(column: str, value: Any) -> ColumnFilter:
    return ColumnFilter(column, "eq", str(value))


def is_null(column: str) -> ColumnFilter:
    return ColumnFilter(column, "is", "null")


def is_true(column: str) -> ColumnFilter:
    return ColumnFilter(column, "is", "true")


class TableClient(ABC):
    def __init__(self, backend_id: str) -> None:
        self.backend_id = backend_id

    def is_configured(self) -> bool:
        return True

    @abstractmethod
    def select(
        self,
        table: str,
        *,
        filters: Sequence[ColumnFilter] = (),
        order: Sequence[OrderBy] = (),
    ) -> list[Row]:
        """Return every row of ``table`` matching ``filters``."""

    @abstractmethod
    def select_single(
        self,
        table: str,
        *,
        filters: Sequence[ColumnFilter] = (),
    ) -> Row | None:
        """Return the one matching row, or None when nothing matches."""
