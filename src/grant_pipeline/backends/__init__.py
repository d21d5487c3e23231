"""Tabular backend clients and registry."""

from .base import (
    BackendError,
    BackendNotConfiguredError,
    ColumnFilter,
    OrderBy,
    QueryError,
    Row,
    TableClient,
    eq,
    is_null,
    is_true,
)
from .postgrest import PostgrestClient
from .registry import (
    BackendRegistrationError,
    create_client,
    register_backend,
    registered_backend_types,
)

__all__ = [
    "BackendError",
    "BackendNotConfiguredError",
    "BackendRegistrationError",
    "ColumnFilter",
    "OrderBy",
    "PostgrestClient",
    "QueryError",
    "Row",
    "TableClient",
    "create_client",
    "eq",
    "is_null",
    "is_true",
    "register_backend",
    "registered_backend_types",
]
