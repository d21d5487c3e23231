from __future__ import annotations

import logging
import os
from typing import Any, Sequence

import requests

from grant_pipeline.config import BackendSettings

from .base import (
    BackendNotConfiguredError,
    ColumnFilter,
    OrderBy,
    QueryError,
    Row,
    TableClient,
)
from .registry import register_backend

logger = logging.getLogger(__name__)

_SINGLE_OBJECT_MEDIA_TYPE = "application/vnd.pgrst.object+json"
# PostgREST: "JSON object requested, multiple (or no) rows returned"
_NO_ROWS_CODE = "PGRST116"


class PostgrestClient(TableClient):
    """Read-only client for a PostgREST endpoint such as Supabase's ``/rest/v1``."""

    def __init__(
        self,
        url: str | None,
        api_key: str | None,
        *,
        timeout_seconds: int = 30,
        url_env_var: str = "SUPABASE_URL",
        key_env_var: str = "SUPABASE_ANON_KEY",
        backend_id: str = "supabase",
    ) -> None:
        super().__init__(backend_id=backend_id)
        self.url = (url or "").strip().rstrip("/")
        self.api_key = (api_key or "").strip()
        self.timeout_seconds = timeout_seconds
        self.url_env_var = url_env_var
        self.key_env_var = key_env_var

    def is_configured(self) -> bool:
        return bool(self.url and self.api_key)

    def select(
        self,
        table: str,
        *,
        filters: Sequence[ColumnFilter] = (),
        order: Sequence[OrderBy] = (),
    ) -> list[Row]:
        params = _build_params(filters, order)
        response = self._get(table, params=params, headers=self._headers())
        if response.status_code >= 400:
            raise _query_error(table, response)

        payload = _json_body(table, response)
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise QueryError(f"Unexpected response for {table}: expected a list of rows")
        return [row for row in payload if isinstance(row, dict)]

    def select_single(
        self,
        table: str,
        *,
        filters: Sequence[ColumnFilter] = (),
    ) -> Row | None:
        params = _build_params(filters, ())
        headers = self._headers()
        headers["Accept"] = _SINGLE_OBJECT_MEDIA_TYPE
        response = self._get(table, params=params, headers=headers)

        if response.status_code >= 400:
            error = _query_error(table, response)
            if error.code == _NO_ROWS_CODE:
                logger.debug("No row in %s for %s", table, params)
                return None
            raise error

        payload = _json_body(table, response)
        if payload is None:
            return None
        if not isinstance(payload, dict):
            raise QueryError(f"Unexpected response for {table}: expected a single row")
        return payload

    def _headers(self) -> dict[str, str]:
        if not self.is_configured():
            raise BackendNotConfiguredError(
                f"Backend '{self.backend_id}' not configured. Please set "
                f"{self.url_env_var} and {self.key_env_var} environment variables."
            )
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
        }

    def _get(
        self,
        table: str,
        *,
        params: dict[str, str],
        headers: dict[str, str],
    ) -> requests.Response:
        endpoint = f"{self.url}/rest/v1/{table}"
        try:
            return requests.get(
                endpoint,
                params=params,
                headers=headers,
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as exc:
            raise QueryError(f"Could not reach backend for {table}: {exc}") from exc


def _build_params(filters: Sequence[ColumnFilter], order: Sequence[OrderBy]) -> dict[str, str]:
    params = {"select": "*"}
    for column_filter in filters:
        params[column_filter.column] = column_filter.to_param()
    if order:
        params["order"] = ",".join(item.to_param() for item in order)
    return params


def _json_body(table: str, response: requests.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError as exc:
        raise QueryError(f"Backend returned invalid JSON for {table}") from exc


def _query_error(table: str, response: requests.Response) -> QueryError:
    code: str | None = None
    message = ""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        code = str(body["code"]) if body.get("code") is not None else None
        message = str(body.get("message") or "").strip()

    if not message:
        message = (response.text or "").strip() or f"HTTP {response.status_code}"

    return QueryError(
        f"Query on {table} failed ({response.status_code}): {message}",
        code=code,
        status_code=response.status_code,
    )


def _client_from_settings(settings: BackendSettings) -> TableClient:
    return PostgrestClient(
        os.getenv(settings.url_env_var),
        os.getenv(settings.key_env_var),
        timeout_seconds=settings.timeout_seconds,
        url_env_var=settings.url_env_var,
        key_env_var=settings.key_env_var,
        backend_id=settings.type,
    )


@register_backend("supabase")
def _build_supabase_client(settings: BackendSettings) -> TableClient:
    return _client_from_settings(settings)


@register_backend("postgrest")
def _build_postgrest_client(settings: BackendSettings) -> TableClient:
    return _client_from_settings(settings)
