from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


class ConfigError(ValueError):
    """Raised when configuration is invalid."""


@dataclass(slots=True)
class BackendSettings:
    type: str = "supabase"
    url_env_var: str = "SUPABASE_URL"
    key_env_var: str = "SUPABASE_ANON_KEY"
    timeout_seconds: int = 30


@dataclass(slots=True)
class TableSettings:
    grants: str = "grants"
    opportunities: str = "opportunity_pipeline"
    bid_progress: str = "bid_writing_progress"
    templates: str = "bid_writing_templates"


@dataclass(slots=True)
class DeadlineSettings:
    window_days: int = 30


@dataclass(slots=True)
class AppConfig:
    backend: BackendSettings = field(default_factory=BackendSettings)
    tables: TableSettings = field(default_factory=TableSettings)
    deadlines: DeadlineSettings = field(default_factory=DeadlineSettings)
    log_level: str = "INFO"


def _as_int(value: Any, *, field_name: str, minimum: int | None = None) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{field_name} must be an integer")

    try:
        parsed = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{field_name} must be an integer") from exc

    if minimum is not None and parsed < minimum:
        raise ConfigError(f"{field_name} must be >= {minimum}")
    return parsed


def _as_name(value: Any, *, default: str) -> str:
    if value is None:
        return default
    return str(value).strip() or default


def _section(parsed: dict[str, Any], name: str) -> dict[str, Any]:
    raw = parsed.get(name, {}) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"{name} must be a mapping")
    return raw


def load_config(path: str | Path) -> AppConfig:
    config_path = Path(path).expanduser().resolve()
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as handle:
        try:
            parsed = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Config file is not valid YAML: {exc}") from exc

    if not isinstance(parsed, dict):
        raise ConfigError("Config root must be a mapping")

    return parse_config(parsed)


def parse_config(parsed: dict[str, Any]) -> AppConfig:
    defaults = AppConfig()

    raw_backend = _section(parsed, "backend")
    backend_settings = BackendSettings(
        type=_as_name(raw_backend.get("type"), default=defaults.backend.type).lower(),
        url_env_var=_as_name(
            raw_backend.get("url_env_var"),
            default=defaults.backend.url_env_var,
        ),
        key_env_var=_as_name(
            raw_backend.get("key_env_var"),
            default=defaults.backend.key_env_var,
        ),
        timeout_seconds=_as_int(
            raw_backend.get("timeout_seconds", defaults.backend.timeout_seconds),
            field_name="backend.timeout_seconds",
            minimum=1,
        ),
    )

    raw_tables = _section(parsed, "tables")
    table_settings = TableSettings(
        grants=_as_name(raw_tables.get("grants"), default=defaults.tables.grants),
        opportunities=_as_name(
            raw_tables.get("opportunities"),
            default=defaults.tables.opportunities,
        ),
        bid_progress=_as_name(
            raw_tables.get("bid_progress"),
            default=defaults.tables.bid_progress,
        ),
        templates=_as_name(raw_tables.get("templates"), default=defaults.tables.templates),
    )

    raw_deadlines = _section(parsed, "deadlines")
    deadline_settings = DeadlineSettings(
        window_days=_as_int(
            raw_deadlines.get("window_days", defaults.deadlines.window_days),
            field_name="deadlines.window_days",
            minimum=0,
        ),
    )

    return AppConfig(
        backend=backend_settings,
        tables=table_settings,
        deadlines=deadline_settings,
        log_level=str(parsed.get("log_level", defaults.log_level)).upper(),
    )
