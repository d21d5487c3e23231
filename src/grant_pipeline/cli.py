from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from grant_pipeline.aggregate import apply_filter, sort_by_priority
from grant_pipeline.backends import BackendRegistrationError, TableClient, create_client
from grant_pipeline.config import AppConfig, ConfigError, load_config
from grant_pipeline.filters import (
    AllOf,
    DeadlineWindowFilter,
    PriorityFilter,
    RecordFilter,
    StatusFilter,
)
from grant_pipeline.logging_config import setup_logging
from grant_pipeline.models import FundingRecord, GrantStatus, Priority
from grant_pipeline.render import (
    render_grant_detail,
    render_grant_list,
    render_summary_text,
    render_template_list,
    render_upcoming_list,
)
from grant_pipeline.repository import GrantRepository
from grant_pipeline.service import GrantPipelineService
from grant_pipeline.state import DashboardState, GrantDetailState, TemplateListState

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="grant-pipeline",
        description="Fetch grant pipeline data and print dashboard views.",
    )
    parser.add_argument(
        "-c",
        "--config",
        help="Path to config YAML file (defaults are used when omitted)",
    )
    parser.add_argument(
        "--log-level",
        help="Override config log level (e.g. INFO, DEBUG)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("summary", help="Refresh and print pipeline summary statistics")

    list_parser = subparsers.add_parser("list", help="Refresh and list grants")
    list_parser.add_argument(
        "--status",
        action="append",
        help=f"Only grants with this status (repeatable; e.g. {GrantStatus.SUBMITTED.value})",
    )
    list_parser.add_argument(
        "--priority",
        action="append",
        choices=[priority.value for priority in Priority],
        help="Only grants with this priority (repeatable)",
    )
    list_parser.add_argument(
        "--sort",
        choices=["deadline", "priority"],
        default="deadline",
        help="Order by deadline (backend order) or by priority, most urgent first",
    )

    upcoming = subparsers.add_parser("upcoming", help="Refresh and list upcoming deadlines")
    upcoming.add_argument(
        "--days",
        type=int,
        help="Deadline window in days (default: deadlines.window_days)",
    )

    show = subparsers.add_parser("show", help="Print a single grant")
    show.add_argument("grant_id")

    subparsers.add_parser("templates", help="List active bid writing templates")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "upcoming" and args.days is not None and args.days < 0:
        parser.error("--days must be >= 0")

    try:
        app_config = load_config(args.config) if args.config else AppConfig()
    except ConfigError as exc:
        print(f"Config error: {exc}", file=sys.stderr)
        return 2

    log_level = args.log_level or app_config.log_level
    setup_logging(log_level)

    try:
        client = _build_client(app_config)
    except BackendRegistrationError as exc:
        logger.error("%s", exc)
        return 2

    if not client.is_configured():
        logger.error(
            "Missing backend connection settings in environment variables %s / %s",
            app_config.backend.url_env_var,
            app_config.backend.key_env_var,
        )
        return 2

    service = GrantPipelineService(
        repository=GrantRepository(client, app_config.tables),
        window_days=app_config.deadlines.window_days,
    )

    return asyncio.run(_dispatch(args, service))


def _build_client(app_config: AppConfig) -> TableClient:
    return create_client(app_config.backend)


async def _dispatch(args: argparse.Namespace, service: GrantPipelineService) -> int:
    if args.command == "show":
        return await _run_show(service, args.grant_id)
    if args.command == "templates":
        return await _run_templates(service)

    state = DashboardState(service)
    await state.refresh()
    if state.error:
        print(f"Error: {state.error}", file=sys.stderr)
        return 1

    if args.command == "summary" and state.summary is not None:
        print(render_summary_text(state.summary, window_days=service.window_days))
    elif args.command == "list":
        print(render_grant_list(_select_grants(state, args)))
    elif args.command == "upcoming" and state.fetched_at is not None:
        days = service.window_days if args.days is None else args.days
        deadline_filter = DeadlineWindowFilter(state.fetched_at, days)
        print(render_upcoming_list(state.upcoming_deadlines(days), deadline_filter))

    return 0


def _select_grants(state: DashboardState, args: argparse.Namespace) -> list[FundingRecord]:
    filters: list[RecordFilter] = []
    if args.status:
        filters.append(StatusFilter(args.status))
    if args.priority:
        filters.append(PriorityFilter(args.priority))

    records = apply_filter(state.grants, AllOf(*filters))
    if args.sort == "priority":
        records = sort_by_priority(records)
    return records


async def _run_show(service: GrantPipelineService, grant_id: str) -> int:
    state = GrantDetailState(service, grant_id)
    await state.load()
    if state.error:
        print(f"Error: {state.error}", file=sys.stderr)
        return 1
    if state.grant is None:
        print(f"Grant {grant_id} not found")
        return 0
    print(render_grant_detail(state.grant))
    return 0


async def _run_templates(service: GrantPipelineService) -> int:
    state = TemplateListState(service)
    await state.load()
    if state.error:
        print(f"Error: {state.error}", file=sys.stderr)
        return 1
    print(render_template_list(state.templates))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
