"""CLI entry point for the career-board analytics engine."""

import argparse
import asyncio
import logging
import sqlite3
import sys
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

import yaml

from careerboard.core.config import Settings
from careerboard.core.db import init_db, record_event, remove_save, upsert_job
from careerboard.core.schemas import EVENT_TYPES, Event, Job
from careerboard.pipeline.dashboard import (
    DashboardReport,
    build_dashboard,
    export_report_csv,
    export_report_json,
    report_window,
)
from careerboard.sources.sqlite_source import SqliteEventSource

logger = logging.getLogger(__name__)


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default="config/settings.yaml",
        help="Path to settings YAML file (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Career board analytics - engagement trends, leaderboards and funnels",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- report subcommand ---
    report_parser = subparsers.add_parser("report", help="Print the engagement dashboard")
    _add_common(report_parser)
    report_parser.add_argument(
        "--days",
        type=int,
        help="Number of days to report on, ending today (default: from settings)",
    )
    report_parser.add_argument(
        "--end",
        type=date.fromisoformat,
        help="Last day of the report as YYYY-MM-DD (default: today)",
    )
    report_parser.add_argument(
        "--top",
        type=int,
        help="Leaderboard size (default: from settings)",
    )
    report_parser.add_argument(
        "--metric",
        choices=["score", "clicks", "saves"],
        help="Leaderboard ranking metric (default: from settings)",
    )
    report_parser.add_argument(
        "--created-by",
        help="Only report on jobs posted by this user id",
    )
    report_parser.add_argument(
        "--export",
        choices=["json", "csv"],
        help="Export the full report to format (json, csv)",
    )

    # --- track subcommand ---
    track_parser = subparsers.add_parser("track", help="Record an engagement event")
    _add_common(track_parser)
    track_parser.add_argument("--job", required=True, help="Job id")
    track_parser.add_argument(
        "--type",
        required=True,
        choices=list(EVENT_TYPES),
        help="Event type",
    )
    track_parser.add_argument("--actor", help="Acting user id (omit for anonymous views)")
    track_parser.add_argument(
        "--at",
        type=datetime.fromisoformat,
        help="Event timestamp as ISO 8601 (default: now)",
    )
    track_parser.add_argument(
        "--status",
        choices=["applied", "viewed", "interview", "hired", "rejected"],
        help="Application status (application events only)",
    )
    track_parser.add_argument(
        "--remove",
        action="store_true",
        help="With --type save: remove the bookmark instead of adding it",
    )

    # --- import-jobs subcommand ---
    import_parser = subparsers.add_parser("import-jobs", help="Insert or update jobs from YAML")
    _add_common(import_parser)
    import_parser.add_argument("--file", required=True, help="YAML file with a 'jobs' list")

    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def load_jobs(path: str | Path) -> list[Job]:
    """Load job rows from a YAML file with a top-level ``jobs`` list."""
    path = Path(path)
    if not path.exists():
        msg = f"Jobs file not found: {path}"
        raise FileNotFoundError(msg)
    raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
    return [Job.model_validate(entry) for entry in raw.get("jobs", [])]


def print_report(report: DashboardReport) -> None:
    """Print a human-readable dashboard summary."""
    o = report.overview
    print(f"\nEngagement report {report.start} .. {report.end}")
    print(f"  Jobs: {o.total_jobs} total, {o.active_jobs} active, "
          f"{o.expired_jobs} expired, {o.pending_jobs} pending")
    print(f"  Views: {o.total_views} ({o.unique_views} unique), clicks: {o.total_clicks}")
    print(f"  Engagement rate: {o.engagement_rate:.1f}%  "
          f"approval rate: {o.approval_rate:.1f}%")
    print(f"  Jobs growth: {report.jobs_growth:+.1f}%  "
          f"applications growth: {report.applications_growth:+.1f}%")

    f = report.funnel
    print(f"\nFunnel: view->click {f.view_to_click:.1f}%, "
          f"click->apply {f.click_to_completion:.1f}%, overall {f.overall:.1f}%")

    print(f"\nTop jobs by {report.metric}:")
    if not report.leaderboard:
        print("  (no active jobs)")
    for entry in report.leaderboard:
        print(f"  {entry.rank}. {entry.title} ({entry.company or 'n/a'}) "
              f"score={entry.score:.1f} views={entry.unique_views} "
              f"clicks={entry.unique_clicks} saves={entry.saves}")

    print("\nEngagement tiers:")
    for tier in report.engagement_tiers:
        print(f"  {tier.tier}: {tier.count} ({tier.percentage:.1f}%)")


async def cmd_report(args: argparse.Namespace, settings: Settings) -> None:
    """Handle report subcommand."""
    days = settings.report.days if args.days is None else args.days
    start, end = report_window(args.end or datetime.now(timezone.utc).date(), days)

    conn = init_db(settings.database.path)
    try:
        report = await build_dashboard(
            SqliteEventSource(conn),
            settings,
            start,
            end,
            created_by=args.created_by,
            metric=args.metric,
            top_n=args.top,
        )
    finally:
        conn.close()

    if args.export == "json":
        print(export_report_json(report))
    elif args.export == "csv":
        print(export_report_csv(report), end="")
    else:
        print_report(report)


def cmd_track(args: argparse.Namespace, settings: Settings) -> None:
    """Handle track subcommand."""
    conn = init_db(settings.database.path)
    try:
        if args.remove:
            if args.type != "save" or not args.actor:
                msg = "--remove requires --type save and --actor"
                raise ValueError(msg)
            removed = remove_save(conn, args.job, args.actor)
            print(f"Bookmark {'removed' if removed else 'not found'} for job {args.job}")
            return
        event = Event(
            event_type=args.type,
            job_id=args.job,
            actor_id=args.actor,
            occurred_at=args.at or datetime.now(timezone.utc),
            status=args.status,
        )
        row_id = record_event(conn, event)
        logger.debug("Recorded event %d", row_id)
        print(f"Recorded {event.event_type} for job {event.job_id}")
    finally:
        conn.close()


def cmd_import_jobs(args: argparse.Namespace, settings: Settings) -> None:
    """Handle import-jobs subcommand."""
    jobs = load_jobs(args.file)
    conn = init_db(settings.database.path)
    try:
        for job in jobs:
            upsert_job(conn, job)
    finally:
        conn.close()
    print(f"Imported {len(jobs)} jobs into {settings.database.path}")


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = Settings.from_yaml(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        if args.command == "report":
            asyncio.run(cmd_report(args, settings))
        elif args.command == "track":
            cmd_track(args, settings)
        else:
            cmd_import_jobs(args, settings)
    except (FileNotFoundError, ValueError, sqlite3.Error) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
