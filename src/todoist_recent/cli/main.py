# src/todoist_recent/cli/main.py

"""
CLI entrypoints.

- todoist-recent-sweep: one sweep (for cron / scheduled container jobs), or a
  periodic loop with --interval.
- todoist-recent-webhook: serve the webhook endpoint for the reactive path.

Both exit non-zero only for setup failures (missing credentials, labels cannot be
resolved, store unreachable at start-up). Individual task failures are logged and
do not change the exit code.
"""

from __future__ import annotations

import argparse
import asyncio
import logging

from ..config import Settings, get_settings
from ..core.sweep import run_sweep_scheduler
from ..errors import ConfigurationError, RemoteCallFailure
from ..webhook.app import create_app
from .bootstrap import create_client, init_logging, run_sweep_once

logger = logging.getLogger(__name__)


def _sweep_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="todoist-recent-sweep",
        description='Reconcile the "recently created" / "recently updated" labels.',
    )
    p.add_argument(
        "--interval",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Keep running and sweep every SECONDS (default: run once and exit).",
    )
    p.add_argument(
        "--cleanup-only",
        action="store_true",
        help="Only remove stale labels; never add new ones.",
    )
    p.add_argument("--dry-run", action="store_true", help="Log intended changes without writing.")
    return p


def sweep_main(argv: list[str] | None = None, *, settings: Settings | None = None) -> int:
    args = _sweep_parser().parse_args(argv)
    settings = settings if settings is not None else get_settings()
    init_logging(settings)

    try:
        settings.require_token()
    except ConfigurationError as e:
        logger.error("%s", e)
        return 1

    add_labels = not args.cleanup_only

    if args.interval is None:
        logger.info("Starting Todoist recent tasks labeling process...")
        try:
            report = run_sweep_once(settings, add_labels=add_labels, dry_run=args.dry_run)
        except (ConfigurationError, RemoteCallFailure) as e:
            logger.error("Error in main process: %s", e)
            return 1
        logger.info("Successfully updated %d tasks", report.changed)
        return 0

    logger.info("Sweeping every %.0fs. Press Ctrl+C to stop.", args.interval)
    try:
        asyncio.run(
            run_sweep_scheduler(
                lambda: run_sweep_once(settings, add_labels=add_labels, dry_run=args.dry_run),
                interval_seconds=args.interval,
            )
        )
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down...")
    return 0


def _webhook_parser(settings: Settings) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="todoist-recent-webhook",
        description="Serve the Todoist webhook endpoint that labels new and edited tasks.",
    )
    p.add_argument("--host", default=settings.host, help=f"Bind address (default: {settings.host}).")
    p.add_argument("--port", type=int, default=settings.port, help=f"Port (default: {settings.port}).")
    return p


def webhook_main(argv: list[str] | None = None, *, settings: Settings | None = None) -> int:
    settings = settings if settings is not None else get_settings()
    args = _webhook_parser(settings).parse_args(argv)
    init_logging(settings)

    logger.info("Starting webhook server on port %s...", args.port)

    try:
        settings.require_client_secret()
        settings.require_token()
    except ConfigurationError as e:
        logger.error("%s", e)
        return 1

    logger.info("Testing Todoist API connection...")
    try:
        with create_client(settings) as client:
            client.get_labels()
    except RemoteCallFailure as e:
        logger.error("Failed to connect to Todoist API: %s", e)
        return 1
    logger.info("Todoist API connection successful")

    app = create_app(settings)
    logger.info("Webhook endpoint: http://%s:%s/webhook", args.host, args.port)
    logger.info("Health check: http://%s:%s/health", args.host, args.port)
    app.run(host=args.host, port=args.port, debug=False, use_reloader=False)
    return 0


if __name__ == "__main__":
    raise SystemExit(sweep_main())
