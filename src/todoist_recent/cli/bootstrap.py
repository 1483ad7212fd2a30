# src/todoist_recent/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- configures logging from settings,
- builds a fresh Todoist client per invocation,
- wires the client into a sweep reconciler.
"""

from __future__ import annotations

import logging

from ..config import Settings
from ..core.batch import BatchApplier
from ..core.sweep import SweepReconciler, SweepReport
from ..logging_setup import level_from_name, setup_logging
from ..todoist.client import TodoistClient

logger = logging.getLogger(__name__)


def init_logging(settings: Settings) -> None:
    setup_logging(log_dir=settings.log_dir, console_level=level_from_name(settings.log_level))


def create_client(settings: Settings) -> TodoistClient:
    """Raises ConfigurationError when the token is missing."""
    return TodoistClient.from_settings(settings)


def run_sweep_once(
    settings: Settings,
    *,
    add_labels: bool = True,
    dry_run: bool = False,
) -> SweepReport:
    """One full sweep with its own client; the client is closed afterwards."""
    with create_client(settings) as client:
        reconciler = SweepReconciler(
            client,
            threshold=settings.recent_threshold,
            lookback=settings.lookback,
            add_labels=add_labels,
            dry_run=dry_run,
            applier=BatchApplier(client, delay_seconds=settings.write_delay_seconds),
        )
        return reconciler.run()
