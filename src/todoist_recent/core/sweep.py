# src/todoist_recent/core/sweep.py

from __future__ import annotations

"""
Sweep reconciler.

One run:
- resolves the two recency labels (failure here aborts the run),
- gathers candidates: items carrying either label, plus items changed within the
  lookback window (only needed when the sweep may add labels),
- evaluates the recency predicate for each candidate against a single `now`,
- queues a label rewrite for every item whose labels disagree with the decision,
- applies the rewrites through the rate-limited batch applier.

Per-item failures are counted and logged; they never abort the run.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from ..errors import MalformedTimestamp
from .batch import BatchApplier
from .label_directory import LabelDirectory
from .label_editor import apply_decision, labels_changed
from .models import DEFAULT_LOOKBACK, RECENT_THRESHOLD, Item, LabelWrite, RecencyDecision
from .ports import TaskStoreClient
from .recency import decide_recency

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SweepReport:
    considered: int = 0
    changed: int = 0
    failed: int = 0
    skipped: int = 0
    query_failures: int = 0

    def summary(self) -> str:
        return (
            f"considered={self.considered} changed={self.changed} failed={self.failed} "
            f"skipped={self.skipped} query_failures={self.query_failures}"
        )


class SweepReconciler:
    def __init__(
        self,
        client: TaskStoreClient,
        *,
        now: datetime | None = None,
        threshold: timedelta = RECENT_THRESHOLD,
        lookback: timedelta = DEFAULT_LOOKBACK,
        add_labels: bool = True,
        dry_run: bool = False,
        directory: LabelDirectory | None = None,
        applier: BatchApplier | None = None,
    ) -> None:
        self._client = client
        self._now = now
        self.threshold = threshold
        if lookback < threshold:
            logger.warning("Lookback %s is narrower than the threshold %s; using the threshold", lookback, threshold)
        self.lookback = max(lookback, threshold)
        self.add_labels = add_labels
        self.dry_run = dry_run
        self._directory = directory or LabelDirectory(client)
        self._applier = applier or BatchApplier(client)

    def run(self) -> SweepReport:
        now = self._now or datetime.now(UTC)
        report = SweepReport()

        logger.info("Starting sweep (threshold for recent tasks: %s)", (now - self.threshold).isoformat())

        ids = self._directory.resolve()
        created_name = ids.created.name
        updated_name = ids.updated.name

        candidates = self._gather_candidates(created_name, updated_name, now, report)
        logger.info("Processing %d unique tasks...", len(candidates))

        writes: list[LabelWrite] = []
        for item in candidates.values():
            report.considered += 1
            try:
                decision = decide_recency(item.added_at, item.updated_at, now=now, threshold=self.threshold)
            except MalformedTimestamp as e:
                logger.warning("Skipping task %s: %s", item.id, e)
                report.skipped += 1
                continue

            has_created = created_name in item.labels
            has_updated = updated_name in item.labels

            if not self.add_labels:
                # Cleanup-only: a label may be removed, never added.
                decision = RecencyDecision(
                    want_created=decision.want_created and has_created,
                    want_updated=decision.want_updated and has_updated,
                )

            if decision.want_created == has_created and decision.want_updated == has_updated:
                continue

            new_labels = apply_decision(
                item.labels,
                decision,
                created_name=created_name,
                updated_name=updated_name,
            )
            if not labels_changed(item.labels, new_labels):
                continue

            logger.debug(
                'Task "%s" (%s): created=%s->%s updated=%s->%s labels=%s',
                item.content,
                item.id,
                has_created,
                decision.want_created,
                has_updated,
                decision.want_updated,
                item.labels,
            )
            writes.append(LabelWrite(item_id=item.id, labels=new_labels, content=item.content))

        logger.info("Found %d tasks that need label updates", len(writes))

        if self.dry_run:
            for write in writes:
                logger.info("[dry-run] would update task %s: labels=%s", write.item_id, write.labels)
        elif writes:
            result = self._applier.apply(writes)
            report.changed = len(result.applied)
            report.failed = len(result.failed)

        logger.info("Sweep finished: %s", report.summary())
        return report

    def _gather_candidates(
        self, created_name: str, updated_name: str, now: datetime, report: SweepReport
    ) -> dict[str, Item]:
        queries: list[tuple[str, Callable[[], list[Item]]]] = [
            (f'label "{created_name}"', lambda: self._client.get_items_by_label(created_name)),
            (f'label "{updated_name}"', lambda: self._client.get_items_by_label(updated_name)),
        ]
        if self.add_labels:
            queries.append(
                (f"changed within {self.lookback}", lambda: self._client.get_items_changed_since(self.lookback, now=now))
            )

        # Later queries overwrite earlier snapshots of the same item.
        candidates: dict[str, Item] = {}
        for what, fetch in queries:
            try:
                items = fetch()
            except Exception:
                logger.exception("Candidate query failed (%s)", what)
                report.query_failures += 1
                continue

            logger.info("Found %d tasks with %s", len(items), what)
            for item in items:
                candidates[item.id] = item

        return candidates


async def run_sweep_scheduler(
        run_sweep: Callable[[], object],
        *,
        interval_seconds: float = 3600.0,
) -> None:
    """
    Simple polling scheduler for deployments without an external one.

    Every interval_seconds `run_sweep` is called in a worker thread; it is expected
    to build a fresh client and reconciler per call. A failed sweep is logged and
    the loop continues. To stop the scheduler, cancel the coroutine/task.
    """
    sleep_s = max(0.5, float(interval_seconds))

    while True:
        try:
            await asyncio.to_thread(run_sweep)
        except Exception:
            logger.exception("Sweep failed")

        await asyncio.sleep(sleep_s)
