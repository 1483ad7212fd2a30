# src/todoist_recent/core/reactive.py

from __future__ import annotations

"""
Reactive updater.

Handles one inbound change event:
- item added   -> make sure the item carries the "recently created" label
- item updated -> make sure it carries "recently updated" (genuine user edits only)
- anything else is ignored

This path only ever adds labels. Removal belongs to the sweep; otherwise a fast
webhook removal could fight a slow sweep addition.

Errors are logged and swallowed: a missed add is corrected by the next sweep, and
the webhook must still be acknowledged so the sender does not retry forever.
"""

import logging
from enum import StrEnum

from .batch import BatchApplier
from .label_directory import LabelDirectory
from .label_editor import apply_label, labels_changed
from .models import ChangeEvent, EventKind, LabelWrite
from .ports import TaskStoreClient

logger = logging.getLogger(__name__)


class ReactiveOutcome(StrEnum):
    LABELED = "labeled"
    UNCHANGED = "unchanged"
    IGNORED = "ignored"
    FAILED = "failed"


class ReactiveUpdater:
    def __init__(
        self,
        client: TaskStoreClient,
        *,
        directory: LabelDirectory | None = None,
        applier: BatchApplier | None = None,
    ) -> None:
        self._client = client
        self._directory = directory or LabelDirectory(client)
        self._applier = applier or BatchApplier(client)

    def handle(self, event: ChangeEvent) -> ReactiveOutcome:
        logger.info("Received webhook event: %s for task %s", event.event_name, event.item_id)

        if event.kind == EventKind.ADDED:
            return self._add_label(event, created=True)

        if event.kind == EventKind.UPDATED:
            if not event.is_user_update:
                logger.info(
                    "Ignoring %s for task %s (update_intent=%s)",
                    event.event_name,
                    event.item_id,
                    event.update_intent,
                )
                return ReactiveOutcome.IGNORED
            return self._add_label(event, created=False)

        logger.info("Ignoring webhook event: %s", event.event_name)
        return ReactiveOutcome.IGNORED

    def _add_label(self, event: ChangeEvent, *, created: bool) -> ReactiveOutcome:
        item_id = event.item_id
        if not item_id:
            logger.warning("Event %s carries no task id; ignoring", event.event_name)
            return ReactiveOutcome.IGNORED

        try:
            ids = self._directory.resolve()
            name = ids.created.name if created else ids.updated.name

            # The event snapshot may be stale; labels can change between emission and delivery.
            item = self._client.get_item(item_id)
            new_labels = apply_label(item.labels, name, True)

            if not labels_changed(item.labels, new_labels):
                logger.info('Task %s already has "%s" label', item_id, name)
                return ReactiveOutcome.UNCHANGED

            result = self._applier.apply([LabelWrite(item_id=item_id, labels=new_labels, content=item.content)])
        except Exception:
            logger.exception("Failed to handle %s for task %s", event.event_name, item_id)
            return ReactiveOutcome.FAILED

        if result.failed:
            return ReactiveOutcome.FAILED

        logger.info('Added "%s" label to task %s: "%s"', name, item_id, item.content)
        return ReactiveOutcome.LABELED
