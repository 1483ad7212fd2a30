# src/todoist_recent/core/label_directory.py

from __future__ import annotations

"""
Label directory.

Resolves the two recency label names to label records, creating them on first use.
One directory lives for one invocation (a sweep run or a webhook request) and
caches its result, so the label collection is fetched at most once per invocation.

Concurrent invocations may both decide a label is missing and both try to create it:
- if the store enforces unique names, the loser gets DuplicateLabel and re-resolves;
- if it does not, a second label with the same name is created and must be removed
  by hand. The store exposes no upsert, so this is left as an accepted risk.
"""

import logging

from ..errors import DuplicateLabel, RemoteCallFailure
from .models import RECENTLY_CREATED_LABEL, RECENTLY_UPDATED_LABEL, Label, LabelIds
from .ports import TaskStoreClient

logger = logging.getLogger(__name__)


def _find(labels: list[Label], name: str) -> Label | None:
    for label in labels:
        if label.name == name:
            return label
    return None


class LabelDirectory:
    def __init__(
        self,
        client: TaskStoreClient,
        *,
        created_name: str = RECENTLY_CREATED_LABEL,
        updated_name: str = RECENTLY_UPDATED_LABEL,
    ) -> None:
        self._client = client
        self.created_name = created_name
        self.updated_name = updated_name
        self._resolved: LabelIds | None = None

    def resolve(self) -> LabelIds:
        if self._resolved is not None:
            return self._resolved

        logger.debug("Fetching labels...")
        labels = self._client.get_labels()

        created = self._ensure(labels, self.created_name)
        updated = self._ensure(labels, self.updated_name)

        self._resolved = LabelIds(created=created, updated=updated)
        return self._resolved

    def _ensure(self, labels: list[Label], name: str) -> Label:
        found = _find(labels, name)
        if found is not None:
            return found

        logger.info('Creating "%s" label...', name)
        try:
            return self._client.create_label(name)
        except DuplicateLabel:
            # Another invocation created it between our fetch and our create.
            logger.info('Label "%s" was created concurrently; re-resolving', name)

        found = _find(self._client.get_labels(), name)
        if found is None:
            raise RemoteCallFailure(f'Label "{name}" reported as duplicate but not found')
        return found
