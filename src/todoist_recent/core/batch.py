# src/todoist_recent/core/batch.py

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from .models import LabelWrite
from .ports import TaskStoreClient

logger = logging.getLogger(__name__)

# Small pause between consecutive writes to stay under the store's rate limits.
DEFAULT_WRITE_DELAY_SECONDS = 0.05


@dataclass(slots=True)
class BatchResult:
    applied: list[str] = field(default_factory=list)
    failed: list[tuple[str, str]] = field(default_factory=list)  # (item_id, reason)


class BatchApplier:
    """
    Sequential label writer shared by the reactive and sweep paths.

    Each write is independent: a failure is logged with the item id and recorded,
    and the remaining writes still run. No retries; the next sweep converges.
    """

    def __init__(
        self,
        client: TaskStoreClient,
        *,
        delay_seconds: float = DEFAULT_WRITE_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._client = client
        self._delay_s = max(0.0, float(delay_seconds))
        self._sleep = sleep

    def apply(self, writes: Iterable[LabelWrite]) -> BatchResult:
        result = BatchResult()

        for n, write in enumerate(writes):
            if n and self._delay_s:
                self._sleep(self._delay_s)

            try:
                self._client.update_item_labels(write.item_id, list(write.labels))
            except Exception as e:
                reason = str(e) or e.__class__.__name__
                logger.exception("Failed to update task %s: %s", write.item_id, reason)
                result.failed.append((write.item_id, reason))
                continue

            result.applied.append(write.item_id)
            logger.info('Updated task "%s" (%s): labels=%s', write.content, write.item_id, write.labels)

        return result
