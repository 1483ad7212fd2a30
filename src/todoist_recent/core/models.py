# src/todoist_recent/core/models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from enum import StrEnum
from typing import Any

RECENTLY_CREATED_LABEL = "recently created"
RECENTLY_UPDATED_LABEL = "recently updated"

# Items are "recent" if created/updated within this window.
RECENT_THRESHOLD = timedelta(hours=24)

# Sweep candidate window; wider than the threshold so newly qualifying items are seen.
DEFAULT_LOOKBACK = timedelta(days=7)


@dataclass(slots=True)
class Item:
    """
    A task record as the store reports it.

    Timestamps stay as the store's raw strings; the recency predicate parses them
    so that a malformed value only affects the one item that carries it.
    """

    id: str
    content: str
    added_at: str | None
    updated_at: str | None = None
    labels: list[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Item:
        labels = data.get("labels") or []
        return cls(
            id=str(data["id"]),
            content=str(data.get("content") or ""),
            added_at=data.get("added_at"),
            updated_at=data.get("updated_at") or None,
            labels=[str(name) for name in labels],
        )


@dataclass(slots=True, frozen=True)
class Label:
    id: str
    name: str

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Label:
        return cls(id=str(data["id"]), name=str(data.get("name") or ""))


@dataclass(slots=True, frozen=True)
class LabelIds:
    """The two recency labels as resolved by the directory."""

    created: Label
    updated: Label


@dataclass(slots=True, frozen=True)
class RecencyDecision:
    want_created: bool
    want_updated: bool


class EventKind(StrEnum):
    ADDED = "added"
    UPDATED = "updated"
    OTHER = "other"


# Update intent the store sends for a genuine user edit. Anything else on
# item:updated (e.g. completing a recurring task) is not a content update.
USER_UPDATE_INTENT = "item_updated"


@dataclass(slots=True, frozen=True)
class ChangeEvent:
    """
    A verified, parsed inbound change event.

    `item` is the snapshot embedded in the event; it is kept for logging only,
    labels are always read fresh from the store.
    """

    kind: EventKind
    event_name: str
    item_id: str | None
    item: Item | None = None
    update_intent: str | None = None

    @property
    def is_user_update(self) -> bool:
        return not self.update_intent or self.update_intent == USER_UPDATE_INTENT


@dataclass(slots=True, frozen=True)
class LabelWrite:
    """One queued label rewrite for the batch applier."""

    item_id: str
    labels: list[str]
    content: str = ""
