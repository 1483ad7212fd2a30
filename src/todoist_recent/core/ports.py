# src/todoist_recent/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
Each invocation constructs its own client and passes it in, so there is no
process-wide client handle, and tests can substitute in-memory fakes.
"""

from datetime import datetime, timedelta
from typing import Protocol

from .models import Item, Label


class TaskStoreClient(Protocol):
    """
    Remote task store (Todoist) as the core sees it.

    Every method may raise RemoteCallFailure; create_label may also raise
    DuplicateLabel when the store enforces unique label names.
    """

    def get_labels(self) -> list[Label]: ...
    def create_label(self, name: str) -> Label: ...

    def get_item(self, item_id: str) -> Item: ...
    def update_item_labels(self, item_id: str, labels: list[str]) -> Item: ...

    # Sweep candidate queries
    def get_items_by_label(self, name: str) -> list[Item]: ...
    def get_items_changed_since(self, window: timedelta, *, now: datetime | None = None) -> list[Item]: ...


class SignatureVerifier(Protocol):
    """Used by the webhook boundary before the core ever sees a payload."""

    def verify(self, raw_body: bytes, signature: str | None, secret: str) -> bool: ...
