# src/todoist_recent/core/recency.py

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from ..errors import MalformedTimestamp
from .models import RECENT_THRESHOLD, RecencyDecision


def parse_timestamp(value: str | datetime | None) -> datetime:
    """
    Parse a store timestamp into an aware UTC datetime.

    Accepts ISO-8601 strings with a "Z" suffix or an explicit offset; naive values
    are taken as UTC. Raises MalformedTimestamp for anything else.
    """
    if isinstance(value, datetime):
        dt = value
    else:
        if not isinstance(value, str) or not value.strip():
            raise MalformedTimestamp(value)
        try:
            dt = datetime.fromisoformat(value.strip())
        except ValueError as e:
            raise MalformedTimestamp(value) from e

    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def decide_recency(
    added_at: str | datetime | None,
    updated_at: str | datetime | None,
    *,
    now: datetime,
    threshold: timedelta = RECENT_THRESHOLD,
) -> RecencyDecision:
    """
    Which recency labels an item should carry at `now`.

    - created: added within `threshold` (inclusive)
    - updated: modified within `threshold` (inclusive), and the modification instant
      differs from the creation instant; the store reports updated_at == added_at
      for items that were never touched.
    """
    now = parse_timestamp(now)
    created = parse_timestamp(added_at)
    want_created = now - created <= threshold

    want_updated = False
    if updated_at is not None and updated_at != "":
        modified = parse_timestamp(updated_at)
        want_updated = now - modified <= threshold and modified != created

    return RecencyDecision(want_created=want_created, want_updated=want_updated)
