# src/todoist_recent/webhook/events.py

from __future__ import annotations

import json
import logging
from typing import Any

from ..core.models import ChangeEvent, EventKind, Item
from ..errors import InvalidPayload

logger = logging.getLogger(__name__)

_KINDS = {
    "item:added": EventKind.ADDED,
    "item:updated": EventKind.UPDATED,
}


def parse_event(payload: Any) -> ChangeEvent:
    """
    Strictly parse a Todoist webhook payload into a ChangeEvent.

    Expected shape:
        {"event_name": "item:added", "event_data": {"id": "...", ...},
         "event_data_extra": {"update_intent": "item_updated"}, ...}

    Fails closed: anything that does not look like that raises InvalidPayload.
    Unknown event names are fine and become EventKind.OTHER.
    """
    if not isinstance(payload, dict):
        raise InvalidPayload("payload must be a JSON object")

    event_name = payload.get("event_name")
    if not isinstance(event_name, str) or not event_name.strip():
        raise InvalidPayload("event_name must be a non-empty string")

    event_data = payload.get("event_data")
    if not isinstance(event_data, dict):
        raise InvalidPayload("event_data must be an object")

    kind = _KINDS.get(event_name, EventKind.OTHER)

    raw_id = event_data.get("id")
    item_id: str | None = None
    if isinstance(raw_id, (str, int)) and not isinstance(raw_id, bool) and str(raw_id).strip():
        item_id = str(raw_id)
    elif kind != EventKind.OTHER:
        raise InvalidPayload(f"{event_name} event without a task id")

    extra = payload.get("event_data_extra")
    if extra is not None and not isinstance(extra, dict):
        raise InvalidPayload("event_data_extra must be an object")

    update_intent = (extra or {}).get("update_intent")
    if update_intent is not None and not isinstance(update_intent, str):
        raise InvalidPayload("update_intent must be a string")

    item: Item | None = None
    if kind != EventKind.OTHER:
        try:
            item = Item.from_api(event_data)
        except (KeyError, TypeError):
            logger.debug("Unusable task snapshot in %s event", event_name, exc_info=True)

    return ChangeEvent(
        kind=kind,
        event_name=event_name,
        item_id=item_id,
        item=item,
        update_intent=update_intent,
    )


def parse_event_body(raw_body: bytes) -> ChangeEvent:
    try:
        payload = json.loads(raw_body)
    except (ValueError, UnicodeDecodeError) as e:
        raise InvalidPayload("body is not valid JSON") from e
    return parse_event(payload)
