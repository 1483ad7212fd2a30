# src/todoist_recent/webhook/app.py

"""
Flask app for the reactive path.

Routes:
- GET  /health  -> 200 "OK"
- POST /webhook -> verify signature, parse the event, run the reactive updater

A verified, parsed event is always acknowledged with 200, even when labeling fails:
the sweep corrects missed labels, and a non-2xx would make Todoist redeliver.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from flask import Blueprint, Flask, current_app, request

from ..core.ports import SignatureVerifier
from ..core.reactive import ReactiveUpdater
from ..errors import InvalidPayload, UnverifiedPayload
from ..todoist.client import TodoistClient
from .events import parse_event_body
from .signature import SIGNATURE_HEADER, HmacSignatureVerifier, require_verified

logger = logging.getLogger(__name__)

ClientFactory = Callable[[Any], Any]

webhook_bp = Blueprint("webhook", __name__)


def _ctx() -> dict[str, Any]:
    return current_app.extensions["todoist_recent"]


@webhook_bp.get("/health")
def health():
    return "OK", 200


@webhook_bp.post("/webhook")
def webhook():
    ctx = _ctx()
    body = request.get_data(cache=False)

    try:
        require_verified(ctx["verifier"], body, request.headers.get(SIGNATURE_HEADER), ctx["secret"])
    except UnverifiedPayload as e:
        logger.error("Rejected webhook: %s", e)
        return str(e), 401

    try:
        event = parse_event_body(body)
    except InvalidPayload as e:
        logger.error("Failed to parse webhook payload: %s", e)
        return "Invalid payload", 400

    client = None
    try:
        client = ctx["client_factory"](ctx["settings"])
        outcome = ReactiveUpdater(client).handle(event)
        logger.debug("Webhook %s for task %s -> %s", event.event_name, event.item_id, outcome.value)
    except Exception:
        logger.exception("Error handling webhook %s for task %s", event.event_name, event.item_id)
    finally:
        close = getattr(client, "close", None)
        if callable(close):
            close()

    return "OK", 200


def create_app(
    settings,
    *,
    client_factory: ClientFactory = TodoistClient.from_settings,
    verifier: SignatureVerifier | None = None,
) -> Flask:
    """
    Build the Flask app.

    `client_factory(settings)` is called once per request, so no client state is
    shared between events. Raises ConfigurationError if the client secret is missing.
    """
    app = Flask(__name__)
    app.extensions["todoist_recent"] = {
        "settings": settings,
        "secret": settings.require_client_secret(),
        "client_factory": client_factory,
        "verifier": verifier or HmacSignatureVerifier(),
    }
    app.register_blueprint(webhook_bp)
    return app
