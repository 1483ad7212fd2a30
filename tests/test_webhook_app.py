# tests/test_webhook_app.py

from __future__ import annotations

import json

import pytest

from todoist_recent.core.models import RECENTLY_CREATED_LABEL as CREATED
from todoist_recent.core.models import RECENTLY_UPDATED_LABEL as UPDATED
from todoist_recent.errors import ConfigurationError, RemoteCallFailure
from todoist_recent.webhook.app import create_app
from todoist_recent.webhook.signature import SIGNATURE_HEADER, sign

from .fakes import FakeTaskStore, ago, make_item


@pytest.fixture()
def app_store(store: FakeTaskStore) -> FakeTaskStore:
    store.items["1"] = make_item("1", labels=["work"])
    store.items["2"] = make_item("2", added_at=ago(hours=30), updated_at=ago(hours=1), labels=[])
    return store


@pytest.fixture()
def client(settings, app_store: FakeTaskStore):
    app = create_app(settings, client_factory=lambda _settings: app_store)
    app.testing = True
    return app.test_client()


def _post(client, payload, *, secret: str = "s3cret", signature: str | None = None):
    body = payload if isinstance(payload, bytes) else json.dumps(payload).encode("utf-8")
    headers = {}
    sig = signature if signature is not None else sign(body, secret)
    if sig:
        headers[SIGNATURE_HEADER] = sig
    return client.post("/webhook", data=body, headers=headers, content_type="application/json")


def test_health(client) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_data(as_text=True) == "OK"


def test_unknown_path_is_404(client) -> None:
    assert client.get("/nope").status_code == 404


def test_item_added_is_labeled(client, app_store: FakeTaskStore) -> None:
    resp = _post(client, {"event_name": "item:added", "event_data": {"id": "1"}})

    assert resp.status_code == 200
    assert app_store.items["1"].labels == ["work", CREATED]


def test_item_updated_is_labeled(client, app_store: FakeTaskStore) -> None:
    resp = _post(
        client,
        {
            "event_name": "item:updated",
            "event_data": {"id": "2"},
            "event_data_extra": {"update_intent": "item_updated"},
        },
    )

    assert resp.status_code == 200
    assert app_store.items["2"].labels == [UPDATED]


def test_missing_signature_is_401(client, app_store: FakeTaskStore) -> None:
    resp = _post(client, {"event_name": "item:added", "event_data": {"id": "1"}}, signature="")

    assert resp.status_code == 401
    assert app_store.calls == []


def test_bad_signature_is_401(client, app_store: FakeTaskStore) -> None:
    resp = _post(client, {"event_name": "item:added", "event_data": {"id": "1"}}, secret="wrong")

    assert resp.status_code == 401
    assert app_store.calls == []


def test_invalid_json_is_400(client) -> None:
    assert _post(client, b"{not json").status_code == 400


def test_invalid_shape_is_400(client) -> None:
    assert _post(client, {"event_name": "item:added", "event_data": {}}).status_code == 400


def test_labeling_failure_still_acknowledged(client, app_store: FakeTaskStore) -> None:
    app_store.fail_on["update_item_labels"] = {"1": RemoteCallFailure("boom", status_code=500)}

    resp = _post(client, {"event_name": "item:added", "event_data": {"id": "1"}})

    assert resp.status_code == 200


def test_ignored_event_is_acknowledged(client, app_store: FakeTaskStore) -> None:
    resp = _post(client, {"event_name": "project:added", "event_data": {"id": "p1"}})

    assert resp.status_code == 200
    assert app_store.calls == []


def test_client_construction_failure_still_acknowledged(settings) -> None:
    def broken_factory(_settings):
        raise ConfigurationError("no token")

    app = create_app(settings, client_factory=broken_factory)
    resp = _post(app.test_client(), {"event_name": "item:added", "event_data": {"id": "1"}})

    assert resp.status_code == 200


def test_client_is_closed_after_request(settings, app_store: FakeTaskStore) -> None:
    closed = []
    app_store.close = lambda: closed.append(True)  # type: ignore[attr-defined]

    app = create_app(settings, client_factory=lambda _settings: app_store)
    resp = _post(app.test_client(), {"event_name": "item:added", "event_data": {"id": "1"}})

    assert resp.status_code == 200
    assert closed == [True]


def test_non_ascii_signature_is_401(client, app_store: FakeTaskStore) -> None:
    resp = _post(client, {"event_name": "item:added", "event_data": {"id": "1"}}, signature="éabc")

    assert resp.status_code == 401
    assert app_store.calls == []


def test_create_app_requires_secret(settings) -> None:
    from dataclasses import replace

    with pytest.raises(ConfigurationError):
        create_app(replace(settings, client_secret=None))
