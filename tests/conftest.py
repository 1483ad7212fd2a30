# tests/conftest.py

from __future__ import annotations

from datetime import datetime

import pytest

from todoist_recent.config import Settings
from todoist_recent.core.models import RECENTLY_CREATED_LABEL, RECENTLY_UPDATED_LABEL, Label

from .fakes import NOW, FakeTaskStore


@pytest.fixture()
def now() -> datetime:
    return NOW


@pytest.fixture()
def existing_labels() -> list[Label]:
    return [
        Label(id="11", name="work"),
        Label(id="12", name=RECENTLY_CREATED_LABEL),
        Label(id="13", name=RECENTLY_UPDATED_LABEL),
    ]


@pytest.fixture()
def store(existing_labels: list[Label]) -> FakeTaskStore:
    return FakeTaskStore(labels=existing_labels)


@pytest.fixture()
def settings() -> Settings:
    """
    Explicit settings rather than Settings.from_env(), to keep unit tests
    isolated from the developer's environment / .env.
    """
    return Settings(
        app_name="todoist-recent-test",
        log_level="DEBUG",
        log_dir=None,
        todoist_token="test-token",
        api_base_url="https://todoist.test/api/v1",
        http_timeout_seconds=5.0,
        client_secret="s3cret",
        host="127.0.0.1",
        port=8000,
        recent_threshold_hours=24,
        lookback_days=7,
        write_delay_ms=0,
    )
