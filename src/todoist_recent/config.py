# src/todoist_recent/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time; entry points call require_*() instead.
- The legacy deployment variables (TODOIST_TOKEN, CLIENT_SECRET, PORT) still work.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

from .errors import ConfigurationError

ENV_PREFIX = "TODOIST_RECENT"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path | None) -> Path | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    log_dir: Path | None

    # ---- Todoist ----
    todoist_token: str | None
    api_base_url: str
    http_timeout_seconds: float

    # ---- Webhook server ----
    client_secret: str | None
    host: str
    port: int

    # ---- Reconciliation tuning ----
    recent_threshold_hours: int
    lookback_days: int
    write_delay_ms: int

    @property
    def recent_threshold(self) -> timedelta:
        return timedelta(hours=self.recent_threshold_hours)

    @property
    def lookback(self) -> timedelta:
        # Never narrower than the threshold, or newly recent items would go unseen.
        return max(timedelta(days=self.lookback_days), self.recent_threshold)

    @property
    def write_delay_seconds(self) -> float:
        return max(0, self.write_delay_ms) / 1000.0

    def require_token(self) -> str:
        token = (self.todoist_token or "").strip()
        if not token:
            raise ConfigurationError(
                "Todoist API token is not set. Set TODOIST_RECENT_TOKEN (or TODOIST_TOKEN)."
            )
        return token

    def require_client_secret(self) -> str:
        secret = (self.client_secret or "").strip()
        if not secret:
            raise ConfigurationError(
                "Webhook client secret is not set. Set TODOIST_RECENT_CLIENT_SECRET (or CLIENT_SECRET)."
            )
        return secret

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "todoist-recent")
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        log_dir = _env_path(_k("LOG_DIR"), None)

        todoist_token = _first_env(_k("TOKEN"), "TODOIST_TOKEN", default=None)
        api_base_url = _env(_k("API_BASE_URL"), "https://api.todoist.com/api/v1").rstrip("/")
        http_timeout_seconds = _env_float(_k("HTTP_TIMEOUT_SECONDS"), 15.0)

        client_secret = _first_env(_k("CLIENT_SECRET"), "CLIENT_SECRET", default=None)
        host = _env(_k("HOST"), "0.0.0.0")
        port = _env_int(_k("PORT"), _env_int("PORT", 8000))

        recent_threshold_hours = _env_int(_k("THRESHOLD_HOURS"), 24)
        lookback_days = _env_int(_k("LOOKBACK_DAYS"), 7)
        write_delay_ms = _env_int(_k("WRITE_DELAY_MS"), 50)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            log_dir=log_dir,
            todoist_token=todoist_token,
            api_base_url=api_base_url,
            http_timeout_seconds=http_timeout_seconds,
            client_secret=client_secret,
            host=host,
            port=port,
            recent_threshold_hours=recent_threshold_hours,
            lookback_days=lookback_days,
            write_delay_ms=write_delay_ms,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
