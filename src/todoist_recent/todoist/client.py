# src/todoist_recent/todoist/client.py

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

import requests

from ..core.models import Item, Label
from ..core.recency import parse_timestamp
from ..errors import DuplicateLabel, MalformedTimestamp, RemoteCallFailure

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.todoist.com/api/v1"

# Hard stop for cursor pagination, in case the store keeps returning a cursor.
_MAX_PAGES = 200


def _is_duplicate_label_response(resp: requests.Response) -> bool:
    if resp.status_code == 409:
        return True
    if resp.status_code != 400:
        return False
    return "already exists" in (resp.text or "").lower()


class TodoistClient:
    """
    Todoist REST client implementing the TaskStoreClient port.

    Every failure (network error, timeout, non-2xx status, unexpected body) is raised
    as RemoteCallFailure; callers decide whether it is fatal. No retries here.
    """

    def __init__(
        self,
        token: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 15.0,
        session: requests.Session | None = None,
    ) -> None:
        if not token or not token.strip():
            raise ValueError("Todoist token must not be empty")
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({"Authorization": f"Bearer {token.strip()}"})

    @classmethod
    def from_settings(cls, settings) -> TodoistClient:
        return cls(
            settings.require_token(),
            base_url=settings.api_base_url,
            timeout=settings.http_timeout_seconds,
        )

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> TodoistClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # ---- low-level helpers ----

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        url = f"{self._base_url}{path}"
        try:
            resp = self._session.request(method, url, timeout=self._timeout, **kwargs)
        except requests.RequestException as e:
            raise RemoteCallFailure(f"{method} {path} failed: {e}") from e
        return resp

    @staticmethod
    def _check(resp: requests.Response, what: str) -> Any:
        try:
            resp.raise_for_status()
        except requests.HTTPError as e:
            raise RemoteCallFailure(
                f"{what} failed: HTTP {resp.status_code}",
                status_code=resp.status_code,
            ) from e
        try:
            return resp.json()
        except ValueError as e:
            raise RemoteCallFailure(f"{what} returned a non-JSON body", status_code=resp.status_code) from e

    def _get_all(self, path: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        """Follow `next_cursor` pagination and return all `results`."""
        params = dict(params or {})
        out: list[dict[str, Any]] = []

        for _ in range(_MAX_PAGES):
            data = self._check(self._request("GET", path, params=dict(params)), f"GET {path}")
            if isinstance(data, list):
                out.extend(data)
                return out
            if not isinstance(data, dict):
                raise RemoteCallFailure(f"GET {path} returned an unexpected body")

            out.extend(data.get("results") or [])
            cursor = data.get("next_cursor")
            if not cursor:
                return out
            params["cursor"] = cursor

        logger.warning("Stopped paginating %s after %d pages", path, _MAX_PAGES)
        return out

    # ---- labels ----

    def get_labels(self) -> list[Label]:
        return [Label.from_api(row) for row in self._get_all("/labels")]

    def create_label(self, name: str) -> Label:
        resp = self._request("POST", "/labels", json={"name": name})
        if _is_duplicate_label_response(resp):
            raise DuplicateLabel(name, status_code=resp.status_code)
        return Label.from_api(self._check(resp, "POST /labels"))

    # ---- tasks ----

    def get_item(self, item_id: str) -> Item:
        return Item.from_api(self._check(self._request("GET", f"/tasks/{item_id}"), f"GET /tasks/{item_id}"))

    def update_item_labels(self, item_id: str, labels: list[str]) -> Item:
        resp = self._request("POST", f"/tasks/{item_id}", json={"labels": list(labels)})
        return Item.from_api(self._check(resp, f"POST /tasks/{item_id}"))

    def get_items_by_label(self, name: str) -> list[Item]:
        return [Item.from_api(row) for row in self._get_all("/tasks", {"label": name})]

    def get_items_changed_since(self, window: timedelta, *, now: datetime | None = None) -> list[Item]:
        """
        Items created or modified within `window` before `now` (default: current time).

        The filter language only knows creation dates, so the query fetches items
        created within the window (rounded up to whole days) and the result is
        narrowed here on added_at/updated_at.
        """
        days = max(1, -(-int(window.total_seconds()) // 86400))
        rows = self._get_all("/tasks/filter", {"query": f"created after: -{days} days"})

        since = (now or datetime.now(UTC)) - window
        out: list[Item] = []
        for row in rows:
            item = Item.from_api(row)
            if _changed_since(item, since):
                out.append(item)
        return out


def _changed_since(item: Item, since: datetime) -> bool:
    for raw in (item.added_at, item.updated_at):
        if not raw:
            continue
        try:
            if parse_timestamp(raw) >= since:
                return True
        except MalformedTimestamp:
            # Keep it; the sweep reports it as skipped instead of silently dropping it.
            return True
    return False
