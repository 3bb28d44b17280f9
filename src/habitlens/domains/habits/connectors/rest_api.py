"""Read-only client for the dashboard REST API (the habit system of record).

Only the two list endpoints the engine needs are used::

    GET /api/habits/
    GET /api/habit-instances/?habit_id=&start_date=&end_date=

Records are validated into :class:`Habit` / :class:`HabitInstance` as they
arrive, so a malformed payload fails here at the boundary rather than inside
the engine.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

import httpx

from habitlens.domains.habits.connectors import (
    InstanceStoreAuthError,
    InstanceStoreConnectionError,
    InstanceStoreResponseError,
)
from habitlens.domains.habits.domain_logic.models import (
    Habit,
    HabitInstance,
    InvalidHabitDataError,
)

logger = logging.getLogger(__name__)

HABITS_PATH = "/api/habits/"
INSTANCES_PATH = "/api/habit-instances/"


class RestInstanceStore:
    """InstanceStore backed by the dashboard REST API.

    Usage::

        store = RestInstanceStore("https://dash.example.com", username="me", password="...")
        habits = await store.get_habits()
        await store.aclose()

    An ``httpx.AsyncClient`` can be injected (tests pass one built on
    ``httpx.MockTransport``); otherwise one is created with basic auth.
    """

    def __init__(
        self,
        base_url: str,
        *,
        username: str = "",
        password: str = "",
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        if client is not None:
            self._client = client
        else:
            auth = httpx.BasicAuth(username, password) if username else None
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                auth=auth,
                timeout=timeout,
                headers={"Accept": "application/json"},
            )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get_habits(self) -> list[Habit]:
        """Fetch every habit (active and inactive)."""
        records = await self._get_list(HABITS_PATH, {})
        return self._parse(records, Habit.from_dict, HABITS_PATH)

    async def get_instances(
        self,
        *,
        habit_id: int | str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[HabitInstance]:
        """Fetch instances, filtered server-side by habit and inclusive date range."""
        params: dict[str, str] = {}
        if habit_id is not None:
            params["habit_id"] = str(habit_id)
        if start_date is not None:
            params["start_date"] = start_date.isoformat()
        if end_date is not None:
            params["end_date"] = end_date.isoformat()

        records = await self._get_list(INSTANCES_PATH, params)
        instances = self._parse(records, HabitInstance.from_dict, INSTANCES_PATH)
        # Guard against servers that ignore the filters.
        return [
            i
            for i in instances
            if (habit_id is None or i.habit_id == habit_id)
            and (start_date is None or i.date >= start_date)
            and (end_date is None or i.date <= end_date)
        ]

    def is_connected(self) -> bool:
        return True

    @property
    def data_source(self) -> str:
        return "rest_api"

    @property
    def base_url(self) -> str:
        return self._base_url

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _get_list(self, path: str, params: dict[str, str]) -> list[Any]:
        """GET ``path`` and return the JSON list body (or a paginated ``results``)."""
        logger.debug("GET %s params=%s", path, params)
        try:
            response = await self._client.get(path, params=params)
        except httpx.TimeoutException as exc:
            raise InstanceStoreConnectionError(
                f"Timed out fetching {path} from {self._base_url}"
            ) from exc
        except httpx.HTTPError as exc:
            raise InstanceStoreConnectionError(
                f"Unable to reach habit API at {self._base_url}: {exc}"
            ) from exc

        status = response.status_code
        if status in (401, 403):
            raise InstanceStoreAuthError(
                f"Habit API rejected credentials for {path} (HTTP {status})"
            )
        if status >= 400:
            raise InstanceStoreResponseError(
                f"Habit API returned HTTP {status} for {path}: {_error_detail(response)}"
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise InstanceStoreResponseError(f"Invalid JSON from {path}: {exc}") from exc

        if isinstance(body, dict) and isinstance(body.get("results"), list):
            body = body["results"]
        if not isinstance(body, list):
            raise InstanceStoreResponseError(
                f"Expected a JSON list from {path}, got {type(body).__name__}"
            )
        return body

    @staticmethod
    def _parse(records: list[Any], parser, path: str) -> list[Any]:
        parsed = []
        for position, record in enumerate(records):
            try:
                parsed.append(parser(record))
            except InvalidHabitDataError as exc:
                raise InstanceStoreResponseError(
                    f"Invalid record #{position} from {path}: {exc}"
                ) from exc
        return parsed


def _error_detail(response: httpx.Response) -> str:
    """Best-effort human-readable error from a failed response."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or "no body"
    if isinstance(body, dict):
        msg = body.get("error") or body.get("detail")
        if isinstance(msg, str) and msg:
            return msg
    return str(body)[:200]
