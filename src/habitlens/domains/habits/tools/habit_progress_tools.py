"""MCP tools exposing habit progress views (daily summary, streak, heat-map).

Each tool fetches a snapshot from the Instance Store, runs the pure engine
over it and returns JSON. Store faults are reported as ``unavailable``; the
all-habit streak instead fails safe toward a shorter streak.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from datetime import date
from typing import TYPE_CHECKING, Any

from fastmcp import Context, FastMCP

if TYPE_CHECKING:
    from habitlens.domains.habits.connectors import InstanceStore

from habitlens.domains.habits.connectors import InstanceStoreError
from habitlens.domains.habits.domain_logic.calendar_grid import build_year_grid
from habitlens.domains.habits.domain_logic.daily_aggregator import aggregate_day
from habitlens.domains.habits.domain_logic.models import (
    DEFAULT_MAX_LOOKBACK,
    DEFAULT_TRACKING_START,
    Habit,
    InvalidHabitDataError,
    parse_date,
)
from habitlens.domains.habits.domain_logic.status_classifier import (
    classify_habit_day,
    index_instances,
)
from habitlens.domains.habits.domain_logic.streak_calculator import (
    current_streak_from_store,
)
from habitlens.domains.habits.domain_logic.tracking_summary import (
    pending_habits_for_date,
    summarize_habit,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Response helpers
# ---------------------------------------------------------------------------

def _error(message: str) -> str:
    return json.dumps({"status": "error", "error": message})


def _unavailable(exc: InstanceStoreError) -> str:
    return json.dumps({
        "status": "unavailable",
        "error": str(exc),
        "message": "The habit data store could not be reached. Try again later.",
    })


def _ok(payload: dict[str, Any]) -> str:
    return json.dumps({"status": "ok", **payload}, indent=2)


def _find_habit(habits: list[Habit], habit_id: int | str) -> Habit | None:
    for habit in habits:
        if str(habit.id) == str(habit_id):
            return habit
    return None


def register_habit_progress_tools(
    mcp: FastMCP,
    store: InstanceStore,
    *,
    today_provider: Callable[[], date] = date.today,
    default_start: date = DEFAULT_TRACKING_START,
    max_lookback: int = DEFAULT_MAX_LOOKBACK,
    require_all_tracked: bool = True,
) -> None:
    """Register the habit progress tools on the MCP server."""
    default_lookback = max_lookback

    def _day_or_today(value: str | None, field_name: str) -> date:
        if value in (None, ""):
            return today_provider()
        return parse_date(value, field_name=field_name)

    @mcp.tool
    async def habit_day_summary(ctx: Context, date: str | None = None) -> str:
        """Summarize every habit's status for one day.

        Returns per-habit statuses (completed / not_completed / pending /
        not_tracked) and totals over active habits with a completion rate.

        Args:
            date: Day to summarize as YYYY-MM-DD (default: today).
        """
        try:
            day = _day_or_today(date, "date")
        except InvalidHabitDataError as exc:
            return _error(str(exc))

        try:
            habits = await store.get_habits()
            instances = await store.get_instances(start_date=day, end_date=day)
        except InstanceStoreError as exc:
            logger.warning("habit_day_summary: store unavailable: %s", exc)
            return _unavailable(exc)

        summary = aggregate_day(
            day,
            habits,
            index_instances(instances),
            today=today_provider(),
            default_start=default_start,
        )
        payload = summary.to_dict()
        payload["habits"] = [
            {
                "habit_id": h.id,
                "name": h.name,
                "is_active": h.is_active,
                "good_bad": h.good_bad,
                "day_status": summary.per_habit[h.id],
            }
            for h in habits
        ]
        payload["data_source"] = store.data_source
        return _ok(payload)

    @mcp.tool
    async def habit_streak(
        ctx: Context,
        reference_date: str | None = None,
        max_lookback: int | None = None,
    ) -> str:
        """Count consecutive days on which every active habit was completed.

        The walk starts at the reference date and goes backward, stopping at
        the first day with a pending or missed habit.

        Args:
            reference_date: Most recent day to check, YYYY-MM-DD (default: today).
            max_lookback: Maximum number of days examined (default: server setting).
        """
        lookback = default_lookback if max_lookback is None else max_lookback
        try:
            reference = _day_or_today(reference_date, "reference_date")
        except InvalidHabitDataError as exc:
            return _error(str(exc))

        try:
            habits = await store.get_habits()
        except InstanceStoreError as exc:
            logger.warning("habit_streak: could not load habits: %s", exc)
            return json.dumps({"status": "unavailable", "length": 0, "error": str(exc)})

        try:
            result = await current_streak_from_store(
                store,
                reference,
                habits,
                lookback,
                today=today_provider(),
                default_start=default_start,
                require_all_tracked=require_all_tracked,
            )
        except InvalidHabitDataError as exc:
            return _error(str(exc))

        return _ok({
            "reference_date": reference.isoformat(),
            "max_lookback": lookback,
            "active_habits": sum(1 for h in habits if h.is_active),
            **result.to_dict(),
        })

    @mcp.tool
    async def habit_year_grid(
        ctx: Context,
        habit_id: int | str,
        year: int | None = None,
    ) -> str:
        """Build the year heat-map (53 weeks x 7 days) for one habit.

        Args:
            habit_id: Habit to render.
            year: Calendar year (default: the current year).
        """
        today = today_provider()
        target_year = today.year if year is None else year
        try:
            habits = await store.get_habits()
            habit = _find_habit(habits, habit_id)
            if habit is None:
                return _error(f"Unknown habit: {habit_id}")
            if not 1 <= target_year <= 9999:
                return _error(f"year must be in 1..9999, got {target_year}")
            instances = await store.get_instances(
                habit_id=habit.id,
                start_date=date(target_year, 1, 1),
                end_date=date(target_year, 12, 31),
            )
        except InstanceStoreError as exc:
            logger.warning("habit_year_grid: store unavailable: %s", exc)
            return _unavailable(exc)

        grid = build_year_grid(
            target_year,
            habit.id,
            instances,
            habit.start_date(default_start),
            today,
            habit.target_count,
        )
        return _ok({"habit_name": habit.name, **grid.to_dict()})

    @mcp.tool
    async def habit_status_for_date(
        ctx: Context,
        habit_id: int | str,
        date: str | None = None,
    ) -> str:
        """Classify a single habit on a single day.

        Args:
            habit_id: Habit to classify.
            date: Day as YYYY-MM-DD (default: today).
        """
        try:
            day = _day_or_today(date, "date")
        except InvalidHabitDataError as exc:
            return _error(str(exc))

        try:
            habits = await store.get_habits()
            habit = _find_habit(habits, habit_id)
            if habit is None:
                return _error(f"Unknown habit: {habit_id}")
            instances = await store.get_instances(
                habit_id=habit.id, start_date=day, end_date=day
            )
        except InstanceStoreError as exc:
            logger.warning("habit_status_for_date: store unavailable: %s", exc)
            return _unavailable(exc)

        day_status = classify_habit_day(
            habit, day, instances, today_provider(), default_start
        )
        return _ok({
            "habit_id": habit.id,
            "date": day.isoformat(),
            "day_status": day_status,
            "instances": [
                {"id": i.id, "completed": i.completed, "notes": i.notes}
                for i in instances
            ],
        })

    @mcp.tool
    async def habit_tracking_summary(
        ctx: Context,
        start_date: str | None = None,
        end_date: str | None = None,
        habit_id: int | str | None = None,
    ) -> str:
        """Per-habit completed / missed / pending counts over a date range.

        Includes each habit's completion rate and current / longest streak.

        Args:
            start_date: First day, YYYY-MM-DD (default: today).
            end_date: Last day, YYYY-MM-DD (default: start_date).
            habit_id: Limit to one habit (default: all active habits).
        """
        try:
            start = _day_or_today(start_date, "start_date")
            end = start if end_date in (None, "") else parse_date(end_date, field_name="end_date")
            if start > end:
                raise InvalidHabitDataError("start_date must not be after end_date")
        except InvalidHabitDataError as exc:
            return _error(str(exc))

        today = today_provider()
        try:
            habits = await store.get_habits()
            if habit_id is not None:
                habit = _find_habit(habits, habit_id)
                if habit is None:
                    return _error(f"Unknown habit: {habit_id}")
                selected = [habit]
            else:
                selected = [h for h in habits if h.is_active]

            summaries = []
            for habit in selected:
                history = await store.get_instances(
                    habit_id=habit.id, end_date=max(end, today)
                )
                summaries.append(
                    summarize_habit(
                        habit,
                        history,
                        start,
                        end,
                        today=today,
                        default_start=default_start,
                    ).to_dict()
                )
        except InstanceStoreError as exc:
            logger.warning("habit_tracking_summary: store unavailable: %s", exc)
            return _unavailable(exc)

        return _ok({
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
            "habits": summaries,
        })

    @mcp.tool
    async def pending_habits(ctx: Context, date: str | None = None) -> str:
        """List active habits that have no record yet for a day.

        Args:
            date: Day as YYYY-MM-DD (default: today).
        """
        try:
            day = _day_or_today(date, "date")
        except InvalidHabitDataError as exc:
            return _error(str(exc))

        try:
            habits = await store.get_habits()
            instances = await store.get_instances(end_date=day)
        except InstanceStoreError as exc:
            logger.warning("pending_habits: store unavailable: %s", exc)
            return _unavailable(exc)

        pending = pending_habits_for_date(
            day, habits, instances, today=today_provider(), default_start=default_start
        )
        return _ok({
            "date": day.isoformat(),
            "pending_count": len(pending),
            "habits": [p.to_dict() for p in pending],
        })
