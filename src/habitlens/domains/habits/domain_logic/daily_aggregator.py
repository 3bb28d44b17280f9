"""Daily roll-up of habit statuses.

Inactive habits keep a per-habit status for historical display but never
count toward the totals. Habits that are not tracked on the day (before their
start, or the day is in the future) are left out of the totals as well, so
``completed + missed + pending == total`` always holds.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import date
from typing import Any

from habitlens.domains.habits.domain_logic.models import (
    COMPLETED,
    DEFAULT_TRACKING_START,
    NOT_COMPLETED,
    NOT_TRACKED,
    PENDING,
    DailySummary,
    DailyTotals,
    Habit,
    HabitInstance,
    completion_rate,
)
from habitlens.domains.habits.domain_logic.status_classifier import classify_habit_day

logger = logging.getLogger(__name__)

__all__ = ["aggregate_day", "completion_rate", "instances_for"]


def instances_for(
    instances_by_habit: Mapping[Any, Iterable[HabitInstance]],
    habit_id: int | str,
    day: date,
) -> list[HabitInstance]:
    """Look up one habit's instances on ``day``.

    Accepts either a ``habit_id -> instances`` mapping or the
    ``(habit_id, date) -> instances`` index built by ``index_instances``.
    """
    keyed = instances_by_habit.get((habit_id, day))
    if keyed is not None:
        return list(keyed)
    by_habit = instances_by_habit.get(habit_id)
    if by_habit is None:
        return []
    return [i for i in by_habit if i.date == day and i.habit_id == habit_id]


def aggregate_day(
    day: date,
    habits: Iterable[Habit],
    instances_by_habit: Mapping[Any, Iterable[HabitInstance]],
    *,
    today: date | None = None,
    default_start: date = DEFAULT_TRACKING_START,
) -> DailySummary:
    """Classify every habit on ``day`` and roll up the active ones.

    Args:
        day: The day to summarize.
        habits: Habit snapshot; inactive habits appear only in ``per_habit``.
        instances_by_habit: Instances keyed by habit id or by (habit id, day).
        today: Upper trackable bound. Defaults to ``day``.
        default_start: Tracking start for habits without their own.

    Returns:
        DailySummary with per-habit statuses and active-habit totals.
    """
    today = day if today is None else today

    per_habit: dict[int | str, str] = {}
    counts = {COMPLETED: 0, NOT_COMPLETED: 0, PENDING: 0, NOT_TRACKED: 0}

    for habit in habits:
        status = classify_habit_day(
            habit,
            day,
            instances_for(instances_by_habit, habit.id, day),
            today,
            default_start,
        )
        per_habit[habit.id] = status
        if habit.is_active:
            counts[status] += 1

    totals = DailyTotals(
        completed=counts[COMPLETED],
        missed=counts[NOT_COMPLETED],
        pending=counts[PENDING],
        total=counts[COMPLETED] + counts[NOT_COMPLETED] + counts[PENDING],
    )
    logger.debug(
        "Aggregated %s: %d/%d completed, %d missed, %d pending, %d not tracked",
        day.isoformat(),
        totals.completed,
        totals.total,
        totals.missed,
        totals.pending,
        counts[NOT_TRACKED],
    )
    return DailySummary(
        date=day,
        per_habit=per_habit,
        totals=totals,
        not_tracked=counts[NOT_TRACKED],
    )
