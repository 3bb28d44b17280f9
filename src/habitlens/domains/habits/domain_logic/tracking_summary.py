"""Per-habit range summaries and the "still pending today" list."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from habitlens.domains.habits.domain_logic.models import (
    COMPLETED,
    DEFAULT_TRACKING_START,
    NOT_COMPLETED,
    PENDING,
    Habit,
    HabitInstance,
    PendingHabit,
    TrackingSummary,
)
from habitlens.domains.habits.domain_logic.status_classifier import (
    classify_habit_day,
    index_instances,
    status_range,
)
from habitlens.domains.habits.domain_logic.streak_calculator import habit_streaks


def _id_key(habit_id: int | str) -> tuple[int, int, str]:
    if isinstance(habit_id, int):
        return (0, habit_id, "")
    return (1, 0, str(habit_id))


def summarize_habit(
    habit: Habit,
    instances: Iterable[HabitInstance],
    start: date,
    end: date,
    *,
    today: date,
    default_start: date = DEFAULT_TRACKING_START,
) -> TrackingSummary:
    """Count completed / missed / pending days of one habit over ``[start, end]``.

    Days that are not tracked are left out of every count, including
    ``total_days``. Streaks are computed over the habit's whole history up to
    ``today``, independent of the range.
    """
    own = [i for i in instances if i.habit_id == habit.id]
    cells = status_range(habit, start, end, own, today, default_start)

    completed = sum(1 for c in cells if c.status == COMPLETED)
    missed = sum(1 for c in cells if c.status == NOT_COMPLETED)
    pending = sum(1 for c in cells if c.status == PENDING)
    current, longest = habit_streaks(habit, own, today=today, default_start=default_start)

    return TrackingSummary(
        habit_id=habit.id,
        habit_name=habit.name,
        start_date=start,
        end_date=end,
        completed_count=completed,
        not_completed_count=missed,
        pending_count=pending,
        total_days=completed + missed + pending,
        current_streak=current,
        longest_streak=longest,
    )


def pending_habits_for_date(
    day: date,
    habits: Iterable[Habit],
    instances: Iterable[HabitInstance],
    *,
    today: date,
    default_start: date = DEFAULT_TRACKING_START,
) -> list[PendingHabit]:
    """Active habits with no record yet on ``day``, sorted by habit id.

    ``last_completed_date`` is the latest completed day on or before ``day``.
    """
    instances = list(instances)
    index = index_instances(instances)

    last_done: dict[int | str, date] = {}
    for instance in instances:
        if instance.completed and instance.date <= day:
            seen = last_done.get(instance.habit_id)
            if seen is None or instance.date > seen:
                last_done[instance.habit_id] = instance.date

    pending: list[PendingHabit] = []
    for habit in habits:
        if not habit.is_active:
            continue
        status = classify_habit_day(
            habit, day, index.get((habit.id, day), ()), today, default_start
        )
        if status != PENDING:
            continue
        last = last_done.get(habit.id)
        pending.append(
            PendingHabit(
                habit_id=habit.id,
                habit_name=habit.name,
                last_completed_date=last,
                days_since_last_completion=(day - last).days if last else None,
            )
        )

    return sorted(pending, key=lambda p: _id_key(p.habit_id))
