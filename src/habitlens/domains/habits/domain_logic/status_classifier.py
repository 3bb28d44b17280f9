"""Per-day status classification for a single habit.

Every presentation (daily summary, detail strips, streak walk, year heat-map)
goes through :func:`classify` so they agree on what "completed", "missed",
"pending" and "not tracked" mean.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from datetime import date, timedelta

from habitlens.domains.habits.domain_logic.models import (
    COMPLETED,
    DEFAULT_TRACKING_START,
    NOT_COMPLETED,
    NOT_TRACKED,
    PENDING,
    DayCell,
    DayStatus,
    Habit,
    HabitInstance,
    InvalidHabitDataError,
)

InstanceIndex = dict[tuple[int | str, date], list[HabitInstance]]


def classify(
    day: date,
    tracking_start_date: date,
    today: date,
    instance: HabitInstance | None = None,
) -> DayStatus:
    """Classify one (habit, day) pair. First matching rule wins.

    Both ``tracking_start_date`` and ``today`` are trackable days.
    """
    if day < tracking_start_date:
        return NOT_TRACKED
    if day > today:
        return NOT_TRACKED
    if instance is None:
        return PENDING
    return COMPLETED if instance.completed else NOT_COMPLETED


def effective_instance(
    instances: Iterable[HabitInstance],
    target_count: int = 1,
) -> HabitInstance | None:
    """Reduce a day's instances for one habit to the record that decides its status.

    The target is met when at least ``target_count`` instances are completed.
    Otherwise an explicit miss wins; partial progress with no miss stays absent
    so the day reads as pending.
    """
    done: list[HabitInstance] = []
    missed: HabitInstance | None = None
    for instance in instances:
        if instance.completed:
            done.append(instance)
        elif missed is None:
            missed = instance
    if done and len(done) >= target_count:
        return done[0]
    return missed


def classify_habit_day(
    habit: Habit,
    day: date,
    instances: Iterable[HabitInstance],
    today: date,
    default_start: date = DEFAULT_TRACKING_START,
) -> DayStatus:
    """Classify ``day`` for ``habit`` given that habit's instances on that day."""
    record = effective_instance(instances, habit.target_count)
    return classify(day, habit.start_date(default_start), today, record)


def index_instances(instances: Iterable[HabitInstance]) -> InstanceIndex:
    """Group instances by ``(habit_id, date)``."""
    index: defaultdict[tuple[int | str, date], list[HabitInstance]] = defaultdict(list)
    for instance in instances:
        index[(instance.habit_id, instance.date)].append(instance)
    return dict(index)


def status_range(
    habit: Habit,
    start: date,
    end: date,
    instances: Iterable[HabitInstance],
    today: date,
    default_start: date = DEFAULT_TRACKING_START,
) -> list[DayCell]:
    """Return a DayCell for every day in ``[start, end]`` for one habit."""
    if start > end:
        raise InvalidHabitDataError(
            f"start ({start.isoformat()}) must not be after end ({end.isoformat()})"
        )
    index = index_instances(i for i in instances if i.habit_id == habit.id)
    cells: list[DayCell] = []
    day = start
    while day <= end:
        status = classify_habit_day(
            habit, day, index.get((habit.id, day), ()), today, default_start
        )
        cells.append(DayCell(date=day, status=status))
        day += timedelta(days=1)
    return cells
