"""Streak computation.

The all-habit streak is a lock-step measure over the *current* active habit
set: a day counts only when every active habit is tracked and completed on
it. The walk runs backward from the reference date and stops at the first
day that does not count; it never skips gaps.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from datetime import date, timedelta
from typing import TYPE_CHECKING, Any, Union

from habitlens.domains.habits.domain_logic.daily_aggregator import aggregate_day
from habitlens.domains.habits.domain_logic.models import (
    COMPLETED,
    DEFAULT_MAX_LOOKBACK,
    DEFAULT_TRACKING_START,
    PENDING,
    Habit,
    HabitInstance,
    InvalidHabitDataError,
    StreakResult,
)
from habitlens.domains.habits.domain_logic.status_classifier import (
    classify_habit_day,
    index_instances,
)

if TYPE_CHECKING:
    from habitlens.domains.habits.connectors import InstanceStore

logger = logging.getLogger(__name__)

InstanceLookup = Union[
    Mapping[Any, Iterable[HabitInstance]],
    Callable[[date], Iterable[HabitInstance]],
]


def _validate_lookback(max_lookback: int) -> None:
    if isinstance(max_lookback, bool) or not isinstance(max_lookback, int):
        raise InvalidHabitDataError(f"max_lookback must be an integer, got {max_lookback!r}")
    if max_lookback < 0:
        raise InvalidHabitDataError(f"max_lookback must be >= 0, got {max_lookback}")


def is_fully_completed(
    day: date,
    active_habits: list[Habit],
    day_instances: Mapping[Any, Iterable[HabitInstance]],
    *,
    today: date,
    default_start: date,
    require_all_tracked: bool = True,
) -> bool:
    """Whether every active habit was completed on ``day``.

    A day with no trackable habit is never fully completed. By default an
    active habit that is not tracked on the day disqualifies it; with
    ``require_all_tracked=False`` such a habit is left out of the day instead.
    """
    summary = aggregate_day(
        day,
        active_habits,
        day_instances,
        today=today,
        default_start=default_start,
    )
    if require_all_tracked and summary.not_tracked:
        return False
    return summary.totals.fully_completed


def _walk_days(reference_date: date, max_lookback: int):
    for offset in range(max_lookback):
        yield reference_date - timedelta(days=offset)


def _log_fetch_fault(day: date, length: int, exc: Exception) -> None:
    # A day whose instances cannot be read is not fully completed.
    logger.warning(
        "Could not read instances for %s (%s: %s); ending streak at %d",
        day.isoformat(),
        type(exc).__name__,
        exc,
        length,
    )


def current_streak(
    reference_date: date,
    habits: Iterable[Habit],
    instance_lookup: InstanceLookup,
    max_lookback: int = DEFAULT_MAX_LOOKBACK,
    *,
    today: date | None = None,
    default_start: date = DEFAULT_TRACKING_START,
    require_all_tracked: bool = True,
) -> StreakResult:
    """Count consecutive fully completed days ending at ``reference_date``.

    Args:
        reference_date: First (most recent) day examined.
        habits: Habit snapshot; only active habits take part.
        instance_lookup: An instance mapping (see ``aggregate_day``) or a
            callable returning the instances recorded on a given day. A
            callable that raises ends the walk at that day.
        max_lookback: Maximum number of days examined.
        today: Upper trackable bound. Defaults to ``reference_date``.
        default_start: Tracking start for habits without their own.
        require_all_tracked: Treat a not-tracked active habit as a break
            (default). Pass False to leave such habits out of the day.

    Returns:
        StreakResult with the streak length (0..max_lookback).
    """
    _validate_lookback(max_lookback)
    today = reference_date if today is None else today
    active = [h for h in habits if h.is_active]
    if not active:
        return StreakResult(length=0)

    length = 0
    for day in _walk_days(reference_date, max_lookback):
        if callable(instance_lookup):
            try:
                day_instances: Mapping[Any, Iterable[HabitInstance]] = index_instances(
                    instance_lookup(day)
                )
            except Exception as exc:
                _log_fetch_fault(day, length, exc)
                break
        else:
            day_instances = instance_lookup

        if not is_fully_completed(
            day,
            active,
            day_instances,
            today=today,
            default_start=default_start,
            require_all_tracked=require_all_tracked,
        ):
            break
        length += 1

    return StreakResult(length=length)


async def current_streak_from_store(
    store: InstanceStore,
    reference_date: date,
    habits: Iterable[Habit],
    max_lookback: int = DEFAULT_MAX_LOOKBACK,
    *,
    today: date | None = None,
    default_start: date = DEFAULT_TRACKING_START,
    require_all_tracked: bool = True,
) -> StreakResult:
    """Same walk as :func:`current_streak`, fetching one day at a time.

    A failed fetch for a day counts as "not fully completed" and ends the
    walk exactly like a raising lookup in :func:`current_streak`, so an outage
    can only under-report the streak.
    """
    _validate_lookback(max_lookback)
    today = reference_date if today is None else today
    active = [h for h in habits if h.is_active]
    if not active:
        return StreakResult(length=0)

    length = 0
    for day in _walk_days(reference_date, max_lookback):
        try:
            fetched = await store.get_instances(start_date=day, end_date=day)
        except Exception as exc:
            _log_fetch_fault(day, length, exc)
            break

        if not is_fully_completed(
            day,
            active,
            index_instances(fetched),
            today=today,
            default_start=default_start,
            require_all_tracked=require_all_tracked,
        ):
            break
        length += 1

    return StreakResult(length=length)


def habit_streaks(
    habit: Habit,
    instances: Iterable[HabitInstance],
    *,
    today: date,
    default_start: date = DEFAULT_TRACKING_START,
) -> tuple[int, int]:
    """Return ``(current, longest)`` runs of completed days for one habit.

    Only days inside the habit's trackable window are considered. A pending
    ``today`` does not break the current run; the day is still open.
    """
    index = index_instances(i for i in instances if i.habit_id == habit.id)
    start = habit.start_date(default_start)
    if start > today:
        return 0, 0

    statuses: list[str] = []
    day = start
    while day <= today:
        statuses.append(
            classify_habit_day(habit, day, index.get((habit.id, day), ()), today, default_start)
        )
        day += timedelta(days=1)

    longest = 0
    run = 0
    for status in statuses:
        if status == COMPLETED:
            run += 1
            longest = max(longest, run)
        else:
            run = 0

    tail = statuses[:-1] if statuses[-1] == PENDING else statuses
    current = 0
    for status in reversed(tail):
        if status != COMPLETED:
            break
        current += 1

    return current, longest
