"""Year heat-map for a single habit.

Days are laid out in Sunday-start week columns, counted from the week that
holds January 1st. This is a rendering convention, not ISO 8601 week
numbering: ISO weeks start on Monday and may assign the first or last days
of a year to a neighbouring year.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date, timedelta

from habitlens.domains.habits.domain_logic.models import (
    COMPLETED,
    GRID_DAYS,
    GRID_WEEKS,
    NOT_TRACKED,
    CalendarGridResult,
    DayCell,
    HabitInstance,
    InvalidHabitDataError,
    completion_rate,
)
from habitlens.domains.habits.domain_logic.status_classifier import (
    classify,
    effective_instance,
    index_instances,
)

logger = logging.getLogger(__name__)


def sunday_day_of_week(day: date) -> int:
    """0 = Sunday .. 6 = Saturday."""
    return (day.weekday() + 1) % 7


def sunday_week_index(day: date) -> int:
    """0-based Sunday-start week of the year; week 0 holds January 1st."""
    jan_first = date(day.year, 1, 1)
    offset = sunday_day_of_week(jan_first)
    return (day.timetuple().tm_yday - 1 + offset) // 7


def year_days(year: int) -> list[date]:
    """Every calendar day of ``year`` in order."""
    if isinstance(year, bool) or not isinstance(year, int) or not 1 <= year <= 9999:
        raise InvalidHabitDataError(f"year must be an integer in 1..9999, got {year!r}")
    first = date(year, 1, 1)
    count = (date(year, 12, 31) - first).days + 1
    return [first + timedelta(days=n) for n in range(count)]


def build_year_grid(
    year: int,
    habit_id: int | str,
    instances: Iterable[HabitInstance],
    tracking_start_date: date,
    today: date,
    target_count: int = 1,
) -> CalendarGridResult:
    """Classify every day of ``year`` for one habit and lay it out as 53x7 cells.

    Instances belonging to other habits are ignored. Cells whose week index
    falls outside the 53 columns are dropped.
    """
    index = index_instances(i for i in instances if i.habit_id == habit_id)

    grid: list[list[DayCell | None]] = [[None] * GRID_DAYS for _ in range(GRID_WEEKS)]
    tracked = 0
    completed = 0

    for day in year_days(year):
        record = effective_instance(index.get((habit_id, day), ()), target_count)
        status = classify(day, tracking_start_date, today, record)
        if status != NOT_TRACKED:
            tracked += 1
        if status == COMPLETED:
            completed += 1

        week = sunday_week_index(day)
        if 0 <= week < GRID_WEEKS:
            grid[week][sunday_day_of_week(day)] = DayCell(date=day, status=status)
        else:
            logger.debug("Dropping %s from grid: week index %d", day.isoformat(), week)

    return CalendarGridResult(
        year=year,
        habit_id=habit_id,
        days=tuple(tuple(week) for week in grid),
        total_tracked_days=tracked,
        completed_days=completed,
        completion_rate=completion_rate(completed, tracked),
    )
