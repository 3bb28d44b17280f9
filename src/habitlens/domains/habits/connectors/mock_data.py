"""Sample habit data for development and testing.

The sample set is deterministic relative to ``today``: the last few days are
fully completed across all active habits, older days mix explicit misses with
gaps, so every day status shows up somewhere.
"""

from __future__ import annotations

from datetime import date, timedelta

from habitlens.domains.habits.connectors.snapshot import SnapshotInstanceStore
from habitlens.domains.habits.domain_logic.models import Habit, HabitInstance

SAMPLE_HISTORY_DAYS = 45
SAMPLE_STREAK_DAYS = 5


def get_sample_habits(today: date) -> list[Habit]:
    """Return the sample habit set; tracking starts ``SAMPLE_HISTORY_DAYS`` ago."""
    start = today - timedelta(days=SAMPLE_HISTORY_DAYS)
    return [
        Habit(id=1, name="Morning run", frequency="daily", tracking_start_date=start),
        Habit(id=2, name="Read 20 pages", frequency="daily", tracking_start_date=start),
        Habit(
            id=3,
            name="No sugar",
            frequency="daily",
            good_bad="bad",
            tracking_start_date=start,
        ),
        Habit(
            id=4,
            name="Drink water",
            frequency="daily",
            tracking_type="automated",
            target_count=2,
            tracking_start_date=start,
        ),
        Habit(
            id=5,
            name="Evening journal",
            frequency="daily",
            is_active=False,
            tracking_start_date=start,
        ),
    ]


def get_sample_instances(today: date) -> list[HabitInstance]:
    """Return sample instances for :func:`get_sample_habits`."""
    instances: list[HabitInstance] = []
    next_id = 1

    def add(habit_id: int, day: date, completed: bool) -> None:
        nonlocal next_id
        instances.append(
            HabitInstance(id=next_id, habit_id=habit_id, date=day, completed=completed)
        )
        next_id += 1

    for offset in range(SAMPLE_HISTORY_DAYS, 0, -1):
        day = today - timedelta(days=offset)
        if offset <= SAMPLE_STREAK_DAYS:
            for habit_id in (1, 2, 3):
                add(habit_id, day, True)
            add(4, day, True)
            add(4, day, True)
            continue

        # Older history: a miss every 4th day, a gap every 7th.
        if offset % 7 == 0:
            continue
        add(1, day, offset % 4 != 0)
        add(2, day, True)
        if offset % 3:
            add(3, day, True)
        add(4, day, True)
        if offset % 2:
            add(4, day, True)
        if offset > 30:
            add(5, day, True)

    return instances


def get_sample_store(today: date) -> SnapshotInstanceStore:
    """Snapshot store preloaded with the sample data."""
    return SnapshotInstanceStore(
        get_sample_habits(today),
        get_sample_instances(today),
        source="sample",
    )
