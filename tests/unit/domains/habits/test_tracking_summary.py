"""Tests for per-habit range summaries and the pending list."""

from __future__ import annotations

import asyncio
from datetime import date

import pytest

from habitlens.domains.habits.domain_logic.models import Habit, HabitInstance
from habitlens.domains.habits.domain_logic.tracking_summary import (
    pending_habits_for_date,
    summarize_habit,
)

TODAY = date(2025, 6, 30)


def _run(coro):
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@pytest.fixture
def store_data(snapshot_store):
    habits = _run(snapshot_store.get_habits())
    instances = _run(snapshot_store.get_instances())
    return habits, instances


class TestSummarizeHabit:
    def test_scenario_range(self, scenario_habit, scenario_instances):
        summary = summarize_habit(
            scenario_habit, scenario_instances, date(2025, 6, 26), TODAY, today=TODAY
        )
        assert summary.completed_count == 1
        assert summary.not_completed_count == 0
        assert summary.pending_count == 3
        assert summary.total_days == 4
        assert summary.completion_rate == 25
        assert summary.current_streak == 0
        assert summary.longest_streak == 1

    def test_counts_misses(self, store_data):
        habits, instances = store_data
        summary = summarize_habit(habits[0], instances, date(2025, 6, 27), TODAY, today=TODAY)
        assert summary.completed_count == 2
        assert summary.not_completed_count == 1
        assert summary.pending_count == 1
        assert summary.total_days == 4
        assert summary.completion_rate == 50
        assert summary.current_streak == 0
        assert summary.longest_streak == 2

    def test_current_streak_survives_open_today(self, store_data):
        habits, instances = store_data
        summary = summarize_habit(habits[1], instances, date(2025, 6, 27), TODAY, today=TODAY)
        assert summary.pending_count == 2
        assert summary.current_streak == 0
        summary = summarize_habit(
            habits[1], instances, date(2025, 6, 27), date(2025, 6, 28), today=date(2025, 6, 29)
        )
        assert summary.total_days == 2
        assert summary.current_streak == 2

    def test_future_days_not_counted(self, scenario_habit, scenario_instances):
        summary = summarize_habit(
            scenario_habit, scenario_instances, date(2025, 6, 28), date(2025, 7, 10), today=TODAY
        )
        assert summary.total_days == 3


class TestPendingHabits:
    def test_only_unrecorded_active_habits(self, store_data):
        habits, instances = store_data
        pending = pending_habits_for_date(date(2025, 6, 29), habits, instances, today=TODAY)
        assert [p.habit_id for p in pending] == [2]
        assert pending[0].last_completed_date == date(2025, 6, 28)
        assert pending[0].days_since_last_completion == 1

    def test_today(self, store_data):
        habits, instances = store_data
        pending = pending_habits_for_date(TODAY, habits, instances, today=TODAY)
        assert [p.habit_id for p in pending] == [1, 2]
        assert all(p.days_since_last_completion == 2 for p in pending)

    def test_never_completed(self):
        habits = [Habit(id=1, name="New", tracking_start_date=TODAY)]
        pending = pending_habits_for_date(TODAY, habits, [], today=TODAY)
        assert pending[0].last_completed_date is None
        assert pending[0].days_since_last_completion is None

    def test_later_completion_ignored(self):
        habits = [Habit(id=1, tracking_start_date=date(2025, 6, 1))]
        instances = [
            HabitInstance(id=1, habit_id=1, date=date(2025, 6, 10), completed=True),
            HabitInstance(id=2, habit_id=1, date=date(2025, 6, 20), completed=True),
        ]
        pending = pending_habits_for_date(date(2025, 6, 15), habits, instances, today=TODAY)
        assert pending[0].last_completed_date == date(2025, 6, 10)

    def test_sorted_numerically(self):
        habits = [Habit(id=i, tracking_start_date=date(2025, 6, 1)) for i in (10, 2, 1)]
        pending = pending_habits_for_date(TODAY, habits, [], today=TODAY)
        assert [p.habit_id for p in pending] == [1, 2, 10]

    def test_not_tracked_day_yields_nothing(self, store_data):
        habits, instances = store_data
        assert pending_habits_for_date(date(2025, 6, 20), habits, instances, today=TODAY) == []
