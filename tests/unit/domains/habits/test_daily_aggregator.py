"""Tests for the daily aggregator."""

from __future__ import annotations

from datetime import date, timedelta

from habitlens.domains.habits.domain_logic.daily_aggregator import aggregate_day
from habitlens.domains.habits.domain_logic.models import (
    COMPLETED,
    NOT_COMPLETED,
    NOT_TRACKED,
    PENDING,
    Habit,
    HabitInstance,
)
from habitlens.domains.habits.domain_logic.status_classifier import index_instances

START = date(2025, 6, 27)


def _habit(id: int, *, active: bool = True, start: date = START) -> Habit:
    return Habit(id=id, name=f"H{id}", is_active=active, tracking_start_date=start)


def _inst(habit_id: int, day: date, completed: bool = True, id: int = 0) -> HabitInstance:
    return HabitInstance(id=id or habit_id, habit_id=habit_id, date=day, completed=completed)


class TestAggregateDay:
    def test_scenario_single_habit(self, scenario_habit, scenario_instances):
        day = date(2025, 6, 28)
        summary = aggregate_day(
            day, [scenario_habit], index_instances(scenario_instances), today=date(2025, 6, 30)
        )
        assert summary.totals.to_dict() == {
            "completed": 1,
            "missed": 0,
            "pending": 0,
            "total": 1,
        }
        assert summary.per_habit == {1: COMPLETED}
        assert summary.totals.completion_rate == 100

    def test_mixed_statuses(self):
        day = date(2025, 6, 28)
        habits = [_habit(1), _habit(2), _habit(3)]
        instances = [_inst(1, day, True), _inst(2, day, False)]
        summary = aggregate_day(day, habits, index_instances(instances))
        assert summary.per_habit == {1: COMPLETED, 2: NOT_COMPLETED, 3: PENDING}
        assert summary.totals.completed == 1
        assert summary.totals.missed == 1
        assert summary.totals.pending == 1
        assert summary.totals.total == 3
        assert summary.totals.completion_rate == 33

    def test_inactive_habits_listed_but_not_counted(self):
        day = date(2025, 6, 28)
        habits = [_habit(1), _habit(2, active=False)]
        instances = [_inst(1, day, True), _inst(2, day, False)]
        summary = aggregate_day(day, habits, index_instances(instances))
        assert summary.per_habit[2] == NOT_COMPLETED
        assert summary.totals.total == 1
        assert summary.totals.missed == 0

    def test_not_yet_onboarded_day_has_zero_totals(self):
        day = date(2025, 6, 20)
        summary = aggregate_day(day, [_habit(1), _habit(2)], {})
        assert summary.per_habit == {1: NOT_TRACKED, 2: NOT_TRACKED}
        assert summary.totals.total == 0
        assert summary.totals.completion_rate == 0
        assert summary.not_tracked == 2

    def test_future_day_relative_to_today(self):
        day = date(2025, 7, 5)
        summary = aggregate_day(day, [_habit(1)], {}, today=date(2025, 7, 1))
        assert summary.per_habit[1] == NOT_TRACKED
        assert summary.totals.total == 0

    def test_today_defaults_to_day(self):
        day = date(2025, 7, 5)
        summary = aggregate_day(day, [_habit(1)], {})
        assert summary.per_habit[1] == PENDING

    def test_accepts_mapping_by_habit_id(self):
        day = date(2025, 6, 28)
        by_habit = {
            1: [_inst(1, day, True), _inst(1, day - timedelta(days=1), False, id=9)],
        }
        summary = aggregate_day(day, [_habit(1), _habit(2)], by_habit)
        assert summary.per_habit == {1: COMPLETED, 2: PENDING}

    def test_conservation_across_range(self):
        habits = [
            _habit(1),
            _habit(2, start=date(2025, 7, 1)),
            _habit(3, active=False),
            _habit(4, start=date(2025, 6, 1)),
        ]
        instances = []
        day = date(2025, 6, 1)
        n = 0
        while day <= date(2025, 7, 10):
            n += 1
            if n % 2:
                instances.append(_inst(1, day, n % 3 != 0, id=n * 10 + 1))
            if n % 5:
                instances.append(_inst(4, day, n % 4 != 0, id=n * 10 + 4))
            day += timedelta(days=1)

        index = index_instances(instances)
        day = date(2025, 6, 1)
        while day <= date(2025, 7, 12):
            totals = aggregate_day(day, habits, index, today=date(2025, 7, 8)).totals
            assert totals.completed + totals.missed + totals.pending == totals.total
            assert totals.total <= 3
            day += timedelta(days=1)

    def test_to_dict_is_json_ready(self):
        day = date(2025, 6, 28)
        summary = aggregate_day(day, [_habit(1)], index_instances([_inst(1, day)]))
        data = summary.to_dict()
        assert data["date"] == "2025-06-28"
        assert data["per_habit"] == {"1": COMPLETED}
        assert data["completion_rate"] == 100
