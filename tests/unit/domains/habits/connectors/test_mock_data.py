"""Tests for the sample habit data set."""

from __future__ import annotations

from datetime import date, timedelta

from habitlens.domains.habits.connectors.mock_data import (
    SAMPLE_HISTORY_DAYS,
    SAMPLE_STREAK_DAYS,
    get_sample_habits,
    get_sample_instances,
    get_sample_store,
)
from habitlens.domains.habits.domain_logic.models import (
    COMPLETED,
    NOT_COMPLETED,
    PENDING,
)
from habitlens.domains.habits.domain_logic.status_classifier import (
    index_instances,
    status_range,
)
from habitlens.domains.habits.domain_logic.streak_calculator import current_streak

TODAY = date(2025, 8, 15)


def test_habit_set():
    habits = get_sample_habits(TODAY)
    assert [h.id for h in habits] == [1, 2, 3, 4, 5]
    assert [h.is_active for h in habits] == [True, True, True, True, False]
    assert habits[3].target_count == 2
    assert all(h.tracking_start_date == TODAY - timedelta(days=SAMPLE_HISTORY_DAYS)
               for h in habits)


def test_no_records_today_or_later():
    assert all(i.date < TODAY for i in get_sample_instances(TODAY))


def test_ids_unique():
    ids = [i.id for i in get_sample_instances(TODAY)]
    assert len(ids) == len(set(ids))


def test_streak_ends_yesterday():
    habits = get_sample_habits(TODAY)
    index = index_instances(get_sample_instances(TODAY))
    yesterday = TODAY - timedelta(days=1)
    assert current_streak(yesterday, habits, index, today=TODAY).length == SAMPLE_STREAK_DAYS
    assert current_streak(TODAY, habits, index).length == 0


def test_history_shows_every_trackable_status():
    habits = get_sample_habits(TODAY)
    instances = get_sample_instances(TODAY)
    start = TODAY - timedelta(days=SAMPLE_HISTORY_DAYS)
    cells = status_range(habits[0], start, TODAY, instances, TODAY)
    statuses = {c.status for c in cells}
    assert {COMPLETED, NOT_COMPLETED, PENDING} <= statuses


def test_store_label():
    store = get_sample_store(TODAY)
    assert store.data_source == "sample"
    assert store.is_connected() is False
