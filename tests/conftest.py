"""Shared test fixtures for HabitLens tests."""

from __future__ import annotations

import sys
from datetime import date
from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Test hermeticity
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _force_hermetic_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HABIT_API_URL", "")
    monkeypatch.setenv("HABIT_API_USERNAME", "")
    monkeypatch.setenv("HABIT_API_PASSWORD", "")
    monkeypatch.delenv("TRACKING_START_DATE", raising=False)
    monkeypatch.delenv("STREAK_MAX_LOOKBACK", raising=False)
    monkeypatch.delenv("STREAK_REQUIRE_ALL_TRACKED", raising=False)

# Allow running tests without `pip install -e .` by making `src/` importable.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_SRC_DIR = _PROJECT_ROOT / "src"
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from habitlens.domains.habits.connectors.snapshot import SnapshotInstanceStore  # noqa: E402
from habitlens.domains.habits.domain_logic.models import Habit, HabitInstance  # noqa: E402


def _habit(
    id: int | str = 1,
    *,
    start: date | None = date(2025, 6, 27),
    active: bool = True,
    target_count: int = 1,
    name: str | None = None,
) -> Habit:
    """Create a test habit with sensible defaults."""
    return Habit(
        id=id,
        name=name or f"Habit {id}",
        is_active=active,
        target_count=target_count,
        tracking_start_date=start,
    )


_next_instance_id = iter(range(1, 1_000_000))


def _instance(habit_id: int | str, day: date, completed: bool = True) -> HabitInstance:
    """Create a test instance with a unique id."""
    return HabitInstance(
        id=next(_next_instance_id),
        habit_id=habit_id,
        date=day,
        completed=completed,
    )


# ---------------------------------------------------------------------------
# Reference scenario: tracking starts 2025-06-27, today is 2025-06-30
# ---------------------------------------------------------------------------

SCENARIO_START = date(2025, 6, 27)
SCENARIO_TODAY = date(2025, 6, 30)


@pytest.fixture
def scenario_habit() -> Habit:
    return _habit(1, start=SCENARIO_START)


@pytest.fixture
def scenario_instances(scenario_habit: Habit) -> list[HabitInstance]:
    return [_instance(scenario_habit.id, date(2025, 6, 28), completed=True)]


@pytest.fixture
def snapshot_store() -> SnapshotInstanceStore:
    """Two active habits completed on 06-27 and 06-28, plus an inactive habit."""
    habits = [
        _habit(1, start=SCENARIO_START),
        _habit(2, start=SCENARIO_START),
        _habit(3, start=SCENARIO_START, active=False),
    ]
    instances = [
        _instance(1, date(2025, 6, 27)),
        _instance(2, date(2025, 6, 27)),
        _instance(1, date(2025, 6, 28)),
        _instance(2, date(2025, 6, 28)),
        _instance(1, date(2025, 6, 29), completed=False),
    ]
    return SnapshotInstanceStore(habits, instances)
