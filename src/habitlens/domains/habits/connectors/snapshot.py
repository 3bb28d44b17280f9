"""In-memory Instance Store over an immutable snapshot."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from typing import Any

from habitlens.domains.habits.domain_logic.models import Habit, HabitInstance


class SnapshotInstanceStore:
    """InstanceStore backed by fixed tuples of habits and instances.

    Usage::

        store = SnapshotInstanceStore(habits, instances)
        today_instances = await store.get_instances(start_date=day, end_date=day)
    """

    def __init__(
        self,
        habits: Iterable[Habit] = (),
        instances: Iterable[HabitInstance] = (),
        *,
        source: str = "snapshot",
    ) -> None:
        self._habits = tuple(habits)
        self._instances = tuple(instances)
        self._source = source

    @classmethod
    def from_payload(
        cls,
        habits: Iterable[dict[str, Any]],
        instances: Iterable[dict[str, Any]],
        *,
        source: str = "snapshot",
    ) -> SnapshotInstanceStore:
        """Build a store from REST-shaped dicts (validated eagerly)."""
        return cls(
            [Habit.from_dict(h) for h in habits],
            [HabitInstance.from_dict(i) for i in instances],
            source=source,
        )

    async def get_habits(self) -> list[Habit]:
        return list(self._habits)

    async def get_instances(
        self,
        *,
        habit_id: int | str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[HabitInstance]:
        return [
            i
            for i in self._instances
            if (habit_id is None or i.habit_id == habit_id)
            and (start_date is None or i.date >= start_date)
            and (end_date is None or i.date <= end_date)
        ]

    def is_connected(self) -> bool:
        return False

    @property
    def data_source(self) -> str:
        return self._source
