"""Instance Store connectors: read access to habit and instance snapshots."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from habitlens.domains.habits.domain_logic.models import Habit, HabitInstance


@runtime_checkable
class InstanceStore(Protocol):
    """Abstract read interface over the system of record for habits.

    Tools call these methods without knowing whether the snapshot comes from
    the dashboard REST API or an in-memory sample set. Implementations never
    mutate what they return.
    """

    async def get_habits(self) -> list[Habit]:
        """All habits, active and inactive."""
        ...

    async def get_instances(
        self,
        *,
        habit_id: int | str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[HabitInstance]:
        """Instances, optionally filtered by habit and inclusive date range."""
        ...

    def is_connected(self) -> bool:
        """Whether a real system of record backs this store."""
        ...

    @property
    def data_source(self) -> str:
        """Label for the active data source: 'rest_api' or 'sample'."""
        ...


# ------------------------------------------------------------------
# Exceptions
# ------------------------------------------------------------------

class InstanceStoreError(Exception):
    """Base exception for Instance Store failures."""


class InstanceStoreConnectionError(InstanceStoreError):
    """Could not reach the habit API (network error or timeout)."""


class InstanceStoreAuthError(InstanceStoreError):
    """The habit API rejected our credentials."""


class InstanceStoreResponseError(InstanceStoreError):
    """Response from the habit API was unexpected."""
