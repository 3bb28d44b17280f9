"""Habit read models, derived result types and domain constants."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Literal


# ---------------------------------------------------------------------------
# Domain constants
# ---------------------------------------------------------------------------

# Habits with no explicit start date are not tracked before this day.
DEFAULT_TRACKING_START = date(2025, 6, 27)

DEFAULT_MAX_LOOKBACK = 30

# Heat-map geometry: 53 Sunday-start week columns x 7 weekday rows.
GRID_WEEKS = 53
GRID_DAYS = 7

FREQUENCIES = ("daily", "weekly", "monthly", "custom")
TRACKING_TYPES = ("manual", "automated", "hybrid")
POLARITIES = ("good", "bad")


# ---------------------------------------------------------------------------
# Derived day status
# ---------------------------------------------------------------------------

COMPLETED = "completed"
NOT_COMPLETED = "not_completed"
PENDING = "pending"
NOT_TRACKED = "not_tracked"

DayStatus = Literal["completed", "not_completed", "pending", "not_tracked"]

DAY_STATUSES: tuple[str, ...] = (COMPLETED, NOT_COMPLETED, PENDING, NOT_TRACKED)


class InvalidHabitDataError(ValueError):
    """Input handed to the engine has the wrong shape (bad date, bad enum, ...)."""


# ---------------------------------------------------------------------------
# Input parsing
# ---------------------------------------------------------------------------

def parse_date(value: Any, *, field_name: str = "date") -> date:
    """Return ``value`` as a calendar day.

    Accepts a ``datetime.date`` or an ISO ``YYYY-MM-DD`` string. Datetimes are
    rejected: a time component means the caller did not normalize the value.
    """
    if isinstance(value, datetime):
        raise InvalidHabitDataError(
            f"{field_name} must be a calendar day, got a datetime: {value!r}"
        )
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            raise InvalidHabitDataError(
                f"{field_name} must be an ISO date (YYYY-MM-DD), got {value!r}"
            ) from None
    raise InvalidHabitDataError(
        f"{field_name} must be a date or ISO date string, got {type(value).__name__}"
    )


def _optional_date(value: Any, *, field_name: str) -> date | None:
    if value in (None, ""):
        return None
    # The REST API returns timestamps for some date-like fields; keep the day.
    if isinstance(value, str) and "T" in value:
        value = value.split("T", 1)[0]
    return parse_date(value, field_name=field_name)


def _choice(payload: dict[str, Any], key: str, allowed: tuple[str, ...], default: str) -> str:
    value = payload.get(key, default)
    if value is None:
        value = default
    if value not in allowed:
        raise InvalidHabitDataError(
            f"{key} must be one of: {' | '.join(allowed)}; got {value!r}"
        )
    return value


def _require(payload: dict[str, Any], key: str) -> Any:
    if key not in payload or payload[key] is None:
        raise InvalidHabitDataError(f"Missing required field: {key}")
    return payload[key]


# ---------------------------------------------------------------------------
# Read models
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Habit:
    """Point-in-time snapshot of a tracked habit."""

    id: int | str
    name: str = ""
    frequency: str = "daily"
    tracking_type: str = "manual"
    target_count: int = 1
    is_active: bool = True
    good_bad: str = "good"
    tracking_start_date: date | None = None

    def __post_init__(self) -> None:
        if isinstance(self.target_count, bool) or not isinstance(self.target_count, int):
            raise InvalidHabitDataError(
                f"target_count must be an integer, got {self.target_count!r}"
            )
        if self.target_count < 1:
            raise InvalidHabitDataError(
                f"target_count must be >= 1, got {self.target_count}"
            )
        if self.tracking_start_date is not None:
            # Frozen: store the normalized day so the engine only ever sees dates.
            object.__setattr__(
                self,
                "tracking_start_date",
                parse_date(self.tracking_start_date, field_name="tracking_start_date"),
            )

    def start_date(self, default: date = DEFAULT_TRACKING_START) -> date:
        """Effective first trackable day for this habit."""
        return self.tracking_start_date or default

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Habit:
        """Parse a habit record as returned by the dashboard REST API."""
        if not isinstance(data, dict):
            raise InvalidHabitDataError(
                f"Habit record must be an object, got {type(data).__name__}"
            )
        target = data.get("target_count", 1)
        if target is None:
            target = 1
        return cls(
            id=_require(data, "id"),
            name=data.get("name") or "",
            frequency=_choice(data, "frequency", FREQUENCIES, "daily"),
            tracking_type=_choice(data, "tracking_type", TRACKING_TYPES, "manual"),
            target_count=target,
            is_active=bool(data.get("is_active", True)),
            good_bad=_choice(data, "good_bad", POLARITIES, "good"),
            tracking_start_date=_optional_date(
                data.get("tracking_start_date"), field_name="tracking_start_date"
            ),
        )


@dataclass(frozen=True)
class HabitInstance:
    """A single dated completion record for one habit."""

    id: int | str
    habit_id: int | str
    date: date
    completed: bool
    notes: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "date", parse_date(self.date, field_name="instance date"))
        if not isinstance(self.completed, bool):
            raise InvalidHabitDataError(
                f"completed must be a boolean, got {self.completed!r}"
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HabitInstance:
        """Parse an instance record as returned by the dashboard REST API."""
        if not isinstance(data, dict):
            raise InvalidHabitDataError(
                f"Instance record must be an object, got {type(data).__name__}"
            )
        # Some serializers expose the owning habit as "habit".
        habit_id = data.get("habit_id", data.get("habit"))
        if habit_id is None:
            raise InvalidHabitDataError("Missing required field: habit_id")
        return cls(
            id=_require(data, "id"),
            habit_id=habit_id,
            date=parse_date(_require(data, "date"), field_name="instance date"),
            completed=_require(data, "completed"),
            notes=data.get("notes"),
        )


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

def completion_rate(completed: int, total: int) -> int:
    """Whole-number completion percentage; 0 when nothing was trackable."""
    if total <= 0:
        return 0
    # Half-up like the dashboard's Math.round, not Python's banker's rounding.
    return int(100 * completed / total + 0.5)


@dataclass(frozen=True)
class DailyTotals:
    """Roll-up counts over the active, trackable habits of one day."""

    completed: int = 0
    missed: int = 0
    pending: int = 0
    total: int = 0

    @property
    def completion_rate(self) -> int:
        return completion_rate(self.completed, self.total)

    @property
    def fully_completed(self) -> bool:
        return self.total > 0 and self.completed == self.total

    def to_dict(self) -> dict[str, int]:
        return {
            "completed": self.completed,
            "missed": self.missed,
            "pending": self.pending,
            "total": self.total,
        }


@dataclass(frozen=True)
class DailySummary:
    """Per-habit statuses plus totals for a single day."""

    date: date
    per_habit: dict[int | str, str]
    totals: DailyTotals
    not_tracked: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "per_habit": {str(k): v for k, v in self.per_habit.items()},
            "totals": self.totals.to_dict(),
            "completion_rate": self.totals.completion_rate,
        }


@dataclass(frozen=True)
class StreakResult:
    length: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"length": self.length}


@dataclass(frozen=True)
class DayCell:
    date: date
    status: str

    def to_dict(self) -> dict[str, str]:
        return {"date": self.date.isoformat(), "status": self.status}


@dataclass(frozen=True)
class CalendarGridResult:
    """Year heat-map: ``days[week][weekday]`` is a DayCell or None."""

    year: int
    habit_id: int | str
    days: tuple[tuple[DayCell | None, ...], ...]
    total_tracked_days: int
    completed_days: int
    completion_rate: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "year": self.year,
            "habit_id": self.habit_id,
            "days": [
                [cell.to_dict() if cell is not None else None for cell in week]
                for week in self.days
            ],
            "total_tracked_days": self.total_tracked_days,
            "completed_days": self.completed_days,
            "completion_rate": self.completion_rate,
        }


@dataclass(frozen=True)
class TrackingSummary:
    """Per-habit counts over a date range."""

    habit_id: int | str
    habit_name: str
    start_date: date
    end_date: date
    completed_count: int = 0
    not_completed_count: int = 0
    pending_count: int = 0
    total_days: int = 0
    current_streak: int = 0
    longest_streak: int = 0

    @property
    def completion_rate(self) -> int:
        return completion_rate(self.completed_count, self.total_days)

    def to_dict(self) -> dict[str, Any]:
        return {
            "habit_id": self.habit_id,
            "habit_name": self.habit_name,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "completed_count": self.completed_count,
            "not_completed_count": self.not_completed_count,
            "pending_count": self.pending_count,
            "total_days": self.total_days,
            "completion_rate": self.completion_rate,
            "current_streak": self.current_streak,
            "longest_streak": self.longest_streak,
        }


@dataclass(frozen=True)
class PendingHabit:
    habit_id: int | str
    habit_name: str
    last_completed_date: date | None = None
    days_since_last_completion: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "habit_id": self.habit_id,
            "habit_name": self.habit_name,
            "last_completed_date": (
                self.last_completed_date.isoformat() if self.last_completed_date else None
            ),
            "days_since_last_completion": self.days_since_last_completion,
        }
