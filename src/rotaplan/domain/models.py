"""Domain models for the scheduling core.

This module contains the data structures shared by the calendar classifier,
shift-time resolver, rotation engine, roster generator and flextime
accounting. Enum values match the column values used by the external store.
"""

from dataclasses import dataclass, field
from datetime import date, time
from enum import Enum, IntEnum
from typing import Optional, Union


class ShiftType(Enum):
    """Categorical shift label governing which time-window rules apply."""

    NORMAL = "normal"
    EARLY = "early"
    LATE = "late"
    WEEKEND = "weekend"


class ActivityType(Enum):
    """What a worker does on a scheduled day."""

    WORK = "work"
    VACATION = "vacation"
    SICK = "sick"
    TRAINING = "training"
    OTHER = "other"


class AvailabilityStatus(Enum):
    """Whether a worker is available on a scheduled day."""

    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"


class EntryType(Enum):
    """Kind of daily time entry recorded for flextime accounting."""

    WORK = "work"
    HOME_OFFICE = "home_office"
    SICK_LEAVE = "sick_leave"
    TEAM_MEETING = "team_meeting"
    TRAINING = "training"
    VACATION = "vacation"
    PUBLIC_HOLIDAY = "public_holiday"
    FZA_WITHDRAWAL = "fza_withdrawal"


class RosterStatus(Enum):
    """Lifecycle of a partnership rotation roster."""

    DRAFT = "draft"
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    IMPLEMENTED = "implemented"


class Weekday(IntEnum):
    """Day of week using the store's numbering (Sunday is 0)."""

    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6

    @classmethod
    def of(cls, d: date) -> "Weekday":
        """Weekday of a date (Python counts Monday as 0)."""
        return cls((d.weekday() + 1) % 7)

    @property
    def is_weekend(self) -> bool:
        return self in (Weekday.SATURDAY, Weekday.SUNDAY)

    @property
    def day_name(self) -> str:
        """Lower-case English name, as used by weekly rotation patterns."""
        return self.name.lower()


def is_weekend(d: date) -> bool:
    """Check if a date falls on a Saturday or Sunday."""
    return d.weekday() >= 5


def parse_time(value: Union[str, time]) -> time:
    """Parse a wall-clock time given as ``HH:MM`` or ``HH:MM:SS``."""
    if isinstance(value, time):
        return value
    parts = value.strip().split(":")
    if len(parts) < 2:
        raise ValueError(f"Invalid time value: {value!r}")
    hours, minutes = int(parts[0]), int(parts[1])
    seconds = int(parts[2]) if len(parts) > 2 else 0
    return time(hour=hours, minute=minutes, second=seconds)


def format_time(t: time) -> str:
    """Format a time as ``HH:MM``."""
    return t.strftime("%H:%M")


@dataclass(frozen=True)
class ShiftTimeDefinition:
    """A scoped rule mapping team/region/country/day to a shift time window.

    Attributes:
        id: Unique identifier of the definition.
        shift_type: Shift type this definition applies to.
        start_time: Wall-clock start (no timezone).
        end_time: Wall-clock end (no timezone).
        team_id: Owning team, if team-scoped.
        team_ids: Additional teams the definition applies to.
        region_code: Region (subdivision) the definition applies to.
        country_codes: Countries the definition is restricted to.
        days_of_week: Weekdays the definition applies to (empty = all days).
        description: Free-text description.
    """

    id: str
    shift_type: ShiftType
    start_time: time
    end_time: time
    team_id: Optional[str] = None
    team_ids: frozenset[str] = frozenset()
    region_code: Optional[str] = None
    country_codes: frozenset[str] = frozenset()
    days_of_week: frozenset[Weekday] = frozenset()
    description: str = ""

    @property
    def has_team(self) -> bool:
        return self.team_id is not None or bool(self.team_ids)

    @property
    def has_day_restriction(self) -> bool:
        return bool(self.days_of_week)

    def applies_to_team(self, team_id: Optional[str]) -> bool:
        """Check if the definition is scoped to a team (directly or via its team set)."""
        if team_id is None:
            return False
        return self.team_id == team_id or team_id in self.team_ids

    def applies_to_day(self, day: Weekday) -> bool:
        """Check if the definition covers a weekday (unrestricted covers all)."""
        return not self.days_of_week or day in self.days_of_week

    @classmethod
    def from_record(cls, record: dict) -> "ShiftTimeDefinition":
        """Build a definition from a store-shaped record."""
        return cls(
            id=str(record["id"]),
            shift_type=ShiftType(record["shift_type"]),
            start_time=parse_time(record["start_time"]),
            end_time=parse_time(record["end_time"]),
            team_id=record.get("team_id"),
            team_ids=frozenset(record.get("team_ids") or ()),
            region_code=record.get("region_code"),
            country_codes=frozenset(record.get("country_codes") or ()),
            days_of_week=frozenset(
                Weekday(d) for d in (record.get("day_of_week") or ())
            ),
            description=record.get("description") or "",
        )


@dataclass(frozen=True)
class ResolvedShiftTime:
    """Concrete time window chosen for a shift on a date.

    Attributes:
        start_time: Resolved start.
        end_time: Resolved end.
        description: Description of the chosen definition or default.
        definition_id: Id of the matched definition (None for built-in defaults).
    """

    start_time: time
    end_time: time
    description: str
    definition_id: Optional[str] = None

    @property
    def is_default(self) -> bool:
        return self.definition_id is None

    @property
    def window(self) -> str:
        """Time window as ``HH:MM-HH:MM``."""
        return f"{format_time(self.start_time)}-{format_time(self.end_time)}"


@dataclass(frozen=True)
class HolidayRecord:
    """A public or personal holiday.

    A public holiday is centrally managed and has no owner. A personal
    holiday belongs to exactly one worker and is only visible to them.
    """

    date: date
    name: str
    country_code: Optional[str] = None
    region_code: Optional[str] = None
    owner_id: Optional[str] = None
    is_public: bool = True

    def __post_init__(self):
        if self.is_public and self.owner_id is not None:
            raise ValueError("A public holiday cannot have an owner")
        if not self.is_public and self.owner_id is None:
            raise ValueError("A personal holiday requires an owner")

    @property
    def is_central(self) -> bool:
        return self.owner_id is None


@dataclass(frozen=True)
class WorkerLocale:
    """Country and region a worker's public holidays are taken from."""

    worker_id: str
    country_code: Optional[str] = None
    region_code: Optional[str] = None


@dataclass(frozen=True)
class TeamMember:
    """Membership of a worker in a team, with the worker's locale."""

    worker_id: str
    team_id: str
    country_code: Optional[str] = None
    region_code: Optional[str] = None


@dataclass(frozen=True)
class CompoundShift:
    """A duty combining a weekday shift type with a weekend time window.

    Externally encoded as ``weekend_<weekday type>``.
    """

    weekday_part: ShiftType
    weekend_part: ShiftType = ShiftType.WEEKEND

    PREFIX = "weekend_"

    @property
    def label(self) -> str:
        return f"{self.PREFIX}{self.weekday_part.value}"


DutyShift = Union[ShiftType, CompoundShift]


def parse_duty_label(label: Optional[str]) -> Optional[DutyShift]:
    """Parse a roster duty label.

    Returns None for "off" or a missing label, a CompoundShift for
    ``weekend_<type>`` labels, otherwise the plain ShiftType.
    """
    if not label or label == "off":
        return None
    if label.startswith(CompoundShift.PREFIX):
        return CompoundShift(weekday_part=ShiftType(label[len(CompoundShift.PREFIX):]))
    return ShiftType(label)


ACTIVITY_CODES = {
    ActivityType.VACATION: "U",
    ActivityType.SICK: "S",
    ActivityType.TRAINING: "K",
    ActivityType.OTHER: "F",
}

SHIFT_CODES = {
    ShiftType.EARLY: "E",
    ShiftType.LATE: "L",
    ShiftType.WEEKEND: "W",
    ShiftType.NORMAL: "N",
}


def shift_type_code(
    shift_type: Optional[ShiftType],
    activity_type: Optional[ActivityType] = None,
) -> str:
    """One-letter calendar code; absences take precedence over the shift."""
    if activity_type in ACTIVITY_CODES:
        return ACTIVITY_CODES[activity_type]
    if shift_type in SHIFT_CODES:
        return SHIFT_CODES[shift_type]
    return "-"


@dataclass
class ScheduleEntry:
    """A concrete per-worker, per-day schedule entry.

    At most one entry exists per (worker, team, date); uniqueness is
    enforced by the store's conflict key.
    """

    worker_id: str
    team_id: str
    date: date
    shift_type: Optional[ShiftType]
    activity_type: ActivityType
    availability_status: AvailabilityStatus
    shift_time_definition_id: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[str] = None

    @property
    def natural_key(self) -> tuple[str, str, date]:
        return (self.worker_id, self.team_id, self.date)

    @property
    def is_work(self) -> bool:
        return self.activity_type == ActivityType.WORK

    def to_record(self) -> dict:
        """Store-shaped representation of this entry."""
        return {
            "user_id": self.worker_id,
            "team_id": self.team_id,
            "date": self.date.isoformat(),
            "shift_type": self.shift_type.value if self.shift_type else None,
            "activity_type": self.activity_type.value,
            "availability_status": self.availability_status.value,
            "shift_time_definition_id": self.shift_time_definition_id,
            "notes": self.notes,
            "created_by": self.created_by,
        }


@dataclass
class RosterConfig:
    """Configuration of a multi-week cyclic duty roster.

    Attributes:
        id: Roster identifier.
        shift_type: Duty label of the roster.
        cycle_length_weeks: Number of weeks before the cycle repeats.
        start_date: First date covered by the roster.
        partnership_id: Partnership (group of teams) sharing the roster.
        end_date: Last date covered (None = start + default horizon).
        default_shift_for_non_duty: Shift type (or "none") for workers not on duty.
        status: Lifecycle status.
    """

    id: str
    shift_type: str
    cycle_length_weeks: int
    start_date: date
    partnership_id: str
    end_date: Optional[date] = None
    default_shift_for_non_duty: str = "none"
    status: RosterStatus = RosterStatus.DRAFT

    def __post_init__(self):
        if self.cycle_length_weeks < 1:
            raise ValueError("cycle_length_weeks must be at least 1")


@dataclass(frozen=True)
class WeekAssignment:
    """Which worker is on duty in a given cycle week."""

    week_number: int
    team_id: str
    worker_id: Optional[str] = None
    shift_type: Optional[str] = None

    @property
    def duty(self) -> Optional[DutyShift]:
        return parse_duty_label(self.shift_type)


@dataclass(frozen=True)
class Partnership:
    """A named grouping of teams sharing a rotation roster."""

    id: str
    name: str
    team_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class ManagerApproval:
    """A manager's sign-off on a roster."""

    manager_id: str
    manager_name: str
    approved: bool = False


@dataclass(frozen=True)
class ShiftRequirement:
    """Number of workers a partnership needs on a shift type per cycle week."""

    shift_type: ShiftType
    staff_required: int


@dataclass
class DailyTimeEntry:
    """A worker's recorded time for one date (one entry per worker and date)."""

    worker_id: str
    entry_date: date
    entry_type: EntryType = EntryType.WORK
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    break_minutes: int = 0
    target_hours: float = 0.0
    actual_hours: float = 0.0
    flex_delta: float = 0.0
    withdrawal_hours: Optional[float] = None
    is_locked: bool = False

    @property
    def natural_key(self) -> tuple[str, date]:
        return (self.worker_id, self.entry_date)


@dataclass
class MonthlyFlexSummary:
    """Recomputed flextime balance of a worker for one month."""

    worker_id: str
    year: int
    month: int
    starting_balance: float = 0.0
    month_delta: float = 0.0
    ending_balance: float = 0.0

    @property
    def period(self) -> tuple[int, int]:
        return (self.year, self.month)


@dataclass
class WorkerProfile:
    """Per-worker settings relevant to accounting and calendars."""

    worker_id: str
    first_name: str = ""
    last_name: str = ""
    country_code: Optional[str] = None
    region_code: Optional[str] = None
    flextime_carryover_limit: Optional[float] = None
    team_ids: list[str] = field(default_factory=list)

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or self.worker_id

    @property
    def locale(self) -> WorkerLocale:
        return WorkerLocale(self.worker_id, self.country_code, self.region_code)
