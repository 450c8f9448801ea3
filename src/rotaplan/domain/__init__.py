"""Domain models and business rules for scheduling."""

from rotaplan.domain.models import (
    ActivityType,
    AvailabilityStatus,
    CompoundShift,
    DailyTimeEntry,
    EntryType,
    HolidayRecord,
    ManagerApproval,
    MonthlyFlexSummary,
    Partnership,
    ResolvedShiftTime,
    RosterConfig,
    RosterStatus,
    ScheduleEntry,
    ShiftRequirement,
    ShiftTimeDefinition,
    ShiftType,
    TeamMember,
    WeekAssignment,
    Weekday,
    WorkerLocale,
    WorkerProfile,
    parse_duty_label,
    shift_type_code,
)
from rotaplan.domain.patterns import (
    CustomPattern,
    FixedDaysPattern,
    RepeatingSequencePattern,
    RotationPattern,
    WeeklyPattern,
    parse_pattern,
    pattern_summary,
)
from rotaplan.domain.policies import GermanWorkingTimePolicy, WorkingTimePolicy

__all__ = [
    # Models
    "ActivityType",
    "AvailabilityStatus",
    "CompoundShift",
    "DailyTimeEntry",
    "EntryType",
    "HolidayRecord",
    "ManagerApproval",
    "MonthlyFlexSummary",
    "Partnership",
    "ResolvedShiftTime",
    "RosterConfig",
    "RosterStatus",
    "ScheduleEntry",
    "ShiftRequirement",
    "ShiftTimeDefinition",
    "ShiftType",
    "TeamMember",
    "WeekAssignment",
    "Weekday",
    "WorkerLocale",
    "WorkerProfile",
    "parse_duty_label",
    "shift_type_code",
    # Patterns
    "CustomPattern",
    "FixedDaysPattern",
    "RepeatingSequencePattern",
    "RotationPattern",
    "WeeklyPattern",
    "parse_pattern",
    "pattern_summary",
    # Policies
    "GermanWorkingTimePolicy",
    "WorkingTimePolicy",
]
