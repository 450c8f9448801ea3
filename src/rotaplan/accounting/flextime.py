"""Daily flextime calculation.

Computes target hours, worked hours and the resulting flextime delta of a
single day. Entry types fall into three groups:
- Work-counting (work, home office, team meeting, training): weekday target
  against clocked time
- Zero-target (sick leave, vacation, public holiday): no balance impact
- FZA withdrawal: a pure debit of the requested hours
"""

from dataclasses import dataclass
from datetime import date, time
from typing import Optional

from rotaplan.domain.models import EntryType
from rotaplan.domain.policies import GermanWorkingTimePolicy, WorkingTimePolicy

WORK_COUNTING_TYPES = frozenset({
    EntryType.WORK,
    EntryType.HOME_OFFICE,
    EntryType.TEAM_MEETING,
    EntryType.TRAINING,
})

ZERO_TARGET_TYPES = frozenset({
    EntryType.SICK_LEAVE,
    EntryType.VACATION,
    EntryType.PUBLIC_HOLIDAY,
})

ENTRY_TYPE_LABELS: dict[EntryType, str] = {
    EntryType.WORK: "Regular Work",
    EntryType.HOME_OFFICE: "Home Office",
    EntryType.SICK_LEAVE: "Sick Leave",
    EntryType.TEAM_MEETING: "Team Meeting",
    EntryType.TRAINING: "Training",
    EntryType.VACATION: "Vacation",
    EntryType.PUBLIC_HOLIDAY: "Public Holiday",
    EntryType.FZA_WITHDRAWAL: "FlexTime Withdrawal (FZA)",
}


@dataclass
class TimeEntryInput:
    """What a worker records for a day.

    Attributes:
        entry_type: Kind of day.
        start_time: Clock-in time (work-counting types).
        end_time: Clock-out time (work-counting types).
        break_minutes: Break taken.
        withdrawal_hours: Hours withdrawn from the balance (FZA withdrawal).
    """

    entry_type: EntryType = EntryType.WORK
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    break_minutes: int = 0
    withdrawal_hours: Optional[float] = None


@dataclass(frozen=True)
class FlexTimeCalculation:
    """Result of a daily flextime calculation."""

    target_hours: float
    actual_hours: float
    flex_delta: float
    gross_hours: float
    withdrawal_hours: Optional[float] = None


def minutes_since_midnight(t: time) -> int:
    return t.hour * 60 + t.minute


class FlexTimeCalculator:
    """Calculates target, actual and delta hours for daily time entries.

    Example:
        >>> calculator = FlexTimeCalculator()
        >>> result = calculator.calculate(
        ...     date(2024, 1, 17),
        ...     TimeEntryInput(start_time=time(8), end_time=time(17), break_minutes=60),
        ... )
        >>> result.actual_hours, result.flex_delta
        (8.0, 0.0)
    """

    def __init__(self, policy: Optional[WorkingTimePolicy] = None):
        self.policy = policy or GermanWorkingTimePolicy()

    def target_hours(self, work_date: date) -> float:
        return self.policy.target_hours(work_date)

    def gross_minutes(self, start_time: Optional[time], end_time: Optional[time]) -> int:
        if start_time is None or end_time is None:
            return 0
        return minutes_since_midnight(end_time) - minutes_since_midnight(start_time)

    def actual_hours(
        self,
        start_time: Optional[time],
        end_time: Optional[time],
        break_minutes: int,
    ) -> float:
        """Worked hours after the legally required break deduction, floored at 0."""
        if start_time is None or end_time is None:
            return 0.0
        gross = self.gross_minutes(start_time, end_time)
        net = gross - self.policy.break_deduction_minutes(gross, break_minutes)
        return max(0.0, net / 60)

    def calculate(self, work_date: date, entry: TimeEntryInput) -> FlexTimeCalculation:
        """Calculate a day's flextime figures."""
        if entry.entry_type == EntryType.FZA_WITHDRAWAL:
            withdrawn = abs(entry.withdrawal_hours or 0.0)
            return FlexTimeCalculation(
                target_hours=0.0,
                actual_hours=0.0,
                flex_delta=-withdrawn,
                gross_hours=0.0,
                withdrawal_hours=withdrawn,
            )

        if entry.entry_type in ZERO_TARGET_TYPES:
            return FlexTimeCalculation(
                target_hours=0.0, actual_hours=0.0, flex_delta=0.0, gross_hours=0.0
            )

        target = self.target_hours(work_date)
        gross = self.gross_minutes(entry.start_time, entry.end_time) / 60
        actual = self.actual_hours(entry.start_time, entry.end_time, entry.break_minutes)
        return FlexTimeCalculation(
            target_hours=target,
            actual_hours=actual,
            flex_delta=actual - target,
            gross_hours=gross,
        )


def format_flex_hours(hours: float) -> str:
    """Format hours as a signed ``H:MM`` string, e.g. ``+1:30`` or ``-0:45``."""
    total_minutes = round(abs(hours) * 60)
    h, m = divmod(total_minutes, 60)
    sign = "-" if hours < 0 and total_minutes else "+"
    return f"{sign}{h}:{m:02d}"


def default_start_time(entry_type: EntryType) -> Optional[time]:
    """Suggested clock-in time for an entry type."""
    if entry_type in WORK_COUNTING_TYPES:
        return time(8, 0)
    return None


def default_end_time(work_date: date, entry_type: EntryType) -> Optional[time]:
    """Suggested clock-out time: target hours plus a 30 minute break after 08:00."""
    if entry_type not in WORK_COUNTING_TYPES:
        return None
    if work_date.weekday() == 4:
        return time(14, 30)
    return time(16, 30)
