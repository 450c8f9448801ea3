"""Rotation pattern expansion.

Turns a rotation pattern into one schedule entry per requested date, in
input order. Work entries carry the pattern's shift type; off entries carry
no shift type and mark the worker unavailable.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Iterable, Optional, Union

from rotaplan.domain.models import (
    ActivityType,
    AvailabilityStatus,
    ScheduleEntry,
    ShiftType,
    Weekday,
    is_weekend,
)
from rotaplan.domain.patterns import (
    CustomPattern,
    FixedDaysPattern,
    RepeatingSequencePattern,
    RotationPattern,
    WeeklyPattern,
    parse_pattern,
)


@dataclass(frozen=True)
class ExpansionOptions:
    """Options for fixed-days expansion.

    Attributes:
        skip_weekends: Emit an unavailable entry on Saturdays and Sundays.
        skip_holidays: Emit an unavailable entry on dates in ``holidays``.
        holidays: Holiday dates to skip.
        skipped_days_advance_cycle: Whether skipped dates still consume a
            position in the work/off cycle.
    """

    skip_weekends: bool = False
    skip_holidays: bool = False
    holidays: frozenset[date] = frozenset()
    skipped_days_advance_cycle: bool = True


@dataclass(frozen=True)
class PatternPreviewDay:
    """One day of a pattern preview."""

    day: int
    shift_type: Optional[ShiftType]
    label: str


def work_entry(
    worker_id: str,
    team_id: str,
    entry_date: date,
    shift_type: ShiftType,
) -> ScheduleEntry:
    return ScheduleEntry(
        worker_id=worker_id,
        team_id=team_id,
        date=entry_date,
        shift_type=shift_type,
        activity_type=ActivityType.WORK,
        availability_status=AvailabilityStatus.AVAILABLE,
    )


def off_entry(
    worker_id: str,
    team_id: str,
    entry_date: date,
    notes: Optional[str] = None,
) -> ScheduleEntry:
    return ScheduleEntry(
        worker_id=worker_id,
        team_id=team_id,
        date=entry_date,
        shift_type=None,
        activity_type=ActivityType.OTHER,
        availability_status=AvailabilityStatus.UNAVAILABLE,
        notes=notes,
    )


class RotationPatternEngine:
    """Expands rotation patterns into day-by-day schedule entries.

    Example:
        >>> engine = RotationPatternEngine()
        >>> pattern = parse_pattern({"type": "fixed_days",
        ...     "cycle": {"work_days": 4, "off_days": 4, "shift_type": "early"}})
        >>> entries = engine.expand(pattern, "W1", "T1", dates)
    """

    def expand(
        self,
        pattern: Union[RotationPattern, dict[str, Any]],
        worker_id: str,
        team_id: str,
        dates: Iterable[date],
        options: Optional[ExpansionOptions] = None,
    ) -> list[ScheduleEntry]:
        """Expand a pattern over the given dates.

        Args:
            pattern: A pattern variant or its store-shaped mapping.
            worker_id: Worker the entries are for.
            team_id: Team the entries are filed under.
            dates: Dates to expand over; one entry is emitted per date.
            options: Weekend/holiday skipping (fixed-days patterns only).

        Returns:
            Schedule entries in input order.
        """
        if isinstance(pattern, dict):
            pattern = parse_pattern(pattern)
        options = options or ExpansionOptions()
        dates = list(dates)

        if isinstance(pattern, FixedDaysPattern):
            return self._expand_fixed_days(pattern, worker_id, team_id, dates, options)
        if isinstance(pattern, RepeatingSequencePattern):
            return self._expand_sequence(pattern, worker_id, team_id, dates)
        if isinstance(pattern, WeeklyPattern):
            return self._expand_weekly(pattern, worker_id, team_id, dates)
        if isinstance(pattern, CustomPattern):
            return self._expand_custom(pattern, worker_id, team_id, dates)
        raise TypeError(f"Unknown rotation pattern: {type(pattern).__name__}")

    def _expand_fixed_days(
        self,
        pattern: FixedDaysPattern,
        worker_id: str,
        team_id: str,
        dates: list[date],
        options: ExpansionOptions,
    ) -> list[ScheduleEntry]:
        entries = []
        day_index = 0

        for d in dates:
            is_holiday = options.skip_holidays and d in options.holidays
            is_weekend_day = options.skip_weekends and is_weekend(d)

            if is_holiday or is_weekend_day:
                entries.append(
                    off_entry(worker_id, team_id, d, "Holiday" if is_holiday else "Weekend")
                )
                if options.skipped_days_advance_cycle:
                    day_index += 1
                continue

            position = day_index % pattern.cycle_length
            if position < pattern.work_days:
                entries.append(work_entry(worker_id, team_id, d, pattern.shift_type))
            else:
                entries.append(off_entry(worker_id, team_id, d))
            day_index += 1

        return entries

    def _expand_sequence(
        self,
        pattern: RepeatingSequencePattern,
        worker_id: str,
        team_id: str,
        dates: list[date],
    ) -> list[ScheduleEntry]:
        entries = []
        current_step = 0
        days_in_step = 0

        for d in dates:
            step = pattern.sequence[current_step]
            if step.shift_type is None:
                entries.append(off_entry(worker_id, team_id, d))
            else:
                entries.append(work_entry(worker_id, team_id, d, step.shift_type))

            days_in_step += 1
            if days_in_step >= step.days:
                current_step = (current_step + 1) % len(pattern.sequence)
                days_in_step = 0

        return entries

    def _expand_weekly(
        self,
        pattern: WeeklyPattern,
        worker_id: str,
        team_id: str,
        dates: list[date],
    ) -> list[ScheduleEntry]:
        entries = []
        for d in dates:
            shift_type = pattern.shift_for(Weekday.of(d))
            if shift_type is None:
                entries.append(off_entry(worker_id, team_id, d))
            else:
                entries.append(work_entry(worker_id, team_id, d, shift_type))
        return entries

    def _expand_custom(
        self,
        pattern: CustomPattern,
        worker_id: str,
        team_id: str,
        dates: list[date],
    ) -> list[ScheduleEntry]:
        entries = []
        for index, d in enumerate(dates):
            shift_type = pattern.shift_for(index % pattern.cycle_length_days)
            if shift_type is None:
                entries.append(off_entry(worker_id, team_id, d))
            else:
                entries.append(work_entry(worker_id, team_id, d, shift_type))
        return entries


def preview_pattern(
    pattern: Union[RotationPattern, dict[str, Any]],
    start: date,
    days: int = 28,
) -> list[PatternPreviewDay]:
    """Expand a pattern over consecutive days for display."""
    dates = [start + timedelta(days=i) for i in range(days)]
    entries = RotationPatternEngine().expand(pattern, "preview", "preview", dates)
    return [
        PatternPreviewDay(day=index, shift_type=entry.shift_type, label=entry.date.strftime("%a"))
        for index, entry in enumerate(entries)
    ]
