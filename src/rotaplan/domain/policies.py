"""Policy definitions for working-time rules.

This module contains the rules flextime accounting is computed against:
weekday target hours, break deduction and the legal break and daily-hour
ceilings. Policies are kept separate from the accounting engine to allow
independent testing and easy modification.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date


class WorkingTimePolicy(ABC):
    """Abstract base class for working-time policies."""

    @abstractmethod
    def target_hours(self, work_date: date) -> float:
        """Contractual hours expected on a date."""
        pass

    @abstractmethod
    def break_deduction_minutes(self, gross_minutes: int, break_minutes: int) -> int:
        """Minutes of break to deduct from a gross working span.

        Args:
            gross_minutes: End minus start, in minutes.
            break_minutes: Break recorded by the worker.

        Returns:
            Minutes to subtract from the gross span.
        """
        pass

    @abstractmethod
    def required_break_minutes(self, actual_hours: float) -> int:
        """Minimum break required by law for a number of worked hours."""
        pass

    @abstractmethod
    def max_daily_hours(self) -> float:
        """Maximum hours that may be worked on one day."""
        pass

    @abstractmethod
    def default_carryover_limit(self) -> float:
        """Carryover ceiling used when a worker has none configured."""
        pass


@dataclass
class GermanWorkingTimePolicy(WorkingTimePolicy):
    """Working-time rules of a 38-hour week.

    Target hours:
    - Monday to Thursday: 8 hours
    - Friday: 6 hours
    - Saturday and Sunday: 0 hours

    Breaks:
    - Spans of 6 hours or less: no break deducted
    - More than 6 hours worked: at least 30 minutes
    - More than 9 hours worked: at least 45 minutes

    At most 10 hours may be worked per day.
    """

    weekday_target_hours: float = 8.0
    friday_target_hours: float = 6.0

    no_break_threshold_minutes: int = 360  # 6 hours

    short_break_after_hours: float = 6.0
    short_break_minutes: int = 30
    long_break_after_hours: float = 9.0
    long_break_minutes: int = 45

    daily_limit_hours: float = 10.0
    carryover_limit_hours: float = 40.0

    def target_hours(self, work_date: date) -> float:
        weekday = work_date.weekday()
        if weekday >= 5:
            return 0.0
        if weekday == 4:
            return self.friday_target_hours
        return self.weekday_target_hours

    def break_deduction_minutes(self, gross_minutes: int, break_minutes: int) -> int:
        if gross_minutes <= self.no_break_threshold_minutes:
            return 0
        return break_minutes

    def required_break_minutes(self, actual_hours: float) -> int:
        if actual_hours > self.long_break_after_hours:
            return self.long_break_minutes
        if actual_hours > self.short_break_after_hours:
            return self.short_break_minutes
        return 0

    def max_daily_hours(self) -> float:
        return self.daily_limit_hours

    def default_carryover_limit(self) -> float:
        return self.carryover_limit_hours
