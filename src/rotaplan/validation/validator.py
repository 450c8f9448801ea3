"""Validation of time entries, shift placement and roster staffing.

The checks are advisory and report findings in a ValidationResult instead
of raising.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Iterable, Optional

from rotaplan.accounting.flextime import FlexTimeCalculation, TimeEntryInput
from rotaplan.domain.models import (
    CompoundShift,
    EntryType,
    ShiftRequirement,
    ShiftType,
    WeekAssignment,
    Weekday,
    is_weekend,
)
from rotaplan.domain.policies import GermanWorkingTimePolicy, WorkingTimePolicy
from rotaplan.scheduling.calendar_classifier import CalendarClassifier


class ValidationErrorType(Enum):
    """Types of validation errors."""

    BREAK_TOO_SHORT = "break_too_short"
    DAILY_LIMIT_EXCEEDED = "daily_limit_exceeded"
    END_BEFORE_START = "end_before_start"
    MISSING_WITHDRAWAL_HOURS = "missing_withdrawal_hours"
    WEEKEND_SHIFT_ON_WEEKDAY = "weekend_shift_on_weekday"
    UNDERSTAFFED_WEEK = "understaffed_week"


@dataclass
class ValidationError:
    """A single validation error."""

    error_type: ValidationErrorType
    message: str
    worker_id: Optional[str] = None
    entry_date: Optional[date] = None
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        parts = [f"[{self.error_type.value}]"]
        if self.worker_id:
            parts.append(f"Worker {self.worker_id}:")
        parts.append(self.message)
        if self.entry_date is not None:
            parts.append(f"({self.entry_date.isoformat()})")
        return " ".join(parts)


@dataclass
class ValidationResult:
    """Result of a validation check."""

    is_valid: bool = True
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, error: ValidationError) -> None:
        """Add an error and mark as invalid."""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str) -> None:
        """Add a warning (doesn't affect validity)."""
        self.warnings.append(warning)

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        for error in other.errors:
            self.add_error(error)
        self.warnings.extend(other.warnings)
        return self

    @property
    def message(self) -> Optional[str]:
        """Message of the first error, if any."""
        return self.errors[0].message if self.errors else None


class ScheduleValidator:
    """Checks time entries and shift assignments against working-time rules.

    Example:
        >>> validator = ScheduleValidator()
        >>> result = validator.validate_break_requirements(9.5, 30)
        >>> result.is_valid
        False
    """

    def __init__(self, policy: Optional[WorkingTimePolicy] = None):
        self.policy = policy or GermanWorkingTimePolicy()

    def validate_break_requirements(
        self,
        actual_hours: float,
        break_minutes: int,
    ) -> ValidationResult:
        """Check the break taken against the legal minimum for the hours worked."""
        result = ValidationResult()
        required = self.policy.required_break_minutes(actual_hours)
        if break_minutes < required:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.BREAK_TOO_SHORT,
                    message=(
                        f"Minimum {required} min break required when working "
                        f"{actual_hours:.2f} hours"
                    ),
                    details={
                        "actual_hours": actual_hours,
                        "break_minutes": break_minutes,
                        "required_minutes": required,
                    },
                )
            )
        return result

    def validate_daily_limit(self, actual_hours: float) -> ValidationResult:
        """Check worked hours against the daily ceiling."""
        result = ValidationResult()
        limit = self.policy.max_daily_hours()
        if actual_hours > limit:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.DAILY_LIMIT_EXCEEDED,
                    message=f"Maximum {limit:g} hours per day allowed",
                    details={"actual_hours": actual_hours, "limit_hours": limit},
                )
            )
        return result

    def validate_time_entry(
        self,
        worker_id: str,
        entry_date: date,
        entry: TimeEntryInput,
        calculation: FlexTimeCalculation,
    ) -> ValidationResult:
        """Run every time-entry check for one recorded day."""
        result = ValidationResult()

        if entry.entry_type == EntryType.FZA_WITHDRAWAL:
            if not entry.withdrawal_hours:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.MISSING_WITHDRAWAL_HOURS,
                        message="Withdrawal requires the number of hours to withdraw",
                        worker_id=worker_id,
                        entry_date=entry_date,
                    )
                )
            return result

        if calculation.gross_hours < 0:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.END_BEFORE_START,
                    message="End time is before start time",
                    worker_id=worker_id,
                    entry_date=entry_date,
                )
            )

        for check in (
            self.validate_break_requirements(calculation.actual_hours, entry.break_minutes),
            self.validate_daily_limit(calculation.actual_hours),
        ):
            for error in check.errors:
                error.worker_id = worker_id
                error.entry_date = entry_date
            result.merge(check)

        return result

    def validate_weekend_shift(
        self,
        shift_type: Optional[ShiftType],
        shift_date: date,
        classifier: CalendarClassifier,
        country_code: Optional[str] = None,
    ) -> ValidationResult:
        """Weekend shifts may only fall on Saturday, Sunday or a public holiday."""
        result = ValidationResult()
        if shift_type != ShiftType.WEEKEND:
            return result
        if is_weekend(shift_date):
            return result
        if classifier.is_central_public_holiday(shift_date, country_code):
            return result

        day_name = Weekday.of(shift_date).day_name.capitalize()
        result.add_error(
            ValidationError(
                error_type=ValidationErrorType.WEEKEND_SHIFT_ON_WEEKDAY,
                message=(
                    "Weekend shifts can only be assigned on weekends or public "
                    f"holidays. {day_name} is a regular weekday."
                ),
                entry_date=shift_date,
            )
        )
        return result

    def validate_staffing(
        self,
        requirements: Iterable[ShiftRequirement],
        assignments: Iterable[WeekAssignment],
        cycle_length_weeks: int,
    ) -> ValidationResult:
        """Report cycle weeks where fewer workers are assigned than required.

        Compound assignments count toward both their weekday shift type and
        the weekend requirement.
        """
        result = ValidationResult()
        requirements = list(requirements)
        assignments = list(assignments)

        for week in range(1, cycle_length_weeks + 1):
            staffed: dict[ShiftType, set[str]] = {}
            for assignment in assignments:
                if assignment.week_number != week or not assignment.worker_id:
                    continue
                try:
                    duty = assignment.duty
                except ValueError:
                    result.add_warning(
                        f"Week {week}: unknown duty {assignment.shift_type!r} "
                        f"for worker {assignment.worker_id}"
                    )
                    continue
                if duty is None:
                    continue
                if isinstance(duty, CompoundShift):
                    covered = (duty.weekday_part, duty.weekend_part)
                else:
                    covered = (duty,)
                for shift_type in covered:
                    staffed.setdefault(shift_type, set()).add(assignment.worker_id)

            for requirement in requirements:
                workers = staffed.get(requirement.shift_type, set())
                if len(workers) < requirement.staff_required:
                    result.add_error(
                        ValidationError(
                            error_type=ValidationErrorType.UNDERSTAFFED_WEEK,
                            message=(
                                f"Week {week}: {len(workers)} of "
                                f"{requirement.staff_required} {requirement.shift_type.value} "
                                "shifts assigned"
                            ),
                            details={
                                "week_number": week,
                                "shift_type": requirement.shift_type.value,
                                "required": requirement.staff_required,
                                "assigned": len(workers),
                                "assigned_workers": sorted(workers),
                            },
                        )
                    )

        return result
