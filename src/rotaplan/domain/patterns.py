"""Rotation pattern configurations.

A rotation pattern is a tagged union of four variants. Each variant is an
immutable pydantic model; ``parse_pattern`` validates the store's JSON shape
into the matching variant using the ``type`` discriminator.
"""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    TypeAdapter,
    field_validator,
    model_validator,
)

from rotaplan.domain.models import ShiftType, Weekday

WEEKDAY_NAMES = tuple(day.day_name for day in Weekday)


def _off_to_none(value: Any) -> Any:
    if value == "off" or value == "":
        return None
    return value


# "off" and empty labels mean no shift
OptionalShift = Annotated[Optional[ShiftType], BeforeValidator(_off_to_none)]


class _PatternModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class SequenceStep(_PatternModel):
    """One step of a repeating sequence: a shift type (or off) held for N days."""

    shift_type: OptionalShift = None
    days: int = Field(ge=1)


class CustomDay(_PatternModel):
    """Shift type (or off) for one day index of a custom cycle."""

    day: int = Field(ge=0)
    shift_type: OptionalShift = None


class FixedDaysPattern(_PatternModel):
    """N work days followed by M off days, e.g. 4-on-4-off."""

    type: Literal["fixed_days"] = "fixed_days"
    work_days: int = Field(ge=0)
    off_days: int = Field(ge=0)
    shift_type: ShiftType

    @model_validator(mode="before")
    @classmethod
    def _flatten_cycle(cls, data: Any) -> Any:
        # The store nests the cycle fields under "cycle".
        if isinstance(data, dict) and isinstance(data.get("cycle"), dict):
            data = {**data["cycle"], **{k: v for k, v in data.items() if k != "cycle"}}
        return data

    @model_validator(mode="after")
    def _check_cycle(self) -> "FixedDaysPattern":
        if self.cycle_length < 1:
            raise ValueError("work_days + off_days must be at least 1")
        return self

    @property
    def cycle_length(self) -> int:
        return self.work_days + self.off_days


class RepeatingSequencePattern(_PatternModel):
    """Ordered steps repeated indefinitely, e.g. Early-Early-Late-Late-Off."""

    type: Literal["repeating_sequence"] = "repeating_sequence"
    sequence: tuple[SequenceStep, ...] = Field(min_length=1)


class WeeklyPattern(_PatternModel):
    """Shift type (or off) per weekday name; missing days are off."""

    type: Literal["weekly_pattern"] = "weekly_pattern"
    pattern: dict[str, Optional[ShiftType]] = Field(default_factory=dict)

    @field_validator("pattern", mode="before")
    @classmethod
    def _normalize_days(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        normalized = {}
        for day_name, day_value in value.items():
            key = str(day_name).lower()
            if key not in WEEKDAY_NAMES:
                raise ValueError(f"Unknown weekday name: {day_name!r}")
            # Store values may be {"shift_type": ...} objects
            if isinstance(day_value, dict):
                day_value = day_value.get("shift_type")
            normalized[key] = _off_to_none(day_value)
        return normalized

    def shift_for(self, day: Weekday) -> Optional[ShiftType]:
        return self.pattern.get(day.day_name)


class CustomPattern(_PatternModel):
    """A cycle of N days with an explicit shift type per day index."""

    type: Literal["custom"] = "custom"
    cycle_length_days: int = Field(ge=1)
    days: tuple[CustomDay, ...] = ()

    def shift_for(self, day_in_cycle: int) -> Optional[ShiftType]:
        for day_config in self.days:
            if day_config.day == day_in_cycle:
                return day_config.shift_type
        return None


RotationPattern = Annotated[
    Union[FixedDaysPattern, RepeatingSequencePattern, WeeklyPattern, CustomPattern],
    Field(discriminator="type"),
]

_pattern_adapter = TypeAdapter(RotationPattern)


def parse_pattern(data: Any) -> RotationPattern:
    """Validate a store-shaped pattern config into its variant.

    Raises:
        pydantic.ValidationError: If the config is malformed.
    """
    return _pattern_adapter.validate_python(data)


def pattern_summary(pattern: RotationPattern) -> str:
    """Short human-readable summary of a pattern, e.g. ``4-on-4-off``."""
    if isinstance(pattern, FixedDaysPattern):
        return f"{pattern.work_days}-on-{pattern.off_days}-off"
    if isinstance(pattern, RepeatingSequencePattern):
        return "-".join(
            f"{step.days}{step.shift_type.value[0].upper() if step.shift_type else 'O'}"
            for step in pattern.sequence
        )
    if isinstance(pattern, WeeklyPattern):
        return "Weekly Pattern"
    if isinstance(pattern, CustomPattern):
        return f"{pattern.cycle_length_days} day cycle"
    raise TypeError(f"Unknown rotation pattern: {type(pattern).__name__}")
