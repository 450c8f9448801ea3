"""Tests for rotation pattern parsing and summaries."""

import pytest
from pydantic import ValidationError

from rotaplan.domain.models import ShiftType, Weekday
from rotaplan.domain.patterns import (
    CustomPattern,
    FixedDaysPattern,
    RepeatingSequencePattern,
    WeeklyPattern,
    parse_pattern,
    pattern_summary,
)


class TestParsePattern:
    """Tests for parse_pattern."""

    def test_fixed_days_nested_cycle(self):
        pattern = parse_pattern({
            "type": "fixed_days",
            "cycle": {"work_days": 4, "off_days": 4, "shift_type": "early"},
        })
        assert isinstance(pattern, FixedDaysPattern)
        assert pattern.work_days == 4
        assert pattern.cycle_length == 8
        assert pattern.shift_type == ShiftType.EARLY

    def test_fixed_days_flat(self):
        pattern = parse_pattern(
            {"type": "fixed_days", "work_days": 5, "off_days": 2, "shift_type": "normal"}
        )
        assert pattern.cycle_length == 7

    def test_fixed_days_empty_cycle_rejected(self):
        with pytest.raises(ValidationError):
            parse_pattern(
                {"type": "fixed_days", "work_days": 0, "off_days": 0, "shift_type": "early"}
            )

    def test_sequence_off_step(self):
        pattern = parse_pattern({
            "type": "repeating_sequence",
            "sequence": [
                {"shift_type": "early", "days": 2},
                {"shift_type": "off", "days": 1},
            ],
        })
        assert isinstance(pattern, RepeatingSequencePattern)
        assert pattern.sequence[0].shift_type == ShiftType.EARLY
        assert pattern.sequence[1].shift_type is None

    def test_sequence_requires_steps(self):
        with pytest.raises(ValidationError):
            parse_pattern({"type": "repeating_sequence", "sequence": []})

    def test_sequence_step_days_positive(self):
        with pytest.raises(ValidationError):
            parse_pattern({
                "type": "repeating_sequence",
                "sequence": [{"shift_type": "late", "days": 0}],
            })

    def test_weekly_normalizes_days(self):
        """Day names are case-insensitive and values may be objects."""
        pattern = parse_pattern({
            "type": "weekly_pattern",
            "pattern": {
                "Monday": {"shift_type": "early"},
                "friday": "late",
                "sunday": "off",
            },
        })
        assert isinstance(pattern, WeeklyPattern)
        assert pattern.shift_for(Weekday.MONDAY) == ShiftType.EARLY
        assert pattern.shift_for(Weekday.FRIDAY) == ShiftType.LATE
        assert pattern.shift_for(Weekday.SUNDAY) is None
        assert pattern.shift_for(Weekday.TUESDAY) is None

    def test_weekly_unknown_day(self):
        with pytest.raises(ValidationError):
            parse_pattern({"type": "weekly_pattern", "pattern": {"funday": "early"}})

    def test_custom(self):
        pattern = parse_pattern({
            "type": "custom",
            "cycle_length_days": 3,
            "days": [{"day": 0, "shift_type": "normal"}, {"day": 2, "shift_type": "late"}],
        })
        assert isinstance(pattern, CustomPattern)
        assert pattern.shift_for(0) == ShiftType.NORMAL
        assert pattern.shift_for(1) is None

    def test_unknown_type(self):
        with pytest.raises(ValidationError):
            parse_pattern({"type": "lunar", "phase": 3})

    def test_unknown_shift_type(self):
        with pytest.raises(ValidationError):
            parse_pattern(
                {"type": "fixed_days", "work_days": 1, "off_days": 1, "shift_type": "night"}
            )


class TestPatternSummary:
    """Tests for pattern_summary."""

    def test_fixed_days(self):
        pattern = FixedDaysPattern(work_days=4, off_days=4, shift_type=ShiftType.EARLY)
        assert pattern_summary(pattern) == "4-on-4-off"

    def test_sequence(self):
        pattern = parse_pattern({
            "type": "repeating_sequence",
            "sequence": [
                {"shift_type": "early", "days": 2},
                {"shift_type": "late", "days": 2},
                {"shift_type": "off", "days": 1},
            ],
        })
        assert pattern_summary(pattern) == "2E-2L-1O"

    def test_weekly(self):
        assert pattern_summary(WeeklyPattern()) == "Weekly Pattern"

    def test_custom(self):
        assert pattern_summary(CustomPattern(cycle_length_days=10)) == "10 day cycle"
