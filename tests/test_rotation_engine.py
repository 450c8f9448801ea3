"""Tests for rotation pattern expansion."""

from datetime import date, timedelta

import pytest

from rotaplan.domain.models import ActivityType, AvailabilityStatus, ShiftType
from rotaplan.domain.patterns import FixedDaysPattern, parse_pattern
from rotaplan.scheduling.rotation_engine import (
    ExpansionOptions,
    RotationPatternEngine,
    preview_pattern,
)

E, L, N = ShiftType.EARLY, ShiftType.LATE, ShiftType.NORMAL


def days_from(start: date, count: int) -> list[date]:
    return [start + timedelta(days=i) for i in range(count)]


def shifts(entries):
    return [e.shift_type for e in entries]


@pytest.fixture
def engine():
    return RotationPatternEngine()


class TestFixedDays:
    """Tests for fixed work/off cycles."""

    @pytest.fixture
    def four_on_four_off(self):
        return FixedDaysPattern(work_days=4, off_days=4, shift_type=ShiftType.EARLY)

    def test_four_on_four_off(self, engine, four_on_four_off):
        entries = engine.expand(four_on_four_off, "W1", "T1", days_from(date(2024, 1, 1), 9))
        assert shifts(entries) == [E, E, E, E, None, None, None, None, E]

    def test_entry_fields(self, engine, four_on_four_off):
        entries = engine.expand(four_on_four_off, "W1", "T1", days_from(date(2024, 1, 1), 5))
        work, off = entries[0], entries[4]
        assert work.worker_id == "W1"
        assert work.team_id == "T1"
        assert work.activity_type == ActivityType.WORK
        assert work.availability_status == AvailabilityStatus.AVAILABLE
        assert off.activity_type == ActivityType.OTHER
        assert off.availability_status == AvailabilityStatus.UNAVAILABLE
        assert off.notes is None

    def test_skip_weekends_advances_cycle(self, engine):
        """Skipped dates consume a cycle position by default."""
        pattern = FixedDaysPattern(work_days=2, off_days=1, shift_type=ShiftType.LATE)
        entries = engine.expand(
            pattern, "W1", "T1",
            days_from(date(2024, 1, 5), 5),  # Fri..Tue
            ExpansionOptions(skip_weekends=True),
        )
        assert shifts(entries) == [L, None, None, L, L]
        assert [e.notes for e in entries[1:3]] == ["Weekend", "Weekend"]

    def test_skip_weekends_without_advancing(self, engine):
        pattern = FixedDaysPattern(work_days=2, off_days=1, shift_type=ShiftType.LATE)
        entries = engine.expand(
            pattern, "W1", "T1",
            days_from(date(2024, 1, 5), 5),
            ExpansionOptions(skip_weekends=True, skipped_days_advance_cycle=False),
        )
        assert shifts(entries) == [L, None, None, L, None]

    def test_skip_holidays(self, engine, four_on_four_off):
        entries = engine.expand(
            four_on_four_off, "W1", "T1",
            days_from(date(2024, 1, 1), 3),
            ExpansionOptions(skip_holidays=True, holidays=frozenset({date(2024, 1, 2)})),
        )
        assert shifts(entries) == [E, None, E]
        assert entries[1].notes == "Holiday"
        assert entries[1].availability_status == AvailabilityStatus.UNAVAILABLE

    def test_holidays_ignored_without_flag(self, engine, four_on_four_off):
        entries = engine.expand(
            four_on_four_off, "W1", "T1",
            days_from(date(2024, 1, 1), 3),
            ExpansionOptions(holidays=frozenset({date(2024, 1, 2)})),
        )
        assert shifts(entries) == [E, E, E]

    def test_holiday_on_weekend_noted_as_holiday(self, engine, four_on_four_off):
        entries = engine.expand(
            four_on_four_off, "W1", "T1",
            [date(2024, 1, 6)],
            ExpansionOptions(
                skip_weekends=True,
                skip_holidays=True,
                holidays=frozenset({date(2024, 1, 6)}),
            ),
        )
        assert entries[0].notes == "Holiday"


class TestOtherPatterns:
    """Tests for sequence, weekly and custom patterns."""

    def test_sequence(self, engine):
        pattern = parse_pattern({
            "type": "repeating_sequence",
            "sequence": [
                {"shift_type": "early", "days": 2},
                {"shift_type": "late", "days": 2},
                {"shift_type": "off", "days": 1},
            ],
        })
        entries = engine.expand(pattern, "W1", "T1", days_from(date(2024, 1, 1), 7))
        assert shifts(entries) == [E, E, L, L, None, E, E]

    def test_sequence_ignores_skip_options(self, engine):
        pattern = parse_pattern({
            "type": "repeating_sequence",
            "sequence": [{"shift_type": "normal", "days": 1}],
        })
        entries = engine.expand(
            pattern, "W1", "T1",
            days_from(date(2024, 1, 6), 2),
            ExpansionOptions(skip_weekends=True),
        )
        assert shifts(entries) == [N, N]

    def test_weekly(self, engine):
        pattern = {"type": "weekly_pattern", "pattern": {"monday": "early", "friday": "late"}}
        entries = engine.expand(pattern, "W1", "T1", days_from(date(2024, 1, 1), 7))
        assert shifts(entries) == [E, None, None, None, L, None, None]

    def test_weekly_keeps_input_order(self, engine):
        pattern = {"type": "weekly_pattern", "pattern": {"monday": "early"}}
        dates = list(reversed(days_from(date(2024, 1, 1), 7)))
        entries = engine.expand(pattern, "W1", "T1", dates)
        assert [e.date for e in entries] == dates
        assert shifts(entries)[-1] == E

    def test_custom(self, engine):
        pattern = {
            "type": "custom",
            "cycle_length_days": 3,
            "days": [{"day": 0, "shift_type": "normal"}, {"day": 2, "shift_type": "late"}],
        }
        entries = engine.expand(pattern, "W1", "T1", days_from(date(2024, 1, 1), 6))
        assert shifts(entries) == [N, None, L, N, None, L]

    def test_no_dates(self, engine):
        pattern = FixedDaysPattern(work_days=1, off_days=1, shift_type=ShiftType.EARLY)
        assert engine.expand(pattern, "W1", "T1", []) == []


class TestPreview:
    """Tests for preview_pattern."""

    def test_preview(self):
        pattern = FixedDaysPattern(work_days=4, off_days=4, shift_type=ShiftType.EARLY)
        rows = preview_pattern(pattern, date(2024, 1, 1), days=8)
        assert len(rows) == 8
        assert rows[0].day == 0
        assert rows[0].label == "Mon"
        assert rows[0].shift_type == ShiftType.EARLY
        assert rows[7].shift_type is None

    def test_default_length(self):
        pattern = FixedDaysPattern(work_days=1, off_days=0, shift_type=ShiftType.NORMAL)
        assert len(preview_pattern(pattern, date(2024, 1, 1))) == 28
