"""Tests for working-time policies."""

from dataclasses import dataclass
from datetime import date, time

import pytest

from rotaplan.accounting.flextime import FlexTimeCalculator, TimeEntryInput
from rotaplan.domain.policies import GermanWorkingTimePolicy, WorkingTimePolicy
from rotaplan.validation.validator import ScheduleValidator


class TestGermanWorkingTimePolicy:
    """Tests for GermanWorkingTimePolicy."""

    @pytest.fixture
    def policy(self):
        return GermanWorkingTimePolicy()

    @pytest.mark.parametrize(
        "work_date,expected",
        [
            (date(2024, 1, 15), 8.0),  # Monday
            (date(2024, 1, 18), 8.0),  # Thursday
            (date(2024, 1, 19), 6.0),  # Friday
            (date(2024, 1, 20), 0.0),  # Saturday
            (date(2024, 1, 21), 0.0),  # Sunday
        ],
    )
    def test_target_hours(self, policy, work_date, expected):
        assert policy.target_hours(work_date) == expected

    def test_break_deduction_threshold(self, policy):
        assert policy.break_deduction_minutes(360, 30) == 0
        assert policy.break_deduction_minutes(361, 30) == 30
        assert policy.break_deduction_minutes(540, 0) == 0

    @pytest.mark.parametrize(
        "hours,expected",
        [(6.0, 0), (6.01, 30), (9.0, 30), (9.01, 45)],
    )
    def test_required_break(self, policy, hours, expected):
        assert policy.required_break_minutes(hours) == expected

    def test_limits(self, policy):
        assert policy.max_daily_hours() == 10.0
        assert policy.default_carryover_limit() == 40.0


class TestCustomPolicy:
    """Tests for plugging in a different policy."""

    @dataclass
    class FortyHourPolicy(GermanWorkingTimePolicy):
        friday_target_hours: float = 8.0
        daily_limit_hours: float = 12.0

    def test_abstract_base(self):
        with pytest.raises(TypeError):
            WorkingTimePolicy()

    def test_calculator_uses_policy(self):
        calculator = FlexTimeCalculator(self.FortyHourPolicy())
        result = calculator.calculate(
            date(2024, 1, 19),
            TimeEntryInput(start_time=time(8), end_time=time(16), break_minutes=0),
        )
        assert result.target_hours == 8.0
        assert result.flex_delta == 0.0

    def test_validator_uses_policy(self):
        validator = ScheduleValidator(self.FortyHourPolicy())
        assert validator.validate_daily_limit(11.0).is_valid
