"""Tests for bulk scheduling."""

import logging
from dataclasses import dataclass
from datetime import date, time

import pytest

from rotaplan.domain.models import (
    HolidayRecord,
    ShiftTimeDefinition,
    ShiftType,
    TeamMember,
    Weekday,
    WorkerProfile,
)
from rotaplan.errors import StoreError
from rotaplan.scheduling.bulk_scheduler import BulkMode, BulkScheduleConfig, BulkScheduler
from rotaplan.scheduling.shift_resolver import ShiftTimeResolver
from rotaplan.store.memory import InMemoryStore

MONDAY = date(2024, 1, 1)
SUNDAY = date(2024, 1, 7)
WEEKEND = frozenset({Weekday.SATURDAY, Weekday.SUNDAY})


def definition(def_id, shift_type, **scope):
    return ShiftTimeDefinition(def_id, shift_type, time(8, 0), time(16, 0), **scope)


@pytest.fixture
def store():
    store = InMemoryStore()
    for worker_id, team_id, region in [("W1", "T1", "BY"), ("W2", "T1", "BE"), ("W3", "T2", None)]:
        store.add_profile(WorkerProfile(worker_id, country_code="DE", region_code=region))
        store.team_members.append(TeamMember(worker_id, team_id, "DE", region))
    store.definitions.extend([
        definition("early-t1", ShiftType.EARLY, team_id="T1"),
        definition("weekend-t1-sun", ShiftType.WEEKEND, team_id="T1",
                   days_of_week=frozenset({Weekday.SUNDAY})),
        definition("weekend-global", ShiftType.WEEKEND),
        definition("weekend-t2", ShiftType.WEEKEND, team_id="T2"),
    ])
    store.holidays.extend([
        HolidayRecord(date(2024, 1, 3), "Company Day", country_code="DE"),
        HolidayRecord(date(2024, 1, 2), "Dentist", owner_id="W2", is_public=False),
    ])
    return store


def config(**overrides):
    values = {
        "team_id": "T1",
        "start_date": MONDAY,
        "end_date": SUNDAY,
        "shift_definition_id": "early-t1",
        "worker_ids": ["W1", "W2"],
    }
    values.update(overrides)
    return BulkScheduleConfig(**values)


def by_date(entries, worker_id):
    return {e.date: e for e in entries if e.worker_id == worker_id}


class TestBulkScheduleConfig:
    """Tests for BulkScheduleConfig."""

    def test_dates_inclusive(self):
        assert len(config().dates) == 7

    def test_end_before_start(self):
        with pytest.raises(ValueError):
            config(end_date=date(2023, 12, 31))


class TestBulkScheduler:
    """Tests for entry building."""

    def test_selected_workers(self, store):
        entries = BulkScheduler(store).build_entries(config(excluded_days=WEEKEND), "planner")

        assert len(entries) == 10
        first = entries[0]
        assert first.worker_id == "W1"
        assert first.team_id == "T1"
        assert first.shift_type == ShiftType.EARLY
        assert first.shift_time_definition_id == "early-t1"
        assert first.notes == "Bulk generated"
        assert first.created_by == "planner"
        assert first.is_work

    def test_team_mode_uses_members(self, store):
        entries = BulkScheduler(store).build_entries(
            config(mode=BulkMode.TEAM, worker_ids=["W3"]), "planner"
        )
        assert {e.worker_id for e in entries} == {"W1", "W2"}
        assert len(entries) == 14

    def test_excluded_days(self, store):
        entries = BulkScheduler(store).build_entries(
            config(excluded_days=frozenset({Weekday.MONDAY, Weekday.SATURDAY})), "planner"
        )
        dates = set(by_date(entries, "W1"))
        assert MONDAY not in dates
        assert date(2024, 1, 6) not in dates
        assert SUNDAY in dates

    def test_weekend_detection_overrides_exclusion(self, store):
        entries = BulkScheduler(store).build_entries(
            config(excluded_days=WEEKEND, auto_detect_weekends=True), "planner"
        )
        w1 = by_date(entries, "W1")

        saturday, sunday = w1[date(2024, 1, 6)], w1[SUNDAY]
        assert saturday.shift_type == ShiftType.WEEKEND
        assert saturday.shift_time_definition_id == "weekend-global"
        assert saturday.notes == "Bulk generated - Weekend"
        assert sunday.shift_time_definition_id == "weekend-t1-sun"
        assert w1[date(2024, 1, 3)].shift_type == ShiftType.EARLY

    def test_weekend_override(self, store):
        entries = BulkScheduler(store).build_entries(
            config(auto_detect_weekends=True, weekend_override_id="weekend-t2"), "planner"
        )
        w1 = by_date(entries, "W1")
        assert w1[SUNDAY].shift_time_definition_id == "weekend-t2"
        assert w1[MONDAY].shift_time_definition_id == "early-t1"

    def test_holiday_detection(self, store):
        entries = BulkScheduler(store).build_entries(
            config(
                excluded_days=frozenset({Weekday.WEDNESDAY}) | WEEKEND,
                auto_detect_holidays=True,
            ),
            "planner",
        )
        w2 = by_date(entries, "W2")

        holiday = w2[date(2024, 1, 3)]
        assert holiday.shift_type == ShiftType.WEEKEND
        assert holiday.shift_time_definition_id == "weekend-global"
        assert holiday.notes == "Bulk generated - Company Day"
        # Weekends are included too but keep the selected shift
        assert w2[SUNDAY].shift_time_definition_id == "early-t1"

    def test_holiday_not_detected_by_default(self, store):
        entries = BulkScheduler(store).build_entries(
            config(excluded_days=frozenset({Weekday.WEDNESDAY})), "planner"
        )
        assert date(2024, 1, 3) not in by_date(entries, "W1")

    def test_skip_workers_with_personal_holiday(self, store):
        scheduler = BulkScheduler(store)
        kept = scheduler.build_entries(config(), "planner")
        skipped = scheduler.build_entries(config(skip_workers_with_holidays=True), "planner")

        assert date(2024, 1, 2) in by_date(kept, "W2")
        assert date(2024, 1, 2) not in by_date(skipped, "W2")
        assert date(2024, 1, 2) in by_date(skipped, "W1")

    def test_rotation_one_worker_per_day(self, store):
        entries = BulkScheduler(store).build_entries(
            config(mode=BulkMode.ROTATION, worker_ids=["W1", "W2", "W3"], excluded_days=WEEKEND),
            "planner",
        )
        assert [e.worker_id for e in entries] == ["W1", "W2", "W3", "W1", "W2"]
        assert all(e.notes == "Bulk generated (rotation)" for e in entries)

    def test_rotation_skipped_day_not_reassigned(self, store):
        entries = BulkScheduler(store).build_entries(
            config(
                mode=BulkMode.ROTATION,
                worker_ids=["W1", "W2", "W3"],
                excluded_days=WEEKEND,
                skip_workers_with_holidays=True,
            ),
            "planner",
        )
        assert [e.date.day for e in entries] == [1, 3, 4, 5]

    def test_unknown_definition(self, store, caplog):
        with caplog.at_level(logging.WARNING):
            entries = BulkScheduler(store).build_entries(
                config(shift_definition_id="gone", worker_ids=["W1"]), "planner"
            )

        assert all(e.shift_type == ShiftType.NORMAL for e in entries)
        assert all(e.shift_time_definition_id is None for e in entries)
        assert "gone" in caplog.text

    def test_no_definition_selected(self, store):
        entries = BulkScheduler(store).build_entries(
            config(shift_definition_id=None, auto_detect_weekends=True), "planner"
        )
        assert {e.shift_type for e in entries} == {ShiftType.NORMAL}
        assert {e.shift_time_definition_id for e in entries} == {None}

    def test_no_workers(self, store, caplog):
        with caplog.at_level(logging.WARNING):
            entries = BulkScheduler(store).build_entries(config(worker_ids=[]), "planner")
        assert entries == []
        assert "no workers" in caplog.text


class TestWeekendDefinitionLookup:
    """Tests for ShiftTimeResolver.weekend_definition_for."""

    @pytest.fixture
    def resolver(self, store):
        return ShiftTimeResolver(store.definitions)

    def test_team_definition_matching_day(self, resolver):
        assert resolver.weekend_definition_for("T1", Weekday.SUNDAY).id == "weekend-t1-sun"

    def test_unscoped_when_team_day_does_not_match(self, resolver):
        assert resolver.weekend_definition_for("T1", Weekday.SATURDAY).id == "weekend-global"

    def test_team_before_unscoped(self, resolver):
        assert resolver.weekend_definition_for("T2", Weekday.SATURDAY).id == "weekend-t2"

    def test_first_candidate_when_no_day_matches(self):
        resolver = ShiftTimeResolver([
            definition("sun-only", ShiftType.WEEKEND, team_id="T1",
                       days_of_week=frozenset({Weekday.SUNDAY})),
        ])
        assert resolver.weekend_definition_for("T1", Weekday.SATURDAY).id == "sun-only"

    def test_none_without_weekend_definitions(self):
        resolver = ShiftTimeResolver([definition("early", ShiftType.EARLY)])
        assert resolver.weekend_definition_for("T1", Weekday.SATURDAY) is None


@dataclass
class FailingStore(InMemoryStore):
    """Store whose second batch write fails."""

    def upsert_schedule_entries(self, entries):
        if self.write_calls == 1:
            self.write_calls += 1
            raise StoreError("connection reset")
        super().upsert_schedule_entries(entries)


class TestBulkWrites:
    """Tests for writing a bulk run."""

    def test_schedule_writes_batches(self, store):
        result = BulkScheduler(store).schedule(
            config(excluded_days=WEEKEND, batch_size=4), created_by="planner"
        )

        assert result.success
        assert result.entries_created == 10
        assert store.write_calls == 3
        assert len(store.schedule_entries) == 10

    def test_rerun_upserts(self, store):
        scheduler = BulkScheduler(store)
        scheduler.schedule(config(), created_by="planner")
        scheduler.schedule(config(), created_by="planner")
        assert len(store.schedule_entries) == 14

    def test_failed_batch_reports_partial_count(self, store):
        failing = FailingStore(
            definitions=store.definitions,
            holidays=store.holidays,
            profiles=store.profiles,
            team_members=store.team_members,
        )
        result = BulkScheduler(failing).schedule(config(batch_size=4), created_by="planner")

        assert not result.success
        assert result.entries_created == 4
        assert result.error == "connection reset"
        assert len(failing.schedule_entries) == 4
