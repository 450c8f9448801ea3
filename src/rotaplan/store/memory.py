"""In-memory implementation of the data store.

Backs the command-line demo and the test suite. Upserts honour the same
natural keys the external store uses as conflict targets.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Iterable, Optional

from rotaplan.domain.models import (
    DailyTimeEntry,
    HolidayRecord,
    ManagerApproval,
    MonthlyFlexSummary,
    Partnership,
    RosterConfig,
    RosterStatus,
    ScheduleEntry,
    ShiftTimeDefinition,
    ShiftType,
    TeamMember,
    WeekAssignment,
    WorkerLocale,
    WorkerProfile,
)
from rotaplan.errors import RosterNotFoundError
from rotaplan.store.base import ScheduleStore


@dataclass
class InMemoryStore(ScheduleStore):
    """Dict-backed store keyed by the external store's natural keys."""

    definitions: list[ShiftTimeDefinition] = field(default_factory=list)
    holidays: list[HolidayRecord] = field(default_factory=list)
    profiles: dict[str, WorkerProfile] = field(default_factory=dict)
    team_members: list[TeamMember] = field(default_factory=list)
    partnerships: dict[str, Partnership] = field(default_factory=dict)
    rosters: dict[str, RosterConfig] = field(default_factory=dict)
    week_assignments: dict[str, list[WeekAssignment]] = field(default_factory=dict)
    approvals: dict[str, list[ManagerApproval]] = field(default_factory=dict)
    schedule_entries: dict[tuple[str, str, date], ScheduleEntry] = field(default_factory=dict)
    time_entries: dict[tuple[str, date], DailyTimeEntry] = field(default_factory=dict)
    monthly_summaries: dict[tuple[str, int, int], MonthlyFlexSummary] = field(
        default_factory=dict
    )
    write_calls: int = 0

    # Setup helpers

    def add_roster(
        self,
        roster: RosterConfig,
        assignments: Iterable[WeekAssignment] = (),
        approvals: Iterable[ManagerApproval] = (),
    ) -> None:
        self.rosters[roster.id] = roster
        self.week_assignments[roster.id] = list(assignments)
        self.approvals[roster.id] = list(approvals)

    def add_profile(self, profile: WorkerProfile) -> None:
        self.profiles[profile.worker_id] = profile

    # Reads

    def get_shift_time_definitions(
        self, shift_type: Optional[ShiftType] = None
    ) -> list[ShiftTimeDefinition]:
        return [
            d for d in self.definitions if shift_type is None or d.shift_type == shift_type
        ]

    def get_shift_time_definition(self, definition_id: str) -> Optional[ShiftTimeDefinition]:
        for definition in self.definitions:
            if definition.id == definition_id:
                return definition
        return None

    def get_holidays(
        self,
        start: date,
        end: date,
        country_codes: Optional[Iterable[str]] = None,
        owner_ids: Optional[Iterable[str]] = None,
    ) -> list[HolidayRecord]:
        countries = set(country_codes) if country_codes is not None else None
        owners = set(owner_ids) if owner_ids is not None else None
        result = []
        for holiday in self.holidays:
            if not start <= holiday.date <= end:
                continue
            if countries is None and owners is None:
                result.append(holiday)
            elif holiday.is_central and countries and holiday.country_code in countries:
                result.append(holiday)
            elif not holiday.is_central and owners and holiday.owner_id in owners:
                result.append(holiday)
        return result

    def get_worker_locales(self, worker_ids: Iterable[str]) -> dict[str, WorkerLocale]:
        return {
            worker_id: self.profiles[worker_id].locale
            for worker_id in worker_ids
            if worker_id in self.profiles
        }

    def get_roster(self, roster_id: str) -> Optional[RosterConfig]:
        return self.rosters.get(roster_id)

    def get_week_assignments(self, roster_id: str) -> list[WeekAssignment]:
        return list(self.week_assignments.get(roster_id, []))

    def get_partnership(self, partnership_id: str) -> Optional[Partnership]:
        return self.partnerships.get(partnership_id)

    def get_team_members(self, team_ids: Iterable[str]) -> list[TeamMember]:
        wanted = set(team_ids)
        return [m for m in self.team_members if m.team_id in wanted]

    def get_roster_approvals(self, roster_id: str) -> list[ManagerApproval]:
        return list(self.approvals.get(roster_id, []))

    def get_monthly_summary(
        self, worker_id: str, year: int, month: int
    ) -> Optional[MonthlyFlexSummary]:
        return self.monthly_summaries.get((worker_id, year, month))

    def get_monthly_summaries(self, worker_id: str) -> list[MonthlyFlexSummary]:
        summaries = [s for s in self.monthly_summaries.values() if s.worker_id == worker_id]
        return sorted(summaries, key=lambda s: s.period)

    def get_time_entries(self, worker_id: str, start: date, end: date) -> list[DailyTimeEntry]:
        entries = [
            e
            for (owner, entry_date), e in self.time_entries.items()
            if owner == worker_id and start <= entry_date <= end
        ]
        return sorted(entries, key=lambda e: e.entry_date)

    def get_time_entry(self, worker_id: str, entry_date: date) -> Optional[DailyTimeEntry]:
        return self.time_entries.get((worker_id, entry_date))

    def get_carryover_limit(self, worker_id: str) -> Optional[float]:
        profile = self.profiles.get(worker_id)
        return profile.flextime_carryover_limit if profile else None

    # Writes

    def upsert_schedule_entries(self, entries: list[ScheduleEntry]) -> None:
        self.write_calls += 1
        for entry in entries:
            self.schedule_entries[entry.natural_key] = entry

    def update_roster_status(self, roster_id: str, status: RosterStatus) -> None:
        roster = self.rosters.get(roster_id)
        if roster is None:
            raise RosterNotFoundError(roster_id)
        self.rosters[roster_id] = replace(roster, status=status)

    def upsert_monthly_summary(self, summary: MonthlyFlexSummary) -> None:
        self.monthly_summaries[(summary.worker_id, summary.year, summary.month)] = summary

    def upsert_time_entry(self, entry: DailyTimeEntry) -> None:
        self.time_entries[entry.natural_key] = entry

    def delete_time_entry(self, worker_id: str, entry_date: date) -> None:
        self.time_entries.pop((worker_id, entry_date), None)
