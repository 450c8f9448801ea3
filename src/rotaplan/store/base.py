"""Data-access interface consumed by the scheduling core.

The persistent store (relational tables with row-level policies) is an
external collaborator. Generators and the flextime ledger only talk to it
through this interface; implementations raise ``StoreError`` when a read or
write fails.
"""

from abc import ABC, abstractmethod
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
)


class ScheduleStore(ABC):
    """Abstract base class for the external data store."""

    # Reads

    @abstractmethod
    def get_shift_time_definitions(
        self, shift_type: Optional[ShiftType] = None
    ) -> list[ShiftTimeDefinition]:
        """Shift-time definitions, newest first, optionally for one shift type."""
        pass

    @abstractmethod
    def get_shift_time_definition(self, definition_id: str) -> Optional[ShiftTimeDefinition]:
        """A single definition by id, or None."""
        pass

    @abstractmethod
    def get_holidays(
        self,
        start: date,
        end: date,
        country_codes: Optional[Iterable[str]] = None,
        owner_ids: Optional[Iterable[str]] = None,
    ) -> list[HolidayRecord]:
        """Holidays between start and end (inclusive).

        Returns central holidays of the given countries plus personal
        holidays of the given owners. With neither filter, all holidays.
        """
        pass

    @abstractmethod
    def get_worker_locales(self, worker_ids: Iterable[str]) -> dict[str, WorkerLocale]:
        """Country/region per worker id (missing workers are omitted)."""
        pass

    @abstractmethod
    def get_roster(self, roster_id: str) -> Optional[RosterConfig]:
        pass

    @abstractmethod
    def get_week_assignments(self, roster_id: str) -> list[WeekAssignment]:
        pass

    @abstractmethod
    def get_partnership(self, partnership_id: str) -> Optional[Partnership]:
        pass

    @abstractmethod
    def get_team_members(self, team_ids: Iterable[str]) -> list[TeamMember]:
        """Members of the given teams, with their locale."""
        pass

    @abstractmethod
    def get_roster_approvals(self, roster_id: str) -> list[ManagerApproval]:
        pass

    @abstractmethod
    def get_monthly_summary(
        self, worker_id: str, year: int, month: int
    ) -> Optional[MonthlyFlexSummary]:
        pass

    @abstractmethod
    def get_monthly_summaries(self, worker_id: str) -> list[MonthlyFlexSummary]:
        """All stored summaries of a worker, oldest month first."""
        pass

    @abstractmethod
    def get_time_entries(self, worker_id: str, start: date, end: date) -> list[DailyTimeEntry]:
        """Daily time entries between start and end (inclusive), by date."""
        pass

    @abstractmethod
    def get_time_entry(self, worker_id: str, entry_date: date) -> Optional[DailyTimeEntry]:
        pass

    @abstractmethod
    def get_carryover_limit(self, worker_id: str) -> Optional[float]:
        """The worker's configured flextime carryover ceiling, if any."""
        pass

    # Writes

    @abstractmethod
    def upsert_schedule_entries(self, entries: list[ScheduleEntry]) -> None:
        """Insert or replace entries on their (worker, team, date) key."""
        pass

    @abstractmethod
    def update_roster_status(self, roster_id: str, status: RosterStatus) -> None:
        pass

    @abstractmethod
    def upsert_monthly_summary(self, summary: MonthlyFlexSummary) -> None:
        """Insert or replace a summary on its (worker, year, month) key."""
        pass

    @abstractmethod
    def upsert_time_entry(self, entry: DailyTimeEntry) -> None:
        """Insert or replace an entry on its (worker, date) key."""
        pass

    @abstractmethod
    def delete_time_entry(self, worker_id: str, entry_date: date) -> None:
        pass
