"""Roster generation from cyclic duty assignments.

This module provides the RosterGenerator, which turns a multi-week duty
roster into concrete per-worker, per-day schedule entries and writes them
to the store in fixed-size batches:
- Week windows start on Monday and run until the roster's end date
- The cycle week repeats every ``cycle_length_weeks`` weeks
- Weekend duties cover Saturday and Sunday, other duties Monday to Friday
- Compound duties cover both, with weekend times on Saturday and Sunday

Batches are not wrapped in a transaction. A failing batch stops generation
and earlier batches stay committed; re-runs rely on the store upserting on
(worker, team, date).
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable, Optional

from rotaplan.domain.models import (
    CompoundShift,
    DutyShift,
    RosterConfig,
    RosterStatus,
    ScheduleEntry,
    ShiftType,
    TeamMember,
    WeekAssignment,
)
from rotaplan.errors import PartnershipNotFoundError, RosterNotFoundError, StoreError
from rotaplan.scheduling.calendar_classifier import CalendarClassifier
from rotaplan.scheduling.rotation_engine import work_entry
from rotaplan.scheduling.shift_resolver import ShiftTimeResolver
from rotaplan.store.base import ScheduleStore

logger = logging.getLogger(__name__)

WEEKDAY_OFFSETS = (0, 1, 2, 3, 4)
WEEKEND_OFFSETS = (5, 6)


@dataclass
class RosterGenerationConfig:
    """Configuration for roster generation.

    Attributes:
        batch_size: Entries written per store request.
        default_horizon_weeks: Weeks generated when the roster has no end date.
    """

    batch_size: int = 100
    default_horizon_weeks: int = 52


@dataclass
class GenerationResult:
    """Outcome of writing generated entries to the store.

    Attributes:
        success: True if every batch was written and, for rosters, the
            roster was marked implemented.
        entries_created: Entries committed, including on failure.
        error: Message of the error that stopped generation.
    """

    success: bool
    entries_created: int = 0
    error: Optional[str] = None


@dataclass
class ApprovalStatus:
    """Whether all managers signed off a roster."""

    all_approved: bool
    pending_managers: list[str] = field(default_factory=list)


def roster_end_date(roster: RosterConfig, horizon_weeks: int = 52) -> date:
    """Last date covered by a roster."""
    if roster.end_date is not None:
        return roster.end_date
    return roster.start_date + timedelta(weeks=horizon_weeks)


def week_starts(start: date, end: date) -> list[date]:
    """Mondays of every week from the week containing ``start`` through ``end``."""
    current = start - timedelta(days=start.weekday())
    mondays = []
    while current <= end:
        mondays.append(current)
        current += timedelta(weeks=1)
    return mondays


def write_batches(
    store: ScheduleStore,
    entries: list[ScheduleEntry],
    batch_size: int,
    label: str,
) -> GenerationResult:
    """Upsert entries in fixed-size batches, stopping at the first failure.

    Batches written before a failing one stay committed and are counted.
    """
    entries_created = 0
    for i in range(0, len(entries), batch_size):
        batch = entries[i:i + batch_size]
        try:
            store.upsert_schedule_entries(batch)
        except StoreError as exc:
            logger.error(
                "Batch write failed for %s after %d entries: %s",
                label,
                entries_created,
                exc,
            )
            return GenerationResult(
                success=False, entries_created=entries_created, error=str(exc)
            )
        entries_created += len(batch)
        logger.debug("Wrote batch of %d entries for %s", len(batch), label)
    return GenerationResult(success=True, entries_created=entries_created)


class RosterGenerator:
    """Generates schedule entries for partnership rotation rosters.

    Example:
        >>> generator = RosterGenerator(store)
        >>> result = generator.generate_for_roster("R1", requested_by="planner-1")
        >>> result.success, result.entries_created
        (True, 260)
    """

    def __init__(
        self,
        store: ScheduleStore,
        resolver: Optional[ShiftTimeResolver] = None,
        config: Optional[RosterGenerationConfig] = None,
    ):
        self.store = store
        self.resolver = resolver
        self.config = config or RosterGenerationConfig()

    def generate_for_roster(self, roster_id: str, requested_by: str) -> GenerationResult:
        """Load a roster with its assignments and members, then generate it.

        Raises:
            RosterNotFoundError: If the roster does not exist.
            PartnershipNotFoundError: If the roster's partnership does not exist.
        """
        roster = self.store.get_roster(roster_id)
        if roster is None:
            raise RosterNotFoundError(roster_id)

        partnership = self.store.get_partnership(roster.partnership_id)
        if partnership is None:
            raise PartnershipNotFoundError(roster.partnership_id)

        if not partnership.team_ids:
            logger.warning(
                "Partnership %s of roster %s has no teams, nothing to generate",
                partnership.id,
                roster.id,
            )
            return GenerationResult(success=True, entries_created=0)

        assignments = self.store.get_week_assignments(roster_id)
        members = self.store.get_team_members(partnership.team_ids)
        return self.generate(roster, assignments, members, requested_by)

    def generate(
        self,
        roster: RosterConfig,
        assignments: Iterable[WeekAssignment],
        members: Iterable[TeamMember],
        requested_by: str,
    ) -> GenerationResult:
        """Build entries for a roster and write them in batches.

        Args:
            roster: Roster configuration.
            assignments: Week assignments of the roster.
            members: Members of the partnership's teams.
            requested_by: Worker id recorded as creator of the entries.

        Returns:
            GenerationResult with the number of entries committed.
        """
        members = list(members)
        entries = self.build_entries(roster, assignments, members, requested_by)
        logger.info(
            "Generating roster %s: %d entries for %d members",
            roster.id,
            len(entries),
            len(members),
        )

        result = write_batches(self.store, entries, self.config.batch_size, f"roster {roster.id}")
        if not result.success:
            return result

        try:
            self.store.update_roster_status(roster.id, RosterStatus.IMPLEMENTED)
        except (StoreError, RosterNotFoundError) as exc:
            logger.error("Could not mark roster %s implemented: %s", roster.id, exc)
            return GenerationResult(
                success=False, entries_created=result.entries_created, error=str(exc)
            )

        logger.info("Roster %s implemented with %d entries", roster.id, result.entries_created)
        return result

    def build_entries(
        self,
        roster: RosterConfig,
        assignments: Iterable[WeekAssignment],
        members: Iterable[TeamMember],
        created_by: str,
    ) -> list[ScheduleEntry]:
        """Materialize the roster into schedule entries without writing them."""
        assignments = list(assignments)
        members = list(members)
        end_date = roster_end_date(roster, self.config.default_horizon_weeks)
        mondays = week_starts(roster.start_date, end_date)
        if not mondays:
            return []
        resolver = self.resolver or self._load_resolver(members, mondays[0], end_date)

        member_ids = {m.worker_id for m in members}
        for assignment in assignments:
            if assignment.worker_id and assignment.worker_id not in member_ids:
                logger.warning(
                    "Worker %s assigned in week %d of roster %s has no team membership, skipping",
                    assignment.worker_id,
                    assignment.week_number,
                    roster.id,
                )

        entries = []
        for week_counter, monday in enumerate(mondays):
            cycle_week = (week_counter % roster.cycle_length_weeks) + 1
            on_duty: dict[str, WeekAssignment] = {}
            for assignment in assignments:
                if assignment.week_number == cycle_week and assignment.worker_id:
                    on_duty.setdefault(assignment.worker_id, assignment)

            for member in members:
                assignment = on_duty.get(member.worker_id)
                if assignment is None:
                    continue
                try:
                    duty = assignment.duty
                except ValueError:
                    logger.warning(
                        "Unknown duty %r for worker %s in week %d of roster %s, skipping",
                        assignment.shift_type,
                        member.worker_id,
                        cycle_week,
                        roster.id,
                    )
                    continue
                if duty is None:
                    continue
                entries.extend(
                    self._week_entries(resolver, member, duty, monday, end_date, created_by)
                )

        return entries

    def _week_entries(
        self,
        resolver: ShiftTimeResolver,
        member: TeamMember,
        duty: DutyShift,
        monday: date,
        end_date: date,
        created_by: str,
    ) -> list[ScheduleEntry]:
        if isinstance(duty, CompoundShift):
            plan = [(offset, duty.weekend_part) for offset in WEEKEND_OFFSETS]
            plan += [(offset, duty.weekday_part) for offset in WEEKDAY_OFFSETS]
        elif duty == ShiftType.WEEKEND:
            plan = [(offset, duty) for offset in WEEKEND_OFFSETS]
        else:
            plan = [(offset, duty) for offset in WEEKDAY_OFFSETS]

        entries = []
        for offset, shift_type in plan:
            entry_date = monday + timedelta(days=offset)
            if entry_date > end_date:
                continue
            resolved = resolver.resolve(
                shift_type,
                team_id=member.team_id,
                region_code=member.region_code,
                shift_date=entry_date,
                country_code=member.country_code,
            )
            entry = work_entry(member.worker_id, member.team_id, entry_date, shift_type)
            entry.shift_time_definition_id = resolved.definition_id
            entry.notes = resolved.window
            entry.created_by = created_by
            entries.append(entry)
        return entries

    def _load_resolver(
        self,
        members: list[TeamMember],
        start: date,
        end: date,
    ) -> ShiftTimeResolver:
        worker_ids = sorted({m.worker_id for m in members})
        classifier = CalendarClassifier.from_store(self.store, worker_ids, start, end)
        return ShiftTimeResolver.from_store(self.store, classifier)

    def validate_approvals(self, roster_id: str) -> ApprovalStatus:
        """Report whether every manager approval of a roster is granted."""
        pending = [
            approval.manager_name
            for approval in self.store.get_roster_approvals(roster_id)
            if not approval.approved
        ]
        return ApprovalStatus(all_approved=not pending, pending_managers=pending)
