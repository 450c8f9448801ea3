"""Bulk scheduling of one shift over a date range.

The BulkScheduler creates a work entry per worker and day for a selected
shift-time definition. Days can be excluded by weekday, weekends and public
holidays can switch to a weekend definition automatically, and workers with
a personal holiday can be skipped. In rotation mode a single worker is
scheduled per day, taking turns in list order.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Iterable, Optional

from rotaplan.domain.models import ScheduleEntry, ShiftType, Weekday, is_weekend
from rotaplan.errors import ShiftDefinitionNotFoundError
from rotaplan.scheduling.calendar_classifier import CalendarClassifier, DayClassification
from rotaplan.scheduling.roster_generator import GenerationResult, write_batches
from rotaplan.scheduling.rotation_engine import work_entry
from rotaplan.scheduling.shift_resolver import ShiftTimeResolver
from rotaplan.store.base import ScheduleStore

logger = logging.getLogger(__name__)


class BulkMode(Enum):
    """Which workers a bulk run schedules."""

    USERS = "users"  # the selected workers, every day
    TEAM = "team"  # every member of the team, every day
    ROTATION = "rotation"  # one selected worker per day, in turn


@dataclass
class BulkScheduleConfig:
    """Configuration for a bulk scheduling run.

    Attributes:
        team_id: Team the entries are created for.
        start_date: First date (inclusive).
        end_date: Last date (inclusive).
        shift_definition_id: Definition used on regular days.
        mode: Which workers to schedule.
        worker_ids: Selected workers (ignored in team mode).
        excluded_days: Weekdays left out of the run.
        auto_detect_weekends: Schedule Saturdays and Sundays with a weekend
            definition, even when their weekday is excluded.
        auto_detect_holidays: Schedule public holidays with a weekend
            definition, even when their weekday is excluded.
        weekend_override_id: Definition used on detected weekends and
            holidays instead of looking one up.
        skip_workers_with_holidays: Leave out workers on their personal
            holidays.
        batch_size: Entries written per store request.
    """

    team_id: str
    start_date: date
    end_date: date
    shift_definition_id: Optional[str] = None
    mode: BulkMode = BulkMode.USERS
    worker_ids: list[str] = field(default_factory=list)
    excluded_days: frozenset[Weekday] = frozenset()
    auto_detect_weekends: bool = False
    auto_detect_holidays: bool = False
    weekend_override_id: Optional[str] = None
    skip_workers_with_holidays: bool = False
    batch_size: int = 100

    def __post_init__(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")

    @property
    def dates(self) -> list[date]:
        days = (self.end_date - self.start_date).days + 1
        return [self.start_date + timedelta(days=i) for i in range(days)]


class BulkScheduler:
    """Creates schedule entries for a team over a date range.

    Example:
        >>> scheduler = BulkScheduler(store)
        >>> config = BulkScheduleConfig("T1", date(2024, 1, 1), date(2024, 1, 7),
        ...                             shift_definition_id="early-t1",
        ...                             mode=BulkMode.TEAM)
        >>> scheduler.schedule(config, created_by="planner-1").entries_created
        14
    """

    def __init__(
        self,
        store: ScheduleStore,
        classifier: Optional[CalendarClassifier] = None,
        resolver: Optional[ShiftTimeResolver] = None,
    ):
        self.store = store
        self.classifier = classifier
        self.resolver = resolver

    def schedule(self, config: BulkScheduleConfig, created_by: str) -> GenerationResult:
        """Build the entries of a run and write them in batches."""
        entries = self.build_entries(config, created_by)
        logger.info(
            "Bulk scheduling team %s from %s to %s: %d entries",
            config.team_id,
            config.start_date,
            config.end_date,
            len(entries),
        )
        return write_batches(
            self.store, entries, config.batch_size, f"bulk run of team {config.team_id}"
        )

    def target_workers(self, config: BulkScheduleConfig) -> list[str]:
        if config.mode == BulkMode.TEAM:
            members = self.store.get_team_members([config.team_id])
            return list(dict.fromkeys(m.worker_id for m in members))
        return list(config.worker_ids)

    def build_entries(self, config: BulkScheduleConfig, created_by: str) -> list[ScheduleEntry]:
        """Materialize a run into schedule entries without writing them."""
        workers = self.target_workers(config)
        if not workers:
            logger.warning(
                "Bulk run of team %s has no workers, nothing to schedule", config.team_id
            )
            return []

        days = config.dates
        classifier = self.classifier or CalendarClassifier.from_store(
            self.store, workers, config.start_date, config.end_date
        )
        resolver = self.resolver or ShiftTimeResolver.from_store(self.store, classifier)
        calendar = classifier.classify_range(days, workers)

        entries = []
        for index, d in enumerate(days):
            day_info = calendar[d]
            if not self._includes_day(config, d, day_info.values()):
                continue

            if config.mode == BulkMode.ROTATION:
                day_workers = [workers[index % len(workers)]]
            else:
                day_workers = workers

            for worker_id in day_workers:
                info = day_info[worker_id]
                if config.skip_workers_with_holidays and info.is_personal_holiday:
                    logger.info(
                        "Skipping %s on %s: personal holiday %s",
                        worker_id,
                        d,
                        info.personal_holiday_name,
                    )
                    continue
                entries.append(self._entry(resolver, config, worker_id, info, created_by))
        return entries

    def best_definition_id(
        self,
        resolver: ShiftTimeResolver,
        config: BulkScheduleConfig,
        d: date,
        use_weekend_shift: bool,
    ) -> Optional[str]:
        """Definition to use on a date.

        On detected weekends and holidays the override wins, then the team's
        weekend definition for that day. Otherwise the selected definition.
        """
        if not config.shift_definition_id and not config.weekend_override_id:
            return None
        if use_weekend_shift:
            if config.weekend_override_id:
                return config.weekend_override_id
            weekend = resolver.weekend_definition_for(config.team_id, Weekday.of(d))
            if weekend is not None:
                return weekend.id
        return config.shift_definition_id

    @staticmethod
    def _includes_day(
        config: BulkScheduleConfig,
        d: date,
        day_info: Iterable[DayClassification],
    ) -> bool:
        if config.auto_detect_weekends and is_weekend(d):
            return True
        if config.auto_detect_holidays and any(
            info.is_public_holiday or info.is_weekend for info in day_info
        ):
            return True
        return Weekday.of(d) not in config.excluded_days

    def _entry(
        self,
        resolver: ShiftTimeResolver,
        config: BulkScheduleConfig,
        worker_id: str,
        info: DayClassification,
        created_by: str,
    ) -> ScheduleEntry:
        use_weekend_shift = (config.auto_detect_weekends and info.is_weekend) or (
            config.auto_detect_holidays and info.is_public_holiday
        )
        definition_id = self.best_definition_id(resolver, config, info.date, use_weekend_shift)

        shift_type = ShiftType.NORMAL
        if definition_id is not None:
            try:
                shift_type = resolver.get_definition(definition_id).shift_type
            except ShiftDefinitionNotFoundError:
                logger.warning(
                    "Shift time definition %s not found, scheduling %s on %s as normal",
                    definition_id,
                    worker_id,
                    info.date,
                )
                definition_id = None

        notes = "Bulk generated"
        if config.mode == BulkMode.ROTATION:
            notes += " (rotation)"
        if use_weekend_shift:
            notes += f" - {info.holiday_name or 'Weekend'}"

        entry = work_entry(worker_id, config.team_id, info.date, shift_type)
        entry.shift_time_definition_id = definition_id
        entry.notes = notes
        entry.created_by = created_by
        return entry
