"""Shift-time resolution.

Picks the concrete start/end time of a shift on a date through a fixed
specificity cascade over the shift-time definitions:

1. Explicit definition id (used verbatim)
2. Team + region + day
3. Team + region
4. Team only
5. Region only
6. Global default
7. Built-in default for the shift type

Every stage only considers definitions of the requested shift type. Weekend
definitions only apply on Saturdays, Sundays and central public holidays.
Resolution never fails.
"""

import logging
from dataclasses import dataclass
from datetime import date, time
from typing import Callable, Iterable, Optional

from rotaplan.domain.models import (
    ResolvedShiftTime,
    ShiftTimeDefinition,
    ShiftType,
    Weekday,
)
from rotaplan.errors import ShiftDefinitionNotFoundError
from rotaplan.scheduling.calendar_classifier import CalendarClassifier
from rotaplan.store.base import ScheduleStore

logger = logging.getLogger(__name__)


DEFAULT_SHIFT_TIMES: dict[ShiftType, ResolvedShiftTime] = {
    ShiftType.NORMAL: ResolvedShiftTime(time(8, 0), time(16, 30), "Normal shift"),
    ShiftType.EARLY: ResolvedShiftTime(time(6, 0), time(14, 0), "Early shift"),
    ShiftType.LATE: ResolvedShiftTime(time(14, 0), time(22, 0), "Late shift"),
    ShiftType.WEEKEND: ResolvedShiftTime(
        time(8, 0), time(16, 0), "Weekend / National Holiday shift"
    ),
}


@dataclass(frozen=True)
class ResolutionRequest:
    """A shift-time lookup.

    Attributes:
        shift_type: Requested shift type.
        team_id: Team of the worker.
        region_code: Region of the worker.
        day_of_week: Weekday being scheduled (derived from shift_date when omitted).
        shift_date: Date being scheduled.
        country_code: Country of the worker (scopes country-restricted definitions).
        weekend_eligible: Set by the resolver for weekend requests on
            Saturdays, Sundays and central public holidays.
    """

    shift_type: ShiftType
    team_id: Optional[str] = None
    region_code: Optional[str] = None
    day_of_week: Optional[Weekday] = None
    shift_date: Optional[date] = None
    country_code: Optional[str] = None
    weekend_eligible: bool = False


@dataclass(frozen=True)
class ResolutionStage:
    """One step of the cascade: a predicate over definitions."""

    name: str
    matches: Callable[[ShiftTimeDefinition, ResolutionRequest], bool]
    applies: Callable[[ResolutionRequest], bool] = lambda request: True


def _team_region_day(d: ShiftTimeDefinition, r: ResolutionRequest) -> bool:
    if not (d.applies_to_team(r.team_id) and d.region_code == r.region_code):
        return False
    if r.weekend_eligible:
        return True
    return d.applies_to_day(r.day_of_week)


def _team_region(d: ShiftTimeDefinition, r: ResolutionRequest) -> bool:
    return (
        d.applies_to_team(r.team_id)
        and d.region_code == r.region_code
        and not d.has_day_restriction
    )


def _team_only(d: ShiftTimeDefinition, r: ResolutionRequest) -> bool:
    return d.applies_to_team(r.team_id) and d.region_code is None and not d.has_day_restriction


def _region_only(d: ShiftTimeDefinition, r: ResolutionRequest) -> bool:
    return not d.has_team and d.region_code == r.region_code and not d.has_day_restriction


def _global(d: ShiftTimeDefinition, r: ResolutionRequest) -> bool:
    return not d.has_team and d.region_code is None and not d.has_day_restriction


RESOLUTION_STAGES: tuple[ResolutionStage, ...] = (
    ResolutionStage(
        "team_region_day",
        _team_region_day,
        applies=lambda r: r.day_of_week is not None or r.weekend_eligible,
    ),
    ResolutionStage("team_region", _team_region),
    ResolutionStage("team", _team_only),
    ResolutionStage("region", _region_only),
    ResolutionStage("global", _global),
)


def specificity_key(definition: ShiftTimeDefinition, position: int) -> tuple:
    """Tie-break order within a stage (smallest wins).

    Team-specific before global, day-restricted before unrestricted, fewer
    listed days before more; remaining ties keep input order.
    """
    return (
        0 if definition.has_team else 1,
        0 if definition.has_day_restriction else 1,
        len(definition.days_of_week),
        position,
    )


class ShiftTimeResolver:
    """Resolves concrete shift times from a set of definitions.

    Example:
        >>> resolver = ShiftTimeResolver(definitions, classifier)
        >>> resolved = resolver.resolve(ShiftType.EARLY, team_id="T1",
        ...                             shift_date=date(2024, 1, 15))
        >>> resolved.window
        '06:00-14:00'
    """

    def __init__(
        self,
        definitions: Iterable[ShiftTimeDefinition] = (),
        classifier: Optional[CalendarClassifier] = None,
        stages: tuple[ResolutionStage, ...] = RESOLUTION_STAGES,
    ):
        self.definitions = list(definitions)
        self.classifier = classifier or CalendarClassifier()
        self.stages = stages
        self._by_id = {d.id: d for d in self.definitions}

    @classmethod
    def from_store(
        cls,
        store: ScheduleStore,
        classifier: Optional[CalendarClassifier] = None,
    ) -> "ShiftTimeResolver":
        return cls(store.get_shift_time_definitions(), classifier)

    def get_definition(self, definition_id: str) -> ShiftTimeDefinition:
        """Strict lookup of a definition by id.

        Raises:
            ShiftDefinitionNotFoundError: If no definition has this id.
        """
        try:
            return self._by_id[definition_id]
        except KeyError:
            raise ShiftDefinitionNotFoundError(definition_id) from None

    def weekend_definition_for(
        self,
        team_id: Optional[str],
        day: Weekday,
    ) -> Optional[ShiftTimeDefinition]:
        """Weekend definition for a team on a weekend day or holiday.

        Team-specific definitions are preferred over unscoped ones. Among
        those, the first covering ``day`` wins; if none covers it, the first
        weekend definition of the team is returned anyway.
        """
        candidates = [
            d
            for d in self.definitions
            if d.shift_type == ShiftType.WEEKEND
            and (d.applies_to_team(team_id) or not d.has_team)
        ]
        if not candidates:
            return None
        candidates.sort(key=lambda d: 0 if d.has_team else 1)
        for definition in candidates:
            if definition.applies_to_day(day):
                return definition
        return candidates[0]

    def resolve(
        self,
        shift_type: ShiftType,
        team_id: Optional[str] = None,
        region_code: Optional[str] = None,
        day_of_week: Optional[Weekday] = None,
        shift_date: Optional[date] = None,
        explicit_definition_id: Optional[str] = None,
        country_code: Optional[str] = None,
    ) -> ResolvedShiftTime:
        """Resolve the time window for a shift.

        Args:
            shift_type: Requested shift type.
            team_id: Team of the worker.
            region_code: Region of the worker.
            day_of_week: Weekday; derived from ``shift_date`` when omitted.
            shift_date: Date being scheduled (needed for holiday-based weekend shifts).
            explicit_definition_id: Definition to use verbatim, if fetchable.
            country_code: Country of the worker.

        Returns:
            The resolved window; the built-in default when nothing matches.
        """
        if explicit_definition_id:
            explicit = self._by_id.get(explicit_definition_id)
            if explicit is not None:
                return self._to_resolved(explicit)
            logger.warning(
                "Shift time definition %s not found, resolving by scope",
                explicit_definition_id,
            )

        if day_of_week is None and shift_date is not None:
            day_of_week = Weekday.of(shift_date)

        request = ResolutionRequest(
            shift_type=shift_type,
            team_id=team_id,
            region_code=region_code,
            day_of_week=day_of_week,
            shift_date=shift_date,
            country_code=country_code,
            weekend_eligible=self._is_weekend_eligible(
                shift_type, day_of_week, shift_date, country_code
            ),
        )

        if shift_type == ShiftType.WEEKEND and not request.weekend_eligible:
            return DEFAULT_SHIFT_TIMES[shift_type]

        candidates = [
            (position, d)
            for position, d in enumerate(self.definitions)
            if d.shift_type == shift_type and self._in_country(d, country_code)
        ]

        for stage in self.stages:
            if not stage.applies(request):
                continue
            matched = [(p, d) for p, d in candidates if stage.matches(d, request)]
            if matched:
                position, best = min(matched, key=lambda pd: specificity_key(pd[1], pd[0]))
                logger.debug(
                    "Resolved %s via %s stage to definition %s",
                    shift_type.value,
                    stage.name,
                    best.id,
                )
                return self._to_resolved(best)

        return DEFAULT_SHIFT_TIMES[shift_type]

    def _is_weekend_eligible(
        self,
        shift_type: ShiftType,
        day_of_week: Optional[Weekday],
        d: Optional[date],
        country_code: Optional[str],
    ) -> bool:
        if shift_type != ShiftType.WEEKEND:
            return False
        if day_of_week is not None and day_of_week.is_weekend:
            return True
        if d is not None:
            return self.classifier.is_central_public_holiday(d, country_code)
        return False

    @staticmethod
    def _in_country(definition: ShiftTimeDefinition, country_code: Optional[str]) -> bool:
        if not definition.country_codes or country_code is None:
            return True
        return country_code in definition.country_codes

    @staticmethod
    def _to_resolved(definition: ShiftTimeDefinition) -> ResolvedShiftTime:
        return ResolvedShiftTime(
            start_time=definition.start_time,
            end_time=definition.end_time,
            description=definition.description,
            definition_id=definition.id,
        )
