"""Calendar classification per worker locale.

Determines whether a date is a weekend day, a public holiday in the
worker's country/region, or one of the worker's personal holidays. The
classifier never fails: unknown workers still get weekend detection, with
holiday flags false.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Mapping, Optional

from rotaplan.domain.models import HolidayRecord, WorkerLocale, is_weekend
from rotaplan.store.base import ScheduleStore


@dataclass(frozen=True)
class DayClassification:
    """Classification of one date for one worker.

    Public and personal holidays are reported independently; callers decide
    which takes precedence for display.

    Attributes:
        date: The classified date.
        is_weekend: Saturday or Sunday.
        is_public_holiday: A central holiday of the worker's country/region.
        is_personal_holiday: A holiday owned by the worker.
        holiday_name: Public holiday name, else personal holiday name.
        personal_holiday_name: Name of the personal holiday, if any.
    """

    date: date
    is_weekend: bool
    is_public_holiday: bool = False
    is_personal_holiday: bool = False
    holiday_name: Optional[str] = None
    personal_holiday_name: Optional[str] = None

    @property
    def is_day_off(self) -> bool:
        """True on weekends and on any holiday."""
        return self.is_weekend or self.is_public_holiday or self.is_personal_holiday


class CalendarClassifier:
    """Classifies dates as weekend/public holiday/personal holiday per worker.

    Example:
        >>> classifier = CalendarClassifier(holidays, locales)
        >>> info = classifier.classify(date(2024, 12, 25), "W1")
        >>> info.is_public_holiday
        True
    """

    def __init__(
        self,
        holidays: Iterable[HolidayRecord] = (),
        locales: Optional[Mapping[str, WorkerLocale]] = None,
    ):
        self.locales = dict(locales or {})
        self._central: dict[date, list[HolidayRecord]] = defaultdict(list)
        self._personal: dict[tuple[str, date], HolidayRecord] = {}
        for holiday in holidays:
            self.add_holiday(holiday)

    @classmethod
    def from_store(
        cls,
        store: ScheduleStore,
        worker_ids: Iterable[str],
        start: date,
        end: date,
    ) -> "CalendarClassifier":
        """Load locales and holidays for a set of workers and a date range."""
        worker_ids = list(worker_ids)
        locales = store.get_worker_locales(worker_ids)
        countries = sorted({loc.country_code for loc in locales.values() if loc.country_code})
        holidays = store.get_holidays(start, end, country_codes=countries, owner_ids=worker_ids)
        return cls(holidays, locales)

    def add_holiday(self, holiday: HolidayRecord) -> None:
        if holiday.is_central:
            self._central[holiday.date].append(holiday)
        else:
            self._personal[(holiday.owner_id, holiday.date)] = holiday

    def set_locale(self, locale: WorkerLocale) -> None:
        self.locales[locale.worker_id] = locale

    def public_holiday(
        self,
        d: date,
        country_code: Optional[str],
        region_code: Optional[str] = None,
    ) -> Optional[HolidayRecord]:
        """Central holiday for a country, national or in the given region."""
        if country_code is None:
            return None
        for holiday in self._central.get(d, ()):
            if holiday.country_code != country_code:
                continue
            if holiday.region_code is None or holiday.region_code == region_code:
                return holiday
        return None

    def is_central_public_holiday(
        self,
        d: date,
        country_code: Optional[str] = None,
        region_code: Optional[str] = None,
    ) -> bool:
        """Check for a central public holiday on a date.

        Without a country, any central public holiday on that date counts.
        """
        if country_code is None:
            return any(h.is_public for h in self._central.get(d, ()))
        return self.public_holiday(d, country_code, region_code) is not None

    def personal_holiday(self, d: date, worker_id: str) -> Optional[HolidayRecord]:
        return self._personal.get((worker_id, d))

    def classify(self, d: date, worker_id: str) -> DayClassification:
        """Classify a date for a worker."""
        locale = self.locales.get(worker_id)
        public = None
        if locale is not None:
            public = self.public_holiday(d, locale.country_code, locale.region_code)
        personal = self.personal_holiday(d, worker_id)

        if public is not None:
            holiday_name = public.name
        elif personal is not None:
            holiday_name = personal.name
        else:
            holiday_name = None

        return DayClassification(
            date=d,
            is_weekend=is_weekend(d),
            is_public_holiday=public is not None,
            is_personal_holiday=personal is not None,
            holiday_name=holiday_name,
            personal_holiday_name=personal.name if personal else None,
        )

    def classify_range(
        self,
        dates: Iterable[date],
        worker_ids: Iterable[str],
    ) -> dict[date, dict[str, DayClassification]]:
        """Classify every date for every worker (date -> worker -> result)."""
        worker_ids = list(worker_ids)
        return {
            d: {worker_id: self.classify(d, worker_id) for worker_id in worker_ids}
            for d in dates
        }

    def holiday_dates(self, worker_id: str, dates: Iterable[date]) -> set[date]:
        """Dates that are a public or personal holiday for the worker."""
        result = set()
        for d in dates:
            info = self.classify(d, worker_id)
            if info.is_public_holiday or info.is_personal_holiday:
                result.add(d)
        return result
