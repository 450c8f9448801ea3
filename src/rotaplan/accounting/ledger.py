"""Monthly flextime balances.

The ledger stores daily time entries and recomputes the worker's monthly
summary in full after every save or delete, followed by every later month
already on record. A month starts from the prior month's ending balance;
the carryover ceiling is reported next to the balance but never applied
to it.
"""

import calendar
import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from rotaplan.accounting.flextime import FlexTimeCalculator, TimeEntryInput
from rotaplan.domain.models import DailyTimeEntry, MonthlyFlexSummary
from rotaplan.errors import EntryLockedError
from rotaplan.store.base import ScheduleStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FlexBalance:
    """A month's balance together with the worker's carryover ceiling."""

    summary: MonthlyFlexSummary
    carryover_limit: float

    @property
    def ending_balance(self) -> float:
        return self.summary.ending_balance

    @property
    def exceeds_carryover(self) -> bool:
        return self.summary.ending_balance > self.carryover_limit


def previous_month(year: int, month: int) -> tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


def month_bounds(year: int, month: int) -> tuple[date, date]:
    _, last_day = calendar.monthrange(year, month)
    return date(year, month, 1), date(year, month, last_day)


def summarize_month(
    worker_id: str,
    year: int,
    month: int,
    daily_deltas: Iterable[float],
    starting_balance: float = 0.0,
) -> MonthlyFlexSummary:
    """Aggregate a month's daily deltas onto a starting balance."""
    month_delta = sum(daily_deltas)
    return MonthlyFlexSummary(
        worker_id=worker_id,
        year=year,
        month=month,
        starting_balance=starting_balance,
        month_delta=month_delta,
        ending_balance=starting_balance + month_delta,
    )


class FlexTimeLedger:
    """Saves daily time entries and keeps monthly summaries in sync.

    Example:
        >>> ledger = FlexTimeLedger(store)
        >>> ledger.save_entry("W1", date(2024, 1, 17), TimeEntryInput(...))
        >>> ledger.balance("W1", 2024, 1).ending_balance
        0.0
    """

    def __init__(
        self,
        store: ScheduleStore,
        calculator: Optional[FlexTimeCalculator] = None,
    ):
        self.store = store
        self.calculator = calculator or FlexTimeCalculator()

    def save_entry(
        self,
        worker_id: str,
        entry_date: date,
        entry: TimeEntryInput,
    ) -> DailyTimeEntry:
        """Calculate and store a day's entry, then recompute its month.

        Raises:
            EntryLockedError: If the existing entry for that day is locked.
        """
        self._check_unlocked(worker_id, entry_date)
        result = self.calculator.calculate(entry_date, entry)
        record = DailyTimeEntry(
            worker_id=worker_id,
            entry_date=entry_date,
            entry_type=entry.entry_type,
            start_time=entry.start_time,
            end_time=entry.end_time,
            break_minutes=entry.break_minutes,
            target_hours=result.target_hours,
            actual_hours=result.actual_hours,
            flex_delta=result.flex_delta,
            withdrawal_hours=result.withdrawal_hours,
        )
        self.store.upsert_time_entry(record)
        self.recompute_month(worker_id, entry_date.year, entry_date.month)
        return record

    def delete_entry(self, worker_id: str, entry_date: date) -> MonthlyFlexSummary:
        """Remove a day's entry and recompute its month.

        Raises:
            EntryLockedError: If the entry is locked.
        """
        self._check_unlocked(worker_id, entry_date)
        self.store.delete_time_entry(worker_id, entry_date)
        return self.recompute_month(worker_id, entry_date.year, entry_date.month)

    def build_summary(self, worker_id: str, year: int, month: int) -> MonthlyFlexSummary:
        """Compute a month's summary from stored entries without writing it."""
        prior = self.store.get_monthly_summary(worker_id, *previous_month(year, month))
        starting_balance = prior.ending_balance if prior else 0.0
        start, end = month_bounds(year, month)
        entries = self.store.get_time_entries(worker_id, start, end)
        return summarize_month(
            worker_id, year, month, (e.flex_delta for e in entries), starting_balance
        )

    def recompute_month(self, worker_id: str, year: int, month: int) -> MonthlyFlexSummary:
        """Recompute and store a month's summary in full.

        Stored summaries of later months are recomputed as well, in order, so
        each keeps starting from its predecessor's ending balance.
        """
        summary = self._recompute(worker_id, year, month)
        for later in self.store.get_monthly_summaries(worker_id):
            if later.period > (year, month):
                self._recompute(worker_id, later.year, later.month)
        return summary

    def _recompute(self, worker_id: str, year: int, month: int) -> MonthlyFlexSummary:
        summary = self.build_summary(worker_id, year, month)
        self.store.upsert_monthly_summary(summary)
        logger.info(
            "Flextime %s %d-%02d: start %.2f, delta %.2f, end %.2f",
            worker_id,
            year,
            month,
            summary.starting_balance,
            summary.month_delta,
            summary.ending_balance,
        )
        return summary

    def carryover_limit(self, worker_id: str) -> float:
        limit = self.store.get_carryover_limit(worker_id)
        if limit is None:
            return self.calculator.policy.default_carryover_limit()
        return limit

    def balance(self, worker_id: str, year: int, month: int) -> FlexBalance:
        """Current balance of a month with the worker's carryover ceiling."""
        summary = self.store.get_monthly_summary(worker_id, year, month)
        if summary is None:
            summary = self.build_summary(worker_id, year, month)
        return FlexBalance(summary=summary, carryover_limit=self.carryover_limit(worker_id))

    def _check_unlocked(self, worker_id: str, entry_date: date) -> None:
        existing = self.store.get_time_entry(worker_id, entry_date)
        if existing is not None and existing.is_locked:
            raise EntryLockedError(worker_id, entry_date)
