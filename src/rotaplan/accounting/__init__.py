"""Flextime accounting: daily calculation and monthly balances."""

from rotaplan.accounting.flextime import (
    ENTRY_TYPE_LABELS,
    FlexTimeCalculation,
    FlexTimeCalculator,
    TimeEntryInput,
    default_end_time,
    default_start_time,
    format_flex_hours,
)
from rotaplan.accounting.ledger import FlexBalance, FlexTimeLedger, summarize_month

__all__ = [
    "ENTRY_TYPE_LABELS",
    "FlexBalance",
    "FlexTimeCalculation",
    "FlexTimeCalculator",
    "FlexTimeLedger",
    "TimeEntryInput",
    "default_end_time",
    "default_start_time",
    "format_flex_hours",
    "summarize_month",
]
