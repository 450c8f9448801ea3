"""Data-access layer for the external schedule store."""

from rotaplan.store.base import ScheduleStore
from rotaplan.store.memory import InMemoryStore

__all__ = [
    "InMemoryStore",
    "ScheduleStore",
]
