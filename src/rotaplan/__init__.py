"""Shift resolution and rotation engine for workforce scheduling.

Resolves concrete shift times, classifies calendar dates per worker locale,
expands rotation patterns, generates multi-week rosters and keeps the
flextime balance of each worker.
"""

__version__ = "0.1.0"
