"""Scheduling engine: calendar classification, shift times, rotations and rosters."""

from rotaplan.scheduling.bulk_scheduler import BulkMode, BulkScheduleConfig, BulkScheduler
from rotaplan.scheduling.calendar_classifier import CalendarClassifier, DayClassification
from rotaplan.scheduling.roster_generator import (
    ApprovalStatus,
    GenerationResult,
    RosterGenerationConfig,
    RosterGenerator,
    write_batches,
)
from rotaplan.scheduling.rotation_engine import (
    ExpansionOptions,
    PatternPreviewDay,
    RotationPatternEngine,
    preview_pattern,
)
from rotaplan.scheduling.shift_resolver import (
    DEFAULT_SHIFT_TIMES,
    ResolutionStage,
    ShiftTimeResolver,
)

__all__ = [
    # Calendar
    "CalendarClassifier",
    "DayClassification",
    # Shift times
    "DEFAULT_SHIFT_TIMES",
    "ResolutionStage",
    "ShiftTimeResolver",
    # Rotation patterns
    "ExpansionOptions",
    "PatternPreviewDay",
    "RotationPatternEngine",
    "preview_pattern",
    # Rosters
    "ApprovalStatus",
    "GenerationResult",
    "RosterGenerationConfig",
    "RosterGenerator",
    "write_batches",
    # Bulk scheduling
    "BulkMode",
    "BulkScheduleConfig",
    "BulkScheduler",
]
