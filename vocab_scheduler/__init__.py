"""Spaced-repetition scheduling for vocabulary review."""
from vocab_scheduler.sm2 import (
    BinaryOutcome,
    BinarySM2Strategy,
    GradedSM2Strategy,
    ReviewStrategy,
    ScheduleState,
    Track,
)
from vocab_scheduler.service import SchedulingService

__all__ = [
    "BinaryOutcome",
    "BinarySM2Strategy",
    "GradedSM2Strategy",
    "ReviewStrategy",
    "ScheduleState",
    "Track",
    "SchedulingService",
]
