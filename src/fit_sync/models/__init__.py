"""Data models for fit-sync."""

from .bodyweight import BodyweightEntry
from .settings import TimerSettings
from .statistics import TrainingStatistics
from .sync_state import SyncState
from .training import (
    Exercise,
    Repetition,
    SessionExerciseSnapshot,
    SessionSetSnapshot,
    SetEntry,
    Training,
    WorkoutSession,
)

__all__ = [
    "BodyweightEntry",
    "Exercise",
    "Repetition",
    "SessionExerciseSnapshot",
    "SessionSetSnapshot",
    "SetEntry",
    "SyncState",
    "TimerSettings",
    "Training",
    "TrainingStatistics",
    "WorkoutSession",
]
