"""Data models for fitsync."""

from .exercises import DifficultyLevel, Exercise
from .identifiers import (
    EntityId,
    PersistedId,
    TemporaryId,
    is_temporary,
    new_temporary_id,
    parse_entity_id,
)
from .nutrition import Food, Meal, NutritionPlan
from .progress import BodyMeasurements, ProgressEntry
from .sync import EntityRef, PendingRequest, SyncResult
from .workout import CompletionRecord, CompletionStatus, Session, WorkoutExercise, WorkoutPlan

__all__ = [
    "BodyMeasurements",
    "CompletionRecord",
    "CompletionStatus",
    "DifficultyLevel",
    "EntityId",
    "EntityRef",
    "Exercise",
    "Food",
    "is_temporary",
    "Meal",
    "new_temporary_id",
    "NutritionPlan",
    "parse_entity_id",
    "PendingRequest",
    "PersistedId",
    "ProgressEntry",
    "Session",
    "SyncResult",
    "TemporaryId",
    "WorkoutExercise",
    "WorkoutPlan",
]
