"""Fallback facades, availability probe, sync engine and preferences."""

from .availability import (
    AvailabilityProbe,
    BackendStatus,
    Notification,
    NotificationKind,
)
from .fallback import (
    FallbackAIService,
    FallbackAuthService,
    FallbackExerciseService,
    FallbackNutritionService,
    FallbackProgressService,
    FallbackService,
    FallbackUserService,
    FallbackWorkoutService,
)
from .preferences import PreferencesService, UserPreferences
from .registry import ServiceRegistry
from .sync import SyncService

__all__ = [
    "AvailabilityProbe",
    "BackendStatus",
    "FallbackAIService",
    "FallbackAuthService",
    "FallbackExerciseService",
    "FallbackNutritionService",
    "FallbackProgressService",
    "FallbackService",
    "FallbackUserService",
    "FallbackWorkoutService",
    "Notification",
    "NotificationKind",
    "PreferencesService",
    "ServiceRegistry",
    "SyncService",
    "UserPreferences",
]
