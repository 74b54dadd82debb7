"""Backend, mock and HTTP clients."""

from .api import ApiClient
from .base import (
    AIService,
    ApiResponse,
    AuthService,
    ExerciseService,
    NutritionService,
    ProgressService,
    UserService,
    WorkoutService,
)

__all__ = [
    "AIService",
    "ApiClient",
    "ApiResponse",
    "AuthService",
    "ExerciseService",
    "NutritionService",
    "ProgressService",
    "UserService",
    "WorkoutService",
]
