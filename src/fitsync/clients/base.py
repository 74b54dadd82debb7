"""Response envelope and domain service protocols.

Each domain service has one fixed method set, implemented three ways:
live (REST backend), mock (static dataset) and fallback (the facade that
chooses between them).
"""

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@dataclass
class ApiResponse:
    """Uniform envelope returned by every service call."""

    data: Any
    status_code: int | None = None
    source: str = "live"  # "live", "cache" or "mock"

    @property
    def is_fallback(self) -> bool:
        return self.source != "live"

    def items(self, key: str) -> list:
        """Extract a list from the payload.

        The backend sometimes returns a bare list and sometimes wraps it
        as ``{key: [...]}``.
        """
        if isinstance(self.data, list):
            return self.data
        if isinstance(self.data, dict) and isinstance(self.data.get(key), list):
            return self.data[key]
        return []

    def entity(self, key: str, id_field: str | None = None) -> dict | None:
        """Extract a single entity from the payload.

        Accepts ``{key: {...}}`` wrappers or the entity itself.
        """
        if not isinstance(self.data, dict):
            return None
        wrapped = self.data.get(key)
        if isinstance(wrapped, dict):
            return wrapped
        if id_field is None or id_field in self.data:
            return self.data
        return None


@runtime_checkable
class WorkoutService(Protocol):
    """Workout plans and logs."""

    async def get_plans(self, user_id: int) -> ApiResponse: ...

    async def get_plan(self, plan_id: Any) -> ApiResponse: ...

    async def create_plan(self, data: dict) -> ApiResponse: ...

    async def update_plan(self, plan_id: Any, data: dict) -> ApiResponse: ...

    async def delete_plan(self, plan_id: Any) -> ApiResponse: ...

    async def get_workout_logs(self, user_id: int) -> ApiResponse: ...

    async def log_workout(self, data: dict) -> ApiResponse: ...


@runtime_checkable
class NutritionService(Protocol):
    """Nutrition plans and meal adherence."""

    async def get_plans(self, user_id: int) -> ApiResponse: ...

    async def get_plan(self, plan_id: Any) -> ApiResponse: ...

    async def create_plan(self, data: dict) -> ApiResponse: ...

    async def update_plan(self, plan_id: Any, data: dict) -> ApiResponse: ...

    async def delete_plan(self, plan_id: Any) -> ApiResponse: ...

    async def log_meal(self, meal_id: int, completion: dict) -> ApiResponse: ...


@runtime_checkable
class ProgressService(Protocol):
    """Body progress entries."""

    async def get_progress(self, user_id: int) -> ApiResponse: ...

    async def log_progress(self, data: dict) -> ApiResponse: ...

    async def update_progress(self, progress_id: Any, data: dict) -> ApiResponse: ...

    async def delete_progress(self, progress_id: Any) -> ApiResponse: ...


@runtime_checkable
class ExerciseService(Protocol):
    """Exercise catalog."""

    async def get_exercises(self, filters: dict | None = None) -> ApiResponse: ...

    async def get_exercise(self, exercise_id: int) -> ApiResponse: ...

    async def suggest_exercise(self, data: dict) -> ApiResponse: ...

    async def create_exercise(self, data: dict) -> ApiResponse: ...

    async def update_exercise(self, exercise_id: int, data: dict) -> ApiResponse: ...

    async def delete_exercise(self, exercise_id: int) -> ApiResponse: ...


@runtime_checkable
class UserService(Protocol):
    """Profile, goals and preferences."""

    async def get_profile(self, user_id: int) -> ApiResponse: ...

    async def update_profile(self, user_id: int, data: dict) -> ApiResponse: ...

    async def get_goals(self, user_id: int) -> ApiResponse: ...

    async def create_goal(self, user_id: int, data: dict) -> ApiResponse: ...

    async def update_goal(self, user_id: int, goal_id: int, data: dict) -> ApiResponse: ...

    async def get_preferences(self, user_id: int) -> ApiResponse: ...

    async def update_preferences(self, user_id: int, data: dict) -> ApiResponse: ...


@runtime_checkable
class AuthService(Protocol):
    """Demo authentication."""

    async def login(self, email: str, password: str) -> ApiResponse: ...

    async def register(
        self, email: str, password: str, first_name: str, last_name: str
    ) -> ApiResponse: ...


@runtime_checkable
class AIService(Protocol):
    """Backend-side AI endpoints."""

    async def generate_workout_plan(self, data: dict) -> ApiResponse: ...

    async def generate_nutrition_plan(self, data: dict) -> ApiResponse: ...

    async def get_advice(self, query: str) -> ApiResponse: ...

    async def send_chat_message(self, message: str) -> ApiResponse: ...
