"""Live service implementations backed by the REST API."""

from typing import Any

from ..errors import BackendError, UnsyncedEntityError
from ..models.identifiers import PersistedId, parse_entity_id
from .api import ApiClient
from .base import ApiResponse


def _path_id(raw: Any) -> int:
    """Resolve an identifier for use in a URL path.

    Client-temporary ids don't exist on the server, so they are
    rejected before any request is made.
    """
    try:
        parsed = parse_entity_id(raw)
    except ValueError as e:
        raise BackendError(f"Invalid identifier {raw!r}") from e
    if not isinstance(parsed, PersistedId):
        raise UnsyncedEntityError(f"Identifier {raw!r} has not been created on the server yet")
    return parsed.server_id


class LiveAuthService:
    def __init__(self, api: ApiClient):
        self.api = api

    async def login(self, email: str, password: str) -> ApiResponse:
        return await self.api.post("/auth/login", {"email": email, "password": password})

    async def register(
        self, email: str, password: str, first_name: str, last_name: str
    ) -> ApiResponse:
        return await self.api.post(
            "/auth/register",
            {
                "email": email,
                "password": password,
                "first_name": first_name,
                "last_name": last_name,
            },
        )


class LiveUserService:
    def __init__(self, api: ApiClient):
        self.api = api

    async def get_profile(self, user_id: int) -> ApiResponse:
        return await self.api.get(f"/users/{user_id}/profile")

    async def update_profile(self, user_id: int, data: dict) -> ApiResponse:
        return await self.api.put(f"/users/{user_id}/profile", data)

    async def get_goals(self, user_id: int) -> ApiResponse:
        return await self.api.get(f"/users/{user_id}/goals")

    async def create_goal(self, user_id: int, data: dict) -> ApiResponse:
        return await self.api.post(f"/users/{user_id}/goals", data)

    async def update_goal(self, user_id: int, goal_id: int, data: dict) -> ApiResponse:
        return await self.api.put(f"/users/{user_id}/goals/{goal_id}", data)

    async def get_preferences(self, user_id: int) -> ApiResponse:
        return await self.api.get("/users/preferences", params={"user_id": user_id})

    async def update_preferences(self, user_id: int, data: dict) -> ApiResponse:
        return await self.api.post("/users/preferences", {"user_id": user_id, **data})


class LiveWorkoutService:
    def __init__(self, api: ApiClient):
        self.api = api

    async def get_plans(self, user_id: int) -> ApiResponse:
        return await self.api.get("/workouts/plans", params={"user_id": user_id})

    async def get_plan(self, plan_id: Any) -> ApiResponse:
        return await self.api.get(f"/workouts/plans/{_path_id(plan_id)}")

    async def create_plan(self, data: dict) -> ApiResponse:
        return await self.api.post("/workouts/plans", data)

    async def update_plan(self, plan_id: Any, data: dict) -> ApiResponse:
        return await self.api.put(f"/workouts/plans/{_path_id(plan_id)}", data)

    async def delete_plan(self, plan_id: Any) -> ApiResponse:
        return await self.api.delete(f"/workouts/plans/{_path_id(plan_id)}")

    async def get_workout_logs(self, user_id: int) -> ApiResponse:
        return await self.api.get("/workouts/logs", params={"user_id": user_id})

    async def log_workout(self, data: dict) -> ApiResponse:
        return await self.api.post("/workouts/logs", data)


class LiveNutritionService:
    def __init__(self, api: ApiClient):
        self.api = api

    async def get_plans(self, user_id: int) -> ApiResponse:
        return await self.api.get("/nutrition/plans", params={"user_id": user_id})

    async def get_plan(self, plan_id: Any) -> ApiResponse:
        return await self.api.get(f"/nutrition/plans/{_path_id(plan_id)}")

    async def create_plan(self, data: dict) -> ApiResponse:
        return await self.api.post("/nutrition/plans", data)

    async def update_plan(self, plan_id: Any, data: dict) -> ApiResponse:
        return await self.api.put(f"/nutrition/plans/{_path_id(plan_id)}", data)

    async def delete_plan(self, plan_id: Any) -> ApiResponse:
        return await self.api.delete(f"/nutrition/plans/{_path_id(plan_id)}")

    async def log_meal(self, meal_id: int, completion: dict) -> ApiResponse:
        return await self.api.post(f"/nutrition/meals/{meal_id}/completions", completion)


class LiveProgressService:
    def __init__(self, api: ApiClient):
        self.api = api

    async def get_progress(self, user_id: int) -> ApiResponse:
        return await self.api.get("/progress", params={"user_id": user_id})

    async def log_progress(self, data: dict) -> ApiResponse:
        return await self.api.post("/progress", data)

    async def update_progress(self, progress_id: Any, data: dict) -> ApiResponse:
        return await self.api.put(f"/progress/{_path_id(progress_id)}", data)

    async def delete_progress(self, progress_id: Any) -> ApiResponse:
        return await self.api.delete(f"/progress/{_path_id(progress_id)}")


class LiveExerciseService:
    def __init__(self, api: ApiClient):
        self.api = api

    async def get_exercises(self, filters: dict | None = None) -> ApiResponse:
        return await self.api.get("/exercises", params=filters or None)

    async def get_exercise(self, exercise_id: int) -> ApiResponse:
        return await self.api.get(f"/exercises/{exercise_id}")

    async def suggest_exercise(self, data: dict) -> ApiResponse:
        return await self.api.post("/exercises/suggest", data)

    async def create_exercise(self, data: dict) -> ApiResponse:
        return await self.api.post("/exercises", data)

    async def update_exercise(self, exercise_id: int, data: dict) -> ApiResponse:
        return await self.api.put(f"/exercises/{exercise_id}", data)

    async def delete_exercise(self, exercise_id: int) -> ApiResponse:
        return await self.api.delete(f"/exercises/{exercise_id}")


class LiveAIService:
    def __init__(self, api: ApiClient):
        self.api = api

    async def generate_workout_plan(self, data: dict) -> ApiResponse:
        return await self.api.post("/ai/generate-workout", data)

    async def generate_nutrition_plan(self, data: dict) -> ApiResponse:
        return await self.api.post("/ai/generate-nutrition", data)

    async def get_advice(self, query: str) -> ApiResponse:
        return await self.api.post("/ai/advice", {"query": query})

    async def send_chat_message(self, message: str) -> ApiResponse:
        return await self.api.post("/ai/chat", {"message": message})
