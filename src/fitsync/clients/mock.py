"""Mock service implementations over the static demo dataset.

Every method succeeds and returns the same envelope shape as the live
backend, so callers never need to tell the two apart.
"""

from datetime import datetime
from typing import Any

from ..data import get_mock
from ..models.identifiers import id_key
from .base import ApiResponse

MOCK_TOKEN = "mock-jwt-token"


def _mock(data: Any) -> ApiResponse:
    return ApiResponse(data=data, status_code=200, source="mock")


def _now() -> str:
    return datetime.now().isoformat()


def _find(items: list[dict], id_field: str, raw_id: Any) -> dict | None:
    key = id_key(raw_id)
    return next((item for item in items if id_key(item.get(id_field)) == key), None)


class MockAuthService:
    async def login(self, email: str, password: str) -> ApiResponse:
        if not email or not password:
            return _mock({"message": "Invalid email or password", "token": None})
        return _mock({"token": MOCK_TOKEN, "user": get_mock("MOCK_USER")})

    async def register(
        self, email: str, password: str, first_name: str, last_name: str
    ) -> ApiResponse:
        if not all((email, password, first_name, last_name)):
            return _mock({"message": "Registration failed", "token": None})
        user = {
            **get_mock("MOCK_USER"),
            "email": email,
            "first_name": first_name,
            "last_name": last_name,
        }
        return _mock({"token": MOCK_TOKEN, "user": user})


class MockUserService:
    async def get_profile(self, user_id: int) -> ApiResponse:
        return _mock({"user": get_mock("MOCK_USER"), "profile": get_mock("MOCK_PROFILE")})

    async def update_profile(self, user_id: int, data: dict) -> ApiResponse:
        profile = {**get_mock("MOCK_PROFILE"), **data, "updated_at": _now()}
        return _mock({"message": "Profile updated successfully", "profile": profile})

    async def get_goals(self, user_id: int) -> ApiResponse:
        return _mock({"goals": get_mock("MOCK_GOALS")})

    async def create_goal(self, user_id: int, data: dict) -> ApiResponse:
        goal = {
            "goal_id": len(get_mock("MOCK_GOALS")) + 1,
            "user_id": user_id,
            "status": "active",
            **data,
        }
        return _mock({"message": "Goal created successfully", "goal": goal})

    async def update_goal(self, user_id: int, goal_id: int, data: dict) -> ApiResponse:
        goal = _find(get_mock("MOCK_GOALS"), "goal_id", goal_id) or {"goal_id": goal_id}
        return _mock({"message": "Goal updated successfully", "goal": {**goal, **data}})

    async def get_preferences(self, user_id: int) -> ApiResponse:
        return _mock({"preferences": {"receive_notifications": True, "dark_mode": False}})

    async def update_preferences(self, user_id: int, data: dict) -> ApiResponse:
        return _mock({"message": "Preferences saved", "preferences": data})


class MockWorkoutService:
    async def get_plans(self, user_id: int) -> ApiResponse:
        return _mock({"plans": get_mock("MOCK_WORKOUT_PLANS")})

    async def get_plan(self, plan_id: Any) -> ApiResponse:
        plan = _find(get_mock("MOCK_WORKOUT_PLANS"), "plan_id", plan_id)
        return _mock({"plan": plan, "sessions": plan["sessions"] if plan else []})

    async def create_plan(self, data: dict) -> ApiResponse:
        plan = {
            "plan_id": len(get_mock("MOCK_WORKOUT_PLANS")) + 1,
            "user_id": 1,
            **data,
            "created_at": _now(),
            "updated_at": _now(),
        }
        return _mock({"message": "Workout plan created successfully", "plan": plan})

    async def update_plan(self, plan_id: Any, data: dict) -> ApiResponse:
        plan = _find(get_mock("MOCK_WORKOUT_PLANS"), "plan_id", plan_id) or {"plan_id": plan_id}
        plan = {**plan, **data, "updated_at": _now()}
        return _mock({"message": "Workout plan updated successfully", "plan": plan})

    async def delete_plan(self, plan_id: Any) -> ApiResponse:
        return _mock({"message": "Workout plan deleted successfully"})

    async def get_workout_logs(self, user_id: int) -> ApiResponse:
        return _mock({"logs": get_mock("MOCK_WORKOUT_LOGS")})

    async def log_workout(self, data: dict) -> ApiResponse:
        log = {
            "log_id": len(get_mock("MOCK_WORKOUT_LOGS")) + 1,
            "user_id": 1,
            **data,
            "created_at": _now(),
        }
        return _mock({"message": "Workout logged successfully", "log": log})


class MockNutritionService:
    async def get_plans(self, user_id: int) -> ApiResponse:
        return _mock({"plans": get_mock("MOCK_NUTRITION_PLANS")})

    async def get_plan(self, plan_id: Any) -> ApiResponse:
        plan = _find(get_mock("MOCK_NUTRITION_PLANS"), "nutrition_plan_id", plan_id)
        return _mock({"plan": plan, "meals": plan["meals"] if plan else []})

    async def create_plan(self, data: dict) -> ApiResponse:
        plan = {
            "nutrition_plan_id": len(get_mock("MOCK_NUTRITION_PLANS")) + 1,
            "user_id": 1,
            **data,
            "created_at": _now(),
            "updated_at": _now(),
        }
        return _mock({"message": "Nutrition plan created successfully", "plan": plan})

    async def update_plan(self, plan_id: Any, data: dict) -> ApiResponse:
        plan = _find(get_mock("MOCK_NUTRITION_PLANS"), "nutrition_plan_id", plan_id) or {
            "nutrition_plan_id": plan_id
        }
        plan = {**plan, **data, "updated_at": _now()}
        return _mock({"message": "Nutrition plan updated successfully", "plan": plan})

    async def delete_plan(self, plan_id: Any) -> ApiResponse:
        return _mock({"message": "Nutrition plan deleted successfully"})

    async def log_meal(self, meal_id: int, completion: dict) -> ApiResponse:
        return _mock({"message": "Meal logged successfully", "meal_id": meal_id, "completion": completion})


class MockProgressService:
    async def get_progress(self, user_id: int) -> ApiResponse:
        return _mock({"progress": get_mock("MOCK_PROGRESS")})

    async def log_progress(self, data: dict) -> ApiResponse:
        entry = {
            "progress_id": len(get_mock("MOCK_PROGRESS")) + 1,
            "user_id": 1,
            **data,
            "created_at": _now(),
        }
        return _mock({"message": "Progress logged successfully", "progress": entry})

    async def update_progress(self, progress_id: Any, data: dict) -> ApiResponse:
        entry = _find(get_mock("MOCK_PROGRESS"), "progress_id", progress_id) or {
            "progress_id": progress_id
        }
        return _mock({"message": "Progress updated successfully", "progress": {**entry, **data}})

    async def delete_progress(self, progress_id: Any) -> ApiResponse:
        return _mock({"message": "Progress deleted successfully"})


class MockExerciseService:
    async def get_exercises(self, filters: dict | None = None) -> ApiResponse:
        exercises = get_mock("MOCK_EXERCISES")
        filters = filters or {}
        if filters.get("muscle_group"):
            exercises = [e for e in exercises if e["muscle_group"] == filters["muscle_group"]]
        if filters.get("difficulty_level"):
            exercises = [
                e for e in exercises if e["difficulty_level"] == filters["difficulty_level"]
            ]
        return _mock({"exercises": exercises})

    async def get_exercise(self, exercise_id: int) -> ApiResponse:
        exercise = _find(get_mock("MOCK_EXERCISES"), "exercise_id", exercise_id)
        return _mock({"exercise": exercise})

    async def suggest_exercise(self, data: dict) -> ApiResponse:
        exercise = {"exercise_id": len(get_mock("MOCK_EXERCISES")) + 1, **data}
        return _mock({"message": "Exercise suggested successfully", "exercise": exercise})

    async def create_exercise(self, data: dict) -> ApiResponse:
        exercise = {"exercise_id": len(get_mock("MOCK_EXERCISES")) + 1, **data}
        return _mock({"message": "Exercise created successfully", "exercise": exercise})

    async def update_exercise(self, exercise_id: int, data: dict) -> ApiResponse:
        exercise = _find(get_mock("MOCK_EXERCISES"), "exercise_id", exercise_id) or {
            "exercise_id": exercise_id
        }
        return _mock({"message": "Exercise updated successfully", "exercise": {**exercise, **data}})

    async def delete_exercise(self, exercise_id: int) -> ApiResponse:
        return _mock({"message": "Exercise deleted successfully"})


class MockAIService:
    """Canned coaching answers used when the backend AI endpoints are down."""

    async def generate_workout_plan(self, data: dict) -> ApiResponse:
        plan = get_mock("MOCK_WORKOUT_PLANS")[0]
        plan.pop("plan_id", None)
        return _mock({"message": "Plan generado", "plan": plan})

    async def generate_nutrition_plan(self, data: dict) -> ApiResponse:
        plan = get_mock("MOCK_NUTRITION_PLANS")[0]
        plan.pop("nutrition_plan_id", None)
        return _mock({"message": "Plan generado", "plan": plan})

    async def get_advice(self, query: str) -> ApiResponse:
        return _mock(
            {
                "message": (
                    "Mantén la constancia: entrena 3-4 días por semana, "
                    "prioriza la proteína y duerme al menos 7 horas."
                ),
                "query": query,
            }
        )

    async def send_chat_message(self, message: str) -> ApiResponse:
        return await self.get_advice(message)
