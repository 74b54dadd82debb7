"""Tests for the live/cache/mock service facades."""

import asyncio
import inspect

import pytest

from fitsync.clients import ApiResponse, mock
from fitsync.clients.live import LiveNutritionService, LiveProgressService, LiveWorkoutService
from fitsync.db import NUTRITION_PLANS, PROGRESS_DATA, WORKOUT_PLANS
from fitsync.errors import BackendError
from fitsync.models.identifiers import id_key, is_temporary
from fitsync.services.fallback import (
    FACADES,
    FallbackNutritionService,
    FallbackProgressService,
    FallbackUserService,
    FallbackWorkoutService,
)


class BrokenService:
    """Live service whose every method fails."""

    def __init__(self):
        self.calls = []

    def __getattr__(self, name):
        async def fail(*args):
            self.calls.append(name)
            raise BackendError(f"{name} failed", status_code=500)

        return fail


@pytest.fixture
def broken():
    return BrokenService()


MOCKS = {
    "workout": mock.MockWorkoutService,
    "nutrition": mock.MockNutritionService,
    "progress": mock.MockProgressService,
    "exercise": mock.MockExerciseService,
    "user": mock.MockUserService,
    "auth": mock.MockAuthService,
    "ai": mock.MockAIService,
}

SAMPLE_ARGS = {
    "get_plans": (1,),
    "get_plan": (1,),
    "create_plan": ({"plan_name": "Fuerza"},),
    "update_plan": (1, {"plan_name": "Fuerza 2"}),
    "delete_plan": (1,),
    "get_workout_logs": (1,),
    "log_workout": ({"session_id": 1, "status": "completed"},),
    "log_meal": (1, {"status": "completed"}),
    "get_progress": (1,),
    "log_progress": ({"weight": 75},),
    "update_progress": (1, {"weight": 74}),
    "delete_progress": (1,),
    "get_exercises": ({"muscle_group": "Pecho"},),
    "get_exercise": (1,),
    "suggest_exercise": ({"name": "Dominadas"},),
    "create_exercise": ({"name": "Dominadas"},),
    "update_exercise": (1, {"name": "Dominadas lastradas"}),
    "delete_exercise": (1,),
    "get_profile": (1,),
    "update_profile": (1, {"weight": 70}),
    "get_goals": (1,),
    "create_goal": (1, {"goal_type": "weight_loss"}),
    "update_goal": (1, 1, {"status": "completed"}),
    "get_preferences": (1,),
    "update_preferences": (1, {"dark_mode": True}),
    "login": ("ana@example.com", "secret"),
    "register": ("ana@example.com", "secret", "Ana", "García"),
    "generate_workout_plan": ({"goal": "fuerza"},),
    "generate_nutrition_plan": ({"goal": "volumen"},),
    "get_advice": ("¿Cuánta proteína?",),
    "send_chat_message": ("Hola",),
}

FACADE_METHODS = [
    (service_name, method)
    for service_name, facade_cls in FACADES.items()
    for method, value in vars(facade_cls).items()
    if inspect.iscoroutinefunction(value) and not method.startswith("_")
]


class TestTransparency:
    """A facade over a failing backend behaves like the mock service."""

    @pytest.mark.parametrize(
        "facade_cls, mock_cls, method, args, key",
        [
            (FallbackWorkoutService, mock.MockWorkoutService, "get_plans", (1,), "plans"),
            (FallbackNutritionService, mock.MockNutritionService, "get_plans", (1,), "plans"),
            (FallbackProgressService, mock.MockProgressService, "get_progress", (1,), "progress"),
            (FallbackUserService, mock.MockUserService, "get_goals", (1,), "goals"),
        ],
    )
    async def test_reads_match_mock(self, broken, cache, queue, status, facade_cls, mock_cls, method, args, key):
        facade = facade_cls(broken, mock_cls(), cache, queue, status)

        response = await getattr(facade, method)(*args)
        expected = await getattr(mock_cls(), method)(*args)

        assert response.source == "mock"
        assert response.items(key) == expected.items(key)

    def test_every_method_has_sample_args(self):
        assert sorted(SAMPLE_ARGS) == sorted({method for _, method in FACADE_METHODS})

    @pytest.mark.parametrize("service_name, method", FACADE_METHODS)
    async def test_every_method_answers(self, broken, cache, queue, status, service_name, method):
        """No facade method raises while the backend is failing."""
        facade = FACADES[service_name](broken, MOCKS[service_name](), cache, queue, status)

        response = await getattr(facade, method)(*SAMPLE_ARGS[method])

        assert isinstance(response, ApiResponse)
        assert isinstance(response.data, dict)
        assert response.is_fallback

    async def test_failure_marks_unavailable(self, broken, cache, queue, status):
        facade = FallbackWorkoutService(broken, mock.MockWorkoutService(), cache, queue, status)

        await facade.get_plans(1)

        assert status.available is False
        assert await cache.get_raw("backend_available") == "false"

    async def test_fast_fail_skips_live_call(self, broken, cache, queue, status):
        await status.mark_unavailable()
        facade = FallbackWorkoutService(broken, mock.MockWorkoutService(), cache, queue, status)

        await facade.get_plans(1)

        assert broken.calls == []


class TestLiveCalls:
    async def test_success_marks_available(self, live_api, cache, queue, status):
        await status.mark_unavailable()
        status.available = True  # a check said it's back
        facade = FallbackWorkoutService(LiveWorkoutService(live_api), mock.MockWorkoutService(), cache, queue, status)

        response = await facade.get_plans(1)

        assert response.source == "live"
        assert await cache.get_raw("backend_available") == "true"

    async def test_live_create_is_mirrored(self, live_api, cache, queue, status):
        facade = FallbackWorkoutService(LiveWorkoutService(live_api), mock.MockWorkoutService(), cache, queue, status)

        await facade.create_plan({"plan_name": "Fuerza"})

        plans = await cache.get(WORKOUT_PLANS)
        assert [p["plan_id"] for p in plans] == [101]
        assert await queue.count_pending() == 0

    async def test_live_create_mirrors_children(self, backend, live_api, cache, queue, status):
        """Meals written live are still served once the backend goes down."""
        facade = FallbackNutritionService(
            LiveNutritionService(live_api), mock.MockNutritionService(), cache, queue, status
        )
        created = await facade.create_plan({"plan_name": "Volumen", "meals": [{"meal_name": "Desayuno"}]})
        plan_id = created.entity("plan", "nutrition_plan_id")["nutrition_plan_id"]
        assert "meals" not in created.entity("plan")
        backend.down = True

        response = await facade.get_plan(plan_id)

        assert response.source == "cache"
        assert response.data["meals"] == [{"meal_name": "Desayuno"}]

    async def test_live_update_keeps_sessions(self, live_api, cache, queue, status):
        facade = FallbackWorkoutService(LiveWorkoutService(live_api), mock.MockWorkoutService(), cache, queue, status)
        created = await facade.create_plan({"plan_name": "Fuerza"})
        plan_id = created.entity("plan", "plan_id")["plan_id"]

        await facade.update_plan(plan_id, {"plan_name": "Fuerza 2", "sessions": [{"day_of_week": "Lunes"}]})

        (plan,) = await cache.get(WORKOUT_PLANS)
        assert plan["plan_id"] == plan_id
        assert plan["plan_name"] == "Fuerza 2"
        assert plan["sessions"] == [{"day_of_week": "Lunes"}]

    async def test_live_delete_removes_cached_entity(self, live_api, cache, queue, status):
        facade = FallbackWorkoutService(LiveWorkoutService(live_api), mock.MockWorkoutService(), cache, queue, status)
        created = await facade.create_plan({"plan_name": "Fuerza"})

        await facade.delete_plan(created.entity("plan", "plan_id")["plan_id"])

        assert await cache.get(WORKOUT_PLANS) == []

    async def test_local_entity_does_not_flip_status(self, live_api, cache, queue, status):
        """A lookup of a plan that only exists locally is served from cache."""
        facade = FallbackWorkoutService(LiveWorkoutService(live_api), mock.MockWorkoutService(), cache, queue, status)
        stored = await cache.upsert_workout_plan({"plan_name": "Local", "sessions": [{"day_of_week": "Lunes"}]})

        response = await facade.get_plan(stored["plan_id"])

        assert response.source == "cache"
        assert response.entity("plan")["plan_name"] == "Local"
        assert response.data["sessions"] == [{"day_of_week": "Lunes"}]
        assert status.available is True


class TestOfflineWrites:
    async def test_create_caches_and_queues(self, broken, cache, queue, status):
        facade = FallbackProgressService(broken, mock.MockProgressService(), cache, queue, status)

        response = await facade.log_progress({"weight": 75, "tracking_date": "2025-04-01"})

        entry = response.entity("progress", "progress_id")
        assert response.source == "cache"
        assert is_temporary(entry["progress_id"])
        assert await cache.get(PROGRESS_DATA) == [entry]

        (request,) = await queue.list_pending()
        assert request.describe() == "progress.log_progress"
        assert request.entity_ref.key == id_key(entry["progress_id"])

    async def test_cached_list_preferred_over_mock(self, broken, cache, queue, status):
        facade = FallbackProgressService(broken, mock.MockProgressService(), cache, queue, status)
        await facade.log_progress({"weight": 75, "tracking_date": "2025-04-01"})

        response = await facade.get_progress(1)

        assert response.source == "cache"
        assert [e["weight"] for e in response.items("progress")] == [75]

    async def test_update_keeps_cached_id(self, broken, cache, queue, status):
        facade = FallbackNutritionService(broken, mock.MockNutritionService(), cache, queue, status)
        created = await facade.create_plan({"plan_name": "Déficit", "daily_calories": 2000})
        plan_id = created.entity("plan", "nutrition_plan_id")["nutrition_plan_id"]

        await facade.update_plan(plan_id, {"plan_name": "Déficit", "daily_calories": 1800})

        plans = await cache.get(NUTRITION_PLANS)
        assert len(plans) == 1
        assert plans[0]["daily_calories"] == 1800
        assert plans[0]["nutrition_plan_id"] == plan_id
        assert await queue.count_pending() == 2

    async def test_update_keeps_created_at(self, broken, cache, queue, status):
        """An offline update without created_at leaves the original stamp."""
        facade = FallbackWorkoutService(broken, mock.MockWorkoutService(), cache, queue, status)
        created = await facade.create_plan({"plan_name": "Fuerza"})
        stored = created.entity("plan", "plan_id")
        await asyncio.sleep(0.001)

        await facade.update_plan(stored["plan_id"], {"plan_name": "Fuerza 2"})

        (plan,) = await cache.get(WORKOUT_PLANS)
        assert plan["plan_name"] == "Fuerza 2"
        assert plan["created_at"] == stored["created_at"]
        assert plan["updated_at"] > stored["updated_at"]

    async def test_delete_local_entity_drops_queued_writes(self, broken, cache, queue, status):
        facade = FallbackWorkoutService(broken, mock.MockWorkoutService(), cache, queue, status)
        created = await facade.create_plan({"plan_name": "Borrador"})

        await facade.delete_plan(created.entity("plan", "plan_id")["plan_id"])

        assert await cache.get(WORKOUT_PLANS) == []
        assert await queue.count_pending() == 0

    async def test_delete_server_entity_is_queued(self, broken, cache, queue, status):
        await cache.upsert_workout_plan({"plan_id": 7, "plan_name": "Servidor"})
        facade = FallbackWorkoutService(broken, mock.MockWorkoutService(), cache, queue, status)

        await facade.delete_plan(7)

        assert await cache.get(WORKOUT_PLANS) == []
        (request,) = await queue.list_pending()
        assert request.method == "delete_plan"
        assert request.args == [7]
        assert request.entity_ref is None

    async def test_call_writes_are_queued_verbatim(self, broken, cache, queue, status):
        facade = FallbackNutritionService(broken, mock.MockNutritionService(), cache, queue, status)

        response = await facade.log_meal(3, {"status": "completed"})

        assert response.source == "mock"
        (request,) = await queue.list_pending()
        assert request.args == [3, {"status": "completed"}]

    async def test_reads_are_never_queued(self, broken, cache, queue, status):
        facade = FallbackWorkoutService(broken, mock.MockWorkoutService(), cache, queue, status)

        await facade.get_plans(1)
        await facade.get_plan(1)
        await facade.get_workout_logs(1)

        assert await queue.count_pending() == 0

    async def test_offline_after_backend_goes_down(self, backend, live_api, cache, queue, status):
        """The same facade switches to local storage once requests fail."""
        facade = FallbackProgressService(LiveProgressService(live_api), mock.MockProgressService(), cache, queue, status)
        backend.down = True

        response = await facade.log_progress({"weight": 80})

        assert response.is_fallback
        assert status.available is False
        assert await queue.count_pending() == 1
