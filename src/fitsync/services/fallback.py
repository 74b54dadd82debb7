"""Service facades that fall back to local data when the backend is down.

Every facade method goes through FallbackService._invoke:

1. If the backend is known to be unavailable, skip the live call.
2. Otherwise call the live service. On success, mark the backend
   available, mirror written plans/progress into the cache and return.
3. On failure (or after the skip), mark the backend unavailable, record
   mutating calls in the cache and the pending-request queue, then serve
   cached entities for plan/progress reads or the mock dataset.

Facade methods never raise for backend problems; the returned
ApiResponse.source says where the data came from.
"""

from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from ..clients.base import ApiResponse
from ..db import (
    ID_FIELDS,
    NUTRITION_PLANS,
    PROGRESS_DATA,
    WORKOUT_PLANS,
    CacheRepository,
    PendingRequestRepository,
)
from ..errors import BackendError, UnsyncedEntityError
from ..models.identifiers import id_key, is_temporary
from ..models.sync import EntityRef, PendingRequest
from .availability import BackendStatus

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class WriteOp:
    """How a mutating method touches the local cache.

    kind is "create", "update", "delete" or "call". Calls carry no cached
    entity and are replayed verbatim by sync.
    """

    kind: str
    bucket: str | None = None
    response_key: str | None = None


@dataclass(frozen=True)
class CachedRead:
    """A read that can be answered from a cache bucket."""

    bucket: str
    response_key: str
    children_key: str | None = None  # set for single-entity lookups


class FallbackService:
    """Generic live/cache/mock dispatcher for one domain service.

    Subclasses declare their fixed method set as thin wrappers over
    _invoke, plus the WRITES and READS tables describing cache behaviour.
    """

    service_name: str = ""
    WRITES: dict[str, WriteOp] = {}
    READS: dict[str, CachedRead] = {}

    def __init__(
        self,
        live: Any,
        mock: Any,
        cache: CacheRepository,
        queue: PendingRequestRepository,
        status: BackendStatus,
    ):
        self.live = live
        self.mock = mock
        self.cache = cache
        self.queue = queue
        self.status = status

    async def _invoke(self, method: str, *args: Any) -> ApiResponse:
        op = self.WRITES.get(method)
        if self.status.available:
            try:
                response = await getattr(self.live, method)(*args)
            except UnsyncedEntityError as e:
                # Local-only entity; the backend itself is fine
                logger.debug("live_call_local_entity", service=self.service_name, method=method, error=str(e))
            except (BackendError, httpx.HTTPError) as e:
                logger.warning("live_call_failed", service=self.service_name, method=method, error=str(e))
                await self.status.mark_unavailable()
            else:
                await self.status.mark_available()
                if op is not None:
                    await self._mirror(op, args, response)
                return response
        else:
            logger.debug("live_call_skipped", service=self.service_name, method=method)

        return await self._fallback(method, op, args)

    async def _fallback(self, method: str, op: WriteOp | None, args: tuple) -> ApiResponse:
        stored = None
        if op is not None:
            stored = await self._record_offline_write(method, op, args)

        if op is None and method in self.READS:
            cached = await self._read_cache(self.READS[method], args)
            if cached is not None:
                return cached

        response = await getattr(self.mock, method)(*args)
        if stored is not None and isinstance(response.data, dict) and op.response_key:
            return ApiResponse(
                data={**response.data, op.response_key: stored},
                status_code=response.status_code,
                source="cache",
            )
        return response

    async def _record_offline_write(self, method: str, op: WriteOp, args: tuple) -> dict | None:
        """Persist the attempted write locally and queue it for replay.

        Returns:
            The cached entity for create/update writes, else None
        """
        if op.kind == "create":
            stored = await self.cache.upsert(op.bucket, dict(args[-1] or {}))
            await self._enqueue(method, args, self._ref(op.bucket, stored))
            return stored

        if op.kind == "update":
            entity_id, data = args[-2], args[-1]
            id_field = ID_FIELDS[op.bucket]
            existing = await self.cache.find_entity(op.bucket, entity_id)
            entity = {**(data or {}), id_field: existing[id_field] if existing else entity_id}
            stored = await self.cache.upsert(op.bucket, entity)
            await self._enqueue(method, args, self._ref(op.bucket, stored))
            return stored

        if op.kind == "delete":
            entity_id = args[0]
            await self.cache.remove_entity(op.bucket, entity_id)
            key = id_key(entity_id)
            if key is not None and is_temporary(entity_id):
                # Never reached the server: drop its queued writes instead
                dropped = await self.queue.remove_for_entity(EntityRef(op.bucket, key))
                logger.info("offline_delete_local_entity", bucket=op.bucket, key=key, dropped=dropped)
                return None
            await self._enqueue(method, args, None)
            return None

        await self._enqueue(method, args, None)
        return None

    async def _read_cache(self, read: CachedRead, args: tuple) -> ApiResponse | None:
        if read.children_key is None:
            entities = await self.cache.get(read.bucket)
            if not entities:
                return None
            return ApiResponse(data={read.response_key: entities}, source="cache")

        entity = await self.cache.find_entity(read.bucket, args[0])
        if entity is None:
            return None
        return ApiResponse(
            data={read.response_key: entity, read.children_key: entity.get(read.children_key, [])},
            source="cache",
        )

    async def _mirror(self, op: WriteOp, args: tuple, response: ApiResponse) -> None:
        """Copy a successful live write into the cache.

        The backend echoes only the entity row, so the written payload
        (with its sessions or meals) is merged under the server's fields.
        """
        if op.bucket is None:
            return
        if op.kind == "delete":
            await self.cache.remove_entity(op.bucket, args[0])
            return
        if op.kind not in ("create", "update"):
            return
        id_field = ID_FIELDS[op.bucket]
        written = args[-1] if isinstance(args[-1], dict) else {}
        entity = {**written, **(response.entity(op.response_key, id_field) or {})}
        if entity.get(id_field) is None and op.kind == "update":
            entity[id_field] = args[-2]
        if entity.get(id_field) is None:
            logger.debug("mirror_skipped", service=self.service_name, reason="no entity id")
            return
        await self.cache.upsert(op.bucket, entity)

    async def _enqueue(self, method: str, args: tuple, ref: EntityRef | None) -> None:
        request = PendingRequest(
            service=self.service_name,
            method=method,
            args=list(args),
            entity_ref=ref,
        )
        request_id = await self.queue.enqueue(request)
        logger.info(
            "request_queued",
            service=self.service_name,
            method=method,
            request_id=request_id,
            entity_ref=ref.to_json() if ref else None,
        )

    def _ref(self, bucket: str, entity: dict) -> EntityRef:
        return EntityRef(bucket=bucket, key=id_key(entity[ID_FIELDS[bucket]]))


class FallbackWorkoutService(FallbackService):
    service_name = "workout"
    WRITES = {
        "create_plan": WriteOp("create", WORKOUT_PLANS, "plan"),
        "update_plan": WriteOp("update", WORKOUT_PLANS, "plan"),
        "delete_plan": WriteOp("delete", WORKOUT_PLANS),
        "log_workout": WriteOp("call"),
    }
    READS = {
        "get_plans": CachedRead(WORKOUT_PLANS, "plans"),
        "get_plan": CachedRead(WORKOUT_PLANS, "plan", "sessions"),
    }

    async def get_plans(self, user_id: int) -> ApiResponse:
        return await self._invoke("get_plans", user_id)

    async def get_plan(self, plan_id: Any) -> ApiResponse:
        return await self._invoke("get_plan", plan_id)

    async def create_plan(self, data: dict) -> ApiResponse:
        return await self._invoke("create_plan", data)

    async def update_plan(self, plan_id: Any, data: dict) -> ApiResponse:
        return await self._invoke("update_plan", plan_id, data)

    async def delete_plan(self, plan_id: Any) -> ApiResponse:
        return await self._invoke("delete_plan", plan_id)

    async def get_workout_logs(self, user_id: int) -> ApiResponse:
        return await self._invoke("get_workout_logs", user_id)

    async def log_workout(self, data: dict) -> ApiResponse:
        return await self._invoke("log_workout", data)


class FallbackNutritionService(FallbackService):
    service_name = "nutrition"
    WRITES = {
        "create_plan": WriteOp("create", NUTRITION_PLANS, "plan"),
        "update_plan": WriteOp("update", NUTRITION_PLANS, "plan"),
        "delete_plan": WriteOp("delete", NUTRITION_PLANS),
        "log_meal": WriteOp("call"),
    }
    READS = {
        "get_plans": CachedRead(NUTRITION_PLANS, "plans"),
        "get_plan": CachedRead(NUTRITION_PLANS, "plan", "meals"),
    }

    async def get_plans(self, user_id: int) -> ApiResponse:
        return await self._invoke("get_plans", user_id)

    async def get_plan(self, plan_id: Any) -> ApiResponse:
        return await self._invoke("get_plan", plan_id)

    async def create_plan(self, data: dict) -> ApiResponse:
        return await self._invoke("create_plan", data)

    async def update_plan(self, plan_id: Any, data: dict) -> ApiResponse:
        return await self._invoke("update_plan", plan_id, data)

    async def delete_plan(self, plan_id: Any) -> ApiResponse:
        return await self._invoke("delete_plan", plan_id)

    async def log_meal(self, meal_id: int, completion: dict) -> ApiResponse:
        return await self._invoke("log_meal", meal_id, completion)


class FallbackProgressService(FallbackService):
    service_name = "progress"
    WRITES = {
        "log_progress": WriteOp("create", PROGRESS_DATA, "progress"),
        "update_progress": WriteOp("update", PROGRESS_DATA, "progress"),
        "delete_progress": WriteOp("delete", PROGRESS_DATA),
    }
    READS = {
        "get_progress": CachedRead(PROGRESS_DATA, "progress"),
    }

    async def get_progress(self, user_id: int) -> ApiResponse:
        return await self._invoke("get_progress", user_id)

    async def log_progress(self, data: dict) -> ApiResponse:
        return await self._invoke("log_progress", data)

    async def update_progress(self, progress_id: Any, data: dict) -> ApiResponse:
        return await self._invoke("update_progress", progress_id, data)

    async def delete_progress(self, progress_id: Any) -> ApiResponse:
        return await self._invoke("delete_progress", progress_id)


class FallbackExerciseService(FallbackService):
    service_name = "exercise"
    WRITES = {
        "suggest_exercise": WriteOp("call"),
        "create_exercise": WriteOp("call"),
        "update_exercise": WriteOp("call"),
        "delete_exercise": WriteOp("call"),
    }

    async def get_exercises(self, filters: dict | None = None) -> ApiResponse:
        return await self._invoke("get_exercises", filters)

    async def get_exercise(self, exercise_id: int) -> ApiResponse:
        return await self._invoke("get_exercise", exercise_id)

    async def suggest_exercise(self, data: dict) -> ApiResponse:
        return await self._invoke("suggest_exercise", data)

    async def create_exercise(self, data: dict) -> ApiResponse:
        return await self._invoke("create_exercise", data)

    async def update_exercise(self, exercise_id: int, data: dict) -> ApiResponse:
        return await self._invoke("update_exercise", exercise_id, data)

    async def delete_exercise(self, exercise_id: int) -> ApiResponse:
        return await self._invoke("delete_exercise", exercise_id)


class FallbackUserService(FallbackService):
    service_name = "user"
    WRITES = {
        "update_profile": WriteOp("call"),
        "create_goal": WriteOp("call"),
        "update_goal": WriteOp("call"),
        "update_preferences": WriteOp("call"),
    }

    async def get_profile(self, user_id: int) -> ApiResponse:
        return await self._invoke("get_profile", user_id)

    async def update_profile(self, user_id: int, data: dict) -> ApiResponse:
        return await self._invoke("update_profile", user_id, data)

    async def get_goals(self, user_id: int) -> ApiResponse:
        return await self._invoke("get_goals", user_id)

    async def create_goal(self, user_id: int, data: dict) -> ApiResponse:
        return await self._invoke("create_goal", user_id, data)

    async def update_goal(self, user_id: int, goal_id: int, data: dict) -> ApiResponse:
        return await self._invoke("update_goal", user_id, goal_id, data)

    async def get_preferences(self, user_id: int) -> ApiResponse:
        return await self._invoke("get_preferences", user_id)

    async def update_preferences(self, user_id: int, data: dict) -> ApiResponse:
        return await self._invoke("update_preferences", user_id, data)


class FallbackAuthService(FallbackService):
    service_name = "auth"

    async def login(self, email: str, password: str) -> ApiResponse:
        return await self._invoke("login", email, password)

    async def register(
        self, email: str, password: str, first_name: str, last_name: str
    ) -> ApiResponse:
        return await self._invoke("register", email, password, first_name, last_name)


class FallbackAIService(FallbackService):
    service_name = "ai"

    async def generate_workout_plan(self, data: dict) -> ApiResponse:
        return await self._invoke("generate_workout_plan", data)

    async def generate_nutrition_plan(self, data: dict) -> ApiResponse:
        return await self._invoke("generate_nutrition_plan", data)

    async def get_advice(self, query: str) -> ApiResponse:
        return await self._invoke("get_advice", query)

    async def send_chat_message(self, message: str) -> ApiResponse:
        return await self._invoke("send_chat_message", message)


FACADES: dict[str, type[FallbackService]] = {
    cls.service_name: cls
    for cls in (
        FallbackWorkoutService,
        FallbackNutritionService,
        FallbackProgressService,
        FallbackExerciseService,
        FallbackUserService,
        FallbackAuthService,
        FallbackAIService,
    )
}
