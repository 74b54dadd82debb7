"""Tests for replaying offline writes."""

import pytest

from fitsync.clients import ApiResponse, mock
from fitsync.clients.live import (
    LiveNutritionService,
    LiveProgressService,
    LiveUserService,
    LiveWorkoutService,
)
from fitsync.db import ID_FIELDS, PROGRESS_DATA, WORKOUT_PLANS
from fitsync.errors import BackendError
from fitsync.models import EntityRef, PendingRequest
from fitsync.models.identifiers import id_key, is_temporary
from fitsync.services import FallbackProgressService, SyncService


class RecordingService:
    """Live service stand-in that records calls and can be told to fail."""

    def __init__(self, fail=False):
        self.calls = []
        self.fail = fail

    def __getattr__(self, name):
        async def call(*args):
            self.calls.append((name, args))
            if self.fail:
                raise BackendError(f"{name} failed", status_code=500)
            return ApiResponse(data={"message": "ok"})

        return call


@pytest.fixture
def live(live_api):
    return {
        "workout": LiveWorkoutService(live_api),
        "nutrition": LiveNutritionService(live_api),
        "progress": LiveProgressService(live_api),
        "user": LiveUserService(live_api),
    }


@pytest.fixture
def sync_service(live, cache, queue, status):
    return SyncService(live, cache, queue, status)


async def cache_and_queue(cache, queue, bucket, entity, service, method):
    stored = await cache.upsert(bucket, entity)
    await queue.enqueue(
        PendingRequest(
            service=service,
            method=method,
            args=[entity],
            entity_ref=EntityRef(bucket, id_key(stored[ID_FIELDS[bucket]])),
        )
    )
    return stored


class TestSyncService:
    """Tests for SyncService."""

    async def test_nothing_pending(self, sync_service):
        result = await sync_service.sync_all()

        assert result.success
        assert result.message == "Nothing to synchronize"
        assert result.replayed == 0

    @pytest.mark.parametrize(
        "raw_id, expected_method",
        [
            (1_000_000_000, "update_progress"),
            (1_000_000_001, "log_progress"),
        ],
    )
    async def test_create_or_update_by_id(self, cache, queue, raw_id, expected_method):
        """Ids above 1_000_000_000 are local and get created; the rest are updated."""
        progress = RecordingService()
        service = SyncService({"progress": progress}, cache, queue)
        await cache_and_queue(
            cache, queue, PROGRESS_DATA, {"progress_id": raw_id, "weight": 75}, "progress", "log_progress"
        )

        await service.sync_all()

        assert [name for name, _ in progress.calls] == [expected_method]

    async def test_create_strips_local_id(self, cache, queue):
        progress = RecordingService()
        service = SyncService({"progress": progress}, cache, queue)
        await cache_and_queue(
            cache, queue, PROGRESS_DATA, {"progress_id": 1_700_000_000_000, "weight": 75}, "progress", "log_progress"
        )

        await service.sync_all()

        (_, (payload,)) = progress.calls[0]
        assert "progress_id" not in payload
        assert payload["weight"] == 75

    async def test_failed_entries_are_retained(self, cache, queue):
        """Requests that failed stay queued for the next pass instead of being cleared."""
        progress = RecordingService(fail=True)
        service = SyncService({"progress": progress}, cache, queue)
        await cache_and_queue(cache, queue, PROGRESS_DATA, {"weight": 75}, "progress", "log_progress")

        result = await service.sync_all()

        assert not result.success
        assert result.failed == 1
        assert result.retained == 1
        assert "1 request(s) kept for retry" in result.message
        assert await queue.count_pending() == 1

    async def test_missing_service_fails_only_its_entities(self, cache, queue):
        """An entity whose service is not registered fails alone; the rest still sync."""
        progress = RecordingService()
        service = SyncService({"progress": progress}, cache, queue)
        await cache_and_queue(cache, queue, WORKOUT_PLANS, {"plan_name": "Fuerza"}, "workout", "create_plan")
        await cache_and_queue(cache, queue, PROGRESS_DATA, {"weight": 75}, "progress", "log_progress")

        result = await service.sync_all()

        assert not result.success
        assert result.replayed == 1
        assert result.failed == 1
        assert [name for name, _ in progress.calls] == ["log_progress"]
        (remaining,) = await queue.list_pending()
        assert remaining.describe() == "workout.create_plan"

    async def test_partial_failure_removes_only_successes(self, cache, queue):
        user = RecordingService()
        workout = RecordingService(fail=True)
        service = SyncService({"user": user, "workout": workout}, cache, queue)
        await queue.enqueue(PendingRequest(service="workout", method="log_workout", args=[{"session_id": 1}]))
        await queue.enqueue(PendingRequest(service="user", method="update_preferences", args=[1, {"dark_mode": True}]))

        result = await service.sync_all()

        assert result.replayed == 1
        assert result.failed == 1
        (remaining,) = await queue.list_pending()
        assert remaining.describe() == "workout.log_workout"

    async def test_reads_are_not_replayed(self, cache, queue):
        workout = RecordingService()
        service = SyncService({"workout": workout}, cache, queue)
        await queue.enqueue(PendingRequest(service="workout", method="get_plans", args=[1]))

        result = await service.sync_all()

        assert workout.calls == []
        assert not result.success
        assert await queue.count_pending() == 1

    async def test_stale_entity_requests_dropped(self, cache, queue):
        service = SyncService({"workout": RecordingService()}, cache, queue)
        await queue.enqueue(
            PendingRequest(
                service="workout",
                method="create_plan",
                args=[{"plan_name": "Gone"}],
                entity_ref=EntityRef(WORKOUT_PLANS, "tmp:1700000000000"),
            )
        )

        result = await service.sync_all()

        assert result.success
        assert await queue.count_pending() == 0

    async def test_temporary_id_replaced_with_server_id(self, backend, cache, queue, sync_service):
        stored = await cache_and_queue(
            cache, queue, WORKOUT_PLANS, {"plan_name": "Fuerza"}, "workout", "create_plan"
        )
        assert is_temporary(stored["plan_id"])

        result = await sync_service.sync_all()

        assert result.success
        plans = await cache.get(WORKOUT_PLANS)
        assert [p["plan_id"] for p in plans] == [101]
        assert backend.workout_plans[101]["plan_name"] == "Fuerza"
        assert ("POST", "/api/workouts/plans") in backend.calls

    async def test_persisted_entity_updated(self, backend, cache, queue, sync_service):
        await cache_and_queue(
            cache, queue, WORKOUT_PLANS, {"plan_id": 7, "plan_name": "Editado"}, "workout", "update_plan"
        )

        await sync_service.sync_all()

        assert ("PUT", "/api/workouts/plans/7") in backend.calls
        assert backend.workout_plans[7]["plan_name"] == "Editado"

    async def test_success_marks_backend_available(self, sync_service, status, queue):
        await status.mark_unavailable()
        await queue.enqueue(PendingRequest(service="user", method="update_preferences", args=[1, {"dark_mode": True}]))

        await sync_service.sync_all()

        assert status.available is True

    async def test_unexpected_error_is_reported_not_raised(self, cache, queue):
        class ExplodingCache:
            async def get(self, bucket):
                raise RuntimeError("disk on fire")

        await queue.enqueue(PendingRequest(service="user", method="update_preferences", args=[1, {}]))
        service = SyncService({}, ExplodingCache(), queue)

        result = await service.sync_all()

        assert not result.success
        assert "disk on fire" in result.message
        assert result.retained == 1


class TestOfflineRoundTrip:
    async def test_progress_logged_offline_then_synced(self, backend, live, cache, queue, status):
        """A weight logged while offline is served locally, then created on the server."""
        backend.down = True
        facade = FallbackProgressService(live["progress"], mock.MockProgressService(), cache, queue, status)

        await facade.log_progress({"user_id": 1, "tracking_date": "2025-04-01", "weight": 75})
        listed = await facade.get_progress(1)

        assert listed.source == "cache"
        assert [e["weight"] for e in listed.items("progress")] == [75]
        assert await queue.count_pending() == 1

        backend.down = False
        result = await SyncService(live, cache, queue, status).sync_all()

        assert result.success
        assert "Sync completed" in result.message
        assert await queue.count_pending() == 0
        (created,) = backend.progress.values()
        assert created["weight"] == 75
        assert created["tracking_date"] == "2025-04-01"
        assert created["progress_id"] == 101
        assert [e["progress_id"] for e in await cache.get(PROGRESS_DATA)] == [101]
