"""Replays offline writes against the live backend."""

from typing import Any

import httpx
import structlog

from ..db import (
    ID_FIELDS,
    NUTRITION_PLANS,
    PROGRESS_DATA,
    WORKOUT_PLANS,
    CacheRepository,
    PendingRequestRepository,
)
from ..errors import BackendError
from ..models.identifiers import TemporaryId, id_key, parse_entity_id
from ..models.sync import EntityRef, PendingRequest, SyncResult
from .availability import BackendStatus
from .fallback import FACADES

logger = structlog.get_logger(__name__)

# bucket -> (service, create method, update method, response key)
BUCKET_TARGETS = {
    WORKOUT_PLANS: ("workout", "create_plan", "update_plan", "plan"),
    NUTRITION_PLANS: ("nutrition", "create_plan", "update_plan", "plan"),
    PROGRESS_DATA: ("progress", "log_progress", "update_progress", "progress"),
}


class SyncService:
    """Pushes cached entities and queued calls to the backend.

    Buckets are processed one entity at a time, in order. Queue entries
    are removed only when their replay succeeded; everything else stays
    queued for the next pass.
    """

    def __init__(
        self,
        live: dict[str, Any],
        cache: CacheRepository,
        queue: PendingRequestRepository,
        status: BackendStatus | None = None,
    ):
        self.live = live
        self.cache = cache
        self.queue = queue
        self.status = status

    async def sync_all(self) -> SyncResult:
        """Run one synchronization pass. Never raises."""
        try:
            return await self._sync_all()
        except Exception as e:
            logger.exception("sync_aborted")
            return SyncResult(
                success=False,
                message=f"Sync failed: {e}",
                retained=await self._safe_count(),
                errors=[str(e)],
            )

    async def _sync_all(self) -> SyncResult:
        pending = await self.queue.list_pending()
        if not pending:
            logger.info("sync_nothing_pending")
            return SyncResult(success=True, message="Nothing to synchronize")

        logger.info("sync_started", pending=len(pending))
        errors: list[str] = []
        synced_refs: set[str] = set()
        failed_refs: set[str] = set()
        replayed = failed = 0

        for bucket in BUCKET_TARGETS:
            for entity in await self.cache.get(bucket):
                key = id_key(entity.get(ID_FIELDS[bucket]))
                ok = await self._sync_entity(bucket, entity, errors)
                if ok:
                    replayed += 1
                else:
                    failed += 1
                if key is not None:
                    (synced_refs if ok else failed_refs).add(EntityRef(bucket, key).to_json())

        done: list[int] = []
        for request in pending:
            if request.entity_ref is not None:
                ref = request.entity_ref.to_json()
                if ref in synced_refs:
                    done.append(request.request_id)
                elif ref not in failed_refs:
                    # The entity is gone from the cache; nothing left to send
                    logger.info("sync_stale_request_dropped", request_id=request.request_id, entity_ref=ref)
                    done.append(request.request_id)
                continue

            if await self._replay(request, errors):
                replayed += 1
                done.append(request.request_id)
            else:
                failed += 1

        await self.queue.remove(done)
        retained = await self.queue.count_pending()

        if replayed and self.status is not None:
            await self.status.mark_available()

        logger.info("sync_finished", replayed=replayed, failed=failed, retained=retained)
        if failed:
            return SyncResult(
                success=False,
                message=(
                    f"Sync finished with {failed} failure(s); "
                    f"{retained} request(s) kept for retry"
                ),
                replayed=replayed,
                failed=failed,
                retained=retained,
                errors=errors,
            )
        return SyncResult(
            success=True,
            message=f"Sync completed: {replayed} item(s) sent to the server",
            replayed=replayed,
            retained=retained,
        )

    async def _sync_entity(self, bucket: str, entity: dict, errors: list[str]) -> bool:
        """Create or update one cached entity on the server.

        Temporary entities are created without their local id and then
        rewritten in the cache under the server-assigned id.
        """
        service_name, create_method, update_method, response_key = BUCKET_TARGETS[bucket]
        service = self.live.get(service_name)
        id_field = ID_FIELDS[bucket]
        raw_id = entity.get(id_field)
        payload = {k: v for k, v in entity.items() if k != id_field}

        if service is None:
            logger.error("sync_service_missing", bucket=bucket, service=service_name)
            errors.append(f"{bucket} {raw_id}: no live {service_name} service")
            return False

        try:
            entity_id = parse_entity_id(raw_id)
            if entity_id is None or isinstance(entity_id, TemporaryId):
                response = await getattr(service, create_method)(payload)
                created = response.entity(response_key, id_field)
                if created and created.get(id_field) is not None:
                    replaced = await self.cache.replace_entity(
                        bucket, id_key(raw_id), {**entity, **created}
                    )
                    logger.info(
                        "sync_entity_created",
                        bucket=bucket,
                        local_id=id_key(raw_id),
                        server_id=created[id_field],
                        replaced=replaced,
                    )
                else:
                    logger.warning("sync_create_without_id", bucket=bucket, local_id=id_key(raw_id))
            else:
                await getattr(service, update_method)(raw_id, payload)
                logger.info("sync_entity_updated", bucket=bucket, server_id=entity_id.server_id)
        except (BackendError, httpx.HTTPError, ValueError) as e:
            logger.warning("sync_entity_failed", bucket=bucket, entity_id=raw_id, error=str(e))
            errors.append(f"{bucket} {raw_id}: {e}")
            return False
        return True

    async def _replay(self, request: PendingRequest, errors: list[str]) -> bool:
        """Replay a queued call that has no cached entity behind it."""
        facade = FACADES.get(request.service)
        service = self.live.get(request.service)
        if facade is None or service is None or request.method not in facade.WRITES:
            logger.error("sync_request_not_replayable", request=request.describe(), request_id=request.request_id)
            errors.append(f"{request.describe()}: not replayable")
            return False

        try:
            await getattr(service, request.method)(*request.args)
        except (BackendError, httpx.HTTPError, TypeError) as e:
            logger.warning(
                "sync_replay_failed",
                request=request.describe(),
                request_id=request.request_id,
                error=str(e),
            )
            errors.append(f"{request.describe()}: {e}")
            return False
        logger.info("sync_replayed", request=request.describe(), request_id=request.request_id)
        return True

    async def _safe_count(self) -> int:
        try:
            return await self.queue.count_pending()
        except Exception:
            logger.exception("sync_count_failed")
            return 0
