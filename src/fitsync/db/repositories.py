"""Data access layer for the local cache and the pending-request queue."""

import json
from datetime import datetime
from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from ..models.identifiers import id_key, new_temporary_id
from ..models.sync import EntityRef, PendingRequest
from .engine import ID_FIELDS, NUTRITION_PLANS, PROGRESS_DATA, WORKOUT_PLANS, get_db_path

logger = structlog.get_logger(__name__)


class CacheRepository:
    """Durable key-value cache of entity buckets and small settings.

    Entity buckets hold JSON lists of plain dicts. Reads never raise on
    missing or corrupt values; they return the default instead.
    """

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def get_raw(self, key: str) -> str | None:
        """Get the stored string for a key."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute("SELECT value FROM kv_store WHERE key = ?", (key,))
            row = await cursor.fetchone()
            return row[0] if row else None

    async def set_raw(self, key: str, value: str) -> None:
        """Store a string under a key."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                INSERT OR REPLACE INTO kv_store (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                """,
                (key, value),
            )
            await db.commit()

    async def delete(self, key: str) -> None:
        """Remove a key."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("DELETE FROM kv_store WHERE key = ?", (key,))
            await db.commit()

    async def get_value(self, key: str, default: Any = None) -> Any:
        """Get a JSON value, falling back to default if absent or corrupt."""
        raw = await self.get_raw(key)
        return self._decode(key, raw, default)

    async def set_value(self, key: str, value: Any) -> None:
        """Serialize and store a JSON value."""
        await self.set_raw(key, json.dumps(value, default=str))

    async def get(self, bucket: str) -> list[dict]:
        """Get the entity list stored in a bucket."""
        value = await self.get_value(bucket, [])
        if not isinstance(value, list):
            logger.warning("cache_bucket_not_a_list", bucket=bucket)
            return []
        return value

    async def set(self, bucket: str, entities: list[dict]) -> None:
        """Overwrite a bucket with a list of entities."""
        await self.set_value(bucket, entities)

    async def upsert_workout_plan(self, plan: dict) -> dict:
        """Insert or merge a workout plan; see _upsert."""
        return await self._upsert(WORKOUT_PLANS, plan, refresh_updated=True)

    async def upsert_nutrition_plan(self, plan: dict) -> dict:
        """Insert or merge a nutrition plan; see _upsert."""
        return await self._upsert(NUTRITION_PLANS, plan, refresh_updated=True)

    async def save_progress_entry(self, entry: dict) -> dict:
        """Insert or merge a progress entry; see _upsert."""
        return await self._upsert(PROGRESS_DATA, entry, refresh_updated=False)

    async def upsert(self, bucket: str, entity: dict) -> dict:
        """Insert or merge an entity into any entity bucket."""
        return await self._upsert(bucket, entity, refresh_updated=bucket != PROGRESS_DATA)

    async def find_entity(self, bucket: str, raw_id: Any) -> dict | None:
        """Find a cached entity by identifier."""
        key = id_key(raw_id)
        if key is None:
            return None
        id_field = ID_FIELDS[bucket]
        for entity in await self.get(bucket):
            if id_key(entity.get(id_field)) == key:
                return entity
        return None

    async def replace_entity(self, bucket: str, old_key: str, new_entity: dict) -> bool:
        """Replace the entity whose id key is old_key.

        Used after a temporary entity is created on the server to adopt
        the server-assigned identifier.

        Returns:
            True if an entity was replaced
        """
        id_field = ID_FIELDS[bucket]
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("BEGIN IMMEDIATE")
            entities = await self._read_bucket(db, bucket)
            for index, existing in enumerate(entities):
                if id_key(existing.get(id_field)) == old_key:
                    entities[index] = new_entity
                    await self._write_bucket(db, bucket, entities)
                    await db.commit()
                    return True
            await db.rollback()
        return False

    async def remove_entity(self, bucket: str, raw_id: Any) -> bool:
        """Remove a cached entity by identifier.

        Returns:
            True if an entity was removed
        """
        key = id_key(raw_id)
        if key is None:
            return False
        id_field = ID_FIELDS[bucket]
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("BEGIN IMMEDIATE")
            entities = await self._read_bucket(db, bucket)
            kept = [e for e in entities if id_key(e.get(id_field)) != key]
            if len(kept) == len(entities):
                await db.rollback()
                return False
            await self._write_bucket(db, bucket, kept)
            await db.commit()
        return True

    async def _upsert(self, bucket: str, entity: dict, refresh_updated: bool) -> dict:
        """Insert or merge-replace an entity in a bucket.

        Assigns a client-temporary id when the entity has none, stamps
        created_at when absent and (for plans) always refreshes updated_at.
        The read-modify-write runs in one immediate transaction.
        """
        id_field = ID_FIELDS[bucket]
        entity = dict(entity)
        now = datetime.now().isoformat()

        if entity.get(id_field) in (None, ""):
            entity[id_field] = new_temporary_id().to_json()
        if not entity.get("created_at"):
            entity.pop("created_at", None)

        key = id_key(entity[id_field])

        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("BEGIN IMMEDIATE")
            entities = await self._read_bucket(db, bucket)
            for index, existing in enumerate(entities):
                if key is not None and id_key(existing.get(id_field)) == key:
                    stored = {**existing, **entity}
                    entities[index] = stored
                    break
            else:
                stored = entity
                entities.append(stored)
            if not stored.get("created_at"):
                stored["created_at"] = now
            if refresh_updated:
                stored["updated_at"] = now
            await self._write_bucket(db, bucket, entities)
            await db.commit()

        return stored

    async def _read_bucket(self, db: aiosqlite.Connection, bucket: str) -> list[dict]:
        cursor = await db.execute("SELECT value FROM kv_store WHERE key = ?", (bucket,))
        row = await cursor.fetchone()
        value = self._decode(bucket, row[0] if row else None, [])
        return value if isinstance(value, list) else []

    async def _write_bucket(
        self, db: aiosqlite.Connection, bucket: str, entities: list[dict]
    ) -> None:
        await db.execute(
            """
            INSERT OR REPLACE INTO kv_store (key, value, updated_at)
            VALUES (?, ?, CURRENT_TIMESTAMP)
            """,
            (bucket, json.dumps(entities, default=str)),
        )

    def _decode(self, key: str, raw: str | None, default: Any) -> Any:
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("cache_value_corrupt", key=key)
            return default


class PendingRequestRepository:
    """Durable FIFO queue of write intents awaiting replay.

    Entries leave the queue only through remove() (after a successful
    replay) or an explicit clear().
    """

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def enqueue(self, request: PendingRequest) -> int:
        """Append a request and return its queue id."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """
                INSERT INTO pending_requests (service, method, args, entity_ref, enqueued_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    request.service,
                    request.method,
                    request.args_json(),
                    request.entity_ref.to_json() if request.entity_ref else None,
                    request.enqueued_at.isoformat(),
                ),
            )
            await db.commit()
            request.request_id = cursor.lastrowid
            return cursor.lastrowid

    async def list_pending(self) -> list[PendingRequest]:
        """List queued requests, oldest first."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM pending_requests ORDER BY request_id"
            )
            rows = await cursor.fetchall()
            return [self._row_to_request(row) for row in rows]

    async def count_pending(self) -> int:
        """Number of queued requests."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute("SELECT COUNT(*) FROM pending_requests")
            row = await cursor.fetchone()
            return row[0]

    async def remove(self, request_ids: list[int]) -> int:
        """Remove specific requests by queue id.

        Returns:
            Number of rows removed
        """
        if not request_ids:
            return 0
        placeholders = ", ".join("?" for _ in request_ids)
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                f"DELETE FROM pending_requests WHERE request_id IN ({placeholders})",
                tuple(request_ids),
            )
            await db.commit()
            return cursor.rowcount

    async def remove_for_entity(self, ref: EntityRef) -> int:
        """Remove every queued request that concerns one cached entity."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "DELETE FROM pending_requests WHERE entity_ref = ?", (ref.to_json(),)
            )
            await db.commit()
            return cursor.rowcount

    async def clear(self) -> None:
        """Drop every queued request."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("DELETE FROM pending_requests")
            await db.commit()

    def _row_to_request(self, row: aiosqlite.Row) -> PendingRequest:
        """Convert a database row to a PendingRequest."""
        try:
            args = json.loads(row["args"])
        except json.JSONDecodeError:
            logger.warning("pending_request_args_corrupt", request_id=row["request_id"])
            args = []
        return PendingRequest(
            request_id=row["request_id"],
            service=row["service"],
            method=row["method"],
            args=args,
            entity_ref=EntityRef.from_json(row["entity_ref"]),
            enqueued_at=datetime.fromisoformat(row["enqueued_at"]),
        )
