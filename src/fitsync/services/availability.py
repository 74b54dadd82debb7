"""Backend availability state and the periodic health probe."""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Awaitable, Callable

import structlog

from ..clients.api import ApiClient
from ..db import BACKEND_AVAILABLE, CacheRepository, PendingRequestRepository
from ..errors import BackendError

logger = structlog.get_logger(__name__)

BACKEND_CHECKED_AT = "backend_checked_at"


class BackendStatus:
    """Process-wide record of whether the backend is reachable.

    Persisted in the cache as the literal "true"/"false" so a new
    process starts from the last known state. Optimistic until told
    otherwise.
    """

    def __init__(self, cache: CacheRepository):
        self.cache = cache
        self.available = True
        self.checked_at: datetime | None = None

    async def load(self) -> bool:
        """Refresh the in-memory state from the cache."""
        raw = await self.cache.get_raw(BACKEND_AVAILABLE)
        self.available = raw != "false"
        checked_at = await self.cache.get_raw(BACKEND_CHECKED_AT)
        self.checked_at = datetime.fromisoformat(checked_at) if checked_at else None
        return self.available

    async def mark_available(self) -> None:
        await self._set(True)

    async def mark_unavailable(self) -> None:
        await self._set(False)

    async def _set(self, available: bool) -> None:
        self.available = available
        self.checked_at = datetime.now()
        await self.cache.set_raw(BACKEND_AVAILABLE, "true" if available else "false")
        await self.cache.set_raw(BACKEND_CHECKED_AT, self.checked_at.isoformat())

    def to_dict(self) -> dict:
        return {
            "available": self.available,
            "checked_at": self.checked_at.isoformat() if self.checked_at else None,
        }


class NotificationKind(str, Enum):
    SYNC_AVAILABLE = "sync_available"
    USING_FALLBACK = "using_fallback"


@dataclass
class Notification:
    """A status change worth telling the user about."""

    kind: NotificationKind
    message: str
    pending_count: int = 0
    timestamp: datetime = field(default_factory=datetime.now)


NotificationCallback = Callable[[Notification], Awaitable[None]]


class AvailabilityProbe:
    """Periodically checks the backend health endpoint.

    On the unavailable -> available edge with writes still queued, emits
    one SYNC_AVAILABLE notification; replaying the queue is left to the
    user. Each failed check emits USING_FALLBACK.
    """

    def __init__(
        self,
        api: ApiClient,
        status: BackendStatus,
        queue: PendingRequestRepository,
        timeout: float = 3.0,
        interval: float = 30.0,
    ):
        self.api = api
        self.status = status
        self.queue = queue
        self.timeout = timeout
        self.interval = interval
        self._callbacks: list[NotificationCallback] = []
        self._lock = asyncio.Lock()
        self._stopped = asyncio.Event()
        self._tasks: set[asyncio.Task] = set()

    def add_listener(self, callback: NotificationCallback) -> None:
        """Register an async callback for notifications."""
        self._callbacks.append(callback)

    async def check(self) -> bool:
        """Run one health check and update the persisted state.

        Returns:
            True if the backend answered
        """
        async with self._lock:
            was_available = await self.status.load()
            try:
                await self.api.get("", timeout=self.timeout)
            except BackendError as e:
                logger.info("backend_unreachable", error=str(e))
                await self.status.mark_unavailable()
                await self._emit(
                    Notification(
                        kind=NotificationKind.USING_FALLBACK,
                        message="Backend unreachable, working offline with local data",
                        pending_count=await self.queue.count_pending(),
                    )
                )
                return False

            await self.status.mark_available()
            if not was_available:
                pending = await self.queue.count_pending()
                logger.info("backend_reconnected", pending=pending)
                if pending:
                    await self._emit(
                        Notification(
                            kind=NotificationKind.SYNC_AVAILABLE,
                            message=f"Backend is back. {pending} pending change(s) ready to sync",
                            pending_count=pending,
                        )
                    )
            return True

    async def tick(self) -> bool | None:
        """Run a check unless one is already in flight.

        Returns:
            The check result, or None when the tick was skipped
        """
        if self._lock.locked():
            logger.warning("probe_tick_skipped", reason="previous check still running")
            return None
        return await self.check()

    async def run(self) -> None:
        """Check at startup and then every interval until stop() is called."""
        self._stopped.clear()
        logger.info("probe_started", interval=self.interval)
        while not self._stopped.is_set():
            # Checks run as tasks so a slow one can't delay the schedule
            task = asyncio.create_task(self.tick())
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                pass
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        logger.info("probe_stopped")

    def stop(self) -> None:
        self._stopped.set()

    async def _emit(self, notification: Notification) -> None:
        for callback in self._callbacks:
            await callback(notification)
