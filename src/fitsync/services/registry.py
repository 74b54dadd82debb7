"""Wiring of clients, cache, facades and background services."""

from typing import Any

import httpx
import structlog

from ..chat import ChatBridge, build_transport
from ..clients import mock
from ..clients.api import ApiClient
from ..clients.live import (
    LiveAIService,
    LiveAuthService,
    LiveExerciseService,
    LiveNutritionService,
    LiveProgressService,
    LiveUserService,
    LiveWorkoutService,
)
from ..config import Settings
from ..db import TOKEN, CacheRepository, PendingRequestRepository, init_db
from .availability import AvailabilityProbe, BackendStatus
from .fallback import (
    FallbackAIService,
    FallbackAuthService,
    FallbackExerciseService,
    FallbackNutritionService,
    FallbackProgressService,
    FallbackUserService,
    FallbackWorkoutService,
)
from .preferences import PreferencesService
from .sync import SyncService

logger = structlog.get_logger(__name__)


class ServiceRegistry:
    """Everything a command needs, built from one Settings object.

    Use as an async context manager so the HTTP client gets closed.
    """

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
        chat_transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings
        self.cache = CacheRepository(settings.db_path)
        self.queue = PendingRequestRepository(settings.db_path)
        self.status = BackendStatus(self.cache)
        self.api = ApiClient(
            settings.api_base_url,
            timeout=settings.request_timeout,
            token_provider=self.get_token,
            transport=transport,
        )

        self.live: dict[str, Any] = {
            "workout": LiveWorkoutService(self.api),
            "nutrition": LiveNutritionService(self.api),
            "progress": LiveProgressService(self.api),
            "exercise": LiveExerciseService(self.api),
            "user": LiveUserService(self.api),
            "auth": LiveAuthService(self.api),
            "ai": LiveAIService(self.api),
        }
        deps = (self.cache, self.queue, self.status)
        self.workout = FallbackWorkoutService(self.live["workout"], mock.MockWorkoutService(), *deps)
        self.nutrition = FallbackNutritionService(self.live["nutrition"], mock.MockNutritionService(), *deps)
        self.progress = FallbackProgressService(self.live["progress"], mock.MockProgressService(), *deps)
        self.exercise = FallbackExerciseService(self.live["exercise"], mock.MockExerciseService(), *deps)
        self.user = FallbackUserService(self.live["user"], mock.MockUserService(), *deps)
        self.auth = FallbackAuthService(self.live["auth"], mock.MockAuthService(), *deps)
        self.ai = FallbackAIService(self.live["ai"], mock.MockAIService(), *deps)

        self.probe = AvailabilityProbe(
            self.api,
            self.status,
            self.queue,
            timeout=settings.health_timeout,
            interval=settings.probe_interval,
        )
        self.sync = SyncService(self.live, self.cache, self.queue, self.status)
        self.preferences = PreferencesService(self.cache, self.queue, settings.default_user_id)
        self.chat = ChatBridge(
            build_transport(settings, self.api, self.get_token, transport=chat_transport),
            self.workout,
            self.nutrition,
            self.progress,
            self.exercise,
        )

    async def __aenter__(self) -> "ServiceRegistry":
        await self.start()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def start(self) -> None:
        """Create the schema if needed and load the persisted state."""
        self.settings.data_dir.mkdir(parents=True, exist_ok=True)
        await init_db(self.settings.db_path)
        await self.status.load()
        logger.debug("services_started", db_path=str(self.settings.db_path), available=self.status.available)

    async def aclose(self) -> None:
        await self.api.aclose()

    async def get_token(self) -> str | None:
        return await self.cache.get_raw(TOKEN)

    async def set_token(self, token: str | None) -> None:
        if token:
            await self.cache.set_raw(TOKEN, token)
        else:
            await self.cache.delete(TOKEN)
