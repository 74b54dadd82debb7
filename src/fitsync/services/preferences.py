"""Locally stored user preferences."""

from dataclasses import asdict, dataclass, fields

import structlog

from ..db import CacheRepository, PendingRequestRepository
from ..errors import ValidationError
from ..models.sync import PendingRequest

logger = structlog.get_logger(__name__)

KEY_PREFIX = "preferences_"
LANGUAGES = ("es", "en")
UNIT_SYSTEMS = ("metric", "imperial")


@dataclass
class UserPreferences:
    notifications: bool = True
    dark_mode: bool = False
    language: str = "es"
    units: str = "metric"

    def validate(self) -> None:
        if self.language not in LANGUAGES:
            raise ValidationError(
                f"Language must be one of {', '.join(LANGUAGES)}", field="language"
            )
        if self.units not in UNIT_SYSTEMS:
            raise ValidationError(
                f"Units must be one of {', '.join(UNIT_SYSTEMS)}", field="units"
            )

    def to_api(self) -> dict:
        """Payload for POST /users/preferences."""
        return {
            "receive_notifications": self.notifications,
            "dark_mode": self.dark_mode,
            "language": self.language,
            "units": self.units,
        }


class PreferencesService:
    """Reads and writes preferences in the cache.

    Saving always queues a user.update_preferences request; it reaches
    the backend on the next sync.
    """

    def __init__(
        self,
        cache: CacheRepository,
        queue: PendingRequestRepository,
        user_id: int = 1,
    ):
        self.cache = cache
        self.queue = queue
        self.user_id = user_id

    async def initialize(self) -> UserPreferences:
        """Write defaults for any preference not stored yet."""
        defaults = UserPreferences()
        for f in fields(UserPreferences):
            key = KEY_PREFIX + f.name
            if await self.cache.get_raw(key) is None:
                await self.cache.set_value(key, getattr(defaults, f.name))
                logger.debug("preference_default_written", key=f.name)
        return await self.load()

    async def load(self) -> UserPreferences:
        defaults = asdict(UserPreferences())
        values = {
            name: await self.cache.get_value(KEY_PREFIX + name, default)
            for name, default in defaults.items()
        }
        return UserPreferences(**values)

    async def save(self, **changes) -> UserPreferences:
        """Update some preferences and queue them for the backend.

        Raises:
            ValidationError: On an unknown key or invalid value
        """
        current = asdict(await self.load())
        unknown = set(changes) - set(current)
        if unknown:
            raise ValidationError(f"Unknown preference: {', '.join(sorted(unknown))}")

        prefs = UserPreferences(**{**current, **changes})
        prefs.validate()

        for name, value in asdict(prefs).items():
            await self.cache.set_value(KEY_PREFIX + name, value)

        request_id = await self.queue.enqueue(
            PendingRequest(
                service="user",
                method="update_preferences",
                args=[self.user_id, prefs.to_api()],
            )
        )
        logger.info("preferences_saved", changed=sorted(changes), request_id=request_id)
        return prefs
