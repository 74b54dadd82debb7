"""Tests for locally stored preferences."""

import pytest

from fitsync.errors import ValidationError
from fitsync.services import PreferencesService, UserPreferences


@pytest.fixture
def preferences(cache, queue):
    return PreferencesService(cache, queue, user_id=1)


class TestPreferencesService:
    """Tests for PreferencesService."""

    async def test_initialize_writes_defaults(self, preferences, cache):
        prefs = await preferences.initialize()

        assert prefs == UserPreferences()
        assert await cache.get_raw("preferences_language") == '"es"'
        assert await cache.get_raw("preferences_notifications") == "true"

    async def test_initialize_keeps_existing_values(self, preferences, cache):
        await cache.set_value("preferences_dark_mode", True)

        prefs = await preferences.initialize()

        assert prefs.dark_mode is True

    async def test_save_queues_update(self, preferences, queue):
        prefs = await preferences.save(dark_mode=True, units="imperial")

        assert prefs.dark_mode is True
        assert (await preferences.load()).units == "imperial"

        (request,) = await queue.list_pending()
        assert request.describe() == "user.update_preferences"
        assert request.args == [
            1,
            {"receive_notifications": True, "dark_mode": True, "language": "es", "units": "imperial"},
        ]

    async def test_invalid_value_not_saved(self, preferences, queue):
        with pytest.raises(ValidationError) as exc_info:
            await preferences.save(language="fr")

        assert exc_info.value.field == "language"
        assert (await preferences.load()).language == "es"
        assert await queue.count_pending() == 0

    async def test_unknown_key(self, preferences):
        with pytest.raises(ValidationError):
            await preferences.save(font_size=14)
