"""Database layer for fitsync."""

from .engine import (
    BACKEND_AVAILABLE,
    ID_FIELDS,
    NUTRITION_PLANS,
    PROGRESS_DATA,
    TOKEN,
    WORKOUT_PLANS,
    get_db_path,
    init_db,
)
from .repositories import CacheRepository, PendingRequestRepository

__all__ = [
    "BACKEND_AVAILABLE",
    "CacheRepository",
    "get_db_path",
    "ID_FIELDS",
    "init_db",
    "NUTRITION_PLANS",
    "PendingRequestRepository",
    "PROGRESS_DATA",
    "TOKEN",
    "WORKOUT_PLANS",
]
