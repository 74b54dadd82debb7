"""Database engine setup and initialization."""

from pathlib import Path

import aiosqlite

from ..config import DATA_DIR

# Named buckets in kv_store
WORKOUT_PLANS = "workout_plans"
NUTRITION_PLANS = "nutrition_plans"
PROGRESS_DATA = "progress_data"
BACKEND_AVAILABLE = "backend_available"
TOKEN = "token"

# Identifier field for each entity bucket
ID_FIELDS = {
    WORKOUT_PLANS: "plan_id",
    NUTRITION_PLANS: "nutrition_plan_id",
    PROGRESS_DATA: "progress_id",
}


def get_db_path(data_dir: Path | None = None) -> Path:
    """Get the database file path."""
    if data_dir is None:
        data_dir = DATA_DIR
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir / "fitsync.db"


async def init_db(db_path: Path | None = None) -> None:
    """Initialize the database schema."""
    if db_path is None:
        db_path = get_db_path()

    async with aiosqlite.connect(db_path) as db:
        # Key-value buckets (entity lists, flags, token, preferences)
        await db.execute("""
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        # FIFO queue of writes made while offline
        await db.execute("""
            CREATE TABLE IF NOT EXISTS pending_requests (
                request_id INTEGER PRIMARY KEY AUTOINCREMENT,
                service TEXT NOT NULL,
                method TEXT NOT NULL,
                args TEXT NOT NULL DEFAULT '[]',
                entity_ref TEXT,
                enqueued_at TIMESTAMP NOT NULL
            )
        """)

        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_pending_requests_entity
            ON pending_requests(entity_ref)
        """)

        await db.commit()
