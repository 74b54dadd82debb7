"""Offline write-queue and synchronization models."""

import json
from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class EntityRef:
    """Points a queued write at the cached entity it concerns."""

    bucket: str
    key: str  # canonical id key, see identifiers.id_key

    def to_json(self) -> str:
        return f"{self.bucket}:{self.key}"

    @classmethod
    def from_json(cls, value: str | None) -> "EntityRef | None":
        if not value:
            return None
        bucket, _, key = value.partition(":")
        return cls(bucket=bucket, key=key)


@dataclass
class PendingRequest:
    """A write attempted while the backend was unreachable."""

    service: str
    method: str
    args: list = field(default_factory=list)
    entity_ref: EntityRef | None = None
    enqueued_at: datetime = field(default_factory=datetime.now)
    request_id: int | None = None  # assigned by the queue

    def args_json(self) -> str:
        return json.dumps(self.args, default=str)

    def describe(self) -> str:
        return f"{self.service}.{self.method}"

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "request_id": self.request_id,
            "service": self.service,
            "method": self.method,
            "args": self.args,
            "entity_ref": self.entity_ref.to_json() if self.entity_ref else None,
            "enqueued_at": self.enqueued_at.isoformat(),
        }


@dataclass
class SyncResult:
    """Aggregate outcome of a synchronization pass."""

    success: bool
    message: str
    replayed: int = 0
    failed: int = 0
    retained: int = 0
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "message": self.message,
            "replayed": self.replayed,
            "failed": self.failed,
            "retained": self.retained,
            "errors": self.errors,
        }
