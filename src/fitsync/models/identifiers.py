"""Entity identifiers: client-temporary vs server-assigned."""

import time
from dataclasses import dataclass

# Bare integer ids above this value were generated on the client from a
# millisecond timestamp. Only consulted for untagged (legacy) values.
TEMPORARY_ID_THRESHOLD = 1_000_000_000


@dataclass(frozen=True)
class TemporaryId:
    """Identifier generated locally for an entity the server hasn't seen."""

    local_id: int

    @property
    def key(self) -> str:
        return f"tmp:{self.local_id}"

    def to_json(self) -> dict:
        return {"kind": "temporary", "local_id": self.local_id}


@dataclass(frozen=True)
class PersistedId:
    """Identifier assigned by the backend."""

    server_id: int

    @property
    def key(self) -> str:
        return f"srv:{self.server_id}"

    def to_json(self) -> int:
        # Stored bare, exactly as the server sends it
        return self.server_id


EntityId = TemporaryId | PersistedId

_last_local_id = 0


def new_temporary_id() -> TemporaryId:
    """Create a temporary id from the current time in milliseconds.

    Unique within the process: a second call in the same millisecond
    gets the next integer.
    """
    global _last_local_id
    candidate = int(time.time() * 1000)
    if candidate <= _last_local_id:
        candidate = _last_local_id + 1
    _last_local_id = candidate
    return TemporaryId(candidate)


def parse_entity_id(raw) -> EntityId | None:
    """Parse a stored or wire identifier.

    Accepts the tagged form ``{"kind": "temporary", "local_id": n}``,
    ``{"kind": "persisted", "server_id": n}``, or a bare integer (or
    numeric string). Bare integers are classified by
    TEMPORARY_ID_THRESHOLD: strictly greater means temporary.

    Returns:
        The parsed id, or None when raw is None

    Raises:
        ValueError: If the value isn't a recognisable identifier
    """
    if raw is None:
        return None
    if isinstance(raw, (TemporaryId, PersistedId)):
        return raw
    if isinstance(raw, dict):
        kind = raw.get("kind")
        if kind == "temporary":
            return TemporaryId(int(raw["local_id"]))
        if kind == "persisted":
            return PersistedId(int(raw["server_id"]))
        raise ValueError(f"Unknown identifier kind: {kind!r}")
    if isinstance(raw, bool):
        raise ValueError(f"Not an identifier: {raw!r}")
    if isinstance(raw, str):
        if not raw.strip().isdigit():
            raise ValueError(f"Not an identifier: {raw!r}")
        raw = int(raw)
    if isinstance(raw, (int, float)):
        value = int(raw)
        if value > TEMPORARY_ID_THRESHOLD:
            return TemporaryId(value)
        return PersistedId(value)
    raise ValueError(f"Not an identifier: {raw!r}")


def is_temporary(raw) -> bool:
    """Check whether a stored identifier is client-temporary."""
    return isinstance(parse_entity_id(raw), TemporaryId)


def id_key(raw) -> str | None:
    """Canonical comparison key for an identifier, or None if absent/invalid."""
    try:
        parsed = parse_entity_id(raw)
    except (ValueError, KeyError, TypeError):
        return None
    return parsed.key if parsed else None
