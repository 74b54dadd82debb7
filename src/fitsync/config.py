"""Runtime configuration.

Settings are resolved from dataclass defaults, then an optional YAML file,
then ``FITSYNC_*`` environment variables (highest precedence).
"""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import get_args

import yaml

from .errors import ConfigError

# Default data directory
DATA_DIR = Path(__file__).parent.parent.parent / "data"

CONFIG_FILENAME = "fitsync.yaml"
ENV_PREFIX = "FITSYNC_"

CHAT_BACKENDS = ("n8n", "deepseek", "backend")


@dataclass
class Settings:
    """Client settings."""

    api_base_url: str = "http://localhost:5000/api"
    request_timeout: float = 10.0
    health_timeout: float = 3.0
    probe_interval: float = 30.0

    n8n_webhook_url: str = "https://n8n.synapticalhub.com/webhook/sas"
    deepseek_api_url: str = "https://api.deepseek.com/v1"
    deepseek_api_key: str | None = None
    deepseek_model: str = "deepseek-chat"
    chat_backend: str = "n8n"
    chat_timeout: float = 30.0

    default_user_id: int = 1
    username: str = "usuario_test"

    data_dir: Path = field(default_factory=lambda: DATA_DIR)
    log_level: str = "INFO"
    log_format: str = "console"

    @property
    def health_url(self) -> str:
        return self.api_base_url.rstrip("/")

    @property
    def db_path(self) -> Path:
        return self.data_dir / "fitsync.db"

    def validate(self) -> None:
        """Raise ConfigError for settings that can't work."""
        if self.chat_backend not in CHAT_BACKENDS:
            raise ConfigError(
                f"chat_backend must be one of {', '.join(CHAT_BACKENDS)}, "
                f"got {self.chat_backend!r}"
            )
        if self.log_format not in ("console", "json"):
            raise ConfigError(f"log_format must be 'console' or 'json', got {self.log_format!r}")
        for name in ("request_timeout", "health_timeout", "probe_interval", "chat_timeout"):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be positive")


def _coerce(name: str, value, target_type):
    """Convert a raw YAML/env value to the field's type."""
    if value is None:
        if type(None) in get_args(target_type):
            return None
        raise ConfigError(f"{name} must not be empty")
    try:
        if target_type is Path:
            return Path(value).expanduser()
        if target_type is int:
            return int(value)
        if target_type is float:
            return float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value for {name}: {value!r}") from e
    return str(value)


def _field_types() -> dict[str, object]:
    return {f.name: f.type for f in fields(Settings)}


def _read_yaml(path: Path) -> dict:
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Could not parse {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping of settings")
    return data


def load_settings(path: Path | None = None, environ: dict | None = None) -> Settings:
    """Load settings from defaults, YAML and environment.

    Args:
        path: Explicit config file. Defaults to ``$FITSYNC_CONFIG`` or
            ``fitsync.yaml`` inside the data directory.
        environ: Environment mapping (defaults to ``os.environ``)

    Returns:
        Validated settings
    """
    env = os.environ if environ is None else environ
    types = _field_types()
    values: dict = {}

    data_dir = env.get(f"{ENV_PREFIX}DATA_DIR")
    if path is None:
        if env.get(f"{ENV_PREFIX}CONFIG"):
            path = Path(env[f"{ENV_PREFIX}CONFIG"])
        else:
            path = (Path(data_dir) if data_dir else DATA_DIR) / CONFIG_FILENAME

    if path.exists():
        for key, raw in _read_yaml(path).items():
            if key not in types:
                raise ConfigError(f"Unknown setting {key!r} in {path}")
            values[key] = _coerce(key, raw, types[key])

    for name, target_type in types.items():
        raw = env.get(ENV_PREFIX + name.upper())
        if raw is not None:
            values[name] = _coerce(name, raw, target_type)

    settings = Settings(**values)
    settings.validate()
    return settings
