"""Configuration management.

Loads from an optional TOML config file + environment variables.
Uses pydantic-settings for validation and env var overriding.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

class EntityDefaults(BaseModel):
    historize: bool = False  # Used when a factory leaves historize unset


class RepositoryConfig(BaseModel):
    publish_on_save: bool = True
    clear_after_publish: bool = True


class EventBusConfig(BaseModel):
    history_limit: int = Field(default=1000, ge=0)  # 0 disables history recording


class ObservabilityConfig(BaseModel):
    log_level: str = "INFO"
    log_format: str = "json"  # "json" or "console"


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """Top-level library settings.

    Loaded from a TOML config file, overridden by environment variables
    (``DOMAINKIT_ENTITIES__HISTORIZE=true``).
    """

    entities: EntityDefaults = Field(default_factory=EntityDefaults)
    repository: RepositoryConfig = Field(default_factory=RepositoryConfig)
    events: EventBusConfig = Field(default_factory=EventBusConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    model_config = {"env_prefix": "DOMAINKIT_", "env_nested_delimiter": "__"}


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load settings from TOML file + env vars.

    Args:
        config_path: Path to TOML config file (optional).
        overrides: Dict of overrides to apply on top.
    """
    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            import tomli

            with open(path, "rb") as f:
                data = tomli.load(f)

    if overrides:
        data.update(overrides)

    return Settings(**data)


_settings: Settings | None = None


def get_settings() -> Settings:
    """Process-wide settings, loaded lazily from the environment."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def set_settings(settings: Settings) -> None:
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Drop the cached settings so the next access reloads them."""
    global _settings
    _settings = None
