"""Environment-driven configuration for serialized layouts."""

from __future__ import annotations

import structlog
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger(__name__)


class LayoutSettings(BaseSettings):
    """Layout options read from ``SERIALOG_*`` variables and an optional ``.env`` file."""

    model_config = SettingsConfigDict(env_prefix="SERIALOG_", env_file=".env", extra="ignore")

    arrangement: str | None = Field(
        None,
        description="Arrangement spec, e.g. 'DEFAULT!nxlog;Host=Name:hostname'.",
    )
    default_preset: str = Field(
        "default",
        description="Named preset applied when no arrangement is configured.",
    )
    flatten: bool = Field(
        False,
        description="Emit nested values under dot-joined keys in a single-level object.",
    )
    save_type: bool | None = Field(
        None,
        description="Inject the type name of reflected objects; unset means public types only.",
    )
    stringify: bool = Field(False, description="Inject the string form of reflected objects.")
    type_member_name: str = Field("@type", description="Key holding the injected type name.")
    string_member_name: str = Field("String", description="Key holding the injected string form.")
    max_depth: int = Field(64, ge=1, description="Deepest value nesting accepted by the normalizer.")
    log_level: str = Field("INFO", description="Level of serialog's own diagnostics.")

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()


_settings: LayoutSettings | None = None


def get_settings() -> LayoutSettings:
    """Get or create singleton settings instance."""
    global _settings
    if _settings is None:
        _settings = LayoutSettings()
        logger.debug("settings_loaded", arrangement=_settings.arrangement, flatten=_settings.flatten)
    return _settings


def reset_settings() -> None:
    """Forget the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None


__all__ = ["LayoutSettings", "get_settings", "reset_settings"]
