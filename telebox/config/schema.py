"""Configuration schema using Pydantic."""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PREFIXES = [".", "$"]
DEVELOPMENT_PREFIXES = ["!", "！"]


def default_prefix() -> str:
    """Trigger list used when TB_PREFIX is not set."""
    if os.environ.get("TB_ENV") == "development":
        return " ".join(DEVELOPMENT_PREFIXES)
    return " ".join(DEFAULT_PREFIXES)


class RelayConfig(BaseModel):
    """Delegated-authority relay timings."""
    cache_ttl: float = 10.0  # Seconds an authorization snapshot stays fresh
    sudo_confirm_delay: float = 2.0  # Admin confirmation lifetime for sudo
    sure_confirm_delay: float = 5.0  # Admin confirmation lifetime for sure
    sure_delete_delay: float = 5.0  # Delay before the triggering message is removed


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = "INFO"
    file_enabled: bool = False
    file_path: str = "logs/telebox.log"
    rotation: str = "10 MB"
    retention: str = "7 days"


class Settings(BaseSettings):
    """Root configuration for telebox, read from TB_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TB_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    prefix: str = Field(default_factory=default_prefix)  # Whitespace-separated triggers
    ignore_edited: bool = False  # Process-wide default for plugins that do not say
    user_plugin_dir: str = "plugins"
    builtin_plugins: bool = True
    user_plugins_override: bool = True  # User plugins claim shared tokens first
    assets_dir: str = "assets"
    relay: RelayConfig = Field(default_factory=RelayConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("prefix")
    @classmethod
    def _prefix_not_blank(cls, value: str) -> str:
        if not value.split():
            raise ValueError("prefix must contain at least one trigger")
        return value

    @property
    def prefixes(self) -> list[str]:
        return list(dict.fromkeys(self.prefix.split()))

    @property
    def assets_path(self) -> Path:
        return Path(self.assets_dir).expanduser()

    @property
    def user_plugin_path(self) -> Path:
        return Path(self.user_plugin_dir).expanduser()

    def db_path(self, name: str) -> Path:
        """Path of the sqlite database for a store, e.g. ``db_path("alias")``."""
        path = self.assets_path / name
        path.mkdir(parents=True, exist_ok=True)
        return path / f"{name}.db"
