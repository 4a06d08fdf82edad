"""Configuration loading utilities."""

import os
from pathlib import Path

from dotenv import load_dotenv, set_key
from loguru import logger

from telebox.config.schema import Settings


def get_env_path() -> Path:
    """Get the default .env path (working directory)."""
    return Path.cwd() / ".env"


def load_settings(env_path: Path | None = None) -> Settings:
    """
    Load settings from the environment, seeding it from a .env file first.

    Variables already present in the environment win over the file.
    """
    path = env_path or get_env_path()
    if path.exists():
        load_dotenv(path, override=False)
    return Settings()


def save_prefixes(prefixes: list[str], env_path: Path | None = None) -> bool:
    """
    Persist the trigger list as TB_PREFIX.

    The running process environment is always updated. Returns False if the
    .env file could not be written; the new prefixes then only last for this run.
    """
    value = " ".join(prefixes)
    os.environ["TB_PREFIX"] = value
    path = env_path or get_env_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch(exist_ok=True)
        set_key(str(path), "TB_PREFIX", value, quote_mode="always")
    except OSError as e:
        logger.warning(f"Failed to persist TB_PREFIX to {path}: {e}")
        return False
    return True
