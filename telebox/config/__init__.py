"""Configuration module for telebox."""

from telebox.config.loader import get_env_path, load_settings, save_prefixes
from telebox.config.schema import Settings

__all__ = ["Settings", "load_settings", "save_prefixes", "get_env_path"]
