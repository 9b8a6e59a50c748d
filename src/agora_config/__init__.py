"""Configuration for the Agora services."""

from agora_config.settings import (
    CONFIG_DIR,
    Settings,
    clear_settings_cache,
    env_files,
    get_settings,
)

__all__ = [
    "CONFIG_DIR",
    "Settings",
    "clear_settings_cache",
    "env_files",
    "get_settings",
]
