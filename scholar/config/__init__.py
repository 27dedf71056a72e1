"""Configuration loading for Scholar.

Configuration is loaded from TOML files with environment variable overrides.

Usage:
    from scholar.config import get_settings

    settings = get_settings()
    service = create_ai_service(settings)
"""

from functools import lru_cache

from scholar.config.loader import load_config
from scholar.config.settings import Settings, set_toml_config


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load and cache the settings instance.

    Call `get_settings.cache_clear()` or `reload_settings()` to reload.
    """
    set_toml_config(load_config())
    return Settings()


def reload_settings() -> Settings:
    """Clear the settings cache and reload configuration."""
    get_settings.cache_clear()
    return get_settings()


__all__ = ["get_settings", "reload_settings", "Settings"]
