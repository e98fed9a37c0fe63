"""Configuration package for schoolshelf."""

from schoolshelf.config.app_config import (
    AppConfig,
    AuthConfig,
    DatabaseConfig,
    RateLimitConfig,
    ServerConfig,
    StorageConfig,
    clear_config_cache,
    load_app_config,
)

__all__ = [
    "AppConfig",
    "AuthConfig",
    "DatabaseConfig",
    "RateLimitConfig",
    "ServerConfig",
    "StorageConfig",
    "clear_config_cache",
    "load_app_config",
]
