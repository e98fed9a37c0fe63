"""Application configuration loader.

Loads configuration from an optional YAML file (``SCHOOLSHELF_CONFIG`` or
config/schoolshelf.yaml) on top of built-in defaults, then applies
environment variable overrides.

Usage:
    from schoolshelf.config.app_config import load_app_config

    config = load_app_config()
    url = config.database.url
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
CONFIG_FILE = Path("config/schoolshelf.yaml")

PRODUCTION = "production"


@dataclass
class DatabaseConfig:
    """Connection pool settings."""

    url: str = "sqlite:///./data/schoolshelf.db"
    pool_size: int = 20
    pool_timeout: float = 5.0
    pool_recycle: int = 30
    slow_query_ms: int = 100


@dataclass
class AuthConfig:
    """Token signing and password hashing settings."""

    jwt_secret: str = "secret"
    jwt_algorithm: str = "HS256"
    token_ttl_hours: int = 24
    bcrypt_rounds: int = 10


@dataclass
class StorageConfig:
    """Upload storage settings."""

    root: str = "uploads"
    max_upload_bytes: int = 50 * 1024 * 1024


@dataclass
class RateLimitConfig:
    """Fixed-window request limiter settings."""

    enabled: bool = True
    window_seconds: int = 15 * 60
    max_requests: int = 1000
    # Clients tracked at once; beyond this the oldest windows are evicted
    max_clients: int = 10_000


@dataclass
class ServerConfig:
    """HTTP server settings."""

    environment: str = "development"
    host: str = "0.0.0.0"
    port: int = 3001
    cors_origins: list[str] = field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ]
    )

    @property
    def is_production(self) -> bool:
        return self.environment == PRODUCTION


@dataclass
class AppConfig:
    """Application-wide configuration."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    server: ServerConfig = field(default_factory=ServerConfig)


# Module-level cache
_cached_config: AppConfig | None = None

# Environment variable -> (section, key, converter)
_ENV_OVERRIDES: dict[str, tuple[str, str, type]] = {
    "DATABASE_URL": ("database", "url", str),
    "JWT_SECRET": ("auth", "jwt_secret", str),
    "UPLOADS_DIR": ("storage", "root", str),
    "APP_ENV": ("server", "environment", str),
    "PORT": ("server", "port", int),
}


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object.

    Unknown keys are ignored so older config files keep loading.
    """
    sections = {
        "database": DatabaseConfig,
        "auth": AuthConfig,
        "storage": StorageConfig,
        "rate_limit": RateLimitConfig,
        "server": ServerConfig,
    }
    parsed: dict[str, Any] = {}
    for name, cls in sections.items():
        raw = data.get(name) or {}
        known = {k: v for k, v in raw.items() if k in cls.__dataclass_fields__}
        parsed[name] = cls(**known)
    return AppConfig(**parsed)


def _apply_env_overrides(config: AppConfig) -> AppConfig:
    """Apply environment variable overrides in place."""
    for env_name, (section, key, convert) in _ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            setattr(getattr(config, section), key, convert(value))

    # Production deployments keep uploads on the persistent volume
    if config.server.is_production and "UPLOADS_DIR" not in os.environ:
        config.storage.root = "/data/uploads"

    return config


def load_app_config(force_reload: bool = False) -> AppConfig:
    """Load application config.

    Args:
        force_reload: If True, ignore cached config and reload from file.

    Returns:
        AppConfig object with all settings.
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    config_path = Path(os.environ.get("SCHOOLSHELF_CONFIG", CONFIG_FILE))

    data: dict[str, Any]
    if config_path.exists():
        logger.debug("loading_app_config", source=str(config_path))
        data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    else:
        logger.info("using_default_config")
        data = {}

    _cached_config = _apply_env_overrides(_parse_config(data))
    return _cached_config


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
