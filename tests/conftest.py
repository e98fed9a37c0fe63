"""Shared fixtures.

Every test gets its own SQLite file and upload directory under tmp_path;
nothing is written to ./data or ./uploads.
"""

import hashlib
import os
from pathlib import Path

import pytest

from schoolshelf.config.app_config import (
    AppConfig,
    AuthConfig,
    DatabaseConfig,
    RateLimitConfig,
    ServerConfig,
    StorageConfig,
    clear_config_cache,
)
from schoolshelf.db.database import Database

WATCHED_DIRS = ("data", "uploads")


def _hash_directory(path: Path) -> str | None:
    """Hash of a directory's file names, sizes and mtimes. None if missing."""
    if not path.exists():
        return None

    hasher = hashlib.sha256()
    for root, dirs, files in os.walk(path):
        dirs.sort()
        for filename in sorted(files):
            filepath = Path(root) / filename
            stat = filepath.stat()
            hasher.update(str(filepath.relative_to(path)).encode())
            hasher.update(str(stat.st_size).encode())
            hasher.update(str(int(stat.st_mtime)).encode())
    return hasher.hexdigest()


@pytest.fixture(scope="session")
def directory_hash():
    return _hash_directory


@pytest.fixture(scope="session", autouse=True)
def workspace_snapshot():
    """Fail the session if ./data or ./uploads changed while tests ran.

    Compared at session teardown, after every test module has run.
    """
    before = {name: _hash_directory(Path(name)) for name in WATCHED_DIRS}
    yield before

    changed = [name for name in WATCHED_DIRS if _hash_directory(Path(name)) != before[name]]
    if changed:
        pytest.fail(
            "Test run created or modified: "
            + ", ".join(f"./{name}" for name in changed)
            + ". All tests MUST use temporary directories."
        )


@pytest.fixture(autouse=True)
def _isolated_config():
    """Never let a cached config leak between tests."""
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def app_config(tmp_path) -> AppConfig:
    """Config pointing at a temporary database and upload root."""
    return AppConfig(
        database=DatabaseConfig(url=f"sqlite:///{tmp_path / 'db' / 'test.db'}", pool_size=5),
        auth=AuthConfig(jwt_secret="test-secret", bcrypt_rounds=4),
        storage=StorageConfig(root=str(tmp_path / "uploads"), max_upload_bytes=1024),
        rate_limit=RateLimitConfig(enabled=False),
        server=ServerConfig(environment="test"),
    )


@pytest.fixture
def database(app_config):
    """Connected gateway with the schema and default lookups in place."""
    db = Database(app_config.database)
    db.connect()
    db.init_schema()
    yield db
    db.close()
