"""FastAPI application factory.

Main entry point for the schoolshelf HTTP API. Run with:

    uvicorn --factory schoolshelf.web.api:create_app
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from schoolshelf import __version__
from schoolshelf.config.app_config import AppConfig, load_app_config
from schoolshelf.core.storage import URL_PREFIX, FileStorage
from schoolshelf.db.database import Database
from schoolshelf.web.errors import register_exception_handlers
from schoolshelf.web.logging_setup import configure_logging
from schoolshelf.web.rate_limit import RateLimitMiddleware
from schoolshelf.web.routes import (
    assignments_router,
    auth_router,
    books_router,
    curriculum_router,
    health_router,
    series_router,
    uploads_router,
    users_router,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the connection pool and ensure the schema on startup."""
    config: AppConfig = app.state.config

    db = Database(config.database)
    db.connect()
    if not db.check_connection():
        db.close()
        raise RuntimeError("Failed to connect to database")
    db.init_schema()
    app.state.db = db

    logger.info(
        "api.startup",
        environment=config.server.environment,
        uploads=str(app.state.storage.root.absolute()),
    )
    yield

    db.close()
    logger.info("api.shutdown")


def create_app(config: AppConfig | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Application config; loaded from file/env when omitted

    Returns:
        Configured FastAPI app instance
    """
    config = config or load_app_config()
    configure_logging(config.server.environment)

    app = FastAPI(
        title="schoolshelf API",
        description="Digital library backend for schools",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.config = config

    # Upload directories must exist before StaticFiles is mounted
    storage = FileStorage(config.storage.root, config.storage.max_upload_bytes)
    storage.ensure_dirs()
    app.state.storage = storage

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    if config.rate_limit.enabled:
        app.add_middleware(RateLimitMiddleware, config=config.rate_limit)

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(curriculum_router)
    app.include_router(series_router)
    app.include_router(books_router)
    app.include_router(uploads_router)
    app.include_router(assignments_router)

    app.mount(URL_PREFIX, StaticFiles(directory=storage.root), name="uploads")

    return app
