"""Route handlers for the HTTP API."""

from schoolshelf.web.routes.assignments import router as assignments_router
from schoolshelf.web.routes.auth import router as auth_router
from schoolshelf.web.routes.books import router as books_router
from schoolshelf.web.routes.health import router as health_router
from schoolshelf.web.routes.lookups import curriculum_router, series_router
from schoolshelf.web.routes.uploads import router as uploads_router
from schoolshelf.web.routes.users import router as users_router

__all__ = [
    "assignments_router",
    "auth_router",
    "books_router",
    "curriculum_router",
    "health_router",
    "series_router",
    "uploads_router",
    "users_router",
]
