"""FastAPI dependencies: shared resources, services and auth guards.

The database gateway, file storage and config are created in the app
lifespan and kept on ``app.state``; services are cheap and built per request.
"""

from __future__ import annotations

from typing import Callable

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from schoolshelf.config.app_config import AppConfig
from schoolshelf.core.assignments_service import AssignmentsService
from schoolshelf.core.auth_service import AuthService
from schoolshelf.core.books_service import BooksService
from schoolshelf.core.errors import ForbiddenError, UnauthorizedError
from schoolshelf.core.lookups_service import CurriculumService, SeriesService
from schoolshelf.core.models import Role
from schoolshelf.core.security import InvalidTokenError, TokenClaims, decode_access_token
from schoolshelf.core.storage import FileStorage
from schoolshelf.core.users_service import UsersService
from schoolshelf.db.database import Database

TOKEN_MISSING = "Authentication token not provided"
TOKEN_INVALID = "Invalid or expired token"
ACCESS_DENIED = "Access denied. Insufficient permission."

# auto_error=False: missing credentials are reported with our own message
bearer_scheme = HTTPBearer(auto_error=False)


def get_config(request: Request) -> AppConfig:
    return request.app.state.config


def get_database(request: Request) -> Database:
    return request.app.state.db


def get_storage(request: Request) -> FileStorage:
    return request.app.state.storage


def get_auth_service(
    db: Database = Depends(get_database), config: AppConfig = Depends(get_config)
) -> AuthService:
    return AuthService(db, config.auth)


def get_users_service(
    db: Database = Depends(get_database), config: AppConfig = Depends(get_config)
) -> UsersService:
    return UsersService(db, config.auth)


def get_books_service(
    db: Database = Depends(get_database), storage: FileStorage = Depends(get_storage)
) -> BooksService:
    return BooksService(db, storage)


def get_assignments_service(db: Database = Depends(get_database)) -> AssignmentsService:
    return AssignmentsService(db)


def get_curriculum_service(db: Database = Depends(get_database)) -> CurriculumService:
    return CurriculumService(db)


def get_series_service(db: Database = Depends(get_database)) -> SeriesService:
    return SeriesService(db)


# =============================================================================
# AUTH GUARDS
# =============================================================================


def require_auth(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    config: AppConfig = Depends(get_config),
) -> TokenClaims:
    """Require a valid bearer token and return its claims.

    Raises:
        UnauthorizedError: If the header is missing or malformed, or the
            token is invalid or expired
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError(TOKEN_MISSING)
    try:
        return decode_access_token(credentials.credentials, config.auth)
    except InvalidTokenError:
        raise UnauthorizedError(TOKEN_INVALID) from None


def require_role(*roles: Role) -> Callable[..., TokenClaims]:
    """Build a guard admitting only the given roles. There is no hierarchy."""
    allowed = frozenset(roles)

    def _guard(claims: TokenClaims = Depends(require_auth)) -> TokenClaims:
        if claims.role not in allowed:
            raise ForbiddenError(ACCESS_DENIED)
        return claims

    return _guard


def optional_auth(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    config: AppConfig = Depends(get_config),
) -> TokenClaims | None:
    """Claims when a valid token is present, otherwise None. Never rejects."""
    if credentials is None:
        return None
    try:
        return decode_access_token(credentials.credentials, config.auth)
    except InvalidTokenError:
        return None


require_admin = require_role(Role.ADMIN)
require_staff = require_role(Role.ADMIN, Role.PROFESSOR)
