"""Authentication: credential check, token issuance, current-user lookup.

Tokens are stateless. There is no revocation list or refresh flow; logout
is the client discarding its token.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from schoolshelf.config.app_config import AuthConfig
from schoolshelf.core.errors import BadRequestError, NotFoundError, UnauthorizedError
from schoolshelf.core.models import UserRecord
from schoolshelf.core.security import TokenClaims, create_access_token, verify_password
from schoolshelf.db.database import Database
from schoolshelf.db.users_repository import UsersRepository

logger = structlog.get_logger(__name__)

# Same message for unknown email and wrong password
INVALID_CREDENTIALS = "Invalid email or password"


@dataclass
class LoginResult:
    token: str
    user: UserRecord


class AuthService:
    def __init__(self, db: Database, config: AuthConfig):
        self.users = UsersRepository(db)
        self.config = config

    def login(self, email: str, password: str) -> LoginResult:
        """Verify credentials and issue a signed token.

        Raises:
            BadRequestError: If email or password is empty
            UnauthorizedError: If the email is unknown or the password is wrong
        """
        if not email or not password:
            raise BadRequestError("Email and password are required")

        row = self.users.get_credentials_by_email(email)
        if row is None:
            logger.info("auth.login_failed", reason="unknown_email")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if not verify_password(password, row.get("password_hash")):
            logger.info("auth.login_failed", reason="bad_password", user_id=row["id"])
            raise UnauthorizedError(INVALID_CREDENTIALS)

        user = UserRecord.from_row(row)
        token = create_access_token(
            TokenClaims(user_id=user.id, email=user.email, role=user.role), self.config
        )
        logger.info("auth.login", user_id=user.id, role=user.role.value)
        return LoginResult(token=token, user=user)

    def get_current_user(self, claims: TokenClaims) -> UserRecord:
        """Re-fetch the token's user.

        Raises:
            NotFoundError: If the user was deleted after the token was issued
        """
        user = self.users.get_by_id(claims.user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user
