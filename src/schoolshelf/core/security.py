"""Password hashing and bearer-token helpers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from urllib.parse import quote

import bcrypt
from jose import JWTError, jwt

from schoolshelf.config.app_config import AuthConfig
from schoolshelf.core.models import Role

AVATAR_COLORS = {
    Role.ADMIN: "ef4444",
    Role.PROFESSOR: "3b82f6",
    Role.STUDENT: "22c55e",
}


class InvalidTokenError(Exception):
    """Raised when a token fails signature, expiry or claim validation."""


@dataclass(frozen=True)
class TokenClaims:
    """Identity carried by a bearer token."""

    user_id: str
    email: str
    role: Role


def hash_password(password: str, rounds: int = 10) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    """Compare a password against a stored hash. A missing hash never matches."""
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash in the database
        return False


def create_access_token(claims: TokenClaims, config: AuthConfig) -> str:
    """Sign a token valid for ``config.token_ttl_hours``."""
    expires = datetime.now(timezone.utc) + timedelta(hours=config.token_ttl_hours)
    payload = {
        "userId": claims.user_id,
        "email": claims.email,
        "role": claims.role.value,
        "exp": expires,
    }
    return jwt.encode(payload, config.jwt_secret, algorithm=config.jwt_algorithm)


def decode_access_token(token: str, config: AuthConfig) -> TokenClaims:
    """Verify signature and expiry and return the embedded identity.

    Raises:
        InvalidTokenError: If the token is invalid, expired or malformed
    """
    try:
        payload = jwt.decode(token, config.jwt_secret, algorithms=[config.jwt_algorithm])
        return TokenClaims(
            user_id=payload["userId"],
            email=payload["email"],
            role=Role(payload["role"]),
        )
    except (JWTError, KeyError, ValueError) as e:
        raise InvalidTokenError(str(e)) from e


def avatar_url(name: str, role: Role) -> str:
    """Deterministic avatar URL from the user's name and role color."""
    return (
        f"https://ui-avatars.com/api/?name={quote(name, safe='')}"
        f"&background={AVATAR_COLORS[role]}&color=fff"
    )
