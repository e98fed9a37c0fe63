"""User management business rules."""

from __future__ import annotations

from typing import Any

import structlog

from schoolshelf.config.app_config import AuthConfig
from schoolshelf.core.errors import BadRequestError, ConflictError, NotFoundError
from schoolshelf.core.models import Page, Role, UserRecord, clamp_limit, clamp_offset
from schoolshelf.core.security import avatar_url, hash_password
from schoolshelf.db.database import Database
from schoolshelf.db.query_builder import QueryBuilder
from schoolshelf.db.users_repository import UsersRepository

logger = structlog.get_logger(__name__)

UPDATABLE_FIELDS = ("name", "email", "password", "role", "professor_id", "class_group")

# bcrypt only reads the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


class UsersService:
    def __init__(self, db: Database, config: AuthConfig):
        self.users = UsersRepository(db)
        self.config = config

    def list_users(
        self,
        role: Role | None = None,
        professor_id: str | None = None,
        class_group: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> Page:
        limit, offset = clamp_limit(limit), clamp_offset(offset)
        filters = (
            QueryBuilder()
            .where_if(role is not None, "role = {0}", role.value if role else None)
            .where_if(bool(professor_id), "professor_id = {0}", professor_id)
            .where_if(bool(class_group), "class_group = {0}", class_group)
        )
        users, total = self.users.find_page(filters, limit, offset)
        return Page(data=users, total=total, limit=limit, offset=offset)

    def get_user(self, user_id: str) -> UserRecord:
        user = self.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def create_user(
        self,
        name: str,
        email: str,
        password: str,
        role: Role,
        professor_id: str | None = None,
        class_group: str | None = None,
    ) -> UserRecord:
        """Create a user with a hashed password and a generated avatar.

        Email uniqueness is left to the database constraint.
        """
        if not (name and email and password and role):
            raise BadRequestError("Name, email, password and role are required")

        _check_password_length(password)
        professor_id = professor_id or None
        self._check_professor(professor_id)

        user = self.users.insert(
            name=name,
            email=email,
            password_hash=hash_password(password, self.config.bcrypt_rounds),
            role=role.value,
            avatar=avatar_url(name, role),
            professor_id=professor_id,
            class_group=class_group or None,
        )
        logger.info("users.created", user_id=user.id, role=role.value)
        return user

    def update_user(self, user_id: str, data: dict[str, Any]) -> UserRecord:
        """Apply a partial update; only supplied fields change."""
        changes: dict[str, Any] = {}
        for key in UPDATABLE_FIELDS:
            if key not in data:
                continue
            value = data[key]
            if value is None and key not in ("professor_id", "class_group"):
                continue
            if key == "password":
                _check_password_length(value)
                changes["password_hash"] = hash_password(value, self.config.bcrypt_rounds)
            elif key == "role":
                changes["role"] = Role(value).value
            elif key in ("professor_id", "class_group"):
                changes[key] = value or None
            else:
                changes[key] = value

        if not changes:
            raise BadRequestError("No fields to update")

        if changes.get("professor_id"):
            self._check_professor(changes["professor_id"])
        if changes.get("role", Role.PROFESSOR.value) != Role.PROFESSOR.value:
            self._check_no_linked_students(user_id)

        user = self.users.update(user_id, changes)
        if user is None:
            raise NotFoundError("User not found")
        logger.info("users.updated", user_id=user_id, fields=sorted(changes))
        return user

    def reset_password(self, email: str, password: str) -> bool:
        """Set a new password by email. Returns False if no such user."""
        _check_password_length(password)
        updated = self.users.set_password_hash(
            email, hash_password(password, self.config.bcrypt_rounds)
        )
        if updated:
            logger.info("users.password_reset", email=email)
        return updated

    def delete_user(self, user_id: str) -> None:
        if not self.users.delete(user_id):
            raise NotFoundError("User not found")
        logger.info("users.deleted", user_id=user_id)

    def students_by_professor(self, professor_id: str) -> list[UserRecord]:
        filters = (
            QueryBuilder()
            .where("professor_id = {0}", professor_id)
            .where("role = {0}", Role.STUDENT.value)
        )
        return self.users.find_all(filters)

    def users_by_role(self, role: str) -> list[UserRecord]:
        try:
            parsed = Role(role)
        except ValueError:
            raise BadRequestError("Invalid role") from None
        return self.users.find_all(QueryBuilder().where("role = {0}", parsed.value))

    def _check_professor(self, professor_id: str | None) -> None:
        """A student's professor reference must point at an existing professor."""
        if professor_id is None:
            return
        if self.users.get_role(professor_id) != Role.PROFESSOR.value:
            raise BadRequestError("professor_id must reference an existing professor")

    def _check_no_linked_students(self, user_id: str) -> None:
        """A professor with linked students keeps the professor role."""
        if self.users.get_role(user_id) != Role.PROFESSOR.value:
            return
        if self.users.count_students(user_id):
            raise ConflictError("Cannot change role: students are still linked to this professor")


def _check_password_length(password: str) -> None:
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise BadRequestError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
