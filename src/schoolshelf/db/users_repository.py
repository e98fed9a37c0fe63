"""Repository for the users table."""

from __future__ import annotations

from typing import Any

import structlog

from schoolshelf.core.models import UserRecord
from schoolshelf.db.database import Database, Row
from schoolshelf.db.query_builder import QueryBuilder, SetClause
from schoolshelf.db.schema import new_id

logger = structlog.get_logger(__name__)

PUBLIC_COLUMNS = "id, name, email, role, avatar, professor_id, class_group, created_at, updated_at"

UPDATABLE_COLUMNS = frozenset(
    {"name", "email", "password_hash", "role", "professor_id", "class_group"}
)


class UsersRepository:
    """CRUD operations for users."""

    def __init__(self, db: Database):
        self.db = db

    def get_by_id(self, user_id: str) -> UserRecord | None:
        rows = self.db.query(
            f"SELECT {PUBLIC_COLUMNS} FROM users WHERE id = :id", {"id": user_id}
        )
        return UserRecord.from_row(rows[0]) if rows else None

    def get_credentials_by_email(self, email: str) -> Row | None:
        """Fetch a user row including ``password_hash`` (exact email match)."""
        rows = self.db.query(
            f"SELECT {PUBLIC_COLUMNS}, password_hash FROM users WHERE email = :email",
            {"email": email},
        )
        return rows[0] if rows else None

    def get_role(self, user_id: str) -> str | None:
        rows = self.db.query("SELECT role FROM users WHERE id = :id", {"id": user_id})
        return rows[0]["role"] if rows else None

    def get_class_group(self, user_id: str) -> tuple[bool, str | None]:
        """Return (exists, class_group) for a user."""
        rows = self.db.query("SELECT class_group FROM users WHERE id = :id", {"id": user_id})
        if not rows:
            return False, None
        return True, rows[0]["class_group"]

    def count_students(self, professor_id: str) -> int:
        rows = self.db.query(
            "SELECT COUNT(*) AS total FROM users WHERE professor_id = :id", {"id": professor_id}
        )
        return rows[0]["total"]

    def exists(self, user_id: str) -> bool:
        return bool(self.db.query("SELECT id FROM users WHERE id = :id", {"id": user_id}))

    def find_page(
        self,
        filters: QueryBuilder,
        limit: int,
        offset: int,
    ) -> tuple[list[UserRecord], int]:
        """Return one page of users matching ``filters`` and the full count."""
        count = self.db.query(
            f"SELECT COUNT(*) AS total FROM users{filters.clause}", filters.params
        )
        page_sql, params = filters.paginate(limit, offset)
        rows = self.db.query(
            f"SELECT {PUBLIC_COLUMNS} FROM users{filters.clause} ORDER BY name ASC{page_sql}",
            params,
        )
        return [UserRecord.from_row(r) for r in rows], count[0]["total"]

    def find_all(self, filters: QueryBuilder) -> list[UserRecord]:
        rows = self.db.query(
            f"SELECT {PUBLIC_COLUMNS} FROM users{filters.clause} ORDER BY name ASC",
            filters.params,
        )
        return [UserRecord.from_row(r) for r in rows]

    def insert(
        self,
        name: str,
        email: str,
        password_hash: str,
        role: str,
        avatar: str,
        professor_id: str | None = None,
        class_group: str | None = None,
    ) -> UserRecord:
        """Insert a user.

        Raises:
            sqlalchemy.exc.IntegrityError: If the email already exists
        """
        rows = self.db.query(
            f"""
            INSERT INTO users (id, name, email, password_hash, role, professor_id, class_group, avatar)
            VALUES (:id, :name, :email, :password_hash, :role, :professor_id, :class_group, :avatar)
            RETURNING {PUBLIC_COLUMNS}
            """,
            {
                "id": new_id(),
                "name": name,
                "email": email,
                "password_hash": password_hash,
                "role": role,
                "professor_id": professor_id,
                "class_group": class_group,
                "avatar": avatar,
            },
        )
        user = UserRecord.from_row(rows[0])
        logger.debug("users.inserted", user_id=user.id, role=user.role.value)
        return user

    def update(self, user_id: str, changes: dict[str, Any]) -> UserRecord | None:
        """Apply a partial update. Returns None if the user does not exist."""
        set_clause = SetClause(UPDATABLE_COLUMNS)
        for column, value in changes.items():
            set_clause.set(column, value)

        rows = self.db.query(
            f"""
            UPDATE users SET {set_clause.sql}, updated_at = datetime('now')
            WHERE id = :user_id
            RETURNING {PUBLIC_COLUMNS}
            """,
            {**set_clause.params, "user_id": user_id},
        )
        return UserRecord.from_row(rows[0]) if rows else None

    def set_password_hash(self, email: str, password_hash: str) -> bool:
        rows = self.db.query(
            "UPDATE users SET password_hash = :hash, updated_at = datetime('now') "
            "WHERE email = :email RETURNING id",
            {"hash": password_hash, "email": email},
        )
        return bool(rows)

    def delete(self, user_id: str) -> bool:
        """Delete a user. Assignments cascade in the database."""
        rows = self.db.query("DELETE FROM users WHERE id = :id RETURNING id", {"id": user_id})
        deleted = bool(rows)
        if deleted:
            logger.debug("users.deleted", user_id=user_id)
        return deleted
