"""Repository for the book_assignments table."""

from __future__ import annotations

import structlog

from schoolshelf.core.models import AssignmentRecord
from schoolshelf.db.database import Database
from schoolshelf.db.query_builder import QueryBuilder
from schoolshelf.db.schema import new_id

logger = structlog.get_logger(__name__)

ASSIGNMENT_COLUMNS = "ba.id, ba.book_id, ba.user_id, ba.assigned_at, ba.progress"

SELECT_WITH_DETAILS = f"""
    SELECT {ASSIGNMENT_COLUMNS},
           b.title AS book_title, u.name AS user_name, u.email AS user_email
    FROM book_assignments ba
    JOIN books b ON ba.book_id = b.id
    JOIN users u ON ba.user_id = u.id
"""


class AssignmentsRepository:
    """CRUD operations for book assignments."""

    def __init__(self, db: Database):
        self.db = db

    def get_by_id(self, assignment_id: str) -> AssignmentRecord | None:
        rows = self.db.query(f"{SELECT_WITH_DETAILS} WHERE ba.id = :id", {"id": assignment_id})
        return AssignmentRecord.from_row(rows[0]) if rows else None

    def find_page(
        self,
        filters: QueryBuilder,
        limit: int,
        offset: int,
    ) -> tuple[list[AssignmentRecord], int]:
        count = self.db.query(
            f"SELECT COUNT(*) AS total FROM book_assignments ba{filters.clause}", filters.params
        )
        page_sql, params = filters.paginate(limit, offset)
        rows = self.db.query(
            f"{SELECT_WITH_DETAILS}{filters.clause} ORDER BY ba.assigned_at DESC, ba.rowid DESC{page_sql}",
            params,
        )
        return [AssignmentRecord.from_row(r) for r in rows], count[0]["total"]

    def find_by_user(self, user_id: str) -> list[AssignmentRecord]:
        """Assignments of one user, with book details."""
        rows = self.db.query(
            f"""
            SELECT {ASSIGNMENT_COLUMNS},
                   b.title AS book_title, b.author, b.cover_url, b.curriculum_component
            FROM book_assignments ba
            JOIN books b ON ba.book_id = b.id
            WHERE ba.user_id = :user_id
            ORDER BY ba.assigned_at DESC, ba.rowid DESC
            """,
            {"user_id": user_id},
        )
        return [AssignmentRecord.from_row(r) for r in rows]

    def find_by_book(self, book_id: str) -> list[AssignmentRecord]:
        """Assignments of one book, with user details."""
        rows = self.db.query(
            f"""
            SELECT {ASSIGNMENT_COLUMNS},
                   u.name AS user_name, u.email AS user_email, u.role AS user_role
            FROM book_assignments ba
            JOIN users u ON ba.user_id = u.id
            WHERE ba.book_id = :book_id
            ORDER BY u.name ASC
            """,
            {"book_id": book_id},
        )
        return [AssignmentRecord.from_row(r) for r in rows]

    def insert_if_absent(
        self, book_id: str, user_id: str, progress: float = 0
    ) -> AssignmentRecord | None:
        """Insert an assignment unless the (book, user) pair already exists.

        Returns None when the pair was already assigned.
        """
        rows = self.db.query(
            """
            INSERT INTO book_assignments (id, book_id, user_id, progress)
            VALUES (:id, :book_id, :user_id, :progress)
            ON CONFLICT (book_id, user_id) DO NOTHING
            RETURNING id, book_id, user_id, assigned_at, progress
            """,
            {"id": new_id(), "book_id": book_id, "user_id": user_id, "progress": progress},
        )
        if not rows:
            return None
        logger.debug("assignments.inserted", assignment_id=rows[0]["id"])
        return AssignmentRecord.from_row(rows[0])

    def update_progress(self, assignment_id: str, progress: float) -> AssignmentRecord | None:
        rows = self.db.query(
            "UPDATE book_assignments SET progress = :progress WHERE id = :id "
            "RETURNING id, book_id, user_id, assigned_at, progress",
            {"progress": progress, "id": assignment_id},
        )
        return AssignmentRecord.from_row(rows[0]) if rows else None

    def update_progress_by_pair(
        self, book_id: str, user_id: str, progress: float
    ) -> AssignmentRecord | None:
        rows = self.db.query(
            "UPDATE book_assignments SET progress = :progress "
            "WHERE book_id = :book_id AND user_id = :user_id "
            "RETURNING id, book_id, user_id, assigned_at, progress",
            {"progress": progress, "book_id": book_id, "user_id": user_id},
        )
        return AssignmentRecord.from_row(rows[0]) if rows else None

    def delete(self, assignment_id: str) -> bool:
        rows = self.db.query(
            "DELETE FROM book_assignments WHERE id = :id RETURNING id", {"id": assignment_id}
        )
        return bool(rows)

    def delete_by_pair(self, book_id: str, user_id: str) -> bool:
        rows = self.db.query(
            "DELETE FROM book_assignments WHERE book_id = :book_id AND user_id = :user_id "
            "RETURNING id",
            {"book_id": book_id, "user_id": user_id},
        )
        return bool(rows)

