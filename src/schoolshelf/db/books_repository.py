"""Repository for the books and book_class_groups tables.

Write methods take an executor (the ``Database`` or an open ``Transaction``)
so a book row and its class-group rows can be written atomically.
"""

from __future__ import annotations

from typing import Any, Protocol

import structlog

from schoolshelf.core.models import BookRecord
from schoolshelf.db.database import Database, Row
from schoolshelf.db.query_builder import QueryBuilder, SetClause
from schoolshelf.db.schema import new_id

logger = structlog.get_logger(__name__)

BOOK_COLUMNS = (
    "b.id, b.title, b.author, b.description, b.cover_url, b.pdf_url, "
    "b.curriculum_component, b.book_type, b.created_at, b.updated_at"
)

# Correlated aggregation of the tag set; sorted when the record is built
CLASS_GROUPS_COLUMN = """
    COALESCE(
        (SELECT json_group_array(DISTINCT bcg.class_group)
         FROM book_class_groups bcg WHERE bcg.book_id = b.id),
        '[]'
    ) AS class_groups
"""

SELECT_BOOKS = f"SELECT {BOOK_COLUMNS}, {CLASS_GROUPS_COLUMN} FROM books b"

UPDATABLE_COLUMNS = frozenset(
    {
        "title",
        "author",
        "description",
        "cover_url",
        "pdf_url",
        "curriculum_component",
        "book_type",
    }
)


class Executor(Protocol):
    def query(self, sql: str, params: dict[str, Any] | None = None) -> list[Row]: ...


class BooksRepository:
    """CRUD operations for books and their class-group tags."""

    def __init__(self, db: Database):
        self.db = db

    def get_by_id(self, book_id: str, executor: Executor | None = None) -> BookRecord | None:
        rows = (executor or self.db).query(f"{SELECT_BOOKS} WHERE b.id = :id", {"id": book_id})
        return BookRecord.from_row(rows[0]) if rows else None

    def exists(self, book_id: str) -> bool:
        return bool(self.db.query("SELECT id FROM books WHERE id = :id", {"id": book_id}))

    def find_page(
        self,
        filters: QueryBuilder,
        limit: int,
        offset: int,
    ) -> tuple[list[BookRecord], int]:
        """Return one page of books matching ``filters`` and the full count."""
        count = self.db.query(
            f"SELECT COUNT(*) AS total FROM books b{filters.clause}", filters.params
        )
        page_sql, params = filters.paginate(limit, offset)
        rows = self.db.query(
            f"{SELECT_BOOKS}{filters.clause} ORDER BY b.title ASC{page_sql}", params
        )
        return [BookRecord.from_row(r) for r in rows], count[0]["total"]

    def find_all(self, filters: QueryBuilder) -> list[BookRecord]:
        rows = self.db.query(f"{SELECT_BOOKS}{filters.clause} ORDER BY b.title ASC", filters.params)
        return [BookRecord.from_row(r) for r in rows]

    def insert(self, executor: Executor, fields: dict[str, Any]) -> Row:
        """Insert a book row and return it (without tags)."""
        rows = executor.query(
            """
            INSERT INTO books (id, title, author, description, cover_url, pdf_url,
                               curriculum_component, book_type)
            VALUES (:id, :title, :author, :description, :cover_url, :pdf_url,
                    :curriculum_component, :book_type)
            RETURNING *
            """,
            {"id": new_id(), **fields},
        )
        logger.debug("books.inserted", book_id=rows[0]["id"])
        return rows[0]

    def update(self, executor: Executor, book_id: str, changes: dict[str, Any]) -> Row | None:
        """Apply a partial update to scalar columns.

        With no changes the current row is read back unchanged.
        Returns None if the book does not exist.
        """
        if not changes:
            rows = executor.query("SELECT * FROM books WHERE id = :id", {"id": book_id})
            return rows[0] if rows else None

        set_clause = SetClause(UPDATABLE_COLUMNS)
        for column, value in changes.items():
            set_clause.set(column, value)

        rows = executor.query(
            f"""
            UPDATE books SET {set_clause.sql}, updated_at = datetime('now')
            WHERE id = :book_id
            RETURNING *
            """,
            {**set_clause.params, "book_id": book_id},
        )
        return rows[0] if rows else None

    def add_class_groups(self, executor: Executor, book_id: str, groups: list[str]) -> None:
        """Bulk-insert class-group tag rows."""
        if not groups:
            return
        qb = QueryBuilder()
        book_ph = qb.bind(book_id)
        values = ", ".join(f"({book_ph}, {qb.bind(group)})" for group in groups)
        executor.query(
            f"INSERT INTO book_class_groups (book_id, class_group) VALUES {values}", qb.params
        )

    def replace_class_groups(self, executor: Executor, book_id: str, groups: list[str]) -> None:
        """Delete all tags of a book and insert ``groups`` instead."""
        executor.query("DELETE FROM book_class_groups WHERE book_id = :id", {"id": book_id})
        self.add_class_groups(executor, book_id, groups)

    def get_class_groups(self, executor: Executor, book_id: str) -> list[str]:
        rows = executor.query(
            "SELECT DISTINCT class_group FROM book_class_groups "
            "WHERE book_id = :id ORDER BY class_group",
            {"id": book_id},
        )
        return [r["class_group"] for r in rows]

    def delete(self, book_id: str) -> Row | None:
        """Delete a book. Tags and assignments cascade in the database.

        Returns the deleted row (for file cleanup), or None if not found.
        """
        rows = self.db.query(
            "DELETE FROM books WHERE id = :id RETURNING id, cover_url, pdf_url", {"id": book_id}
        )
        if rows:
            logger.debug("books.deleted", book_id=book_id)
            return rows[0]
        return None

    def count_by_component(self, component_id: str) -> int:
        """Count books referencing a curriculum component (by name)."""
        rows = self.db.query(
            """
            SELECT COUNT(*) AS total FROM books b
            JOIN curriculum_components c ON b.curriculum_component = c.name
            WHERE c.id = :id
            """,
            {"id": component_id},
        )
        return rows[0]["total"]
