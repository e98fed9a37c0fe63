"""Book catalog business rules.

A book and its class-group tags are always written in one transaction.
"""

from __future__ import annotations

from typing import Any

import structlog

from schoolshelf.core.errors import BadRequestError, NotFoundError
from schoolshelf.core.models import (
    BookRecord,
    BookType,
    Page,
    clamp_limit,
    clamp_offset,
    normalize_class_groups,
)
from schoolshelf.core.storage import FileStorage
from schoolshelf.db.books_repository import BooksRepository
from schoolshelf.db.database import Database, Transaction
from schoolshelf.db.lookups_repository import LookupRepository
from schoolshelf.db.query_builder import QueryBuilder
from schoolshelf.db.users_repository import UsersRepository

logger = structlog.get_logger(__name__)

ALL = "all"

SCALAR_FIELDS = (
    "title",
    "author",
    "description",
    "cover_url",
    "pdf_url",
    "curriculum_component",
    "book_type",
)

# Columns that may reference a stored upload
FILE_FIELDS = ("pdf_url", "cover_url")

ASSIGNED_TO = "EXISTS (SELECT 1 FROM book_assignments ba WHERE ba.book_id = b.id AND ba.user_id = {0})"
TAGGED_WITH = "EXISTS (SELECT 1 FROM book_class_groups bcg WHERE bcg.book_id = b.id AND bcg.class_group = {0})"


def _active(value: str | None) -> bool:
    """A filter is active unless empty or the literal ``all``."""
    return bool(value) and value != ALL


class BooksService:
    def __init__(self, db: Database, storage: FileStorage | None = None):
        self.db = db
        self.books = BooksRepository(db)
        self.users = UsersRepository(db)
        self.components = LookupRepository(db, "curriculum_components")
        self.storage = storage

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_books(
        self,
        search: str | None = None,
        curriculum_component: str | None = None,
        class_group: str | None = None,
        professor_id: str | None = None,
        student_id: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> Page:
        """Filtered, paginated catalog.

        ``professor_id`` and ``student_id`` both match books assigned to that
        user, whatever the user's role.
        """
        limit, offset = clamp_limit(limit), clamp_offset(offset)
        filters = QueryBuilder()
        if search:
            filters.where(
                "(LOWER(b.title) LIKE {0} OR LOWER(b.author) LIKE {0} "
                "OR LOWER(b.description) LIKE {0})",
                f"%{search.lower()}%",
            )
        filters.where_if(_active(curriculum_component), "b.curriculum_component = {0}", curriculum_component)
        filters.where_if(_active(class_group), TAGGED_WITH, class_group)
        filters.where_if(_active(professor_id), ASSIGNED_TO, professor_id)
        filters.where_if(_active(student_id), ASSIGNED_TO, student_id)

        books, total = self.books.find_page(filters, limit, offset)
        return Page(data=books, total=total, limit=limit, offset=offset)

    def get_book(self, book_id: str) -> BookRecord:
        book = self.books.get_by_id(book_id)
        if book is None:
            raise NotFoundError("Book not found")
        return book

    def books_by_component(self, component: str) -> list[BookRecord]:
        return self.books.find_all(QueryBuilder().where("b.curriculum_component = {0}", component))

    def books_by_class(self, class_group: str) -> list[BookRecord]:
        return self.books.find_all(QueryBuilder().where(TAGGED_WITH, class_group))

    def books_for_student(self, user_id: str) -> list[BookRecord]:
        """Student-type books tagged with the user's class group.

        Professor material is never included, even when tagged with the
        student's class group. A user without a class group gets ``[]``.
        """
        exists, class_group = self.users.get_class_group(user_id)
        if not exists:
            raise NotFoundError("User not found")
        if not class_group:
            return []

        filters = (
            QueryBuilder()
            .where("b.book_type = {0}", BookType.STUDENT.value)
            .where(TAGGED_WITH, class_group)
        )
        return self.books.find_all(filters)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_book(
        self,
        title: str,
        author: str,
        curriculum_component: str,
        description: str | None = None,
        cover_url: str | None = None,
        pdf_url: str | None = None,
        book_type: BookType | None = None,
        class_groups: list[str] | None = None,
    ) -> BookRecord:
        if not (title and author and curriculum_component):
            raise BadRequestError("Title, author and curriculum component are required")
        self._check_component(curriculum_component)

        groups = normalize_class_groups(class_groups or [])
        fields = {
            "title": title,
            "author": author,
            "description": description or "",
            "cover_url": cover_url or "",
            "pdf_url": pdf_url or None,
            "curriculum_component": curriculum_component,
            "book_type": (book_type or BookType.STUDENT).value,
        }

        def _create(tx: Transaction) -> BookRecord:
            row = self.books.insert(tx, fields)
            self.books.add_class_groups(tx, row["id"], groups)
            return BookRecord.from_row({**row, "class_groups": groups})

        book = self.db.with_transaction(_create)
        logger.info("books.created", book_id=book.id, class_groups=len(groups))
        return book

    def update_book(self, book_id: str, data: dict[str, Any]) -> BookRecord:
        """Partial update of scalar fields; ``class_groups`` replaces all tags.

        An update with no scalar field still succeeds and returns the book.
        """
        changes: dict[str, Any] = {}
        for key in SCALAR_FIELDS:
            if key in data:
                value = data[key]
                if key == "book_type" and value is not None:
                    value = BookType(value).value
                changes[key] = value

        for key in ("title", "author", "curriculum_component", "book_type"):
            if key in changes and not changes[key]:
                raise BadRequestError(f"{key} cannot be empty")
        if "description" in changes:
            changes["description"] = changes["description"] or ""
        if "cover_url" in changes:
            changes["cover_url"] = changes["cover_url"] or ""
        if "curriculum_component" in changes:
            self._check_component(changes["curriculum_component"])

        replace_groups = "class_groups" in data and data["class_groups"] is not None
        groups = normalize_class_groups(data.get("class_groups") or [])

        def _update(tx: Transaction) -> tuple[BookRecord, dict[str, Any]]:
            previous = self.books.get_by_id(book_id, tx)
            if previous is None:
                raise NotFoundError("Book not found")

            row = self.books.update(tx, book_id, changes)
            if row is None:
                raise NotFoundError("Book not found")

            if replace_groups:
                self.books.replace_class_groups(tx, book_id, groups)

            current = self.books.get_class_groups(tx, book_id)
            replaced = {
                key: getattr(previous, key)
                for key in FILE_FIELDS
                if key in changes and getattr(previous, key) != changes[key]
            }
            return BookRecord.from_row({**row, "class_groups": current}), replaced

        book, replaced_files = self.db.with_transaction(_update)
        logger.info("books.updated", book_id=book_id, fields=sorted(changes), tags_replaced=replace_groups)

        # Old uploads are removed only once the new reference is committed
        self._cleanup_files(replaced_files.values())
        return book

    def delete_book(self, book_id: str) -> None:
        row = self.books.delete(book_id)
        if row is None:
            raise NotFoundError("Book not found")
        logger.info("books.deleted", book_id=book_id)
        self._cleanup_files(row.get(key) for key in FILE_FIELDS)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _check_component(self, name: str) -> None:
        if self.components.get_by_name(name) is None:
            raise BadRequestError(f"Unknown curriculum component '{name}'")

    def _cleanup_files(self, urls) -> None:
        if self.storage is None:
            return
        for url in urls:
            self.storage.delete(url)
