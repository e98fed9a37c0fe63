"""Book-to-user assignments and reading progress."""

from __future__ import annotations

import structlog

from schoolshelf.core.errors import BadRequestError, ConflictError, NotFoundError
from schoolshelf.core.models import AssignmentRecord, Page, clamp_limit, clamp_offset
from schoolshelf.db.assignments_repository import AssignmentsRepository
from schoolshelf.db.books_repository import BooksRepository
from schoolshelf.db.database import Database
from schoolshelf.db.query_builder import QueryBuilder
from schoolshelf.db.users_repository import UsersRepository

logger = structlog.get_logger(__name__)

NOT_FOUND = "Assignment not found"


def validate_progress(progress: float | None) -> float:
    """Progress is a percentage in [0, 100]."""
    if progress is None or not 0 <= progress <= 100:
        raise BadRequestError("Progress must be a number between 0 and 100")
    return progress


class AssignmentsService:
    def __init__(self, db: Database):
        self.assignments = AssignmentsRepository(db)
        self.books = BooksRepository(db)
        self.users = UsersRepository(db)

    def list_assignments(
        self,
        book_id: str | None = None,
        user_id: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> Page:
        limit, offset = clamp_limit(limit), clamp_offset(offset)
        filters = (
            QueryBuilder()
            .where_if(bool(book_id), "ba.book_id = {0}", book_id)
            .where_if(bool(user_id), "ba.user_id = {0}", user_id)
        )
        items, total = self.assignments.find_page(filters, limit, offset)
        return Page(data=items, total=total, limit=limit, offset=offset)

    def get_assignment(self, assignment_id: str) -> AssignmentRecord:
        assignment = self.assignments.get_by_id(assignment_id)
        if assignment is None:
            raise NotFoundError(NOT_FOUND)
        return assignment

    def assignments_for_user(self, user_id: str) -> list[AssignmentRecord]:
        return self.assignments.find_by_user(user_id)

    def assignments_for_book(self, book_id: str) -> list[AssignmentRecord]:
        return self.assignments.find_by_book(book_id)

    def assign(self, book_id: str | None, user_id: str | None) -> AssignmentRecord:
        """Assign a book to a user with zero progress.

        Raises:
            BadRequestError: If either id is missing
            NotFoundError: If the book or the user does not exist
            ConflictError: If the book is already assigned to the user
        """
        if not book_id or not user_id:
            raise BadRequestError("Book ID and user ID are required")
        if not self.books.exists(book_id):
            raise NotFoundError("Book not found")
        if not self.users.exists(user_id):
            raise NotFoundError("User not found")

        assignment = self.assignments.insert_if_absent(book_id, user_id)
        if assignment is None:
            raise ConflictError("This book is already assigned to this user")

        logger.info("assignments.created", assignment_id=assignment.id, book_id=book_id, user_id=user_id)
        return assignment

    def update_progress(self, assignment_id: str, progress: float | None) -> AssignmentRecord:
        assignment = self.assignments.update_progress(assignment_id, validate_progress(progress))
        if assignment is None:
            raise NotFoundError(NOT_FOUND)
        return assignment

    def update_progress_by_pair(
        self, book_id: str, user_id: str, progress: float | None
    ) -> AssignmentRecord:
        assignment = self.assignments.update_progress_by_pair(
            book_id, user_id, validate_progress(progress)
        )
        if assignment is None:
            raise NotFoundError(NOT_FOUND)
        return assignment

    def unassign(self, assignment_id: str) -> None:
        if not self.assignments.delete(assignment_id):
            raise NotFoundError(NOT_FOUND)
        logger.info("assignments.deleted", assignment_id=assignment_id)

    def unassign_pair(self, book_id: str, user_id: str) -> None:
        if not self.assignments.delete_by_pair(book_id, user_id):
            raise NotFoundError(NOT_FOUND)
        logger.info("assignments.deleted", book_id=book_id, user_id=user_id)
