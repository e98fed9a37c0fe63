"""Demo data for local development.

Creates an admin, two professors with their students, a small catalog
tagged by class group, and a few assignments with progress.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from schoolshelf.config.app_config import AuthConfig
from schoolshelf.core.assignments_service import AssignmentsService
from schoolshelf.core.books_service import BooksService
from schoolshelf.core.models import BookType, Role
from schoolshelf.core.users_service import UsersService
from schoolshelf.db.database import Database

logger = structlog.get_logger(__name__)

DEMO_PASSWORD = "demo123"
ADMIN_EMAIL = "admin@schoolshelf.local"
ADMIN_PASSWORD = "admin123"

PROFESSORS = [
    ("Prof. Maria Silva", "maria.silva@schoolshelf.local"),
    ("Prof. John Santos", "john.santos@schoolshelf.local"),
]

# (name, email, professor email, class group)
STUDENTS = [
    ("Ana Oliveira", "ana.oliveira@students.schoolshelf.local", "maria.silva@schoolshelf.local", "1st Year A"),
    ("Peter Costa", "peter.costa@students.schoolshelf.local", "maria.silva@schoolshelf.local", "1st Year A"),
    ("Lucas Fernandes", "lucas.fernandes@students.schoolshelf.local", "john.santos@schoolshelf.local", "2nd Year B"),
    ("Julia Martins", "julia.martins@students.schoolshelf.local", "maria.silva@schoolshelf.local", "1st Year B"),
    ("Gabriel Souza", "gabriel.souza@students.schoolshelf.local", "john.santos@schoolshelf.local", "3rd Year A"),
]

# (title, author, component, class groups, book type)
BOOKS = [
    ("Fundamental Mathematics", "Carlos Pereira", "Mathematics", ["1st Year A", "1st Year B"], BookType.STUDENT),
    ("Language and Literature", "Helena Rocha", "Portuguese Language", ["1st Year A", "2nd Year B"], BookType.STUDENT),
    ("Natural Sciences", "Roberto Lima", "Science", ["2nd Year B", "3rd Year A"], BookType.STUDENT),
    ("World History", "Marta Alves", "History", ["3rd Year A"], BookType.STUDENT),
    ("World Geography", "Paulo Mendes", "Geography", ["1st Year B", "3rd Year A"], BookType.STUDENT),
    ("Intermediate English", "Sarah Johnson", "English", ["2nd Year B"], BookType.STUDENT),
    ("Teaching Mathematics: Teacher's Guide", "Carlos Pereira", "Mathematics", ["1st Year A"], BookType.PROFESSOR),
]

# (book title, user email, progress)
ASSIGNMENTS = [
    ("Fundamental Mathematics", "ana.oliveira@students.schoolshelf.local", 45),
    ("Language and Literature", "ana.oliveira@students.schoolshelf.local", 10),
    ("Fundamental Mathematics", "peter.costa@students.schoolshelf.local", 80),
    ("Natural Sciences", "lucas.fernandes@students.schoolshelf.local", 0),
    ("World History", "gabriel.souza@students.schoolshelf.local", 100),
    ("Teaching Mathematics: Teacher's Guide", "maria.silva@schoolshelf.local", 30),
]


class DatabaseNotEmptyError(Exception):
    """Raised when demo data would mix with existing users."""


@dataclass
class SeedSummary:
    users: int
    books: int
    assignments: int


def seed_demo(db: Database, auth: AuthConfig) -> SeedSummary:
    """Insert the demo data set into an empty database.

    Raises:
        DatabaseNotEmptyError: If any user already exists
    """
    if db.query("SELECT COUNT(*) AS total FROM users")[0]["total"] > 0:
        raise DatabaseNotEmptyError("Database already has users; demo data not loaded")

    users = UsersService(db, auth)
    books = BooksService(db)
    assignments = AssignmentsService(db)

    user_ids: dict[str, str] = {}
    admin = users.create_user("Administrator", ADMIN_EMAIL, ADMIN_PASSWORD, Role.ADMIN)
    user_ids[admin.email] = admin.id

    for name, email in PROFESSORS:
        user_ids[email] = users.create_user(name, email, DEMO_PASSWORD, Role.PROFESSOR).id

    for name, email, professor_email, class_group in STUDENTS:
        user_ids[email] = users.create_user(
            name,
            email,
            DEMO_PASSWORD,
            Role.STUDENT,
            professor_id=user_ids[professor_email],
            class_group=class_group,
        ).id

    book_ids: dict[str, str] = {}
    for title, author, component, groups, book_type in BOOKS:
        book = books.create_book(
            title=title,
            author=author,
            curriculum_component=component,
            description=f"{title} for the {component} curriculum.",
            book_type=book_type,
            class_groups=groups,
        )
        book_ids[title] = book.id

    for title, email, progress in ASSIGNMENTS:
        assignment = assignments.assign(book_ids[title], user_ids[email])
        if progress:
            assignments.update_progress(assignment.id, progress)

    summary = SeedSummary(users=len(user_ids), books=len(book_ids), assignments=len(ASSIGNMENTS))
    logger.info("db.demo_seeded", users=summary.users, books=summary.books, assignments=summary.assignments)
    return summary
