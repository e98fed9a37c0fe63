"""Fixtures for HTTP API tests: a live app per test and authenticated users."""

from dataclasses import dataclass

import pytest
from fastapi.testclient import TestClient

from schoolshelf.core.books_service import BooksService
from schoolshelf.core.models import BookType, Role, UserRecord
from schoolshelf.core.security import TokenClaims, create_access_token
from schoolshelf.core.users_service import UsersService
from schoolshelf.web.api import create_app

PASSWORD = "s3cret-pass"


@dataclass
class Actor:
    """A stored user plus ready-to-use auth headers."""

    user: UserRecord
    headers: dict[str, str]

    @property
    def id(self) -> str:
        return self.user.id


@pytest.fixture
def client(app_config):
    """Test client with the lifespan running (pool open, schema created)."""
    with TestClient(create_app(app_config)) as test_client:
        yield test_client


@pytest.fixture
def db(client):
    """The app's own database gateway."""
    return client.app.state.db


@pytest.fixture
def make_user(db, app_config):
    """Factory creating a user and a signed token for it."""
    counter = {"n": 0}

    def _make(role: Role, name: str | None = None, **fields) -> Actor:
        counter["n"] += 1
        n = counter["n"]
        user = UsersService(db, app_config.auth).create_user(
            name=name or f"{role.value.title()} {n}",
            email=fields.pop("email", f"{role.value}{n}@school.test"),
            password=PASSWORD,
            role=role,
            **fields,
        )
        token = create_access_token(
            TokenClaims(user_id=user.id, email=user.email, role=user.role), app_config.auth
        )
        return Actor(user=user, headers={"Authorization": f"Bearer {token}"})

    return _make


@pytest.fixture
def admin(make_user) -> Actor:
    return make_user(Role.ADMIN, name="Admin")


@pytest.fixture
def professor(make_user) -> Actor:
    return make_user(Role.PROFESSOR, name="Prof. Ada")


@pytest.fixture
def student(make_user, professor) -> Actor:
    return make_user(
        Role.STUDENT, name="Bruno Student", professor_id=professor.id, class_group="1st Year A"
    )


@pytest.fixture
def make_book(db):
    """Factory creating a book directly through the service."""

    def _make(
        title: str = "Algebra Basics",
        component: str = "Mathematics",
        class_groups: list[str] | None = None,
        book_type: BookType = BookType.STUDENT,
        **fields,
    ):
        return BooksService(db).create_book(
            title=title,
            author=fields.pop("author", "Ana Author"),
            curriculum_component=component,
            class_groups=class_groups,
            book_type=book_type,
            **fields,
        )

    return _make


@pytest.fixture
def password() -> str:
    """Password of every user created by make_user."""
    return PASSWORD
