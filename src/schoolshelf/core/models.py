"""Domain records and enumerations.

Records are plain dataclasses built from database rows; the web layer
serializes them through the pydantic schemas.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

DEFAULT_PAGE_LIMIT = 50
MAX_PAGE_LIMIT = 100


class Role(str, Enum):
    """User roles. No hierarchy: admin is not implicitly professor or student."""

    ADMIN = "admin"
    PROFESSOR = "professor"
    STUDENT = "student"


class BookType(str, Enum):
    """Audience of a book's content."""

    STUDENT = "student"
    PROFESSOR = "professor"


@dataclass
class UserRecord:
    """User as exposed to clients (credential hash excluded)."""

    id: str
    name: str
    email: str
    role: Role
    avatar: str | None = None
    professor_id: str | None = None
    class_group: str | None = None
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> UserRecord:
        return cls(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            role=Role(row["role"]),
            avatar=row.get("avatar"),
            professor_id=row.get("professor_id"),
            class_group=row.get("class_group"),
            created_at=row.get("created_at") or "",
            updated_at=row.get("updated_at") or "",
        )


@dataclass
class BookRecord:
    """Book with its class-group tags."""

    id: str
    title: str
    author: str
    description: str
    cover_url: str
    pdf_url: str | None
    curriculum_component: str
    book_type: BookType
    class_groups: list[str] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> BookRecord:
        groups = row.get("class_groups")
        if isinstance(groups, str):
            groups = json.loads(groups)
        return cls(
            id=row["id"],
            title=row["title"],
            author=row["author"],
            description=row.get("description") or "",
            cover_url=row.get("cover_url") or "",
            pdf_url=row.get("pdf_url"),
            curriculum_component=row["curriculum_component"],
            book_type=BookType(row["book_type"]),
            class_groups=normalize_class_groups(groups or []),
            created_at=row.get("created_at") or "",
            updated_at=row.get("updated_at") or "",
        )


@dataclass
class AssignmentRecord:
    """Book-to-user edge with reading progress.

    Display fields are filled depending on which listing produced the row.
    """

    id: str
    book_id: str
    user_id: str
    assigned_at: str
    progress: float
    book_title: str | None = None
    author: str | None = None
    cover_url: str | None = None
    curriculum_component: str | None = None
    user_name: str | None = None
    user_email: str | None = None
    user_role: str | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> AssignmentRecord:
        optional = (
            "book_title",
            "author",
            "cover_url",
            "curriculum_component",
            "user_name",
            "user_email",
            "user_role",
        )
        return cls(
            id=row["id"],
            book_id=row["book_id"],
            user_id=row["user_id"],
            assigned_at=row["assigned_at"],
            progress=row["progress"],
            **{key: row.get(key) for key in optional},
        )


@dataclass
class LookupRecord:
    """Row of a name lookup table (curriculum components, series)."""

    id: str
    name: str
    created_at: str = ""

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> LookupRecord:
        return cls(id=row["id"], name=row["name"], created_at=row.get("created_at") or "")


@dataclass
class Page:
    """One page of a filtered collection."""

    data: list[Any]
    total: int
    limit: int
    offset: int


def normalize_class_groups(groups: list[str]) -> list[str]:
    """Deduplicate and sort class-group labels."""
    return sorted(set(groups))


def clamp_limit(limit: int | None) -> int:
    """Apply the default page size and the hard cap."""
    if not limit or limit <= 0:
        return DEFAULT_PAGE_LIMIT
    return min(limit, MAX_PAGE_LIMIT)


def clamp_offset(offset: int | None) -> int:
    if not offset or offset < 0:
        return 0
    return offset
