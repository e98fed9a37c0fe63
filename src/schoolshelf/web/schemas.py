"""Pydantic schemas for the HTTP API.

Request bodies keep required fields optional where the service layer owns
the "required" rule, so missing and empty values get the same message.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from schoolshelf.core.models import BookType, Role


# =============================================================================
# COMMON
# =============================================================================


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str


class HealthResponse(BaseModel):
    """Liveness and database connectivity."""

    status: str
    database: str
    timestamp: str
    version: str


# =============================================================================
# AUTH SCHEMAS
# =============================================================================


class LoginRequest(BaseModel):
    """Request body for login."""

    email: str = ""
    password: str = ""


# =============================================================================
# USER SCHEMAS
# =============================================================================


class UserResponse(BaseModel):
    """Public user fields (no credential hash)."""

    id: str
    name: str
    email: str
    role: Role
    avatar: str | None = None
    professor_id: str | None = None
    class_group: str | None = None
    created_at: str
    updated_at: str

    model_config = {"from_attributes": True}


class LoginResponse(BaseModel):
    """Signed token plus the authenticated user."""

    token: str
    user: UserResponse


class UserListResponse(BaseModel):
    """One page of users."""

    data: list[UserResponse]
    total: int
    limit: int
    offset: int

    model_config = {"from_attributes": True}


class UserCreate(BaseModel):
    """Request body for creating a user."""

    name: str | None = None
    email: str | None = None
    password: str | None = None
    role: Role | None = None
    professor_id: str | None = None
    class_group: str | None = None


class UserUpdate(BaseModel):
    """Partial update; only supplied fields are applied."""

    name: str | None = Field(default=None, min_length=1)
    email: str | None = Field(default=None, min_length=1)
    password: str | None = Field(default=None, min_length=1)
    role: Role | None = None
    professor_id: str | None = None
    class_group: str | None = None


# =============================================================================
# BOOK SCHEMAS
# =============================================================================


class BookResponse(BaseModel):
    """Book with its class-group tags."""

    id: str
    title: str
    author: str
    description: str
    cover_url: str
    pdf_url: str | None = None
    curriculum_component: str
    book_type: BookType
    class_groups: list[str]
    created_at: str
    updated_at: str

    model_config = {"from_attributes": True}


class BookListResponse(BaseModel):
    """One page of books."""

    data: list[BookResponse]
    total: int
    limit: int
    offset: int

    model_config = {"from_attributes": True}


class BookCreate(BaseModel):
    """Request body for creating a book."""

    title: str | None = None
    author: str | None = None
    description: str | None = None
    cover_url: str | None = None
    pdf_url: str | None = None
    curriculum_component: str | None = None
    book_type: BookType | None = None
    class_groups: list[str] = Field(default_factory=list)


class BookUpdate(BaseModel):
    """Partial update; ``class_groups`` replaces all tags when present."""

    title: str | None = None
    author: str | None = None
    description: str | None = None
    cover_url: str | None = None
    pdf_url: str | None = None
    curriculum_component: str | None = None
    book_type: BookType | None = None
    class_groups: list[str] | None = None


# =============================================================================
# ASSIGNMENT SCHEMAS
# =============================================================================


class AssignmentResponse(BaseModel):
    """Assignment edge; display fields depend on the listing."""

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

    model_config = {"from_attributes": True}


class AssignmentListResponse(BaseModel):
    """One page of assignments."""

    data: list[AssignmentResponse]
    total: int
    limit: int
    offset: int

    model_config = {"from_attributes": True}


class AssignmentCreate(BaseModel):
    book_id: str | None = None
    user_id: str | None = None


class ProgressUpdate(BaseModel):
    """Reading progress as a percentage."""

    progress: float | None = None


# =============================================================================
# LOOKUP SCHEMAS
# =============================================================================


class LookupResponse(BaseModel):
    """Curriculum component or series."""

    id: str
    name: str
    created_at: str

    model_config = {"from_attributes": True}


class LookupWrite(BaseModel):
    name: str | None = None


# =============================================================================
# UPLOAD SCHEMAS
# =============================================================================


class _UploadResponse(BaseModel):
    message: str
    filename: str
    original_name: str = Field(serialization_alias="originalName")
    size: int


class PdfUploadResponse(_UploadResponse):
    pdf_url: str = Field(serialization_alias="pdfUrl")


class ImageUploadResponse(_UploadResponse):
    image_url: str = Field(serialization_alias="imageUrl")
