"""Core business logic.

Modules:
- errors: domain error taxonomy mapped to HTTP status codes
- models: records, enums and pagination helpers
- security: password hashing and bearer tokens
- storage: uploaded file storage
- *_service: per-resource business rules
"""

__all__ = [
    "errors",
    "models",
    "security",
    "storage",
    "auth_service",
    "users_service",
    "books_service",
    "assignments_service",
    "lookups_service",
]
