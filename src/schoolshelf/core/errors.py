"""Domain error taxonomy.

Services raise these; the web layer converts them to ``{"error": message}``
responses with the matching status code.
"""


class AppError(Exception):
    """Base class for errors that map to an HTTP status."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class BadRequestError(AppError):
    """Malformed or missing input."""

    status_code = 400


class UnauthorizedError(AppError):
    """Missing, invalid or expired token, or bad credentials."""

    status_code = 401


class ForbiddenError(AppError):
    """Valid token but insufficient role."""

    status_code = 403


class NotFoundError(AppError):
    """Referenced entity does not exist."""

    status_code = 404


class ConflictError(AppError):
    """Uniqueness or duplicate-relationship violation."""

    status_code = 409


class InternalError(AppError):
    """Unexpected failure."""

    status_code = 500
