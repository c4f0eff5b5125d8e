"""Error types raised by the catalog services.

Every error carries a human-readable message, an ``ErrorKind`` tag and the
HTTP status class the API layer answers with. Errors are never retried; they
propagate to the request boundary, where a single exception handler turns them
into the error envelope.
"""

from enum import StrEnum


class ErrorKind(StrEnum):
    """Category of a catalog failure."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UPSTREAM = "upstream"


class CatalogError(Exception):
    """Base class for catalog failures."""

    kind: ErrorKind = ErrorKind.UPSTREAM
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(CatalogError):
    """Raised when required fields are missing or invalid."""

    kind = ErrorKind.VALIDATION
    status_code = 400


class NotFoundError(CatalogError):
    """Raised when no product matches the request."""

    kind = ErrorKind.NOT_FOUND
    status_code = 404


class ConflictError(CatalogError):
    """Raised when a product name is already taken."""

    kind = ErrorKind.CONFLICT
    status_code = 409


class UpstreamError(CatalogError):
    """Raised when the remote image host fails."""

    kind = ErrorKind.UPSTREAM
    status_code = 500
