"""Custom exceptions for doc-versioning."""


class DocVersioningError(Exception):
    """Base class for all doc-versioning errors."""

    pass


class NotFoundError(DocVersioningError):
    """Raised when a requested version or document is not found."""

    pass


class ValidationError(DocVersioningError):
    """Raised when a required argument is missing or invalid."""

    pass


class MismatchError(DocVersioningError):
    """Raised when a version does not belong to the document it is claimed for."""

    pass


class PermissionDeniedError(DocVersioningError):
    """Raised when the store refuses an operation for lack of access."""

    pass


class ConflictError(DocVersioningError):
    """Raised when a write violates a store uniqueness constraint."""

    pass


class StoreError(DocVersioningError):
    """Raised on a backend failure. Callers own any retry policy."""

    pass
