class CMSError(Exception):
    """Base class for page tree errors surfaced to callers."""

    status_code = 400


class NotFoundError(CMSError):
    status_code = 404


class ValidationError(CMSError):
    status_code = 400


class InvariantViolation(ValidationError):
    """Raised when an operation would break a tree invariant."""


class ConflictError(CMSError):
    status_code = 409
