class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a class, subject or student does not exist."""


class ConflictError(DomainError):
    """Raised when data is ambiguous or breaks a policy (e.g. multi-batch membership)."""
