# core/exceptions.py

class DomainError(Exception):
    """Base class for domain-level errors."""
    def __init__(self, message: str, *, code: str | None = None):
        super().__init__(message)
        self.code = code or self.__class__.__name__


class ValidationError(DomainError):
    """Raised when data is invalid or violates constraints."""


class BusinessRuleError(DomainError):
    """Raised when business rules are violated (e.g., a missing permission)."""


class BackendError(DomainError):
    """Raised when the remote API cannot fulfil a request."""


class BackendUnavailableError(BackendError):
    """Raised when the remote API cannot be reached or answers garbage."""


class BackendRejectedError(BackendError):
    """Raised when the remote API answers with success=false."""
