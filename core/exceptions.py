# core/exceptions.py

class DomainError(Exception):
    """Base class for domain-level errors."""
    def __init__(self, message: str, *, code: str | None = None):
        super().__init__(message)
        self.code = code or self.__class__.__name__


class ValidationError(DomainError):
    """Raised when analysis input or configuration is invalid."""


class NotFoundError(DomainError):
    """Raised when an explicitly required task is not in the graph."""
