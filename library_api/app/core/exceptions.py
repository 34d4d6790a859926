"""
Error taxonomy shared by the service layer and the HTTP layer.

Services raise these exceptions; ``main.py`` registers handlers that
turn them into JSON responses of the form ``{"message": ...}`` with
optional ``error`` and ``details`` keys.  All of them derive from
``ValueError`` so callers that only care about "the request was
rejected" can keep catching that.
"""

from typing import Any, Dict, Iterable, Optional


class LibraryError(ValueError):
    """Base class for rejected library operations (HTTP 400)."""

    status_code = 400

    def __init__(
        self,
        message: str,
        *,
        error: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error = error
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {}
        if self.error:
            body["error"] = self.error
        body["message"] = self.message
        if self.details:
            body["details"] = self.details
        return body


class NotFoundError(LibraryError):
    """An entity id is absent from its service."""

    status_code = 404


class ValidationFailedError(LibraryError):
    """Entity field constraints were violated."""

    def __init__(self, errors: Iterable[str], **kwargs: Any) -> None:
        self.errors = list(errors)
        super().__init__("Validation failed: " + ", ".join(self.errors), **kwargs)


class ConflictError(LibraryError):
    """A business rule rejected the operation (duplicates, double borrow, limits)."""
