"""errors.py — Error taxonomy and its HTTP status mapping."""
from __future__ import annotations

__all__ = [
    "ApiError",
    "DocumentNotFound",
    "Internal",
    "InvalidInput",
    "NotFound",
]


class ApiError(Exception):
    """Base for failures that map to an HTTP error response.

    ``str(exc)`` is the client-facing message and must never carry the
    underlying cause.
    """

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInput(ApiError):
    status_code = 400


class NotFound(ApiError):
    status_code = 404


class Internal(ApiError):
    status_code = 500


class DocumentNotFound(KeyError):
    """Raised by the store when a keyed write finds no document."""

    def __init__(self, collection: str, doc_id: str) -> None:
        super().__init__(f"{collection}/{doc_id}")
        self.collection = collection
        self.doc_id = doc_id
