"""
Email Builder Backend — Custom Exception Hierarchy
===================================================

What:  Application-specific exceptions for every failure the API reports.
How:   Each exception carries a client-safe `message` and an optional
       `context` dict. Global handlers (registered in main.py) turn them
       into `{"error": message}` JSON bodies with the matching status code.
Who:   Raised by the store, the repository, and the upload client.

Exception Hierarchy:
    EmailBuilderError (base)           → 500
    ├── ValidationError                → 400 Bad Request
    │   ├── InvalidIdentifierError     → 400 (template id is not a UUID)
    │   └── UnsupportedFormatError     → 400 (image format outside allow-list)
    ├── NotFoundError                  → 404 Not Found
    ├── StoreConnectionError           → startup only, logged
    ├── PersistenceError               → 500 Internal Server Error
    └── UploadError                    → 500 Internal Server Error

`context` is logged server-side and never returned to the client.
"""

from typing import Any, Dict, Optional


class EmailBuilderError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred.",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(EmailBuilderError):
    """
    Raised when client input is structurally unusable.

    HTTP: 400 Bad Request

    Example response:
        {"error": "No image uploaded.", "request_id": "a1b2c3d4"}
    """

    def __init__(
        self,
        message: str = "Validation failed.",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class InvalidIdentifierError(ValidationError):
    """Raised when a template id in the URL is not a well-formed UUID."""

    def __init__(self, raw_id: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["raw_id"] = raw_id
        super().__init__(message="Invalid template id.", field="id", context=ctx)
        self.raw_id = raw_id


class UnsupportedFormatError(ValidationError):
    """
    Raised when an uploaded image is not one of the allowed formats.

    Detected locally from the filename extension, or reported by the media
    host after it inspected the file content.
    """

    def __init__(
        self,
        extension: str,
        allowed: tuple,
        context: Optional[Dict[str, Any]] = None,
    ):
        shown = extension or "(none)"
        message = (
            f"Image format '{shown}' is not supported. "
            f"Allowed formats: {', '.join(allowed)}."
        )
        ctx = context or {}
        ctx["extension"] = extension
        ctx["allowed"] = list(allowed)
        super().__init__(message=message, field="image", context=ctx)
        self.extension = extension
        self.allowed = allowed


class NotFoundError(EmailBuilderError):
    """
    Raised when a requested template does not exist.

    HTTP: 404 Not Found. The message is static so a missing id and a
    deleted id look the same to the client.
    """

    def __init__(
        self,
        resource: str = "Template",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=f"{resource} not found.", context=ctx)
        self.resource_id = resource_id


class StoreConnectionError(EmailBuilderError):
    """
    Raised by TemplateStore.connect() when the database URI is invalid or the
    database is unreachable.

    Startup catches it, logs it, and keeps serving; data operations then
    fail individually with PersistenceError.
    """

    def __init__(
        self,
        message: str = "Could not connect to the template store.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PersistenceError(EmailBuilderError):
    """
    Raised when a store operation fails for any reason other than not-found.

    HTTP: 500 Internal Server Error. The message names the operation only;
    the driver error stays in `context` and in the server log.
    """

    def __init__(
        self,
        message: str = "A database error occurred.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UploadError(EmailBuilderError):
    """
    Raised when the media host is unreachable or rejects the credentials,
    quota, or request.

    HTTP: 500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "Failed to upload image.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
