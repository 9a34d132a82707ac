"""
ScorePress Backend — Custom Exception Hierarchy
=================================================

What:  Defines application-specific exceptions for different error scenarios.
Why:   Custom exceptions enable targeted error handling with appropriate HTTP
       status codes and one JSON error envelope for every endpoint.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services; caught by global handlers.

Exception Hierarchy:
    ScorePressError (base)
    ├── ValidationError      → 400 Bad Request (client can fix)
    ├── NotFoundError        → 404 Not Found (negative lookup result)
    ├── UpstreamFetchError   → per item, contained inside services
    ├── StorageError         → 500 Internal Server Error (record store failed)
    └── GenerationError      → 500 Internal Server Error (PDF build failed)

Propagation:
    ValidationError is raised before any I/O starts.
    UpstreamFetchError never aborts a whole request: the generator and the
    combiner catch it per image / per catalog entry, report it, and move on.
    StorageError and GenerationError only happen after I/O was attempted.
    Nothing is retried.
"""

from typing import Any, Dict, Optional


class ScorePressError(Exception):
    """
    Base exception for all ScorePress application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged; returned as `details` only
                  for client-side errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(ScorePressError):
    """
    Raised when client input fails validation.

    When:    Missing required fields, non-numeric score, wrong selection-flag count.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Missing required fields",
            "details": {"fields": ["last_name"]}
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(ScorePressError):
    """
    Raised when a lookup matches nothing.

    A miss is a normal outcome of /getStudentDetails, not a failure; it
    only becomes an exception so the handler can turn it into a 404.
    """

    def __init__(
        self,
        resource: str = "resource",
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        super().__init__(
            message=message or f"The requested {resource} was not found",
            context=ctx,
        )


class UpstreamFetchError(ScorePressError):
    """
    Raised when a remote image or PDF cannot be retrieved or read.

    Covers network errors, timeouts, non-2xx responses and payloads that
    cannot be decoded. Callers catch it per item and skip that item.
    """

    def __init__(
        self,
        url: str,
        reason: str,
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["url"] = url
        if status_code is not None:
            ctx["status_code"] = status_code
        super().__init__(message=f"Failed to fetch {url}: {reason}", context=ctx)
        self.url = url
        self.reason = reason
        self.status_code = status_code


class StorageError(ScorePressError):
    """
    Raised when a record store operation fails.

    HTTP:    500 Internal Server Error
    The message includes the driver's error text.
    """

    def __init__(
        self,
        message: str = "A storage error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class GenerationError(ScorePressError):
    """
    Raised when building or serializing an output PDF fails unexpectedly.

    HTTP:    500 Internal Server Error
    Per-item fetch problems never end up here; this is for the document itself.
    """

    def __init__(
        self,
        message: str = "Failed to generate PDF",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
