"""
Sparkz Backend: Custom Exception Hierarchy
===========================================

What:  Application-specific exceptions for each error class the API reports.
How:   Each exception carries a user-facing message and an optional context
       dict. Global handlers (registered in main.py) map them to HTTP status
       codes and a closed set of error codes.
Who:   Raised by services and dependencies; caught by global handlers.

Exception Hierarchy:
    SparkzError (base)
    ├── ValidationError          → 400 validation_error
    │   └── PayloadTooLargeError → 413 payload_too_large
    ├── AuthenticationError      → 401 unauthenticated
    ├── ForbiddenError           → 403 forbidden
    ├── NotFoundError            → 404 not_found
    ├── ConflictError            → 409 conflict
    ├── UpstreamServiceError     → 502 upstream_error
    └── DatabaseError            → 500 server_error

`context` is logged server-side. Only client-error handlers (400/413) echo it
back; everything else returns the message alone.
"""

from typing import Any, Dict, Optional


class SparkzError(Exception):
    """
    Base exception for all Sparkz application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, not returned for server errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(SparkzError):
    """
    Raised when client input fails a business-rule check.

    Schema-level problems (missing JSON fields, wrong types) are handled by
    FastAPI itself and answered with 422.
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


class PayloadTooLargeError(ValidationError):
    """Raised when an upload or request body exceeds its configured cap."""

    def __init__(
        self,
        max_size: int,
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        max_mb = max_size / (1024 * 1024)
        ctx = context or {}
        ctx["max_size_bytes"] = max_size
        super().__init__(
            message=f"Payload exceeds the maximum size of {max_mb:g}MB.",
            field=field,
            context=ctx,
        )
        self.max_size = max_size


class AuthenticationError(SparkzError):
    """
    Raised when a request has no valid session.

    Missing header, malformed token, bad signature and expiry all produce the
    same message; the reason is never revealed to the client.
    """

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(SparkzError):
    """Raised when an authenticated user acts on a resource they do not own."""

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(
            message=f"You are not allowed to modify this {resource}",
            context=ctx,
        )


class NotFoundError(SparkzError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; services convert that into this
    exception so the handler can answer 404.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource.capitalize()} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(SparkzError):
    """Raised when a write collides with existing data (e.g. duplicate email)."""

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UpstreamServiceError(SparkzError):
    """
    Raised when the video provider call did not succeed.

    Covers both a non-2xx answer and a transport failure (DNS, connect,
    timeout). The client only ever sees the generic message.
    """

    def __init__(
        self,
        message: str = "The video provider is unavailable. Please try again later.",
        operation: Optional[str] = None,
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if operation:
            ctx["operation"] = operation
        if status_code is not None:
            ctx["status_code"] = status_code
        super().__init__(message=message, context=ctx)
        self.operation = operation
        self.status_code = status_code


class DatabaseError(SparkzError):
    """
    Raised when a database operation fails unexpectedly.

    The message returned to the client is always generic; SQL text, constraint
    names and driver errors are logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
