"""
ChurchFinder Backend — Custom Exception Hierarchy
==================================================

What:  Application-specific exceptions, one per failure class the API exposes.
How:   Each exception carries a client-safe `message` and a `context` dict that
       is logged server-side only. Global handlers registered in main.py turn
       them into JSON error responses.
Who:   Raised by services and routes; caught by the global handlers.

Exception Hierarchy:
    ChurchFinderError (base)
    ├── ValidationError      → 400 Bad Request ("Invalid <thing> data")
    ├── NotFoundError        → 404 Not Found
    ├── ConflictError        → 409 Conflict
    ├── UpstreamError        → upstream status passthrough (502 on transport failure)
    ├── DatabaseError        → 500 Internal Server Error
    └── ConfigurationError   → fatal at startup, never reaches a request
"""

from typing import Any, Dict, Optional


class ChurchFinderError(Exception):
    """
    Base exception for all ChurchFinder application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    code = "server_error"
    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(ChurchFinderError):
    """
    Raised when a request body or seed parameters fail schema validation.

    The message stays generic ("Invalid review data"); the pydantic error
    list goes into `context` so it is logged, not echoed to the client.
    """

    code = "validation_error"
    status_code = 400

    def __init__(
        self,
        message: str = "Invalid request data",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(ChurchFinderError):
    """
    Raised when a referenced resource does not exist.

    SQLAlchemy returns None for missing rows; services convert that into this
    exception so routes stay free of status-code logic.
    """

    code = "not_found"
    status_code = 404

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id:
                message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(ChurchFinderError):
    """Raised when a create would violate a uniqueness rule (duplicate place id)."""

    code = "conflict"
    status_code = 409

    def __init__(
        self,
        message: str = "The resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UpstreamError(ChurchFinderError):
    """
    Raised when a Google API call fails.

    `status_code` is the upstream HTTP status when there was a response, or
    502 when the request never completed. The handler replies with that
    status and the generic `message`; the upstream body is only logged.
    """

    code = "upstream_error"

    def __init__(
        self,
        message: str = "Upstream service request failed",
        status_code: int = 502,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["upstream_status"] = status_code
        super().__init__(message=message, context=ctx)
        self.status_code = status_code


class DatabaseError(ChurchFinderError):
    """
    Raised when a database operation fails unexpectedly.

    The client always sees a generic message; SQL and constraint names are
    logged server-side only.
    """

    code = "server_error"
    status_code = 500

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ConfigurationError(ChurchFinderError):
    """
    Raised while building Settings when required configuration is missing.

    Only ever raised during startup. The application factory lets it
    propagate, so the process exits instead of serving requests.
    """

    code = "configuration_error"

    def __init__(
        self,
        message: str = "Required configuration is missing",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
