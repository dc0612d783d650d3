"""
Alpaca API — Custom Exception Hierarchy
========================================

What:  Application-specific exceptions for the failure cases of a record endpoint.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with the matching HTTP status.
Who:   Raised by the document shapes and RecordService; caught by global handlers.

Exception Hierarchy:
    AlpacaError (base)
    ├── ValidationError   → 400 Bad Request (bad id, bad JSON, invalid document)
    ├── NotFoundError     → 404 Not Found
    └── DatabaseError     → 500 Internal Server Error (driver failure)
"""

from typing import Any, Dict, Optional


class AlpacaError(Exception):
    """
    Base exception for all Alpaca application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(AlpacaError):
    """
    Raised when client input fails validation.

    When:    Malformed record id, body that is not JSON, missing required fields,
             non-string search values.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Required fields missing",
            "details": {"record": "projects", "required": ["name", "category", "description"]}
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


class NotFoundError(AlpacaError):
    """
    Raised when a requested record does not exist.

    The driver reports a missing document as `None` (find_one) or as a zero
    count (replace_one, delete_one); the service layer turns both into this
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
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(AlpacaError):
    """
    Raised when a driver call fails for any reason other than "not found".

    When:    Server unreachable, timeout, write error, duplicate key.
    HTTP:    500 Internal Server Error

    The message returned to the client is always generic; the driver's own
    error text is kept in `context` and only logged server-side.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
