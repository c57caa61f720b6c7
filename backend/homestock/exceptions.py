"""
HomeStock Backend — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for each failure the API can report.
Why:   Services raise typed errors; global handlers (registered in main.py)
       turn them into JSON responses with the right HTTP status code.
How:   Each exception carries a short summary (`message`), a human-readable
       `detail` that is returned as the `error` field, and an optional
       `context` dict that is logged but never sent to the client.

Exception Hierarchy:
    HomeStockError (base)
    ├── ValidationError     → 400 Bad Request (500 in lenient mode)
    ├── NotFoundError       → 404 Not Found
    ├── UploadError         → 500 Internal Server Error
    ├── ImageCleanupError   → logged by the service, never returned
    ├── DatabaseError       → 500 Internal Server Error
    └── StartupError        → aborts application startup

Response body produced by the handlers:
    {
        "message": "Invalid stock item",
        "error": "category: Input should be 'Fruits', 'Vegetables', ...",
        "request_id": "1a2b3c4d"
    }
"""

from typing import Any, Dict, Optional


class HomeStockError(Exception):
    """
    Base exception for all HomeStock application errors.

    Attributes:
        message:  Short user-facing summary
        detail:   Human-readable explanation (returned as `error`)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        detail: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.detail = detail or message
        self.context = context or {}
        if self.detail == self.message:
            super().__init__(self.message)
        else:
            super().__init__(f"{self.message}: {self.detail}")


class ValidationError(HomeStockError):
    """
    Raised when stock fields or an uploaded image fail validation.

    When:  Missing required field, value outside an enumerated set, negative
           quantity, unknown user reference, non-image upload.
    HTTP:  400 Bad Request, or 500 when LENIENT_STATUS_CODES is enabled.
    """

    def __init__(
        self,
        detail: str = "Validation failed",
        field: Optional[str] = None,
        message: str = "Invalid stock item",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, detail=detail, context=ctx)
        self.field = field


class NotFoundError(HomeStockError):
    """
    Raised when a requested record does not exist.

    SQLAlchemy returns None for missing rows; the repository converts that
    into this exception so routes never check for None themselves.
    HTTP:  404 Not Found
    """

    def __init__(
        self,
        resource: str = "stock item",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource[:1].upper()}{resource[1:]} not found"
        detail = f"The requested {resource} was not found"
        if resource_id:
            detail = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, detail=detail, context=ctx)
        self.resource_id = resource_id


class UploadError(HomeStockError):
    """
    Raised when the media host is unreachable or rejects an image.

    The record creation or update that needed the image fails as a whole.
    HTTP:  500 Internal Server Error
    """

    def __init__(
        self,
        detail: str = "The image host rejected the upload",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message="Image upload failed", detail=detail, context=context)


class ImageCleanupError(HomeStockError):
    """
    Raised when a stored image could not be removed from the media host.

    Services treat image cleanup as a side effect: they log this error and
    carry on, so it never decides the outcome of a request.
    """

    def __init__(
        self,
        public_id: str,
        detail: str = "The image host did not remove the image",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["public_id"] = public_id
        super().__init__(message="Image cleanup failed", detail=detail, context=ctx)
        self.public_id = public_id


class DatabaseError(HomeStockError):
    """
    Raised when a database operation fails unexpectedly.

    The detail returned to the client is always generic; the driver error is
    only kept in `context` for the server log.
    HTTP:  500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "A database error occurred",
        detail: str = "The database operation could not be completed. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, detail=detail, context=context)


class StartupError(HomeStockError):
    """
    Raised when the server cannot start: missing configuration, database
    unreachable, or listening port already bound. Fatal.
    """

    def __init__(
        self,
        detail: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message="Server startup failed", detail=detail, context=context)
