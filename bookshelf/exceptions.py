"""
Bookshelf Backend — Custom Exception Hierarchy
================================================

What:  Defines application-specific exceptions for different error scenarios.
Why:   Custom exceptions enable targeted error handling with appropriate HTTP
       status codes and user-friendly messages, without leaking internals.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services; caught by global handlers.

Exception Hierarchy:
    BookshelfError (base)
    ├── ValidationError              → 400 Bad Request (client can fix)
    ├── NotFoundError                → 404 Not Found
    ├── AuthError                    → 400 Bad Request
    │   ├── DuplicateUsernameError
    │   └── InvalidCredentialsError
    ├── UnauthorizedError            → 401 Unauthorized
    └── DatabaseError                → 500 Internal Server Error

Design Decision:
    Exceptions propagate naturally through the call stack, so routes stay thin
    and the mapping to HTTP lives in one place (main.register_exception_handlers).
"""

from typing import Any, Dict, Optional


class BookshelfError(Exception):
    """
    Base exception for all Bookshelf application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only where a handler says so)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(BookshelfError):
    """
    Raised when client input fails a business rule.

    When:    Blank book title on create/update.
    HTTP:    400 Bad Request

    Schema-level problems (wrong JSON types, over-long or out-of-range
    fields) arrive as FastAPI's RequestValidationError, which main.py also
    maps to 400. This class covers the rules the service layer owns.
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


class NotFoundError(BookshelfError):
    """
    Raised when a requested resource does not exist.

    HTTP:    404 Not Found

    SQLAlchemy returns None for missing rows; the service layer converts that
    into this exception so routes never deal with None checks.
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


class AuthError(BookshelfError):
    """
    Base for register/login failures.

    HTTP:    400 Bad Request with the message only. Context is never returned,
             so the response cannot reveal which check failed.
    """


class DuplicateUsernameError(AuthError):
    """Registration attempted with a username that already exists."""

    def __init__(self, username: Optional[str] = None):
        super().__init__(
            message="Username already exists",
            context={"username": username} if username else None,
        )


class InvalidCredentialsError(AuthError):
    """
    Login failed.

    Unknown username and wrong password raise the same exception with the
    same message; only the server-side context records which one it was.
    """

    def __init__(self, reason: Optional[str] = None):
        super().__init__(
            message="Invalid username or password",
            context={"reason": reason} if reason else None,
        )


class UnauthorizedError(BookshelfError):
    """
    Missing, malformed, or expired bearer token on a protected route.

    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(BookshelfError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic.
        Detailed error info (SQL, constraint names) is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
