"""
Postboard Backend — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions, one per failure category.
How:   Each exception carries a user-facing message, an HTTP-style status code
       and an optional context dict. REST exception handlers (main.py) and the
       GraphQL error formatter (graphql/router.py) both read `status_code`, so a
       resolver and a REST route report the same failure with the same code.
Who:   Raised by services, validation and route handlers.

Exception Hierarchy:
    PostboardError (base)                → 500
    ├── ValidationError                  → 422 (carries a list of field messages)
    ├── AuthenticationError              → 401
    ├── AuthorizationError               → 403
    ├── NotFoundError                    → 404
    ├── ConflictError                    → 409
    ├── FileStorageError                 → 500
    └── DatabaseError                    → 500
"""

from typing import Any, Dict, List, Optional


class PostboardError(Exception):
    """
    Base exception for all Postboard application errors.

    Attributes:
        message:  User-facing error description (safe to return to clients)
        context:  Additional debug info (logged, never returned to clients)
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(PostboardError):
    """
    Raised when client input fails one or more field rules.

    All failing rules are collected into `data` so a client can show every
    problem at once:

        {"message": "Invalid input.", "data": [{"message": "Title is invalid."}]}
    """

    status_code = 422

    def __init__(
        self,
        message: str = "Invalid input.",
        data: Optional[List[Dict[str, str]]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.data = data or []


class AuthenticationError(PostboardError):
    """Raised when an operation needs an identity and none (or a bad one) was given."""

    status_code = 401

    def __init__(
        self,
        message: str = "Not authenticated!",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthorizationError(PostboardError):
    """Raised when the caller is authenticated but does not own the resource."""

    status_code = 403

    def __init__(
        self,
        message: str = "Not authorized!",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(PostboardError):
    """
    Raised when a requested resource does not exist.

    Malformed identifiers are reported the same way as unknown ones.
    """

    status_code = 404

    def __init__(
        self,
        message: str = "No post found!",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(PostboardError):
    """Raised when a unique value (a user's email) is already taken."""

    status_code = 409

    def __init__(
        self,
        message: str = "User exists already!",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(PostboardError):
    """
    Raised when writing an uploaded file fails (disk full, permissions, I/O).

    Deleting a replaced image never raises this; that failure is only logged.
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(PostboardError):
    """
    Raised when a database operation fails unexpectedly.

    The message returned to the client is always generic; the driver error is
    kept in `context` for the server log.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
