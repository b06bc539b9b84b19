"""Custom exception classes for the marketplace client."""
from typing import Any, Optional


class AppException(Exception):
    """Base exception for the client."""

    def __init__(self, message: str, detail: Any = None):
        self.message = message
        self.detail = detail
        super().__init__(message)


class ApiError(AppException):
    """A request to the REST backend failed."""

    def __init__(self, message: str, status_code: Optional[int] = None, detail: Any = None):
        self.status_code = status_code
        super().__init__(message, detail)


class UnauthorizedError(ApiError):
    """HTTP 401: the session token is missing, expired or invalid."""
    pass


class ForbiddenError(ApiError):
    """HTTP 403: authenticated but not permitted."""
    pass


class NotFoundError(ApiError):
    """HTTP 404: resource not found."""
    pass


class ServerError(ApiError):
    """Any other non-2xx response."""
    pass


class NetworkError(ApiError):
    """The request never got a response (connection refused, DNS, timeout)."""
    pass


class MissingTokenError(AppException):
    """An authenticated action was attempted without a session token."""
    pass


class ValidationError(AppException):
    """Client-side validation failed before submission."""

    def __init__(self, message: str, errors: Optional[dict] = None):
        self.errors = errors or {}
        super().__init__(message, detail=self.errors)


class InvalidTransitionError(AppException):
    """A report or publication status transition is not allowed."""
    pass


class InvalidResponseError(AppException):
    """A 2xx response whose body does not have the expected shape."""
    pass
