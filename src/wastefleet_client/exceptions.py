"""
Exception hierarchy for the WasteFleet client library.

Every error raised by this package derives from WasteFleetClientError.
HTTP failures are RequestFailed subclasses chosen by status code and keep
the decoded response body so callers can present server messages.
"""

from typing import Any, Dict, Optional


class WasteFleetClientError(Exception):
    """
    Base exception for all WasteFleet client errors.

    Attributes:
        message: Human-readable error message
        details: Additional context about the failure
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r})"


# =============================================================================
# Registry Errors
# =============================================================================


class UnknownEntity(WasteFleetClientError, KeyError):
    """
    A logical name was requested that was never registered.

    This is a programmer error and is raised as early as possible,
    ideally while the application is being wired together.
    """

    def __init__(self, logical_name: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(f"Unknown entity: {logical_name!r}", details=details)
        self.logical_name = logical_name


class DuplicateRegistration(WasteFleetClientError):
    """Two endpoint descriptors share the same logical name."""

    def __init__(
        self,
        logical_name: str,
        *,
        existing_path: Optional[str] = None,
        new_path: Optional[str] = None,
    ):
        message = f"Logical name {logical_name!r} is registered more than once"
        if existing_path and new_path:
            message += f" ({existing_path} and {new_path})"
        super().__init__(
            message,
            details={"existing_path": existing_path, "new_path": new_path},
        )
        self.logical_name = logical_name


# =============================================================================
# Request Errors
# =============================================================================


class RequestFailed(WasteFleetClientError):
    """
    An HTTP request failed.

    Raised for every non-2xx response and for network failures. Network
    failures have no status code.

    Attributes:
        status_code: HTTP status code, or None for network failures
        body: Decoded response body (JSON value or text)
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        body: Any = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)
        self.status_code = status_code
        self.body = body

    def __str__(self) -> str:
        if self.status_code:
            return f"{self.message} (HTTP {self.status_code})"
        return self.message

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"status_code={self.status_code})"
        )


class ValidationError(RequestFailed):
    """The server rejected the payload (400 or 422)."""


class AuthenticationError(RequestFailed):
    """Authentication failed or the bearer token is invalid (401)."""


class AuthorizationError(RequestFailed):
    """The session lacks permission for the operation (403)."""


class NotFoundError(RequestFailed):
    """The requested resource does not exist (404)."""


class ConflictError(RequestFailed):
    """The request conflicts with the current resource state (409)."""


class ServerError(RequestFailed):
    """The server failed to handle the request (5xx)."""


class NetworkError(RequestFailed):
    """
    Network-level error occurred.

    Raised when there's a connection problem, DNS failure, or other
    transport issue before any response was received.
    """

    def __init__(
        self,
        message: str = "Network error",
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, status_code=None, body=None, details=details)


class TimeoutError(NetworkError):
    """Request timed out."""

    def __init__(
        self,
        message: str = "Request timed out",
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)


# =============================================================================
# Exception Mapping
# =============================================================================

# Map HTTP status codes to exception classes
STATUS_CODE_EXCEPTIONS = {
    400: ValidationError,
    401: AuthenticationError,
    403: AuthorizationError,
    404: NotFoundError,
    409: ConflictError,
    422: ValidationError,
}


def exception_from_response(
    status_code: int,
    message: str,
    body: Any = None,
) -> RequestFailed:
    """
    Create an appropriate exception from an HTTP response.

    Args:
        status_code: HTTP status code
        message: Error message
        body: Decoded response body

    Returns:
        Appropriate RequestFailed subclass
    """
    exception_class = STATUS_CODE_EXCEPTIONS.get(status_code)
    if exception_class is None:
        exception_class = ServerError if 500 <= status_code < 600 else RequestFailed
    return exception_class(message, status_code=status_code, body=body)
