"""
Base exception classes for the HygieneQuest dashboard.

Each module should define its own exceptions that inherit from these bases.
The CLI catches DashboardError at its boundary and renders the message
as an inline error banner.
"""

from typing import Optional, Any


class DashboardError(Exception):
    """
    Base exception for all dashboard errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for display or logging."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(DashboardError):
    """Resource not found."""

    pass


class ValidationError(DashboardError):
    """Input validation failed."""

    pass


class AuthenticationError(DashboardError):
    """Authentication failed (invalid, expired or missing credentials)."""

    pass


class AuthorizationError(DashboardError):
    """Authorization failed (insufficient permissions)."""

    pass


class ConfigurationError(DashboardError):
    """A policy or setting does not cover the requested case."""

    pass


class ExternalServiceError(DashboardError):
    """Error communicating with an external service."""

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service


class RequestTimeoutError(ExternalServiceError):
    """The remote call was aborted after its timeout budget."""

    def __init__(self, service: str, timeout: float):
        super().__init__(
            "Request timed out. Please check your connection and try again.",
            service,
            code="REQUEST_TIMEOUT",
            details={"timeout_seconds": timeout},
        )


class RemoteUnavailableError(ExternalServiceError):
    """The remote API could not be reached at all."""

    def __init__(self, service: str, reason: str):
        super().__init__(
            "Unable to reach the server. Please check your connection and try again.",
            service,
            code="REMOTE_UNAVAILABLE",
            details={"reason": reason},
        )


class RemoteRejectedError(ExternalServiceError):
    """The remote API answered with an error status."""

    def __init__(
        self,
        message: str,
        service: str,
        status_code: int,
        detail: Any = None,
    ):
        super().__init__(
            message,
            service,
            code="REMOTE_REJECTED",
            details={"status_code": status_code},
        )
        self.status_code = status_code
        self.detail = detail
