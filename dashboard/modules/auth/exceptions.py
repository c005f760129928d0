"""
Authentication module exceptions.

These exceptions are raised by the auth module and caught at the CLI
boundary, which sends the operator back to the login entry point.
"""

from shared.exceptions import AuthenticationError, AuthorizationError, ValidationError


class NotAuthenticatedError(AuthenticationError):
    """Raised when no usable session is stored."""

    def __init__(self, message: str = "Please log in to continue"):
        super().__init__(message, code="NOT_AUTHENTICATED")


class SessionExpiredError(AuthenticationError):
    """Raised when the session has expired or the server rejected it."""

    def __init__(self, message: str = "Your session has expired. Please log in again."):
        super().__init__(message, code="SESSION_EXPIRED")


class EmptyOtpError(ValidationError):
    """Raised when an OTP is submitted blank. No request is sent."""

    def __init__(self, message: str = "Please enter the OTP code"):
        super().__init__(message, code="EMPTY_OTP")


class PhoneNotRegisteredError(AuthenticationError):
    """Raised when a school-admin phone number is not registered."""

    def __init__(self, phone: str):
        super().__init__(
            "This phone number is not registered as a school. Please contact support.",
            code="PHONE_NOT_REGISTERED",
            details={"phone": phone},
        )


class InsufficientPermissionsError(AuthorizationError):
    """Raised when the actor's role doesn't allow an operation."""

    def __init__(self, required_role: str, user_role: str):
        super().__init__(
            f"Insufficient permissions. Required: {required_role}, has: {user_role}",
            code="INSUFFICIENT_PERMISSIONS",
            details={"required_role": required_role, "user_role": user_role},
        )
