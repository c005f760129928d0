"""
Authentication module.

Handles phone + OTP login, session persistence and expiry, and the
visible session countdown.

Public API:
- IAuthService: Interface for login/logout
- ISessionProvider: The current-actor accessor
- SessionManager: Persisted session owner
- SessionCountdown: Visible countdown to session expiry
- Auth exceptions: NotAuthenticatedError, SessionExpiredError, etc.
"""

from .interfaces import IAuthService, ISessionProvider
from .models import CountdownTick, RegistrationCheck
from .session import SessionManager
from .countdown import SessionCountdown, format_remaining
from .exceptions import (
    NotAuthenticatedError,
    SessionExpiredError,
    EmptyOtpError,
    PhoneNotRegisteredError,
    InsufficientPermissionsError,
)

__all__ = [
    # Interfaces
    "IAuthService",
    "ISessionProvider",
    # Models
    "CountdownTick",
    "RegistrationCheck",
    # Session handling
    "SessionManager",
    "SessionCountdown",
    "format_remaining",
    # Exceptions
    "NotAuthenticatedError",
    "SessionExpiredError",
    "EmptyOtpError",
    "PhoneNotRegisteredError",
    "InsufficientPermissionsError",
]
