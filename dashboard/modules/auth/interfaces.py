"""
Authentication module interface.

Other modules should depend on IAuthService and ISessionProvider, not
the concrete implementations.
"""

from typing import Protocol, Optional, runtime_checkable

from shared.models import Role, Session


@runtime_checkable
class ISessionProvider(Protocol):
    """
    The single accessor for the current actor.

    Every module that needs "who is logged in" goes through this
    protocol instead of reading the credential store itself.
    """

    def current(self) -> Optional[Session]:
        """
        Return the stored session if it is present, well-formed and unexpired.

        A missing, malformed or expired session is purged and None returned.
        """
        ...

    def require(self) -> Session:
        """
        Return the current session or fail.

        Raises:
            NotAuthenticatedError: If nobody is logged in
            SessionExpiredError: If the stored session has expired
        """
        ...

    def clear(self) -> None:
        """Remove the session and every credential derived from it."""
        ...


@runtime_checkable
class IAuthService(Protocol):
    """
    Interface for phone + OTP login.

    Dashboard roles (field worker, manager, super admin) log in through
    the /dashboard endpoints; school admins through the registration
    endpoints.
    """

    async def send_login_otp(self, phone: str, role: Optional[Role] = None) -> None:
        """
        Ask the server to send a login OTP to the phone.

        Args:
            phone: Phone number to log in with
            role: Pass Role.SCHOOL_ADMIN for school-admin login

        Raises:
            PhoneNotRegisteredError: If a school-admin phone isn't registered
            ExternalServiceError: If the server call fails or times out
        """
        ...

    async def login(self, phone: str, otp: str, role: Optional[Role] = None) -> Session:
        """
        Verify the OTP and persist a new 20-minute session.

        Raises:
            EmptyOtpError: If the OTP is blank (no request is sent)
            ExternalServiceError: If the server rejects the OTP or the call fails
        """
        ...

    def logout(self) -> None:
        """Clear the session and any export token."""
        ...
