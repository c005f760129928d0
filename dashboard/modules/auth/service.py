"""
Authentication service implementation.

Logs operators in with phone + OTP against the remote API and persists
the resulting session through the SessionManager.
"""

import logging
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from shared.config import Settings, get_settings
from shared.credential_store import get_credential_store
from shared.exceptions import ExternalServiceError
from shared.expiry import Clock, now_ms
from shared.models import Role, Session
from shared.remote import SERVICE_NAME, RemoteClient, get_remote_client

from .exceptions import EmptyOtpError, PhoneNotRegisteredError
from .interfaces import IAuthService
from .models import RegistrationCheck, SendOtpRequest, VerifyOtpRequest
from .session import SessionManager

logger = logging.getLogger(__name__)

DEFAULT_SCHOOL_ADMIN_NAME = "School Admin"


class AuthService(IAuthService):
    """
    Implementation of the authentication service.

    Sessions last a fixed `session_lifetime_minutes` from login and are
    only renewed by logging in again.
    """

    def __init__(
        self,
        remote: RemoteClient,
        sessions: SessionManager,
        settings: Optional[Settings] = None,
        clock: Clock = now_ms,
    ):
        self._remote = remote
        self._sessions = sessions
        self._settings = settings or get_settings()
        self._clock = clock

    @property
    def sessions(self) -> SessionManager:
        return self._sessions

    async def send_login_otp(self, phone: str, role: Optional[Role] = None) -> None:
        """Request a login OTP for the phone."""
        body = SendOtpRequest(phone=phone.strip()).model_dump()
        timeout = self._settings.otp_timeout_seconds

        if role == Role.SCHOOL_ADMIN:
            registration = await self._check_registration(body["phone"])
            if not registration.registered:
                raise PhoneNotRegisteredError(body["phone"])
            await self._remote.post(
                "/send-otp",
                json_body=body,
                timeout=timeout,
                fallback_message="Failed to send OTP",
            )
        else:
            await self._remote.post(
                "/dashboard/send-login-otp",
                json_body=body,
                timeout=timeout,
                fallback_message="Failed to send OTP",
            )
        logger.info("Login OTP sent")

    async def login(self, phone: str, otp: str, role: Optional[Role] = None) -> Session:
        """Verify the login OTP and persist the session."""
        if not otp.strip():
            raise EmptyOtpError()

        body = VerifyOtpRequest(phone=phone.strip(), otp=otp.strip()).model_dump()
        timeout = self._settings.otp_timeout_seconds

        if role == Role.SCHOOL_ADMIN:
            await self._remote.post(
                "/verify-otp",
                json_body=body,
                timeout=timeout,
                fallback_message="OTP verification failed",
            )
            registration = await self._check_registration(body["phone"])
            profile: dict[str, Any] = {
                "id": registration.id if registration.id is not None else 0,
                "phone": body["phone"],
                "name": registration.name or DEFAULT_SCHOOL_ADMIN_NAME,
                "role": Role.SCHOOL_ADMIN.value,
                "school": registration.school,
                "district": registration.district,
            }
        else:
            response = await self._remote.post(
                "/dashboard/login",
                json_body=body,
                timeout=timeout,
                fallback_message="Login failed",
            )
            profile = dict(response or {})
            profile.setdefault("phone", body["phone"])

        session = self._create_session(profile)
        self._sessions.save(session)
        logger.info(f"Logged in as {session.name or session.phone} ({session.role})")
        return session

    def logout(self) -> None:
        self._sessions.clear()
        logger.info("Logged out")

    def _create_session(self, profile: dict[str, Any]) -> Session:
        now = self._clock()
        try:
            return Session.model_validate(
                {
                    **profile,
                    "login_time": now,
                    "expires_at": now + self._settings.session_lifetime_ms,
                }
            )
        except PydanticValidationError as e:
            raise ExternalServiceError(
                "Invalid login response from server",
                SERVICE_NAME,
                code="INVALID_LOGIN_RESPONSE",
                details={"errors": e.error_count()},
            )

    async def _check_registration(self, phone: str) -> RegistrationCheck:
        data = await self._remote.get(
            f"/check-registration/{phone}",
            fallback_message="Failed to check registration status.",
        )
        return RegistrationCheck.model_validate(data or {})


# Module-level instance getter
_service_instance: Optional[AuthService] = None


def get_auth_service() -> AuthService:
    """Get the auth service singleton."""
    global _service_instance
    if _service_instance is None:
        _service_instance = AuthService(
            remote=get_remote_client(),
            sessions=SessionManager(get_credential_store()),
        )
    return _service_instance


def reset_auth_service() -> None:
    """Reset the auth service singleton (for testing)."""
    global _service_instance
    _service_instance = None
