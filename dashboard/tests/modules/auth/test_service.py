import pytest

from modules.auth.exceptions import EmptyOtpError, PhoneNotRegisteredError
from modules.auth.service import AuthService
from shared.credential_store import AUTH_USER_KEY, EXPORT_TOKEN_KEY, EXPORT_TOKEN_TIMESTAMP_KEY
from shared.exceptions import ExternalServiceError, RemoteRejectedError
from shared.models import Role

PHONE = "0241234567"


class TestAuthService:
    @pytest.fixture
    def service(self, remote, sessions, settings, clock):
        """Create auth service against the fake API."""
        return AuthService(remote, sessions, settings=settings, clock=clock)

    @pytest.mark.asyncio
    async def test_send_login_otp(self, service, api):
        """Dashboard roles should request the OTP from the dashboard endpoint."""
        api.add("POST", "/dashboard/send-login-otp", json_body={"message": "sent"})

        await service.send_login_otp(f"  {PHONE} ")

        call = api.calls_to("POST", "/dashboard/send-login-otp")[0]
        assert api.body(call) == {"phone": PHONE}

    @pytest.mark.asyncio
    async def test_login_creates_twenty_minute_session(self, service, api, clock, store):
        """A successful login should persist a session expiring 20 minutes later."""
        api.add("POST", "/dashboard/login", json_body={
            "user_id": 42,
            "name": "Ama Mensah",
            "role": "manager",
            "phone": PHONE,
            "access_token": "session-token",
        })

        session = await service.login(PHONE, "123456")

        assert session.id == 42
        assert session.role == "manager"
        assert session.access_token == "session-token"
        assert session.login_time == clock()
        assert session.expires_at == clock() + 20 * 60 * 1000
        assert store.get(AUTH_USER_KEY) is not None
        assert service.sessions.current() == session

    @pytest.mark.asyncio
    async def test_login_rejects_empty_otp_without_network(self, service, api):
        with pytest.raises(EmptyOtpError):
            await service.login(PHONE, "   ")
        assert api.calls == []

    @pytest.mark.asyncio
    async def test_login_failure_surfaces_detail(self, service, api, store):
        api.add("POST", "/dashboard/login", status=401, json_body={"detail": "Invalid OTP"})

        with pytest.raises(RemoteRejectedError) as exc_info:
            await service.login(PHONE, "000000")
        assert exc_info.value.message == "Invalid OTP"
        assert store.get(AUTH_USER_KEY) is None

    @pytest.mark.asyncio
    async def test_login_with_unusable_profile(self, service, api):
        """A login response without a role cannot become a session."""
        api.add("POST", "/dashboard/login", json_body={"user_id": 1})

        with pytest.raises(ExternalServiceError) as exc_info:
            await service.login(PHONE, "123456")
        assert exc_info.value.code == "INVALID_LOGIN_RESPONSE"

    @pytest.mark.asyncio
    async def test_school_admin_requires_registration(self, service, api):
        """School-admin login should stop if the phone is not registered."""
        api.add("GET", f"/check-registration/{PHONE}", json_body={"registered": False})

        with pytest.raises(PhoneNotRegisteredError):
            await service.send_login_otp(PHONE, Role.SCHOOL_ADMIN)
        assert api.calls_to("POST", "/send-otp") == []

    @pytest.mark.asyncio
    async def test_school_admin_login(self, service, api):
        api.add("GET", f"/check-registration/{PHONE}", json_body={
            "registered": True,
            "id": 9,
            "school": "Accra Primary",
            "district": "Accra Metro",
        })
        api.add("POST", "/send-otp", json_body={})
        api.add("POST", "/verify-otp", json_body={"verified": True})

        await service.send_login_otp(PHONE, Role.SCHOOL_ADMIN)
        session = await service.login(PHONE, "123456", Role.SCHOOL_ADMIN)

        assert session.role == "schooladmin"
        assert session.name == "School Admin"
        assert session.school == "Accra Primary"
        assert session.id == 9

    def test_logout_clears_session_and_export_token(self, service, make_session, store):
        make_session()
        store.set(EXPORT_TOKEN_KEY, "export")
        store.set(EXPORT_TOKEN_TIMESTAMP_KEY, "1")

        service.logout()

        assert store.snapshot() == {}
