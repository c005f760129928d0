"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules:
a controllable clock, an in-memory credential store, and a fake remote API
served through httpx.MockTransport.
"""

import json
from typing import Any, Callable, Optional, Union

import httpx
import pytest

from shared.config import Settings
from shared.credential_store import AUTH_USER_KEY, InMemoryCredentialStore, reset_credential_store
from shared.models import Role, Session
from shared.remote import RemoteClient, reset_remote_client

from modules.attendance.service import reset_attendance_service
from modules.auth.service import reset_auth_service
from modules.auth.session import SessionManager
from modules.export_requests.service import reset_export_request_service
from modules.exports.service import reset_export_service

# 2025-10-09T08:53:20Z
FIXED_NOW = 1_760_000_000_000
MINUTE_MS = 60 * 1000
TEST_BASE_URL = "https://api.test"

Responder = Union[tuple[int, Any], Callable[[httpx.Request], httpx.Response]]


class FakeClock:
    """Epoch-ms clock that only moves when told to."""

    def __init__(self, now: int = FIXED_NOW):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeApi:
    """
    In-process stand-in for the remote API.

    Routes are keyed by (method, path). Unrouted requests get a 404 with
    a `detail` body, like the real server.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Responder] = {}
        self.calls: list[httpx.Request] = []

    def add(
        self,
        method: str,
        path: str,
        status: int = 200,
        json_body: Any = None,
        handler: Optional[Callable[[httpx.Request], httpx.Response]] = None,
    ) -> None:
        self.routes[(method.upper(), path)] = handler or (status, json_body)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        responder = self.routes.get((request.method, request.url.path))
        if responder is None:
            return httpx.Response(404, json={"detail": "Not Found"})
        if callable(responder):
            return responder(request)
        status, body = responder
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def calls_to(self, method: str, path: str) -> list[httpx.Request]:
        return [c for c in self.calls if c.method == method.upper() and c.url.path == path]

    @staticmethod
    def body(request: httpx.Request) -> Any:
        return json.loads(request.content)


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset module singletons before and after each test."""
    resets = (
        reset_auth_service,
        reset_attendance_service,
        reset_export_service,
        reset_export_request_service,
        reset_remote_client,
        reset_credential_store,
    )
    for reset in resets:
        reset()
    yield
    for reset in resets:
        reset()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def remote(api: FakeApi) -> RemoteClient:
    return RemoteClient(TEST_BASE_URL, default_timeout=10.0, transport=api.transport)


@pytest.fixture
def store() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        api_base_url=TEST_BASE_URL,
        export_dir=tmp_path / "exports",
        credential_store_path=tmp_path / "credentials.json",
    )


@pytest.fixture
def sessions(store: InMemoryCredentialStore, clock: FakeClock) -> SessionManager:
    return SessionManager(store, clock=clock)


@pytest.fixture
def make_session(store: InMemoryCredentialStore, clock: FakeClock):
    """Factory that logs an actor in by writing a session to the store."""

    def _make(
        role: Union[Role, str] = Role.MANAGER,
        user_id: Union[int, str] = 42,
        phone: str = "0241234567",
        name: str = "Ama Mensah",
        access_token: str = "session-token",
        lifetime_ms: int = 20 * MINUTE_MS,
    ) -> Session:
        session = Session(
            id=user_id,
            phone=phone,
            name=name,
            role=role.value if isinstance(role, Role) else role,
            access_token=access_token,
            login_time=clock(),
            expires_at=clock() + lifetime_ms,
        )
        store.set(AUTH_USER_KEY, session.model_dump_json())
        return session

    return _make


@pytest.fixture
def attendance_payload() -> list[dict[str, Any]]:
    """Attendance records as the API returns them."""
    return [
        {
            "id": 1,
            "phone": "0241234567",
            "students_present": 25,
            "students_absent": 3,
            "absence_reason": "Sick, malaria",
            "topic_covered": "Handwashing",
            "created_at": "2025-10-08T09:15:00Z",
        },
        {
            "id": 2,
            "phone": "0209876543",
            "students_present": 30,
            "students_absent": 2,
            "absence_reason": "Heavy rain",
            "subject": "Toothbrushing",
            "created_at": "2025-10-08T10:30:00Z",
        },
    ]


@pytest.fixture
def registrations_payload() -> list[dict[str, Any]]:
    return [
        {
            "id": 1,
            "phone": "0241234567",
            "name": "Ama Mensah",
            "school": "Accra Primary",
            "district": "Accra Metro",
            "language": "Twi",
        },
    ]
