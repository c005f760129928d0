"""
Service wiring for the CLI.

The container builds every service from one settings object, one
credential store and one remote client, so all commands in a process
see the same session and export token.
"""

from typing import Optional

import httpx

from shared.config import Settings, get_settings
from shared.credential_store import ICredentialStore, JsonFileCredentialStore
from shared.expiry import Clock, now_ms
from shared.remote import RemoteClient

from modules.attendance.service import AttendanceService
from modules.attendance.sources import RemoteAttendanceSource, SampleDataSource
from modules.auth.countdown import SessionCountdown
from modules.auth.service import AuthService
from modules.auth.session import SessionManager
from modules.export_requests.service import ExportRequestService
from modules.export_requests.user_directory import UserDirectory
from modules.exports.csv_export import CsvExporter
from modules.exports.service import ExportService
from modules.exports.token_cache import ExportTokenCache


class ServiceContainer:
    """
    Container for all service instances.

    Services are created lazily on first access and cached. Tests pass
    an in-memory store, a mock transport and a fixed clock.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        store: Optional[ICredentialStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Clock = now_ms,
    ) -> None:
        self._settings = settings
        self._store = store
        self._transport = transport
        self._clock = clock

        self._remote: Optional[RemoteClient] = None
        self._sessions: Optional[SessionManager] = None
        self._exporter: Optional[CsvExporter] = None
        self._auth: Optional[AuthService] = None
        self._attendance: Optional[AttendanceService] = None
        self._exports: Optional[ExportService] = None
        self._export_requests: Optional[ExportRequestService] = None

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def store(self) -> ICredentialStore:
        if self._store is None:
            self._store = JsonFileCredentialStore(self.settings.credential_store_path)
        return self._store

    @property
    def remote(self) -> RemoteClient:
        if self._remote is None:
            self._remote = RemoteClient(
                self.settings.api_base_url,
                default_timeout=self.settings.data_timeout_seconds,
                transport=self._transport,
            )
        return self._remote

    @property
    def sessions(self) -> SessionManager:
        if self._sessions is None:
            self._sessions = SessionManager(self.store, clock=self._clock)
        return self._sessions

    @property
    def exporter(self) -> CsvExporter:
        if self._exporter is None:
            self._exporter = CsvExporter(self.settings.export_dir, clock=self._clock)
        return self._exporter

    @property
    def auth(self) -> AuthService:
        if self._auth is None:
            self._auth = AuthService(
                self.remote,
                self.sessions,
                settings=self.settings,
                clock=self._clock,
            )
        return self._auth

    @property
    def attendance(self) -> AttendanceService:
        if self._attendance is None:
            self._attendance = AttendanceService(
                source=RemoteAttendanceSource(self.remote, self.settings.data_timeout_seconds),
                sessions=self.sessions,
                fallback=SampleDataSource() if self.settings.degraded_mode else None,
            )
        return self._attendance

    @property
    def exports(self) -> ExportService:
        if self._exports is None:
            self._exports = ExportService(
                remote=self.remote,
                sessions=self.sessions,
                attendance=self.attendance,
                token_cache=ExportTokenCache(
                    self.store,
                    self.settings.export_token_lifetime_ms,
                    clock=self._clock,
                ),
                exporter=self.exporter,
                settings=self.settings,
            )
        return self._exports

    @property
    def export_requests(self) -> ExportRequestService:
        if self._export_requests is None:
            self._export_requests = ExportRequestService(
                remote=self.remote,
                sessions=self.sessions,
                attendance=self.attendance,
                exporter=self.exporter,
                directory=UserDirectory(self.remote, self.settings.data_timeout_seconds),
                settings=self.settings,
                clock=self._clock,
            )
        return self._export_requests

    def countdown(self) -> SessionCountdown:
        return SessionCountdown(
            self.sessions,
            warning_ms=self.settings.session_warning_ms,
            clock=self._clock,
        )

    def reset(self) -> None:
        """Drop every cached service (settings, store and transport are kept)."""
        self._remote = None
        self._sessions = None
        self._exporter = None
        self._auth = None
        self._attendance = None
        self._exports = None
        self._export_requests = None


# Module-level container singleton
_container: Optional[ServiceContainer] = None


def get_container() -> ServiceContainer:
    """Get the singleton service container."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def reset_container() -> None:
    """Reset the service container (for testing)."""
    global _container
    _container = None
