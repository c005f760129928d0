"""
Export service implementation.

Resolves the actor's export path and carries out the part of it that
needs no operator input.
"""

import logging
from typing import Mapping, Optional, Sequence

from shared.config import Settings, get_settings
from shared.credential_store import get_credential_store
from shared.models import Role, Session
from shared.remote import RemoteClient, get_remote_client

from modules.attendance.formatting import format_attendance_for_export
from modules.attendance.models import AttendanceRecord
from modules.attendance.service import AttendanceService, get_attendance_service
from modules.auth.session import SessionManager

from .csv_export import CsvExporter
from .exceptions import NoDataToExportError
from .interfaces import IExportService
from .models import ExportDecision, ExportPath, OtpState
from .otp_workflow import ExportOtpWorkflow
from .policy import resolve_export_path
from .token_cache import ExportTokenCache

logger = logging.getLogger(__name__)


class ExportService(IExportService):
    """Implementation of role-dependent exports."""

    def __init__(
        self,
        remote: RemoteClient,
        sessions: SessionManager,
        attendance: AttendanceService,
        token_cache: ExportTokenCache,
        exporter: CsvExporter,
        settings: Optional[Settings] = None,
        policy: Optional[Mapping[Role, ExportPath]] = None,
    ):
        self._remote = remote
        self._sessions = sessions
        self._attendance = attendance
        self._token_cache = token_cache
        self._exporter = exporter
        self._settings = settings or get_settings()
        self._policy = policy

    @property
    def token_cache(self) -> ExportTokenCache:
        return self._token_cache

    def export_path(self) -> ExportPath:
        """Export path for the current actor."""
        return resolve_export_path(self._sessions.require().role, self._policy)

    def create_workflow(
        self,
        actor: Session,
        data_type: str,
        record_count: int,
    ) -> ExportOtpWorkflow:
        return ExportOtpWorkflow(
            actor=actor,
            data_type=data_type,
            record_count=record_count,
            remote=self._remote,
            sessions=self._sessions,
            token_cache=self._token_cache,
            attendance=self._attendance,
            exporter=self._exporter,
            settings=self._settings,
        )

    async def export(
        self,
        data_type: str,
        records: Sequence[AttendanceRecord],
    ) -> ExportDecision:
        """Start an export for the current actor."""
        actor = self._sessions.require()
        path = resolve_export_path(actor.role, self._policy)
        if not records:
            raise NoDataToExportError(data_type)

        decision = ExportDecision(path=path, data_type=data_type, record_count=len(records))

        if path == ExportPath.DIRECT:
            decision.file = self._exporter.emit(
                format_attendance_for_export(records),
                data_type,
            )
        elif path == ExportPath.OTP_GATED:
            workflow = self.create_workflow(actor, data_type, len(records))
            decision.workflow = workflow
            workflow.start()
            if workflow.state == OtpState.AUTHORIZED:
                decision.file = await workflow.fetch_and_emit()
        else:
            logger.info(f"Export by {actor.role} needs an approved export request")

        return decision


# Module-level instance getter
_service_instance: Optional[ExportService] = None


def get_export_service() -> ExportService:
    """Get the export service singleton."""
    global _service_instance
    if _service_instance is None:
        settings = get_settings()
        store = get_credential_store()
        _service_instance = ExportService(
            remote=get_remote_client(),
            sessions=SessionManager(store),
            attendance=get_attendance_service(),
            token_cache=ExportTokenCache(store, settings.export_token_lifetime_ms),
            exporter=CsvExporter(settings.export_dir),
            settings=settings,
        )
    return _service_instance


def reset_export_service() -> None:
    """Reset the export service singleton (for testing)."""
    global _service_instance
    _service_instance = None
