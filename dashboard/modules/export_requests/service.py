"""
Export request service implementation.

Submission and resolution are single-flight: while one is running,
another raises RequestInFlightError instead of sending a duplicate.
The request list is always re-fetched after a resolution; the server
is the only source of truth, and concurrent approvers resolve as
last-write-wins.
"""

import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from shared.config import Settings, get_settings
from shared.credential_store import get_credential_store
from shared.exceptions import ExternalServiceError, RemoteRejectedError
from shared.expiry import Clock, iso_timestamp, now_ms
from shared.models import Role, Session
from shared.remote import SERVICE_NAME, RemoteClient, get_remote_client

from modules.attendance.service import AttendanceService, get_attendance_service
from modules.auth.exceptions import InsufficientPermissionsError
from modules.auth.session import SessionManager
from modules.exports.csv_export import CsvExporter
from modules.exports.models import EmittedFile, FileVariant

from .exceptions import (
    EmptyReasonError,
    InvalidDecisionError,
    RequestAlreadyResolvedError,
    RequestInFlightError,
    RequestNotApprovedError,
    RequestValidationError,
)
from .interfaces import IExportRequestService
from .models import (
    EXPORT_REQUESTS_PATH,
    CreateExportRequest,
    ExportRequest,
    RequestScope,
    RequestStatus,
    ResolveExportRequest,
)
from .poller import RequestPoller
from .user_directory import UserDirectory

logger = logging.getLogger(__name__)

PLACEHOLDER_REQUESTER_NAME = "Field Worker"
PLACEHOLDER_REQUESTER_PHONE = "0000000000"
DEFAULT_APPROVER_NAME = "Super Admin"


def _is_super_admin(actor: Session) -> bool:
    try:
        return Role.parse(actor.role) == Role.SUPER_ADMIN
    except ValueError:
        return False


class ExportRequestService(IExportRequestService):
    """Implementation of the request/approval workflow."""

    def __init__(
        self,
        remote: RemoteClient,
        sessions: SessionManager,
        attendance: AttendanceService,
        exporter: CsvExporter,
        directory: Optional[UserDirectory] = None,
        settings: Optional[Settings] = None,
        clock: Clock = now_ms,
    ):
        self._remote = remote
        self._sessions = sessions
        self._attendance = attendance
        self._exporter = exporter
        self._directory = directory or UserDirectory(remote)
        self._settings = settings or get_settings()
        self._clock = clock
        self._busy = False

    @property
    def is_busy(self) -> bool:
        return self._busy

    def default_scope(self, actor: Optional[Session] = None) -> RequestScope:
        """Super admins see every request; everyone else sees their own."""
        actor = actor or self._sessions.require()
        if _is_super_admin(actor):
            return RequestScope.all()
        return RequestScope.requester(actor.id)

    async def submit_request(
        self,
        reason: str,
        data_type: str,
        record_count: int,
    ) -> Optional[ExportRequest]:
        """File a pending export request for the current actor."""
        reason = reason.strip()
        if not reason:
            raise EmptyReasonError()

        actor = self._sessions.require()
        with self._in_flight():
            profile = await self._directory.lookup(actor.id, actor.access_token)
            body = CreateExportRequest(
                requester_id=actor.id,
                requester_name=(profile and profile.name) or PLACEHOLDER_REQUESTER_NAME,
                requester_phone=(profile and profile.phone) or PLACEHOLDER_REQUESTER_PHONE,
                data_type=data_type,
                record_count=record_count,
                reason=reason,
            ).model_dump(mode="json")

            try:
                with self._sessions.expire_on_unauthorized():
                    data = await self._remote.post(
                        EXPORT_REQUESTS_PATH,
                        bearer=actor.access_token,
                        json_body=body,
                        fallback_message="Failed to submit export request",
                    )
            except RemoteRejectedError as e:
                if e.status_code == 422:
                    raise RequestValidationError(e.detail) from e
                raise

        logger.info(f"Export request submitted for {record_count} {data_type} records")
        if isinstance(data, dict) and "id" in data:
            try:
                return ExportRequest.model_validate(data)
            except PydanticValidationError:
                logger.warning("Server echoed an unreadable export request")
        return None

    async def list_requests(
        self,
        scope: Optional[RequestScope] = None,
    ) -> list[ExportRequest]:
        """Fetch requests for the scope (defaults by role)."""
        actor = self._sessions.require()
        scope = scope or self.default_scope(actor)

        with self._sessions.expire_on_unauthorized():
            data = await self._remote.get(
                scope.path,
                bearer=actor.access_token,
                fallback_message="Failed to fetch export requests",
            )

        if not isinstance(data, list):
            raise ExternalServiceError(
                "Unexpected response when listing export requests",
                SERVICE_NAME,
                code="INVALID_RESPONSE",
                details={"path": scope.path},
            )
        try:
            return [ExportRequest.model_validate(item) for item in data]
        except PydanticValidationError as e:
            raise ExternalServiceError(
                "Unexpected response when listing export requests",
                SERVICE_NAME,
                code="INVALID_RESPONSE",
                details={"path": scope.path, "errors": e.error_count()},
            )

    async def resolve_request(
        self,
        request: ExportRequest,
        decision: Union[RequestStatus, str],
    ) -> list[ExportRequest]:
        """Approve or reject a pending request, then re-fetch all requests."""
        actor = self._sessions.require()
        if not _is_super_admin(actor):
            raise InsufficientPermissionsError(Role.SUPER_ADMIN.value, actor.role)

        try:
            status = RequestStatus(decision)
        except ValueError:
            raise InvalidDecisionError(str(decision))
        if status == RequestStatus.PENDING:
            raise InvalidDecisionError(status.value)
        if not request.is_pending:
            raise RequestAlreadyResolvedError(request.id, request.status.value)

        body = ResolveExportRequest(
            status=status,
            approved_by=actor.name or DEFAULT_APPROVER_NAME,
            approved_at=iso_timestamp(self._clock()),
        ).model_dump(mode="json")

        with self._in_flight():
            with self._sessions.expire_on_unauthorized():
                await self._remote.patch(
                    f"{EXPORT_REQUESTS_PATH}/{request.id}",
                    bearer=actor.access_token,
                    json_body=body,
                    fallback_message=f"Failed to {'approve' if status == RequestStatus.APPROVED else 'reject'} request",
                )
        logger.info(f"Export request {request.id} {status.value} by {body['approved_by']}")

        return await self.list_requests(RequestScope.all())

    async def download_approved_data(self, request: ExportRequest) -> EmittedFile:
        """Write the dataset behind an approved request to CSV."""
        if not request.can_download:
            raise RequestNotApprovedError(request.id, request.status.value)

        actor = self._sessions.require()
        with self._sessions.expire_on_unauthorized():
            records = await self._attendance.fetch_raw_attendance(actor.access_token)

        return self._exporter.emit(
            records,
            request.data_type,
            variant=FileVariant.APPROVED,
            request_id=request.id,
        )

    def create_poller(
        self,
        scope: RequestScope,
        on_update: Callable[[list[ExportRequest]], None],
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> RequestPoller:
        """Poller for a request view, using the interval configured for it."""
        interval = (
            self._settings.approver_poll_interval_seconds
            if scope.is_approver_view
            else self._settings.requester_poll_interval_seconds
        )

        async def fetch() -> list[ExportRequest]:
            return await self.list_requests(scope)

        return RequestPoller(fetch, interval, on_update, on_error)

    @contextmanager
    def _in_flight(self) -> Iterator[None]:
        if self._busy:
            raise RequestInFlightError()
        self._busy = True
        try:
            yield
        finally:
            self._busy = False


# Module-level instance getter
_service_instance: Optional[ExportRequestService] = None


def get_export_request_service() -> ExportRequestService:
    """Get the export request service singleton."""
    global _service_instance
    if _service_instance is None:
        settings = get_settings()
        remote = get_remote_client()
        _service_instance = ExportRequestService(
            remote=remote,
            sessions=SessionManager(get_credential_store()),
            attendance=get_attendance_service(),
            exporter=CsvExporter(settings.export_dir),
            directory=UserDirectory(remote, settings.data_timeout_seconds),
            settings=settings,
        )
    return _service_instance


def reset_export_request_service() -> None:
    """Reset the export request service singleton (for testing)."""
    global _service_instance
    _service_instance = None
