"""
Attendance service implementation.

Loads the attendance listing shown on the dashboard and the datasets
used by exports. Only the dashboard listing may fall back to sample
data, and only when a fallback source was configured explicitly.
"""

import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from shared.config import get_settings
from shared.credential_store import get_credential_store
from shared.exceptions import ExternalServiceError
from shared.remote import get_remote_client

from modules.auth.session import SessionManager

from .exceptions import UnexpectedPayloadError
from .interfaces import IAttendanceSource
from .models import AttendanceFilter, AttendanceOverview, AttendanceRecord, RegistrationRecord
from .sources import ATTENDANCE_PATH, REGISTRATIONS_PATH, RemoteAttendanceSource, SampleDataSource
from .stats import (
    attendance_by_district,
    calculate_stats,
    enrich_attendance,
    filter_attendance,
    group_absence_reasons,
)

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


def parse_records(model: type[RecordT], data: list[dict[str, Any]], path: str) -> list[RecordT]:
    """Validate server records, reporting unreadable ones as a server fault."""
    try:
        return [model.model_validate(item) for item in data]
    except PydanticValidationError as e:
        logger.warning(f"{path} returned {e.error_count()} invalid record fields")
        raise UnexpectedPayloadError(path, f"{e.error_count()} invalid record fields")


class AttendanceService:
    """
    Attendance reads for the dashboard and for exports.

    Args:
        source: The primary (remote) data source
        sessions: Current-actor accessor; its bearer is used for listings
        fallback: Source substituted when the primary fails (degraded mode)
    """

    def __init__(
        self,
        source: IAttendanceSource,
        sessions: SessionManager,
        fallback: Optional[IAttendanceSource] = None,
    ):
        self._source = source
        self._sessions = sessions
        self._fallback = fallback

    @property
    def degraded_mode(self) -> bool:
        return self._fallback is not None

    async def _listing(
        self,
        kind: str,
        primary: Callable[[Optional[str]], Awaitable[list[dict[str, Any]]]],
        fallback: Optional[Callable[[Optional[str]], Awaitable[list[dict[str, Any]]]]],
    ) -> list[dict[str, Any]]:
        session = self._sessions.require()
        try:
            with self._sessions.expire_on_unauthorized():
                return await primary(session.access_token)
        except ExternalServiceError as e:
            if fallback is None:
                raise
            logger.warning(f"API unavailable, using sample {kind} data: {e.message}")
            return await fallback(session.access_token)

    async def _attendance_listing(self) -> list[AttendanceRecord]:
        data = await self._listing(
            "attendance",
            self._source.fetch_attendance,
            self._fallback.fetch_attendance if self._fallback else None,
        )
        return parse_records(AttendanceRecord, data, ATTENDANCE_PATH)

    async def list_registrations(self) -> list[RegistrationRecord]:
        data = await self._listing(
            "registrations",
            self._source.fetch_registrations,
            self._fallback.fetch_registrations if self._fallback else None,
        )
        return parse_records(RegistrationRecord, data, REGISTRATIONS_PATH)

    async def list_attendance(
        self,
        filters: Optional[AttendanceFilter] = None,
    ) -> list[AttendanceRecord]:
        """Attendance joined with registrations, optionally filtered."""
        attendance = await self._attendance_listing()
        registrations = await self.list_registrations()
        records = enrich_attendance(attendance, registrations)
        if filters:
            records = filter_attendance(
                records,
                search=filters.search,
                district=filters.district,
                school=filters.school,
            )
        return records

    async def overview(self) -> AttendanceOverview:
        """Listing, headline stats and breakdowns from a single fetch."""
        attendance = await self._attendance_listing()
        registrations = await self.list_registrations()
        return AttendanceOverview(
            records=enrich_attendance(attendance, registrations),
            stats=calculate_stats(attendance, registrations),
            absence_reasons=group_absence_reasons(attendance),
            districts=attendance_by_district(attendance, registrations),
        )

    async def fetch_unmasked_attendance(self, export_token: str) -> list[AttendanceRecord]:
        """
        Attendance fetched with an export token. Never falls back.

        Raises:
            ExternalServiceError: If the fetch fails for any reason
        """
        data = await self._source.fetch_attendance(export_token)
        return parse_records(AttendanceRecord, data, ATTENDANCE_PATH)

    async def fetch_raw_attendance(self, bearer: Optional[str]) -> list[dict[str, Any]]:
        """Attendance exactly as the server sent it. Never falls back."""
        return await self._source.fetch_attendance(bearer)


# Module-level instance getter
_service_instance: Optional[AttendanceService] = None


def get_attendance_service() -> AttendanceService:
    """Get the attendance service singleton."""
    global _service_instance
    if _service_instance is None:
        settings = get_settings()
        _service_instance = AttendanceService(
            source=RemoteAttendanceSource(get_remote_client(), settings.data_timeout_seconds),
            sessions=SessionManager(get_credential_store()),
            fallback=SampleDataSource() if settings.degraded_mode else None,
        )
    return _service_instance


def reset_attendance_service() -> None:
    """Reset the attendance service singleton (for testing)."""
    global _service_instance
    _service_instance = None
