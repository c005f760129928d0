"""
Attendance module interface.

A data source returns raw JSON records; the service turns them into
models, joins registrations, and decides whether a fallback applies.
"""

from typing import Any, Optional, Protocol, runtime_checkable


@runtime_checkable
class IAttendanceSource(Protocol):
    """Where attendance and registration records come from."""

    async def fetch_attendance(self, bearer: Optional[str]) -> list[dict[str, Any]]:
        """
        Fetch attendance records.

        Whether the records come back masked depends on the credential:
        the session bearer may yield masked data, an export token yields
        unmasked data.
        """
        ...

    async def fetch_registrations(self, bearer: Optional[str]) -> list[dict[str, Any]]:
        """Fetch teacher registrations."""
        ...
