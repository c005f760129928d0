"""
Attendance data sources.

- RemoteAttendanceSource: reads /attendances and /registrations
- SampleDataSource: fixed sample records, used only when degraded mode
  is switched on in settings
"""

import logging
from typing import Any, Optional

from shared.remote import RemoteClient

from .exceptions import UnexpectedPayloadError

logger = logging.getLogger(__name__)

ATTENDANCE_PATH = "/attendances"
REGISTRATIONS_PATH = "/registrations"


SAMPLE_ATTENDANCE: list[dict[str, Any]] = [
    {
        "id": 1,
        "phone": "0772207616",
        "students_present": 30,
        "students_absent": 2,
        "absence_reason": "2 students sick",
        "subject": "Personal Hygiene",
        "district": "Kisoro",
    },
    {
        "id": 2,
        "phone": "0772207616",
        "students_present": 18,
        "students_absent": 21,
        "absence_reason": "bad weather, it was raining too much",
        "subject": "Hand Washing Techniques",
        "district": "Kisoro",
    },
    {
        "id": 3,
        "phone": "0774405405",
        "students_present": 25,
        "students_absent": 8,
        "absence_reason": "school fees",
        "subject": "Dental Hygiene",
        "district": "Isingiro",
    },
    {
        "id": 4,
        "phone": "0700677231",
        "students_present": 40,
        "students_absent": 12,
        "absence_reason": "malaria outbreak",
        "subject": "Food Safety",
        "district": "Kaliro",
    },
    {
        "id": 5,
        "phone": "0708210793",
        "students_present": 35,
        "students_absent": 5,
        "absence_reason": "flu symptoms",
        "subject": "Environmental Hygiene",
        "district": "Ibanda",
    },
]

SAMPLE_REGISTRATIONS: list[dict[str, Any]] = [
    {
        "id": 1,
        "phone": "0772207616",
        "name": "Katende Brian",
        "school": "St. Mary's Primary",
        "district": "Kisoro",
        "language": "English",
    },
    {
        "id": 2,
        "phone": "0774405405",
        "name": "John Doe",
        "school": "Kampala Primary",
        "district": "Isingiro",
        "language": "English",
    },
    {
        "id": 3,
        "phone": "0700677231",
        "name": "Charity Atuheire",
        "school": "Mary Secondary School",
        "district": "Kaliro",
        "language": "English",
    },
    {
        "id": 4,
        "phone": "0708210793",
        "name": "Sarah Nakato",
        "school": "Luweero Primary",
        "district": "Ibanda",
        "language": "English",
    },
]


class RemoteAttendanceSource:
    """Reads records from the remote API."""

    def __init__(self, remote: RemoteClient, timeout: float = 10.0):
        self._remote = remote
        self._timeout = timeout

    async def _fetch_list(self, path: str, bearer: Optional[str]) -> list[dict[str, Any]]:
        data = await self._remote.get(
            path,
            bearer=bearer,
            timeout=self._timeout,
            fallback_message=f"Failed to fetch {path.strip('/')}",
        )
        if not isinstance(data, list):
            raise UnexpectedPayloadError(path, type(data).__name__)
        logger.debug(f"Fetched {len(data)} records from {path}")
        return data

    async def fetch_attendance(self, bearer: Optional[str]) -> list[dict[str, Any]]:
        return await self._fetch_list(ATTENDANCE_PATH, bearer)

    async def fetch_registrations(self, bearer: Optional[str]) -> list[dict[str, Any]]:
        return await self._fetch_list(REGISTRATIONS_PATH, bearer)


class SampleDataSource:
    """
    Fixed sample records.

    Stands in for the API only when degraded mode is enabled; the
    caller logs a warning every time it is used.
    """

    def __init__(
        self,
        attendance: Optional[list[dict[str, Any]]] = None,
        registrations: Optional[list[dict[str, Any]]] = None,
    ):
        self._attendance = attendance if attendance is not None else SAMPLE_ATTENDANCE
        self._registrations = registrations if registrations is not None else SAMPLE_REGISTRATIONS

    async def fetch_attendance(self, bearer: Optional[str]) -> list[dict[str, Any]]:
        return [dict(record) for record in self._attendance]

    async def fetch_registrations(self, bearer: Optional[str]) -> list[dict[str, Any]]:
        return [dict(record) for record in self._registrations]
