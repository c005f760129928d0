"""
Requester display-name lookup.

Tries the dashboard user endpoint first and the general user endpoint
second. A failed lookup is never an error for the caller: it gets None
and falls back to placeholder values.
"""

import logging
from typing import Optional, Union

from pydantic import ValidationError as PydanticValidationError

from shared.exceptions import DashboardError, RemoteRejectedError
from shared.remote import RemoteClient

from .models import RequesterProfile

logger = logging.getLogger(__name__)


class UserDirectory:
    """Looks up a user's name and phone by ID."""

    def __init__(self, remote: RemoteClient, timeout: Optional[float] = None):
        self._remote = remote
        self._timeout = timeout

    async def lookup(
        self,
        user_id: Union[int, str],
        bearer: Optional[str],
    ) -> Optional[RequesterProfile]:
        for path in (f"/dashboard/users/{user_id}", f"/users/{user_id}"):
            try:
                data = await self._remote.get(path, bearer=bearer, timeout=self._timeout)
            except RemoteRejectedError as e:
                logger.warning(f"User lookup {path} returned {e.status_code}")
                continue
            except DashboardError as e:
                logger.warning(f"User lookup failed, using placeholders: {e.message}")
                return None
            if not isinstance(data, dict):
                continue
            try:
                return RequesterProfile.model_validate(data)
            except PydanticValidationError:
                logger.warning(f"User lookup {path} returned an unreadable profile, using placeholders")
                return None
        return None
