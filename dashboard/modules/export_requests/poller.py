"""
Export request polling.

Request status changes are picked up by re-fetching on a fixed
interval. An interval of None means the view is fetched once and then
only on explicit refresh.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from shared.exceptions import AuthenticationError, DashboardError

from .models import ExportRequest

logger = logging.getLogger(__name__)


class RequestPoller:
    """
    Re-fetches a request list and hands each snapshot to on_update.

    A failed poll is logged and passed to on_error; polling carries on.
    Losing the session ends polling, since every later fetch would fail
    the same way.
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[list[ExportRequest]]],
        interval: Optional[float],
        on_update: Callable[[list[ExportRequest]], None],
        on_error: Optional[Callable[[Exception], None]] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._fetch = fetch
        self._interval = interval
        self._on_update = on_update
        self._on_error = on_error
        self._sleep = sleep
        self._stopped = False

    @property
    def interval(self) -> Optional[float]:
        return self._interval

    @property
    def auto_refresh(self) -> bool:
        return self._interval is not None and self._interval > 0

    def stop(self) -> None:
        self._stopped = True

    async def refresh(self) -> bool:
        """Fetch once. Returns False if the fetch failed."""
        try:
            requests = await self._fetch()
        except AuthenticationError:
            raise
        except DashboardError as e:
            logger.warning(f"Failed to refresh export requests: {e.message}")
            if self._on_error:
                self._on_error(e)
            return False
        self._on_update(requests)
        return True

    async def run(self, max_polls: Optional[int] = None) -> None:
        """
        Fetch now, then every interval until stopped.

        Args:
            max_polls: Stop after this many fetches (including the first)
        """
        polls = 0
        while not self._stopped:
            await self.refresh()
            polls += 1
            if not self.auto_refresh or (max_polls is not None and polls >= max_polls):
                return
            await self._sleep(self._interval)
