"""
Visible session countdown.

This is the only timer in the dashboard: it ticks once a second purely
for display, and the moment the remaining time reaches zero it purges
the session and hands control back to the login entry point.
"""

import asyncio
from typing import Awaitable, Callable, Optional

from shared.expiry import Clock, now_ms

from .models import CountdownTick
from .session import SessionManager

TICK_SECONDS = 1.0


def format_remaining(remaining_ms: int) -> str:
    """Format milliseconds as MM:SS, e.g. 1_234_000 -> "20:34"."""
    remaining_ms = max(0, remaining_ms)
    minutes = remaining_ms // 60_000
    seconds = (remaining_ms % 60_000) // 1000
    return f"{minutes:02d}:{seconds:02d}"


class SessionCountdown:
    """Ticks down to the current session's expiry."""

    def __init__(
        self,
        sessions: SessionManager,
        warning_ms: int = 5 * 60 * 1000,
        clock: Clock = now_ms,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._sessions = sessions
        self._warning_ms = warning_ms
        self._clock = clock
        self._sleep = sleep

    def tick(self) -> Optional[CountdownTick]:
        """Current countdown state, or None once the session is gone."""
        session = self._sessions.current()
        if session is None:
            return None
        remaining = session.remaining_ms(self._clock())
        return CountdownTick(
            remaining_ms=remaining,
            display=format_remaining(remaining),
            warning=remaining < self._warning_ms,
        )

    async def run(
        self,
        on_tick: Callable[[CountdownTick], None],
        on_expire: Callable[[], None],
        interval: float = TICK_SECONDS,
    ) -> None:
        """Tick until the session expires, then call on_expire once."""
        while True:
            current = self.tick()
            if current is None or current.remaining_ms == 0:
                self._sessions.clear()
                on_expire()
                return
            on_tick(current)
            await self._sleep(interval)
