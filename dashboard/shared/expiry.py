"""
Expiry rule shared by the login session and the export token.

Both credentials are checked lazily at the point of use against the
wall clock. Timestamps are epoch milliseconds, the format they are
persisted in.
"""

import time
from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], int]


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def is_expired(issued_at: int, lifetime_ms: int, now: int) -> bool:
    """
    Whether a credential issued at `issued_at` has outlived `lifetime_ms`.

    The boundary is inclusive: a credential is still valid when exactly
    `lifetime_ms` has elapsed.
    """
    return (now - issued_at) > lifetime_ms


def deadline_passed(expires_at: int, now: int) -> bool:
    """
    Whether an absolute expiry time has been reached.

    The session stores its expiry as a fixed deadline set at login and is
    usable only while now < expires_at, so the boundary is exclusive.
    """
    return now >= expires_at


def to_datetime(timestamp_ms: int) -> datetime:
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)


def iso_date(timestamp_ms: int) -> str:
    """UTC calendar date (YYYY-MM-DD) for a timestamp."""
    return to_datetime(timestamp_ms).date().isoformat()


def iso_timestamp(timestamp_ms: int) -> str:
    return to_datetime(timestamp_ms).isoformat(timespec="milliseconds").replace("+00:00", "Z")
