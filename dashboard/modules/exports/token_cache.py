"""
Persisted export token.

The token and its issuance time are stored as two string entries in
the credential store, the issuance time as epoch milliseconds.
"""

import logging
from typing import Optional

from shared.credential_store import (
    EXPORT_TOKEN_KEY,
    EXPORT_TOKEN_TIMESTAMP_KEY,
    ICredentialStore,
)
from shared.expiry import Clock, now_ms

from .models import ExportToken

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_LIFETIME_MS = 30 * 60 * 1000


class ExportTokenCache:
    """Reads, writes and expires the export token."""

    def __init__(
        self,
        store: ICredentialStore,
        lifetime_ms: int = DEFAULT_TOKEN_LIFETIME_MS,
        clock: Clock = now_ms,
    ):
        self._store = store
        self._lifetime_ms = lifetime_ms
        self._clock = clock

    @property
    def lifetime_ms(self) -> int:
        return self._lifetime_ms

    def peek(self) -> Optional[ExportToken]:
        """The stored token regardless of age, or None if absent/unreadable."""
        value = self._store.get(EXPORT_TOKEN_KEY)
        timestamp = self._store.get(EXPORT_TOKEN_TIMESTAMP_KEY)
        if not value or not timestamp:
            return None
        try:
            return ExportToken(value=value, issued_at=int(timestamp))
        except ValueError:
            return None

    def get_valid(self) -> Optional[ExportToken]:
        """
        The stored token if it is still within its lifetime.

        An expired or incomplete token is discarded as a side effect.
        """
        token = self.peek()
        if token is None:
            if self._store.get(EXPORT_TOKEN_KEY) or self._store.get(EXPORT_TOKEN_TIMESTAMP_KEY):
                self.clear()
            return None
        if not token.is_valid(self._clock(), self._lifetime_ms):
            logger.info("Export token expired, discarding")
            self.clear()
            return None
        return token

    def save(self, value: str) -> ExportToken:
        """Store a new token issued now, replacing any previous one."""
        token = ExportToken(value=value, issued_at=self._clock())
        self._store.set(EXPORT_TOKEN_KEY, token.value)
        self._store.set(EXPORT_TOKEN_TIMESTAMP_KEY, str(token.issued_at))
        return token

    def clear(self) -> None:
        self._store.clear(EXPORT_TOKEN_KEY, EXPORT_TOKEN_TIMESTAMP_KEY)
