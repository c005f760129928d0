"""
Session persistence and the current-actor accessor.

SessionManager is the only code that reads or writes the persisted
session. Validity is checked lazily on every read: an expired,
malformed or missing session is purged and treated as logged out.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from pydantic import ValidationError as PydanticValidationError

from shared.credential_store import (
    AUTH_USER_KEY,
    EXPORT_TOKEN_KEY,
    EXPORT_TOKEN_TIMESTAMP_KEY,
    ICredentialStore,
)
from shared.exceptions import RemoteRejectedError
from shared.expiry import Clock, now_ms
from shared.models import Session

from .exceptions import NotAuthenticatedError, SessionExpiredError

logger = logging.getLogger(__name__)


class SessionManager:
    """Owns the persisted session in the credential store."""

    def __init__(self, store: ICredentialStore, clock: Clock = now_ms):
        self._store = store
        self._clock = clock

    def _load(self) -> tuple[Optional[Session], bool]:
        """Return (session, expired); purges anything unusable."""
        raw = self._store.get(AUTH_USER_KEY)
        if raw is None:
            return None, False

        try:
            session = Session.model_validate_json(raw)
        except (PydanticValidationError, ValueError):
            logger.warning("Discarding malformed stored session")
            self.clear()
            return None, False

        if not session.is_valid(self._clock()):
            logger.info(f"Session for {session.phone} expired, logging out")
            self.clear()
            return None, True

        return session, False

    def current(self) -> Optional[Session]:
        session, _ = self._load()
        return session

    def require(self) -> Session:
        session, expired = self._load()
        if session is None:
            if expired:
                raise SessionExpiredError()
            raise NotAuthenticatedError()
        return session

    def save(self, session: Session) -> None:
        self._store.set(AUTH_USER_KEY, session.model_dump_json())

    def clear(self) -> None:
        self._store.clear(AUTH_USER_KEY, EXPORT_TOKEN_KEY, EXPORT_TOKEN_TIMESTAMP_KEY)

    @contextmanager
    def expire_on_unauthorized(self) -> Iterator[None]:
        """
        Treat an HTTP 401 on a session-bearer call as session expiry.

        The session is purged and SessionExpiredError raised in place of
        the raw server error.
        """
        try:
            yield
        except RemoteRejectedError as e:
            if e.status_code != 401:
                raise
            logger.info("Server rejected the session credential, logging out")
            self.clear()
            raise SessionExpiredError() from e
