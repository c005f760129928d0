"""
Credential store for the session and export token.

A single process-wide key-value store owns every persisted credential.
Modules receive the store by injection instead of touching the file
directly, so tests can swap in the in-memory implementation.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from .config import get_settings

logger = logging.getLogger(__name__)

# Persisted keys
AUTH_USER_KEY = "authUser"
EXPORT_TOKEN_KEY = "export_token"
EXPORT_TOKEN_TIMESTAMP_KEY = "export_token_timestamp"


@runtime_checkable
class ICredentialStore(Protocol):
    """Durable string key-value storage."""

    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the key is absent."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""
        ...

    def clear(self, *keys: str) -> None:
        """Remove the given keys (missing keys are ignored)."""
        ...


class InMemoryCredentialStore:
    """Credential store kept in memory. Used by tests and one-shot runs."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def clear(self, *keys: str) -> None:
        for key in keys:
            self._data.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        return dict(self._data)


class JsonFileCredentialStore:
    """
    Credential store backed by a JSON file.

    The file is re-read on every access so that a second dashboard
    process sees the latest write. Concurrent writers are not
    coordinated: the last write wins.
    """

    def __init__(self, path: Path):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable credential store {self._path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed credential store {self._path}")
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _save(self, data: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(".tmp")
        tmp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        tmp_path.chmod(0o600)
        tmp_path.replace(self._path)

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def clear(self, *keys: str) -> None:
        data = self._load()
        if not any(key in data for key in keys):
            return
        for key in keys:
            data.pop(key, None)
        self._save(data)


# Module-level store cache
_store: Optional[ICredentialStore] = None


def get_credential_store() -> ICredentialStore:
    """Get the process-wide credential store (file-backed)."""
    global _store
    if _store is None:
        _store = JsonFileCredentialStore(get_settings().credential_store_path)
    return _store


def reset_credential_store() -> None:
    """Reset the cached credential store (for testing)."""
    global _store
    _store = None
