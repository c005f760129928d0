"""
Shared infrastructure for the HygieneQuest dashboard.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- credential_store: Durable storage for the session and export token
- expiry: The expiry rule shared by the session and export token
- remote: HTTP client for the remote API
- exceptions: Base exception classes

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings
from .credential_store import (
    ICredentialStore,
    InMemoryCredentialStore,
    JsonFileCredentialStore,
    get_credential_store,
    reset_credential_store,
)
from .exceptions import (
    DashboardError,
    NotFoundError,
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    ExternalServiceError,
    RequestTimeoutError,
    RemoteUnavailableError,
    RemoteRejectedError,
)
from .models import Role, Session
from .remote import RemoteClient, get_remote_client, reset_remote_client

__all__ = [
    "Settings",
    "get_settings",
    "ICredentialStore",
    "InMemoryCredentialStore",
    "JsonFileCredentialStore",
    "get_credential_store",
    "reset_credential_store",
    "DashboardError",
    "NotFoundError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "ConfigurationError",
    "ExternalServiceError",
    "RequestTimeoutError",
    "RemoteUnavailableError",
    "RemoteRejectedError",
    "Role",
    "Session",
    "RemoteClient",
    "get_remote_client",
    "reset_remote_client",
]
