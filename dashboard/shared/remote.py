"""
HTTP client for the remote HygieneQuest API.

Every outbound call goes through RemoteClient.request(), which applies
a bounded timeout, attaches the bearer credential, and maps failures
onto the shared exception hierarchy:

- RequestTimeoutError: the call was aborted after its timeout
- RemoteUnavailableError: the server could not be reached
- RemoteRejectedError: the server answered with an error status; the
  message is the body's `detail` field, or the caller's fallback text
"""

import json
import logging
from typing import Any, Optional

import httpx

from .config import get_settings
from .exceptions import (
    ExternalServiceError,
    RemoteRejectedError,
    RemoteUnavailableError,
    RequestTimeoutError,
)

logger = logging.getLogger(__name__)

SERVICE_NAME = "hygienequest-api"


def extract_detail(response: httpx.Response) -> Any:
    """Return the `detail` field of an error body, or None if unavailable."""
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, dict):
        return data.get("detail") or None
    return None


def detail_to_message(detail: Any, fallback: str) -> str:
    if detail is None:
        return fallback
    if isinstance(detail, str):
        return detail
    return json.dumps(detail)


class RemoteClient:
    """
    Thin async wrapper around httpx for the dashboard's API calls.

    A fresh httpx.AsyncClient is opened per call; the dashboard issues
    calls strictly one after another, so there is no pool to share.
    """

    def __init__(
        self,
        base_url: str,
        default_timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: API origin, e.g. https://hygienequestemdpoints.onrender.com
            default_timeout: Timeout in seconds when a call doesn't set one
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self._base_url = base_url.rstrip("/")
        self._default_timeout = default_timeout
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    async def request(
        self,
        method: str,
        path: str,
        *,
        bearer: Optional[str] = None,
        json_body: Optional[Any] = None,
        timeout: Optional[float] = None,
        fallback_message: str = "Request failed",
    ) -> Any:
        """
        Send a request and return the decoded JSON body.

        Args:
            method: HTTP method
            path: Path relative to the base URL
            bearer: Bearer credential for the Authorization header
            json_body: JSON-serializable request body
            timeout: Seconds before the call is aborted
            fallback_message: Error text when the server gives no detail

        Returns:
            Decoded JSON, or None for an empty body

        Raises:
            RequestTimeoutError: If the call timed out
            RemoteUnavailableError: If the server could not be reached
            RemoteRejectedError: If the server returned an error status
        """
        timeout = timeout if timeout is not None else self._default_timeout
        headers = {"Content-Type": "application/json"}
        if bearer:
            headers["Authorization"] = f"Bearer {bearer}"

        logger.debug(f"{method} {path}")
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                transport=self._transport,
                timeout=timeout,
            ) as client:
                response = await client.request(
                    method,
                    path,
                    headers=headers,
                    json=json_body,
                )
        except httpx.TimeoutException:
            logger.warning(f"{method} {path} timed out after {timeout}s")
            raise RequestTimeoutError(SERVICE_NAME, timeout)
        except httpx.TransportError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise RemoteUnavailableError(SERVICE_NAME, str(e))

        if response.is_error:
            detail = extract_detail(response)
            logger.warning(f"{method} {path} returned {response.status_code}")
            raise RemoteRejectedError(
                detail_to_message(detail, fallback_message),
                SERVICE_NAME,
                status_code=response.status_code,
                detail=detail,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            raise ExternalServiceError(
                "Invalid response from server",
                SERVICE_NAME,
                code="INVALID_RESPONSE",
                details={"path": path},
            )

    async def get(self, path: str, **kwargs: Any) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> Any:
        return await self.request("POST", path, **kwargs)

    async def patch(self, path: str, **kwargs: Any) -> Any:
        return await self.request("PATCH", path, **kwargs)


# Module-level client cache
_client: Optional[RemoteClient] = None


def get_remote_client() -> RemoteClient:
    """Get the remote API client configured from settings."""
    global _client
    if _client is None:
        settings = get_settings()
        _client = RemoteClient(
            settings.api_base_url,
            default_timeout=settings.data_timeout_seconds,
        )
    return _client


def reset_remote_client() -> None:
    """Reset the cached client (for testing or after config changes)."""
    global _client
    _client = None
