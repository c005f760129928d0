"""
Attendance module exceptions.
"""

from shared.exceptions import ExternalServiceError
from shared.remote import SERVICE_NAME


class UnexpectedPayloadError(ExternalServiceError):
    """Raised when a listing endpoint doesn't return a JSON array."""

    def __init__(self, path: str, received: str):
        super().__init__(
            f"Unexpected response from {path}",
            SERVICE_NAME,
            code="UNEXPECTED_PAYLOAD",
            details={"path": path, "received": received},
        )
