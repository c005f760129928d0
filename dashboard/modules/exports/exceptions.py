"""
Exports module exceptions.
"""

from typing import Optional

from shared.exceptions import (
    AuthorizationError,
    ConfigurationError,
    DashboardError,
    ValidationError,
)


class ExportError(DashboardError):
    """Base exception for export-related errors."""

    pass


class UnknownRoleError(ConfigurationError):
    """Raised when a role is outside the known set."""

    def __init__(self, role: str):
        super().__init__(
            f"Unknown role: {role!r}",
            code="UNKNOWN_ROLE",
            details={"role": role},
        )


class ExportNotAvailableError(ConfigurationError):
    """Raised when a known role has no export path configured."""

    def __init__(self, role: str):
        super().__init__(
            f"No export path is configured for role: {role}",
            code="EXPORT_NOT_AVAILABLE",
            details={"role": role},
        )


class NoDataToExportError(ValidationError):
    """Raised when there are no records to export."""

    def __init__(self, data_type: Optional[str] = None):
        super().__init__(
            "No data to export",
            code="NO_DATA_TO_EXPORT",
            details={"data_type": data_type} if data_type else {},
        )


class InvalidTransitionError(ExportError):
    """Raised when a workflow step is called from the wrong state."""

    def __init__(self, current: str, target: str):
        super().__init__(
            f"Cannot move from {current} to {target}",
            code="INVALID_TRANSITION",
            details={"current": current, "target": target},
        )


class WorkflowBusyError(ExportError):
    """Raised when a step is attempted while another is in flight."""

    def __init__(self):
        super().__init__(
            "Please wait for the current request to finish",
            code="WORKFLOW_BUSY",
        )


class ResendNotAvailableError(ValidationError):
    """Raised when resend is attempted during the cooldown."""

    def __init__(self, remaining_seconds: int):
        super().__init__(
            f"You can resend the OTP in {remaining_seconds} seconds",
            code="RESEND_NOT_AVAILABLE",
            details={"remaining_seconds": remaining_seconds},
        )


class ExportTokenMissingError(ExportError):
    """Raised when OTP verification succeeds but returns no export token."""

    def __init__(self):
        super().__init__(
            "Verification did not return an export token",
            code="EXPORT_TOKEN_MISSING",
        )


class ExportTokenRejectedError(AuthorizationError):
    """
    Raised when the unmasked fetch fails with the export token.

    The cached token has been discarded; the operator must verify
    with a fresh OTP.
    """

    def __init__(self, reason: Optional[str] = None):
        super().__init__(
            "Export verification is no longer valid. Please verify with a new OTP.",
            code="EXPORT_TOKEN_REJECTED",
            details={"reason": reason} if reason else {},
        )


class ExportWriteError(ExportError):
    """Raised when the export file cannot be written."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            f"Could not write export file {path}: {reason}",
            code="EXPORT_WRITE_FAILED",
            details={"path": path, "reason": reason},
        )
