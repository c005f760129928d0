"""
Exports module.

Decides how the current actor may export and carries the export out:
directly, through the OTP-gated export token workflow, or by pointing
the actor at the export request workflow.

Public API:
- IExportService: Interface for starting an export
- resolve_export_path: Role-policy resolver
- ExportOtpWorkflow / ResendCooldown: OTP-gated export state machine
- ExportTokenCache: Persisted export token
- CsvExporter, to_csv, build_export_filename: CSV emission
- Export exceptions: NoDataToExportError, ExportTokenRejectedError, etc.
"""

from .interfaces import IExportService
from .models import (
    ExportPath,
    OtpState,
    FileVariant,
    ExportToken,
    EmittedFile,
    ExportDecision,
)
from .policy import EXPORT_POLICY, resolve_export_path
from .token_cache import ExportTokenCache
from .csv_export import CsvExporter, to_csv, build_export_filename, slugify_data_type
from .otp_workflow import ExportOtpWorkflow, ResendCooldown
from .exceptions import (
    ExportError,
    UnknownRoleError,
    ExportNotAvailableError,
    ExportWriteError,
    NoDataToExportError,
    InvalidTransitionError,
    WorkflowBusyError,
    ResendNotAvailableError,
    ExportTokenMissingError,
    ExportTokenRejectedError,
)

__all__ = [
    # Interface
    "IExportService",
    # Models
    "ExportPath",
    "OtpState",
    "FileVariant",
    "ExportToken",
    "EmittedFile",
    "ExportDecision",
    # Policy
    "EXPORT_POLICY",
    "resolve_export_path",
    # Workflow
    "ExportTokenCache",
    "ExportOtpWorkflow",
    "ResendCooldown",
    # CSV
    "CsvExporter",
    "to_csv",
    "build_export_filename",
    "slugify_data_type",
    # Exceptions
    "ExportError",
    "UnknownRoleError",
    "ExportNotAvailableError",
    "ExportWriteError",
    "NoDataToExportError",
    "InvalidTransitionError",
    "WorkflowBusyError",
    "ResendNotAvailableError",
    "ExportTokenMissingError",
    "ExportTokenRejectedError",
]
