"""
Exports module data models.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

from pydantic import BaseModel, Field

from shared.expiry import is_expired

if TYPE_CHECKING:
    from .otp_workflow import ExportOtpWorkflow


class ExportPath(str, Enum):
    """How a role is allowed to export."""

    DIRECT = "direct"                       # Export immediately
    OTP_GATED = "otp_gated"                 # Needs a valid export token
    REQUEST_APPROVAL = "request_approval"   # File a request and wait


class OtpState(str, Enum):
    """States of the OTP-gated export workflow."""

    IDLE = "idle"
    AWAITING_OTP_SEND = "awaiting_otp_send"
    AWAITING_OTP_ENTRY = "awaiting_otp_entry"
    VERIFYING = "verifying"
    AUTHORIZED = "authorized"
    FETCHING = "fetching"
    EMITTED = "emitted"
    FAILED = "failed"


class FileVariant(str, Enum):
    """Filename suffix distinguishing how the data was obtained."""

    APPROVED = "approved"
    UNMASKED = "unmasked"


class ExportToken(BaseModel):
    """
    Short-lived credential for the unmasked attendance fetch.

    Valid while now - issued_at <= lifetime (inclusive).
    """

    value: str = Field(..., min_length=1, description="Export bearer token")
    issued_at: int = Field(..., description="Issuance time (epoch ms)")

    model_config = {"frozen": True}

    def is_valid(self, now: int, lifetime_ms: int) -> bool:
        return not is_expired(self.issued_at, lifetime_ms, now)


class SendExportOtpRequest(BaseModel):
    """Body for /dashboard/send-export-otp. data_type and record_count are for audit."""

    phone: str
    user_id: Union[int, str]
    data_type: str
    record_count: int = Field(..., ge=0)


class VerifyExportOtpRequest(BaseModel):
    """Body for /dashboard/verify-export-otp."""

    phone: str
    otp: str = Field(..., min_length=1)
    user_id: Union[int, str]


class EmittedFile(BaseModel):
    """A CSV file written by an export."""

    path: Path = Field(..., description="Where the file was written")
    row_count: int = Field(..., ge=0, description="Data rows (excluding header)")


@dataclass
class ExportDecision:
    """
    Result of an export attempt.

    Exactly one follow-up applies: a file was written, an OTP workflow
    needs the operator, or an export request must be filed.
    """

    path: ExportPath
    data_type: str
    record_count: int
    file: Optional[EmittedFile] = None
    workflow: Optional["ExportOtpWorkflow"] = None

    @property
    def requires_otp(self) -> bool:
        return self.file is None and self.workflow is not None

    @property
    def requires_request(self) -> bool:
        return self.path == ExportPath.REQUEST_APPROVAL
