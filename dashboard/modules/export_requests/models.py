"""
Export request data models.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional, Union

from pydantic import BaseModel, Field, field_validator

from shared.expiry import to_datetime

EXPORT_REQUESTS_PATH = "/dashboard/export-requests"


class RequestStatus(str, Enum):
    """Export request lifecycle. pending -> approved | rejected, both terminal."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ExportRequest(BaseModel):
    """A field worker's request to export data."""

    id: Union[int, str] = Field(..., description="Request ID")
    requester_id: Union[int, str] = Field(..., description="Requesting user ID")
    requester_name: str = Field(default="", description="Requester display name")
    requester_phone: str = Field(default="", description="Requester phone")
    data_type: str = Field(..., description="Dataset label, e.g. 'Attendance Data'")
    record_count: int = Field(default=0, ge=0, description="Records the requester saw")
    reason: str = Field(default="", description="Justification given by the requester")
    status: RequestStatus = Field(default=RequestStatus.PENDING)
    created_at: Optional[datetime] = Field(None, description="Submission time")
    approved_by: Optional[str] = Field(None, description="Name of the resolving approver")
    approved_at: Optional[datetime] = Field(None, description="Resolution time")
    rejection_reason: Optional[str] = Field(None, description="Why the request was rejected")

    model_config = {"extra": "ignore"}

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING

    @property
    def can_download(self) -> bool:
        """Approved requests expose a download action; nothing else does."""
        return self.status == RequestStatus.APPROVED


class CreateExportRequest(BaseModel):
    """Body for POST /dashboard/export-requests."""

    requester_id: Union[int, str]
    requester_name: str
    requester_phone: str
    data_type: str = Field(..., min_length=1)
    record_count: int = Field(..., ge=0)
    reason: str = Field(..., min_length=1)
    status: RequestStatus = RequestStatus.PENDING


class ResolveExportRequest(BaseModel):
    """Body for PATCH /dashboard/export-requests/{id}."""

    status: RequestStatus
    approved_by: str
    approved_at: str = Field(..., description="ISO 8601 resolution time")

    @field_validator("status")
    @classmethod
    def validate_decision(cls, v: RequestStatus) -> RequestStatus:
        if v == RequestStatus.PENDING:
            raise ValueError("A resolution must approve or reject")
        return v


class RequesterProfile(BaseModel):
    """Display details of the requester, from the user directory."""

    name: Optional[str] = None
    phone: Optional[str] = None

    model_config = {"extra": "ignore"}

    @field_validator("name", "phone", mode="before")
    @classmethod
    def numeric_to_text(cls, v):
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


@dataclass(frozen=True)
class RequestScope:
    """Which requests to list: everyone's (approvers) or one requester's."""

    requester_id: Optional[Union[int, str]] = None

    @classmethod
    def all(cls) -> "RequestScope":
        return cls()

    @classmethod
    def requester(cls, requester_id: Union[int, str]) -> "RequestScope":
        return cls(requester_id=requester_id)

    @property
    def is_approver_view(self) -> bool:
        return self.requester_id is None

    @property
    def path(self) -> str:
        if self.requester_id is None:
            return EXPORT_REQUESTS_PATH
        return f"{EXPORT_REQUESTS_PATH}/user/{self.requester_id}"


class RequestSummary(BaseModel):
    """Request counts shown above the request tables."""

    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    approved_today: int = 0


def partition_requests(
    requests: Iterable[ExportRequest],
) -> tuple[list[ExportRequest], list[ExportRequest]]:
    """Split into (pending, processed), keeping order."""
    pending: list[ExportRequest] = []
    processed: list[ExportRequest] = []
    for request in requests:
        (pending if request.is_pending else processed).append(request)
    return pending, processed


def summarize_requests(
    requests: Iterable[ExportRequest],
    now: Optional[int] = None,
) -> RequestSummary:
    """
    Count requests per status.

    Args:
        requests: Requests to count
        now: Epoch ms; when given, approvals on that UTC day are counted
    """
    today = to_datetime(now).date() if now is not None else None
    summary = RequestSummary()
    for request in requests:
        summary.total += 1
        if request.status == RequestStatus.PENDING:
            summary.pending += 1
        elif request.status == RequestStatus.APPROVED:
            summary.approved += 1
            if today and request.approved_at and request.approved_at.date() == today:
                summary.approved_today += 1
        else:
            summary.rejected += 1
    return summary


def filter_by_status(
    requests: Iterable[ExportRequest],
    status: Optional[RequestStatus] = None,
) -> list[ExportRequest]:
    if status is None:
        return list(requests)
    return [request for request in requests if request.status == status]


def find_approved_request(
    requests: Iterable[ExportRequest],
    requester_id: Union[int, str],
    data_type: str,
) -> Optional[ExportRequest]:
    """The requester's approved request for a dataset, if any."""
    for request in requests:
        if (
            str(request.requester_id) == str(requester_id)
            and request.data_type == data_type
            and request.status == RequestStatus.APPROVED
        ):
            return request
    return None
