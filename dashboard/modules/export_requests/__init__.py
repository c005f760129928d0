"""
Export request module.

Field workers cannot export directly: they file an export request with
a reason, a super admin approves or rejects it, and once approved the
requester downloads the data.

Public API:
- IExportRequestService: Interface for the request/approval workflow
- ExportRequest, RequestStatus, RequestScope: Request models
- partition_requests, summarize_requests: View helpers
- RequestPoller: Interval re-fetching of a request view
- Export request exceptions: EmptyReasonError, RequestNotApprovedError, etc.
"""

from .interfaces import IExportRequestService
from .models import (
    ExportRequest,
    RequestStatus,
    RequestScope,
    RequestSummary,
    RequesterProfile,
    partition_requests,
    summarize_requests,
    filter_by_status,
    find_approved_request,
)
from .poller import RequestPoller
from .user_directory import UserDirectory
from .exceptions import (
    ExportRequestError,
    EmptyReasonError,
    RequestValidationError,
    RequestNotApprovedError,
    RequestAlreadyResolvedError,
    InvalidDecisionError,
    RequestInFlightError,
)

__all__ = [
    # Interface
    "IExportRequestService",
    # Models
    "ExportRequest",
    "RequestStatus",
    "RequestScope",
    "RequestSummary",
    "RequesterProfile",
    "partition_requests",
    "summarize_requests",
    "filter_by_status",
    "find_approved_request",
    # Collaborators
    "RequestPoller",
    "UserDirectory",
    # Exceptions
    "ExportRequestError",
    "EmptyReasonError",
    "RequestValidationError",
    "RequestNotApprovedError",
    "RequestAlreadyResolvedError",
    "InvalidDecisionError",
    "RequestInFlightError",
]
