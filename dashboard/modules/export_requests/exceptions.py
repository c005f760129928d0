"""
Export request module exceptions.
"""

import json
from typing import Any, Union

from shared.exceptions import DashboardError, ValidationError


class ExportRequestError(DashboardError):
    """Base exception for export request errors."""

    pass


class EmptyReasonError(ValidationError):
    """Raised when a request is submitted without a reason. No request is sent."""

    def __init__(self):
        super().__init__(
            "Please provide a reason for the export request",
            code="EMPTY_REASON",
        )


class RequestValidationError(ValidationError):
    """Raised when the server rejects a submitted request as invalid (HTTP 422)."""

    def __init__(self, detail: Any):
        detail = detail if detail is not None else "Validation failed"
        super().__init__(
            f"Validation error: {json.dumps(detail)}",
            code="REQUEST_VALIDATION_FAILED",
            details={"detail": detail},
        )


class RequestNotApprovedError(ExportRequestError):
    """Raised when downloading data for a request that isn't approved."""

    def __init__(self, request_id: Union[int, str], status: str):
        super().__init__(
            f"Export request {request_id} is {status}; only approved requests can be downloaded",
            code="REQUEST_NOT_APPROVED",
            details={"request_id": request_id, "status": status},
        )


class RequestAlreadyResolvedError(ExportRequestError):
    """Raised when resolving a request that is no longer pending."""

    def __init__(self, request_id: Union[int, str], status: str):
        super().__init__(
            f"Export request {request_id} has already been {status}",
            code="REQUEST_ALREADY_RESOLVED",
            details={"request_id": request_id, "status": status},
        )


class InvalidDecisionError(ValidationError):
    """Raised when a resolution is neither approve nor reject."""

    def __init__(self, decision: str):
        super().__init__(
            f"Invalid decision: {decision!r}. Use 'approved' or 'rejected'",
            code="INVALID_DECISION",
            details={"decision": decision},
        )


class RequestInFlightError(ExportRequestError):
    """Raised when a submission or resolution is already in progress."""

    def __init__(self):
        super().__init__(
            "Please wait for the current request to finish",
            code="REQUEST_IN_FLIGHT",
        )
