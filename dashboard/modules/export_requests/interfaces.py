"""
Export request module interface.
"""

from typing import Optional, Protocol, Union, runtime_checkable

from modules.exports.models import EmittedFile

from .models import ExportRequest, RequestScope, RequestStatus


@runtime_checkable
class IExportRequestService(Protocol):
    """
    Interface for the request/approval export workflow.

    Field workers file requests; super admins approve or reject them;
    the requester downloads the data once approved.
    """

    async def submit_request(
        self,
        reason: str,
        data_type: str,
        record_count: int,
    ) -> Optional[ExportRequest]:
        """
        File a new pending export request for the current actor.

        Args:
            reason: Justification; must be non-blank
            data_type: Dataset label, e.g. "Attendance Data"
            record_count: Number of records the requester saw

        Returns:
            The created request if the server echoed it, else None

        Raises:
            EmptyReasonError: If reason is blank (no request is sent)
            RequestValidationError: If the server rejected the payload (422)
            ExternalServiceError: If the submission failed otherwise
        """
        ...

    async def list_requests(
        self,
        scope: Optional[RequestScope] = None,
    ) -> list[ExportRequest]:
        """
        Fetch a snapshot of requests.

        Args:
            scope: All requests, or one requester's; defaults by role
        """
        ...

    async def resolve_request(
        self,
        request: ExportRequest,
        decision: Union[RequestStatus, str],
    ) -> list[ExportRequest]:
        """
        Approve or reject a pending request and return the re-fetched list.

        Raises:
            InsufficientPermissionsError: If the actor is not a super admin
            InvalidDecisionError: If decision is not approved/rejected
            RequestAlreadyResolvedError: If the request is no longer pending
        """
        ...

    async def download_approved_data(self, request: ExportRequest) -> EmittedFile:
        """
        Fetch the dataset with the actor's session and write it to CSV.

        Raises:
            RequestNotApprovedError: If the request is not approved
            NoDataToExportError: If the server returned no records
        """
        ...
