"""
Exports module interface.
"""

from typing import Protocol, Sequence, runtime_checkable

from modules.attendance.models import AttendanceRecord

from .models import ExportDecision


@runtime_checkable
class IExportService(Protocol):
    """
    Interface for role-dependent exports.

    The actor's role picks exactly one path: super admins export at
    once, managers go through the OTP workflow, field workers must file
    an export request.
    """

    async def export(
        self,
        data_type: str,
        records: Sequence[AttendanceRecord],
    ) -> ExportDecision:
        """
        Start an export of the given records.

        Args:
            data_type: Label for the dataset, e.g. "Attendance Data"
            records: The records currently on screen

        Returns:
            ExportDecision carrying the written file, the OTP workflow
            still needing the operator, or a request-approval marker

        Raises:
            NotAuthenticatedError: If nobody is logged in
            NoDataToExportError: If records is empty
            ConfigurationError: If the role has no export path
        """
        ...
