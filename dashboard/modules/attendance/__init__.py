"""
Attendance module.

Reads attendance and registration records from the remote API, joins
and aggregates them for the dashboard, and shapes them for export.

Public API:
- IAttendanceSource: Interface for record sources
- AttendanceRecord, RegistrationRecord, DashboardStats: Models
- format_attendance_for_export: Export row shaping
"""

from .interfaces import IAttendanceSource
from .models import (
    AttendanceRecord,
    RegistrationRecord,
    DashboardStats,
    AbsenceReasonCount,
    DistrictAttendance,
    AttendanceFilter,
    AttendanceOverview,
)
from .formatting import EXPORT_COLUMNS, format_attendance_for_export
from .exceptions import UnexpectedPayloadError

__all__ = [
    # Interface
    "IAttendanceSource",
    # Models
    "AttendanceRecord",
    "RegistrationRecord",
    "DashboardStats",
    "AbsenceReasonCount",
    "DistrictAttendance",
    "AttendanceFilter",
    "AttendanceOverview",
    # Formatting
    "EXPORT_COLUMNS",
    "format_attendance_for_export",
    # Exceptions
    "UnexpectedPayloadError",
]
