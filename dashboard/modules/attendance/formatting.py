"""Shaping attendance records into export rows."""

from typing import Any, Iterable

from .models import AttendanceRecord

EXPORT_COLUMNS = [
    "Teacher Name",
    "School",
    "District",
    "Phone",
    "Topic Covered",
    "Students Present",
    "Students Absent",
    "Absence Reason",
    "Date",
    "Time",
]


def format_attendance_for_export(records: Iterable[AttendanceRecord]) -> list[dict[str, Any]]:
    """Map records onto the display-named export columns."""
    rows = []
    for record in records:
        created = record.created_at
        rows.append(
            {
                "Teacher Name": record.teacher_name or "Unknown",
                "School": record.school or "Unknown",
                "District": record.district or "Unknown",
                "Phone": record.phone,
                "Topic Covered": record.topic_covered,
                "Students Present": record.students_present,
                "Students Absent": record.students_absent,
                "Absence Reason": record.absence_reason,
                "Date": created.date().isoformat() if created else "",
                "Time": created.strftime("%H:%M:%S") if created else "",
            }
        )
    return rows
