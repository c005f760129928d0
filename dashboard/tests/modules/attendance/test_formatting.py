"""Tests for modules/attendance/formatting.py."""

from datetime import datetime, timezone

from modules.attendance.formatting import EXPORT_COLUMNS, format_attendance_for_export
from modules.attendance.models import AttendanceRecord


class TestFormatAttendanceForExport:
    def test_columns_and_values(self):
        record = AttendanceRecord(
            phone="0241",
            students_present=25,
            students_absent=3,
            absence_reason="Sick",
            topic_covered="Handwashing",
            teacher_name="Ama",
            school="Accra Primary",
            district="Accra Metro",
            created_at=datetime(2025, 10, 8, 9, 15, 0, tzinfo=timezone.utc),
        )
        [row] = format_attendance_for_export([record])

        assert list(row) == EXPORT_COLUMNS
        assert row["Teacher Name"] == "Ama"
        assert row["Students Present"] == 25
        assert row["Date"] == "2025-10-08"
        assert row["Time"] == "09:15:00"

    def test_missing_values(self):
        [row] = format_attendance_for_export([AttendanceRecord(phone="0241")])
        assert row["Teacher Name"] == "Unknown"
        assert row["Date"] == ""
        assert row["Time"] == ""
