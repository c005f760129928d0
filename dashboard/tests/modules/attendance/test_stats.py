"""Tests for modules/attendance/stats.py."""

import pytest

from modules.attendance.models import AttendanceRecord, RegistrationRecord
from modules.attendance.stats import (
    attendance_by_district,
    calculate_stats,
    categorize_absence_reason,
    enrich_attendance,
    filter_attendance,
    group_absence_reasons,
)


@pytest.fixture
def registrations():
    return [
        RegistrationRecord(phone="0241", name="Ama", school="Accra Primary", district="Accra Metro"),
        RegistrationRecord(phone="0209", name="Kofi", school="Kumasi JHS", district="Kumasi"),
    ]


@pytest.fixture
def attendance():
    return [
        AttendanceRecord(phone="0241", students_present=25, students_absent=3,
                         absence_reason="Sick with flu", topic_covered="Handwashing"),
        AttendanceRecord(phone="0209", students_present=30, students_absent=2,
                         absence_reason="Heavy rain", topic_covered="Toothbrushing"),
        AttendanceRecord(phone="0555", students_present=10, students_absent=5,
                         absence_reason="Unpaid fees", topic_covered="Food Safety"),
    ]


class TestEnrichAttendance:
    def test_joins_registration_by_phone(self, attendance, registrations):
        enriched = enrich_attendance(attendance, registrations)
        assert enriched[0].teacher_name == "Ama"
        assert enriched[0].school == "Accra Primary"
        assert enriched[1].district == "Kumasi"

    def test_unknown_defaults(self, attendance, registrations):
        """Records without a registration get placeholder names."""
        orphan = enrich_attendance(attendance, registrations)[2]
        assert orphan.teacher_name == "Unknown Teacher"
        assert orphan.school == "Unknown School"
        assert orphan.district == "Unknown District"

    def test_does_not_mutate_input(self, attendance, registrations):
        enrich_attendance(attendance, registrations)
        assert attendance[0].teacher_name is None


class TestFilterAttendance:
    def test_search_is_case_insensitive(self, attendance, registrations):
        records = enrich_attendance(attendance, registrations)
        assert [r.phone for r in filter_attendance(records, search="TOOTH")] == ["0209"]
        assert [r.phone for r in filter_attendance(records, search="kofi")] == ["0209"]

    def test_district_and_school(self, attendance, registrations):
        records = enrich_attendance(attendance, registrations)
        assert len(filter_attendance(records, district="Accra Metro")) == 1
        assert len(filter_attendance(records, school="Kumasi JHS", district="Accra Metro")) == 0

    def test_no_filters_returns_all(self, attendance):
        assert len(filter_attendance(attendance)) == 3


class TestCalculateStats:
    def test_totals_and_rate(self, attendance, registrations):
        stats = calculate_stats(attendance, registrations)
        assert stats.total_present == 65
        assert stats.total_absent == 10
        assert stats.attendance_rate == 86.7
        assert stats.total_schools == 2
        assert stats.total_districts == 2
        assert stats.total_teachers == 3

    def test_empty_attendance_rate_is_zero(self):
        assert calculate_stats([], []).attendance_rate == 0


class TestAbsenceReasons:
    @pytest.mark.parametrize("reason,category", [
        ("2 students sick", "Health Issues"),
        ("malaria outbreak", "Health Issues"),
        ("bad weather", "Bad Weather"),
        ("it was raining", "Bad Weather"),
        ("school fees", "School Fees"),
        ("market day", "Other Reasons"),
        ("", "Other Reasons"),
    ])
    def test_categorize(self, reason, category):
        assert categorize_absence_reason(reason) == category

    def test_group_sums_absent_students(self, attendance):
        groups = {g.name: g.value for g in group_absence_reasons(attendance)}
        assert groups == {"Health Issues": 3, "Bad Weather": 2, "School Fees": 5}


class TestAttendanceByDistrict:
    def test_unregistered_phone_is_unknown(self, attendance, registrations):
        by_district = {d.district: (d.present, d.absent) for d in attendance_by_district(attendance, registrations)}
        assert by_district == {
            "Accra Metro": (25, 3),
            "Kumasi": (30, 2),
            "Unknown": (10, 5),
        }
