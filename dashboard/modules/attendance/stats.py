"""
Dashboard aggregations over attendance records.
"""

from typing import Iterable, Optional

from .models import (
    AbsenceReasonCount,
    AttendanceRecord,
    DashboardStats,
    DistrictAttendance,
    RegistrationRecord,
)

UNKNOWN_TEACHER = "Unknown Teacher"
UNKNOWN_SCHOOL = "Unknown School"
UNKNOWN_DISTRICT = "Unknown District"

# Category -> keywords matched against the lower-cased absence reason.
# Order matters: the first matching category wins.
ABSENCE_CATEGORIES: list[tuple[str, tuple[str, ...]]] = [
    ("Health Issues", ("sick", "flu", "malaria")),
    ("Bad Weather", ("weather", "rain")),
    ("School Fees", ("fees",)),
]
OTHER_REASONS = "Other Reasons"


def enrich_attendance(
    records: Iterable[AttendanceRecord],
    registrations: Iterable[RegistrationRecord],
) -> list[AttendanceRecord]:
    """Join teacher name, school and district from registrations by phone."""
    by_phone: dict[str, RegistrationRecord] = {}
    for registration in registrations:
        by_phone.setdefault(registration.phone, registration)

    enriched = []
    for record in records:
        teacher = by_phone.get(record.phone)
        enriched.append(
            record.model_copy(
                update={
                    "teacher_name": (teacher.name if teacher else None) or UNKNOWN_TEACHER,
                    "school": (teacher.school if teacher else None) or UNKNOWN_SCHOOL,
                    "district": (teacher.district if teacher else None) or UNKNOWN_DISTRICT,
                }
            )
        )
    return enriched


def filter_attendance(
    records: Iterable[AttendanceRecord],
    search: Optional[str] = None,
    district: Optional[str] = None,
    school: Optional[str] = None,
) -> list[AttendanceRecord]:
    """Case-insensitive search plus exact district/school filters."""
    needle = search.lower() if search else None
    result = []
    for record in records:
        if needle:
            haystack = (
                record.teacher_name or "",
                record.school or "",
                record.topic_covered,
                record.absence_reason,
            )
            if not any(needle in value.lower() for value in haystack):
                continue
        if district and record.district != district:
            continue
        if school and record.school != school:
            continue
        result.append(record)
    return result


def calculate_stats(
    attendance: list[AttendanceRecord],
    registrations: list[RegistrationRecord],
) -> DashboardStats:
    total_present = sum(record.students_present for record in attendance)
    total_absent = sum(record.students_absent for record in attendance)
    total = total_present + total_absent
    rate = round(total_present / total * 100, 1) if total > 0 else 0.0

    return DashboardStats(
        total_present=total_present,
        total_absent=total_absent,
        attendance_rate=rate,
        total_schools=len({r.school for r in registrations}),
        total_districts=len({r.district for r in registrations}),
        total_teachers=len({record.phone for record in attendance}),
    )


def categorize_absence_reason(reason: str) -> str:
    lowered = reason.lower()
    for category, keywords in ABSENCE_CATEGORIES:
        if any(keyword in lowered for keyword in keywords):
            return category
    return OTHER_REASONS


def group_absence_reasons(attendance: Iterable[AttendanceRecord]) -> list[AbsenceReasonCount]:
    """Absent students per reason category, in first-seen order."""
    counts: dict[str, int] = {}
    for record in attendance:
        category = categorize_absence_reason(record.absence_reason)
        counts[category] = counts.get(category, 0) + record.students_absent
    return [AbsenceReasonCount(name=name, value=value) for name, value in counts.items()]


def attendance_by_district(
    attendance: Iterable[AttendanceRecord],
    registrations: Iterable[RegistrationRecord],
) -> list[DistrictAttendance]:
    """Present/absent totals per district of the submitting teacher."""
    district_by_phone: dict[str, str] = {}
    for registration in registrations:
        district_by_phone.setdefault(registration.phone, registration.district)

    totals: dict[str, DistrictAttendance] = {}
    for record in attendance:
        district = district_by_phone.get(record.phone) or "Unknown"
        entry = totals.setdefault(district, DistrictAttendance(district=district))
        entry.present += record.students_present
        entry.absent += record.students_absent
    return list(totals.values())
