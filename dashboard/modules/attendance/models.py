"""
Attendance module data models.

Records are owned by the remote API; unknown fields on attendance
records are kept so raw exports carry everything the server sent.
"""

from datetime import datetime
from typing import Any, Optional, Union
from pydantic import AliasChoices, BaseModel, Field, ValidationInfo, field_validator


def _default_for_null(model: type[BaseModel], value: Any, info: ValidationInfo) -> Any:
    if value is None:
        return model.model_fields[info.field_name].default
    return value


class AttendanceRecord(BaseModel):
    """A lesson attendance record submitted by a teacher."""

    id: Optional[Union[int, str]] = Field(None, description="Record ID")
    phone: str = Field(default="", description="Submitting teacher's phone")
    students_present: int = Field(default=0, description="Students present")
    students_absent: int = Field(default=0, description="Students absent")
    absence_reason: str = Field(default="", description="Free-text absence reason")
    topic_covered: str = Field(
        default="",
        validation_alias=AliasChoices("topic_covered", "subject"),
        description="Lesson topic",
    )
    teacher_name: Optional[str] = Field(None, description="Teacher name (joined from registrations)")
    school: Optional[str] = Field(None, description="School (joined from registrations)")
    district: Optional[str] = Field(None, description="District")
    created_at: Optional[datetime] = Field(None, description="Submission time")

    @field_validator("students_present", "students_absent", mode="before")
    @classmethod
    def null_count(cls, v: Any, info: ValidationInfo) -> Any:
        return _default_for_null(cls, v, info)

    @field_validator("phone", "absence_reason", "topic_covered", mode="before")
    @classmethod
    def null_or_numeric_text(cls, v: Any, info: ValidationInfo) -> Any:
        """The API sends null for unfilled fields and sometimes phones as numbers."""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return _default_for_null(cls, v, info)

    model_config = {
        "extra": "allow",
        "populate_by_name": True,
    }


class RegistrationRecord(BaseModel):
    """A registered teacher."""

    id: Optional[Union[int, str]] = Field(None, description="Registration ID")
    phone: str = Field(default="", description="Phone number")
    name: str = Field(default="", description="Teacher name")
    school: str = Field(default="", description="School")
    district: str = Field(default="", description="District")
    language: str = Field(default="", description="Preferred language")

    @field_validator("phone", "name", "school", "district", "language", mode="before")
    @classmethod
    def null_or_numeric_text(cls, v: Any, info: ValidationInfo) -> Any:
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return _default_for_null(cls, v, info)

    model_config = {"extra": "ignore"}


class DashboardStats(BaseModel):
    """Headline numbers for the dashboard overview."""

    total_present: int = Field(default=0, description="Sum of students present")
    total_absent: int = Field(default=0, description="Sum of students absent")
    attendance_rate: float = Field(default=0.0, description="Present / total, percent, 1 decimal")
    total_schools: int = Field(default=0, description="Distinct registered schools")
    total_districts: int = Field(default=0, description="Distinct registered districts")
    total_teachers: int = Field(default=0, description="Distinct submitting phones")


class AbsenceReasonCount(BaseModel):
    """Absent students grouped under a reason category."""

    name: str
    value: int


class DistrictAttendance(BaseModel):
    """Present/absent totals for a district."""

    district: str
    present: int = 0
    absent: int = 0


class AttendanceFilter(BaseModel):
    """Filters applied to the attendance listing."""

    search: Optional[str] = Field(None, description="Matches teacher, school, topic or reason")
    district: Optional[str] = Field(None, description="Exact district")
    school: Optional[str] = Field(None, description="Exact school")


class AttendanceOverview(BaseModel):
    """Everything the dashboard overview shows, from one fetch."""

    records: list[AttendanceRecord] = Field(default_factory=list)
    stats: DashboardStats = Field(default_factory=DashboardStats)
    absence_reasons: list[AbsenceReasonCount] = Field(default_factory=list)
    districts: list[DistrictAttendance] = Field(default_factory=list)
