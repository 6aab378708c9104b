"""
Attendance check-in schemas.
Records are returned with datetimes on the campus clock; attendance_date is the campus-local day.
"""
from datetime import date, datetime, time
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

from portal.services.checkin_engine import LocationState
from portal.utils.datetime_utils import iso_campus


def _validate_accuracy(v: Optional[float]) -> Optional[float]:
    if v is None:
        return v
    if v <= 0:
        raise ValueError("accuracy must be positive")
    return v


class CheckInRequest(BaseModel):
    """
    Check-in attempt from the client.

    lat/lng are the device reading. When the device could not produce one,
    send location_error instead (pending, permission_denied, unavailable or
    timeout) and leave lat/lng empty.
    """
    lat: Optional[float] = Field(None, ge=-90, le=90, description="GPS latitude")
    lng: Optional[float] = Field(None, ge=-180, le=180, description="GPS longitude")
    accuracy: Optional[float] = Field(None, description="Accuracy in meters; must be positive")
    captured_at: Optional[datetime] = Field(None, description="When the device took the reading")
    location_error: Optional[LocationState] = Field(None, description="Why no reading is available")
    course_id: Optional[int] = Field(None, description="Course being attended; omit for a campus-wide check-in")

    @field_validator("accuracy")
    @classmethod
    def check_accuracy(cls, v: Optional[float]) -> Optional[float]:
        return _validate_accuracy(v)

    @field_validator("location_error")
    @classmethod
    def check_location_error(cls, v: Optional[LocationState]) -> Optional[LocationState]:
        if v == LocationState.RESOLVED:
            raise ValueError("location_error cannot be 'resolved'")
        return v

    @model_validator(mode="after")
    def check_coordinates_pair(self):
        if (self.lat is None) != (self.lng is None):
            raise ValueError("lat and lng must be provided together")
        return self


class CheckInDecisionOut(BaseModel):
    """Outcome of a check-in attempt (also the detail body of a rejection)"""
    accepted: bool
    status: Optional[str] = None
    reason: Optional[str] = None
    message: str
    location_state: Optional[str] = None
    distance_meters: Optional[float] = None
    required_meters: Optional[float] = None
    meters_over_limit: Optional[int] = None
    window_label: Optional[str] = None


class AttendanceRecordOut(BaseModel):
    """Stored check-in. Datetimes on the campus clock."""
    id: int
    user_id: int
    course_id: Optional[int] = None
    attendance_date: date
    checked_in_at: datetime
    latitude: float
    longitude: float
    accuracy_meters: Optional[float] = None
    distance_meters: float
    status: str
    window_label: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("checked_in_at", when_used="always")
    def _ser_datetime(self, dt: Optional[datetime]) -> Optional[str]:
        return iso_campus(dt)


class CheckInResponse(BaseModel):
    decision: CheckInDecisionOut
    record: AttendanceRecordOut


class AttendanceListResponse(BaseModel):
    items: List[AttendanceRecordOut]
    total: int


class CheckInWindowOut(BaseModel):
    label: str
    start: time
    on_time_until: time
    end: time


class CampusInfo(BaseModel):
    """Geofence and window configuration the client shows before check-in"""
    name: str
    address: str
    latitude: float
    longitude: float
    allowed_radius_meters: float
    timezone: str
    window_strategy: str
    windows: List[CheckInWindowOut]


class StudentAttendanceSummary(BaseModel):
    user_id: int
    full_name: Optional[str] = None
    email: str
    student_id: Optional[str] = None
    present: int
    late: int
    absent: int
    total: int
    attendance_rate: float
    band: str
    last_attendance: Optional[date] = None


class CourseAttendanceSummary(BaseModel):
    """Per-student tallies for one course"""
    course_id: int
    course_code: str
    course_name: str
    students: List[StudentAttendanceSummary]


class LowAttendanceAlertRequest(BaseModel):
    user_id: int = Field(..., description="Student to warn")
