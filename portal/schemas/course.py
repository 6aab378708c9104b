"""
Course and enrollment schemas
"""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field, field_serializer

from portal.schemas.user import UserBrief
from portal.utils.datetime_utils import iso_campus


class CourseCreate(BaseModel):
    """Schema for creating a course"""
    name: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1, description="Unique course code, e.g. CS101")
    semester: str = Field(..., min_length=1)
    credits: int = Field(default=3, ge=0, le=12)
    department: str = Field(..., min_length=1)
    capacity: int = Field(default=30, ge=0)
    location: Optional[str] = None
    session_times: str = Field(default="", description="Free text, e.g. 'Sun/Tue 09:00-10:15'")
    description: Optional[str] = None
    professor_id: Optional[int] = Field(None, description="Admin only; faculty always own their courses")


class CourseUpdate(BaseModel):
    """Schema for updating a course"""
    name: Optional[str] = Field(None, min_length=1)
    code: Optional[str] = Field(None, min_length=1)
    semester: Optional[str] = Field(None, min_length=1)
    credits: Optional[int] = Field(None, ge=0, le=12)
    department: Optional[str] = Field(None, min_length=1)
    capacity: Optional[int] = Field(None, ge=0)
    location: Optional[str] = None
    session_times: Optional[str] = None
    description: Optional[str] = None


class CourseOut(BaseModel):
    """Schema for course output"""
    id: int
    name: str
    code: str
    semester: str
    professor_id: int
    credits: int
    department: str
    capacity: int
    location: Optional[str] = None
    session_times: str
    description: Optional[str] = None
    created_at: datetime
    professor_name: Optional[str] = None
    enrolled_count: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", when_used="always")
    def _ser_datetime(self, dt: Optional[datetime]) -> Optional[str]:
        return iso_campus(dt)


class EnrollmentOut(BaseModel):
    id: int
    user_id: int
    course_id: int
    enrolled_at: datetime
    course: Optional[CourseOut] = None

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("enrolled_at", when_used="always")
    def _ser_datetime(self, dt: Optional[datetime]) -> Optional[str]:
        return iso_campus(dt)


class RosterEntry(BaseModel):
    """Enrolled student as seen by the course's faculty"""
    enrollment_id: int
    enrolled_at: datetime
    student: UserBrief

    @field_serializer("enrolled_at", when_used="always")
    def _ser_datetime(self, dt: Optional[datetime]) -> Optional[str]:
        return iso_campus(dt)


class CourseListResponse(BaseModel):
    items: List[CourseOut]
    total: int
