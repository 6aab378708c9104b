"""
Grade schemas
"""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field, computed_field, field_serializer

from portal.services.grade_service import letter_grade
from portal.utils.datetime_utils import iso_campus


class GradePost(BaseModel):
    """Final grade for one student in one course (0-100)"""
    user_id: int
    final_grade: float = Field(..., ge=0, le=100)


class GradeUpdate(BaseModel):
    final_grade: float = Field(..., ge=0, le=100)


class GradeOut(BaseModel):
    id: int
    user_id: int
    course_id: int
    final_grade: float
    posted_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def letter_grade(self) -> str:
        return letter_grade(self.final_grade)

    @field_serializer("posted_at", when_used="always")
    def _ser_datetime(self, dt: Optional[datetime]) -> Optional[str]:
        return iso_campus(dt)


class GradeReportItem(GradeOut):
    course_name: str
    course_code: str
    credits: int
    semester: str
    department: str


class GradeReport(BaseModel):
    """Student transcript-style report"""
    user_id: int
    items: List[GradeReportItem]
    gpa: float
    total_credits: int
    completed_courses: int


class CourseGradeRow(BaseModel):
    """Enrolled student with the grade posted so far (if any)"""
    user_id: int
    full_name: Optional[str] = None
    email: str
    student_id: Optional[str] = None
    grade: Optional[GradeOut] = None
