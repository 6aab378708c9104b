"""
Dashboard schemas
"""
from typing import Optional, List
from pydantic import BaseModel

from portal.schemas.attendance import AttendanceRecordOut
from portal.schemas.course import CourseOut
from portal.schemas.grade import GradeOut
from portal.schemas.notification import NotificationOut


class StudentDashboard(BaseModel):
    enrolled_courses: List[CourseOut]
    recent_grades: List[GradeOut]
    recent_attendance: List[AttendanceRecordOut]
    unread_notifications: int
    attendance_rate: Optional[float] = None
    gpa: Optional[float] = None
    checked_in_today: bool


class PendingGrade(BaseModel):
    course_id: int
    course_code: str
    user_id: int
    full_name: Optional[str] = None


class AttendanceAlert(BaseModel):
    course_id: int
    course_code: str
    user_id: int
    full_name: Optional[str] = None
    attendance_rate: float


class FacultyDashboard(BaseModel):
    courses: List[CourseOut]
    total_students: int
    pending_grades: List[PendingGrade]
    attendance_alerts: List[AttendanceAlert]
    recent_notifications: List[NotificationOut]


class AdminStats(BaseModel):
    total_users: int
    students: int
    faculty: int
    admins: int
    total_courses: int
    total_enrollments: int
    todays_checkins: int
    system_health: str
