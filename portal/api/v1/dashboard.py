"""
Role dashboards
"""
from datetime import datetime
from typing import Callable
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from portal.api.v1.courses import course_out
from portal.core.deps import get_db, get_clock, require_roles
from portal.models.user import Role, User
from portal.schemas.attendance import AttendanceRecordOut
from portal.schemas.dashboard import AdminStats, AttendanceAlert, FacultyDashboard, PendingGrade, StudentDashboard
from portal.schemas.grade import GradeOut
from portal.schemas.notification import NotificationOut
from portal.services.dashboard_service import admin_stats, faculty_dashboard, student_dashboard

router = APIRouter()


@router.get("/student", response_model=StudentDashboard)
async def student_dashboard_endpoint(
    db: Session = Depends(get_db),
    clock: Callable[[], datetime] = Depends(get_clock),
    current_user: User = Depends(require_roles(Role.STUDENT))
):
    data = student_dashboard(db, current_user, clock())
    return StudentDashboard(
        enrolled_courses=[course_out(db, c) for c in data["enrolled_courses"]],
        recent_grades=[GradeOut.model_validate(g) for g in data["recent_grades"]],
        recent_attendance=[AttendanceRecordOut.model_validate(r) for r in data["recent_attendance"]],
        unread_notifications=data["unread_notifications"],
        attendance_rate=data["attendance_rate"],
        gpa=data["gpa"],
        checked_in_today=data["checked_in_today"],
    )


@router.get("/faculty", response_model=FacultyDashboard)
async def faculty_dashboard_endpoint(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.FACULTY))
):
    data = faculty_dashboard(db, current_user)
    return FacultyDashboard(
        courses=[course_out(db, c) for c in data["courses"]],
        total_students=data["total_students"],
        pending_grades=[PendingGrade(**p) for p in data["pending_grades"]],
        attendance_alerts=[AttendanceAlert(**a) for a in data["attendance_alerts"]],
        recent_notifications=[NotificationOut.model_validate(n) for n in data["recent_notifications"]],
    )


@router.get("/admin", response_model=AdminStats)
async def admin_dashboard_endpoint(
    db: Session = Depends(get_db),
    clock: Callable[[], datetime] = Depends(get_clock),
    current_user: User = Depends(require_roles(Role.ADMIN))
):
    return AdminStats(**admin_stats(db, clock()))
