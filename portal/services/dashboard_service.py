"""
Dashboard aggregates for students, faculty and admins
"""
from datetime import datetime
from typing import Dict, Optional

from sqlalchemy.orm import Session

from portal.models.attendance import AttendanceRecord
from portal.models.course import Course, Enrollment
from portal.models.grade import Grade
from portal.models.user import User, Role
from portal.services.attendance_service import (
    LOW_ATTENDANCE_THRESHOLD,
    get_today_records,
    overall_rate,
    student_course_rate,
)
from portal.services.grade_service import calculate_gpa
from portal.services.notification_service import list_notifications, unread_count
from portal.utils.datetime_utils import campus_today, now_utc


def student_dashboard(db: Session, user: User, now: Optional[datetime] = None) -> Dict:
    now = now or now_utc()
    courses = [e.course for e in sorted(user.enrollments, key=lambda e: e.id)]
    grades = (
        db.query(Grade)
        .filter(Grade.user_id == user.id)
        .order_by(Grade.posted_at.desc(), Grade.id.desc())
        .all()
    )
    recent_attendance = (
        db.query(AttendanceRecord)
        .filter(AttendanceRecord.user_id == user.id)
        .order_by(AttendanceRecord.checked_in_at.desc(), AttendanceRecord.id.desc())
        .limit(10)
        .all()
    )
    return {
        "enrolled_courses": courses,
        "recent_grades": grades[:5],
        "recent_attendance": recent_attendance,
        "unread_notifications": unread_count(db, user.id),
        "attendance_rate": overall_rate(db, user.id),
        "gpa": calculate_gpa(grades) if grades else None,
        "checked_in_today": bool(get_today_records(db, user.id, now)),
    }


def faculty_dashboard(db: Session, user: User) -> Dict:
    """
    Courses taught by the user, enrollment total, enrolled students still
    without a grade, and students under the low-attendance threshold
    (only those with at least one record in the course).
    """
    courses = db.query(Course).filter(Course.professor_id == user.id).order_by(Course.code).all()

    total_students = 0
    pending_grades = []
    attendance_alerts = []
    for course in courses:
        graded = {g.user_id for g in course.grades}
        for enrollment in sorted(course.enrollments, key=lambda e: e.id):
            total_students += 1
            student = enrollment.user
            if student.id not in graded:
                pending_grades.append({
                    "course_id": course.id,
                    "course_code": course.code,
                    "user_id": student.id,
                    "full_name": student.full_name,
                })
            rate, record_count = student_course_rate(db, student.id, course.id)
            if record_count and rate < LOW_ATTENDANCE_THRESHOLD:
                attendance_alerts.append({
                    "course_id": course.id,
                    "course_code": course.code,
                    "user_id": student.id,
                    "full_name": student.full_name,
                    "attendance_rate": rate,
                })

    return {
        "courses": courses,
        "total_students": total_students,
        "pending_grades": pending_grades,
        "attendance_alerts": attendance_alerts,
        "recent_notifications": list_notifications(db, user.id, limit=5),
    }


def admin_stats(db: Session, now: Optional[datetime] = None) -> Dict:
    today = campus_today(now)
    role_counts = {role.value: 0 for role in Role}
    for (role,) in db.query(User.role).all():
        role_counts[role] = role_counts.get(role, 0) + 1

    return {
        "total_users": sum(role_counts.values()),
        "students": role_counts[Role.STUDENT.value],
        "faculty": role_counts[Role.FACULTY.value],
        "admins": role_counts[Role.ADMIN.value],
        "total_courses": db.query(Course).count(),
        "total_enrollments": db.query(Enrollment).count(),
        "todays_checkins": db.query(AttendanceRecord).filter(AttendanceRecord.attendance_date == today).count(),
        "system_health": "healthy",
    }
