"""
Report service - rows for CSV exports
"""
from datetime import date
from typing import Dict, List, Optional
from sqlalchemy.orm import Session
from portal.models.attendance import AttendanceRecord
from portal.models.course import Course
from portal.utils.datetime_utils import iso_campus

ATTENDANCE_CSV_HEADERS = [
    "student_id",
    "student_name",
    "email",
    "course_code",
    "attendance_date",
    "checked_in_at",
    "status",
    "window",
    "distance_meters",
    "latitude",
    "longitude",
]


def get_course_attendance_rows(
    db: Session,
    course: Course,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
) -> List[Dict]:
    """Attendance rows of a course, oldest first. Times on the campus clock."""
    query = db.query(AttendanceRecord).filter(AttendanceRecord.course_id == course.id)
    if from_date:
        query = query.filter(AttendanceRecord.attendance_date >= from_date)
    if to_date:
        query = query.filter(AttendanceRecord.attendance_date <= to_date)

    rows = []
    for record in query.order_by(AttendanceRecord.attendance_date, AttendanceRecord.checked_in_at).all():
        student = record.user
        rows.append({
            "student_id": student.student_id,
            "student_name": student.full_name,
            "email": student.email,
            "course_code": course.code,
            "attendance_date": record.attendance_date.isoformat(),
            "checked_in_at": iso_campus(record.checked_in_at),
            "status": record.status,
            "window": record.window_label,
            "distance_meters": round(record.distance_meters, 1),
            "latitude": record.latitude,
            "longitude": record.longitude,
        })
    return rows
