"""
Per-course attendance windows: faculty CRUD and evaluation against the campus clock.
"""
import logging
from datetime import datetime
from typing import List, Tuple

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from portal.models.attendance import AttendanceWindow
from portal.models.course import Course
from portal.models.user import User, Role
from portal.schemas.attendance_window import AttendanceWindowCreate, AttendanceWindowUpdate
from portal.services.audit_service import log_audit
from portal.services.checkin_windows import WindowEvaluation, is_within_window

logger = logging.getLogger(__name__)


def get_managed_course(db: Session, course_id: int, user: User) -> Course:
    """Course the user may manage: its professor, or any course for an admin."""
    course = db.query(Course).filter(Course.id == course_id).first()
    if not course:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found")
    if user.role != Role.ADMIN and course.professor_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the course's professor can manage this course"
        )
    return course


def list_windows(db: Session, course_id: int) -> List[AttendanceWindow]:
    """Windows of a course ordered by day of week, then start time."""
    return (
        db.query(AttendanceWindow)
        .filter(AttendanceWindow.course_id == course_id)
        .order_by(AttendanceWindow.day_of_week, AttendanceWindow.start_time)
        .all()
    )


def _get_window(db: Session, course_id: int, window_id: int) -> AttendanceWindow:
    window = (
        db.query(AttendanceWindow)
        .filter(AttendanceWindow.id == window_id, AttendanceWindow.course_id == course_id)
        .first()
    )
    if not window:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Attendance window not found")
    return window


def create_window(db: Session, course_id: int, data: AttendanceWindowCreate, user: User) -> AttendanceWindow:
    get_managed_course(db, course_id, user)

    window = AttendanceWindow(
        course_id=course_id,
        day_of_week=data.day_of_week,
        start_time=data.start_time,
        end_time=data.end_time,
        grace_period_minutes=data.grace_period_minutes,
    )
    db.add(window)
    db.commit()
    db.refresh(window)

    log_audit(
        db=db,
        actor_id=user.id,
        action="ATTENDANCE_WINDOW_CREATE",
        entity_type="attendance_windows",
        entity_id=window.id,
        meta=data.model_dump(),
    )
    return window


def update_window(
    db: Session,
    course_id: int,
    window_id: int,
    data: AttendanceWindowUpdate,
    user: User,
) -> AttendanceWindow:
    """
    Partially update a window. The merged start/end must still satisfy start < end.
    """
    get_managed_course(db, course_id, user)
    window = _get_window(db, course_id, window_id)

    changes = data.model_dump(exclude_unset=True)
    start = changes.get("start_time", window.start_time)
    end = changes.get("end_time", window.end_time)
    if start is None or end is None or start >= end:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="start_time must be before end_time"
        )

    for field, value in changes.items():
        if value is not None:
            setattr(window, field, value)
    db.commit()
    db.refresh(window)

    log_audit(
        db=db,
        actor_id=user.id,
        action="ATTENDANCE_WINDOW_UPDATE",
        entity_type="attendance_windows",
        entity_id=window.id,
        meta=changes,
    )
    return window


def delete_window(db: Session, course_id: int, window_id: int, user: User) -> None:
    get_managed_course(db, course_id, user)
    window = _get_window(db, course_id, window_id)
    db.delete(window)
    db.commit()

    log_audit(
        db=db,
        actor_id=user.id,
        action="ATTENDANCE_WINDOW_DELETE",
        entity_type="attendance_windows",
        entity_id=window_id,
    )


def evaluate_course_windows(
    db: Session,
    course_id: int,
    now: datetime,
) -> List[Tuple[AttendanceWindow, WindowEvaluation]]:
    """Every window of the course paired with its evaluation at local time ``now``."""
    return [(window, is_within_window(window, now)) for window in list_windows(db, course_id)]
