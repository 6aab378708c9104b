"""
Attendance check-in service: wraps the eligibility engine with identity, the
campus clock, the configured window strategy and persistence.
All instants are stored in UTC; attendance_date is the campus-local day.
Records are append-only.
"""
import logging
import math
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from portal.core.config import settings
from portal.models.attendance import AttendanceRecord, AttendanceStatus
from portal.models.course import Course, Enrollment
from portal.models.notification import NotificationType
from portal.models.user import User, Role
from portal.services.attendance_window_service import get_managed_course, list_windows
from portal.services.audit_service import log_audit
from portal.services.checkin_engine import (
    CheckInAttempt,
    CheckInDecision,
    LocationState,
    RejectionReason,
    evaluate,
    persistence_failed,
)
from portal.services.checkin_windows import CourseWindowSchedule, FixedWindowSchedule
from portal.services.notification_service import create_notification
from portal.utils.datetime_utils import campus_today, ensure_utc, now_utc, to_campus_local
from portal.utils.geo import GeoPoint

logger = logging.getLogger(__name__)

REJECTION_STATUS_CODES = {
    RejectionReason.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    RejectionReason.LOCATION_UNAVAILABLE: status.HTTP_400_BAD_REQUEST,
    RejectionReason.OUTSIDE_RADIUS: status.HTTP_403_FORBIDDEN,
    RejectionReason.OUTSIDE_WINDOW: status.HTTP_403_FORBIDDEN,
    RejectionReason.ALREADY_CHECKED_IN: status.HTTP_409_CONFLICT,
    RejectionReason.PERSISTENCE_FAILED: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

LOW_ATTENDANCE_THRESHOLD = 75
HIGH_ATTENDANCE_THRESHOLD = 90


def rejection_error(decision: CheckInDecision) -> HTTPException:
    """HTTPException carrying the rejected decision as its detail."""
    return HTTPException(
        status_code=REJECTION_STATUS_CODES[decision.reason],
        detail=decision.to_dict(),
    )


def build_attempt(
    user_id: Optional[int],
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    accuracy: Optional[float] = None,
    captured_at: Optional[datetime] = None,
    location_error: Optional[LocationState] = None,
    course_id: Optional[int] = None,
) -> CheckInAttempt:
    """Turn request fields into an engine attempt. A reported location error wins over coordinates."""
    if location_error is not None and location_error != LocationState.RESOLVED:
        return CheckInAttempt(
            subject_id=user_id,
            course_id=course_id,
            location_state=location_error,
        )
    location = GeoPoint(lat, lng) if lat is not None and lng is not None else None
    return CheckInAttempt(
        subject_id=user_id,
        location=location,
        course_id=course_id,
        accuracy_meters=accuracy,
        captured_at=captured_at,
    )


def _check_course_access(db: Session, user: User, course_id: Optional[int]) -> None:
    if course_id is None:
        return
    course = db.query(Course).filter(Course.id == course_id).first()
    if not course:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found")
    if user.role == Role.STUDENT:
        enrolled = (
            db.query(Enrollment.id)
            .filter(Enrollment.user_id == user.id, Enrollment.course_id == course_id)
            .first()
        )
        if not enrolled:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You are not enrolled in this course"
            )


def resolve_schedule(db: Session, course_id: Optional[int]):
    """
    Window schedule for a check-in, per CHECKIN_WINDOW_STRATEGY.

    fixed: the global daily windows. course: the course's own attendance
    windows, so a course must be named.
    """
    if settings.CHECKIN_WINDOW_STRATEGY == "course":
        if course_id is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="course_id is required: check-in uses course attendance windows"
            )
        return CourseWindowSchedule(list_windows(db, course_id))
    return FixedWindowSchedule(settings.get_checkin_windows())


def has_record_for_day(db: Session, user_id: int, course_id: Optional[int], day: date) -> bool:
    """True if the user already has a record for this course (or campus-wide) on the given day."""
    query = db.query(AttendanceRecord.id).filter(
        AttendanceRecord.user_id == user_id,
        AttendanceRecord.attendance_date == day,
    )
    if course_id is None:
        query = query.filter(AttendanceRecord.course_id.is_(None))
    else:
        query = query.filter(AttendanceRecord.course_id == course_id)
    return query.first() is not None


def _decide(
    db: Session,
    user: User,
    attempt: CheckInAttempt,
    now: datetime,
) -> Tuple[CheckInDecision, datetime]:
    local_now = to_campus_local(now)
    _check_course_access(db, user, attempt.course_id)
    schedule = resolve_schedule(db, attempt.course_id)
    existing = has_record_for_day(db, user.id, attempt.course_id, local_now.date())
    decision = evaluate(
        attempt,
        settings.get_campus_location(),
        existing,
        local_now,
        schedule=schedule,
        max_location_age_seconds=settings.LOCATION_MAX_AGE_SECONDS,
    )
    return decision, local_now


def preview_check_in(
    db: Session,
    user: User,
    attempt: CheckInAttempt,
    now: Optional[datetime] = None,
) -> CheckInDecision:
    """Evaluate a check-in without writing anything. Rejections are returned, not raised."""
    decision, _ = _decide(db, user, attempt, now or now_utc())
    return decision


def check_in(
    db: Session,
    user: User,
    attempt: CheckInAttempt,
    now: Optional[datetime] = None,
) -> Tuple[CheckInDecision, AttendanceRecord]:
    """
    Check in: evaluate the attempt and append one AttendanceRecord when accepted.

    Server time only (never client time). A rejected attempt writes nothing and
    raises HTTPException whose detail is the decision. A failed write (including
    a lost race on the one-record-per-day index) is rolled back and reported as
    PERSISTENCE_FAILED; it is not retried.
    """
    now = ensure_utc(now or now_utc())
    decision, local_now = _decide(db, user, attempt, now)

    if not decision.accepted:
        logger.info(
            "check-in rejected: user_id=%s course_id=%s reason=%s distance=%s",
            user.id, attempt.course_id, decision.reason.value,
            round(decision.distance_meters, 1) if decision.distance_meters is not None else None,
        )
        raise rejection_error(decision)

    record = AttendanceRecord(
        user_id=user.id,
        course_id=attempt.course_id,
        attendance_date=local_now.date(),
        checked_in_at=now,
        latitude=attempt.location.latitude,
        longitude=attempt.location.longitude,
        accuracy_meters=attempt.accuracy_meters,
        distance_meters=decision.distance_meters,
        status=decision.status.value,
        window_label=decision.window_label,
    )
    # Record and audit row commit together or not at all
    try:
        db.add(record)
        db.flush()
        log_audit(
            db=db,
            actor_id=user.id,
            action="ATTENDANCE_CHECK_IN",
            entity_type="attendance_records",
            entity_id=record.id,
            meta={
                "attendance_date": str(record.attendance_date),
                "course_id": attempt.course_id,
                "status": decision.status,
                "distance_meters": round(decision.distance_meters, 1),
                "window": decision.window_label,
            },
            commit=False,
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning("check-in write failed: user_id=%s course_id=%s: %s", user.id, attempt.course_id, e)
        raise rejection_error(persistence_failed(decision))
    db.refresh(record)
    return decision, record


def list_my_attendance(
    db: Session,
    user_id: int,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
    course_id: Optional[int] = None,
) -> List[AttendanceRecord]:
    """Own records, newest first, optionally bounded by campus-local dates."""
    query = db.query(AttendanceRecord).filter(AttendanceRecord.user_id == user_id)
    if from_date:
        query = query.filter(AttendanceRecord.attendance_date >= from_date)
    if to_date:
        query = query.filter(AttendanceRecord.attendance_date <= to_date)
    if course_id is not None:
        query = query.filter(AttendanceRecord.course_id == course_id)
    return query.order_by(AttendanceRecord.checked_in_at.desc(), AttendanceRecord.id.desc()).all()


def get_today_records(db: Session, user_id: int, now: Optional[datetime] = None) -> List[AttendanceRecord]:
    """Records for the campus-local day of ``now`` (default: the current instant)."""
    today = campus_today(now)
    return (
        db.query(AttendanceRecord)
        .filter(AttendanceRecord.user_id == user_id, AttendanceRecord.attendance_date == today)
        .order_by(AttendanceRecord.checked_in_at)
        .all()
    )


def attendance_rate(present: int, late: int, total: int) -> float:
    """(present + late) / total as a whole percentage; 0 with no records. Halves round up."""
    if not total:
        return 0.0
    return float(math.floor((present + late) * 100 / total + 0.5))


def attendance_band(rate: float) -> str:
    if rate >= HIGH_ATTENDANCE_THRESHOLD:
        return "high"
    if rate >= LOW_ATTENDANCE_THRESHOLD:
        return "medium"
    return "low"


def _tally(records: List[AttendanceRecord]) -> Dict[str, int]:
    counts = {s.value: 0 for s in AttendanceStatus}
    for record in records:
        counts[record.status] = counts.get(record.status, 0) + 1
    return counts


def student_course_rate(db: Session, user_id: int, course_id: int) -> Tuple[float, int]:
    """(attendance rate, record count) of one student in one course."""
    records = (
        db.query(AttendanceRecord)
        .filter(AttendanceRecord.user_id == user_id, AttendanceRecord.course_id == course_id)
        .all()
    )
    counts = _tally(records)
    return attendance_rate(counts["present"], counts["late"], len(records)), len(records)


def overall_rate(db: Session, user_id: int) -> Optional[float]:
    """Attendance rate across every record of the user; None when there are none."""
    records = db.query(AttendanceRecord).filter(AttendanceRecord.user_id == user_id).all()
    if not records:
        return None
    counts = _tally(records)
    return attendance_rate(counts["present"], counts["late"], len(records))


def course_attendance_summary(db: Session, course: Course, band: Optional[str] = None) -> List[Dict]:
    """
    Per enrolled student tallies for a course.

    Args:
        band: optional filter, one of low (<75), medium (75-89), high (>=90)

    Returns:
        List of dicts ordered by student name
    """
    enrollments = (
        db.query(Enrollment)
        .filter(Enrollment.course_id == course.id)
        .all()
    )
    records_by_user: Dict[int, List[AttendanceRecord]] = {}
    for record in db.query(AttendanceRecord).filter(AttendanceRecord.course_id == course.id).all():
        records_by_user.setdefault(record.user_id, []).append(record)

    rows = []
    for enrollment in enrollments:
        student = enrollment.user
        records = records_by_user.get(student.id, [])
        counts = _tally(records)
        rate = attendance_rate(counts["present"], counts["late"], len(records))
        row = {
            "user_id": student.id,
            "full_name": student.full_name,
            "email": student.email,
            "student_id": student.student_id,
            "present": counts["present"],
            "late": counts["late"],
            "absent": counts["absent"],
            "total": len(records),
            "attendance_rate": rate,
            "band": attendance_band(rate),
            "last_attendance": max((r.attendance_date for r in records), default=None),
        }
        if band and row["band"] != band:
            continue
        rows.append(row)

    rows.sort(key=lambda r: ((r["full_name"] or r["email"]).lower(), r["user_id"]))
    return rows


def send_low_attendance_alert(db: Session, course_id: int, student_id: int, sender: User):
    """Notify a student of their attendance rate in the sender's course."""
    course = get_managed_course(db, course_id, sender)
    enrolled = (
        db.query(Enrollment)
        .filter(Enrollment.course_id == course.id, Enrollment.user_id == student_id)
        .first()
    )
    if not enrolled:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Student is not enrolled in this course"
        )

    rate, _ = student_course_rate(db, student_id, course.id)
    notification = create_notification(
        db,
        user_id=student_id,
        title="Low Attendance Warning",
        message=(
            f"Your attendance in {course.name} is {rate:g}%. "
            "Please improve your attendance to avoid academic consequences."
        ),
        type=NotificationType.ATTENDANCE,
    )
    log_audit(
        db=db,
        actor_id=sender.id,
        action="ATTENDANCE_LOW_ALERT",
        entity_type="notifications",
        entity_id=notification.id,
        meta={"course_id": course.id, "student_id": student_id, "attendance_rate": rate},
    )
    return notification
