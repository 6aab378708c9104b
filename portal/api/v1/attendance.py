"""
Attendance check-in endpoints.
Any signed-in user checks themselves in; /my and /today return only own records.
Rejected check-ins answer with the decision as the error detail and write nothing.
"""
import logging
from datetime import date, datetime
from typing import Callable, List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from portal.core.config import settings
from portal.core.deps import get_db, get_clock, get_current_user, require_roles
from portal.models.user import Role, User
from portal.schemas.attendance import (
    AttendanceListResponse,
    AttendanceRecordOut,
    CampusInfo,
    CheckInDecisionOut,
    CheckInRequest,
    CheckInResponse,
    CheckInWindowOut,
    CourseAttendanceSummary,
    LowAttendanceAlertRequest,
    StudentAttendanceSummary,
)
from portal.schemas.notification import NotificationOut
from portal.services.attendance_service import (
    build_attempt,
    check_in,
    course_attendance_summary,
    get_today_records,
    list_my_attendance,
    preview_check_in,
    send_low_attendance_alert,
)
from portal.services.attendance_window_service import get_managed_course
from portal.utils.datetime_utils import iso_8601_utc, iso_campus

router = APIRouter()
_log = logging.getLogger(__name__)


def _attempt_from(payload: CheckInRequest, user: User):
    return build_attempt(
        user.id,
        lat=payload.lat,
        lng=payload.lng,
        accuracy=payload.accuracy,
        captured_at=payload.captured_at,
        location_error=payload.location_error,
        course_id=payload.course_id,
    )


@router.get("/campus", response_model=CampusInfo)
async def campus_endpoint(current_user: User = Depends(get_current_user)):
    """Campus geofence and the fixed daily check-in windows"""
    campus = settings.get_campus_location()
    return CampusInfo(
        name=campus.name,
        address=campus.address,
        latitude=campus.point.latitude,
        longitude=campus.point.longitude,
        allowed_radius_meters=campus.allowed_radius_meters,
        timezone=settings.CAMPUS_TIMEZONE,
        window_strategy=settings.CHECKIN_WINDOW_STRATEGY,
        windows=[
            CheckInWindowOut(label=w.label, start=w.start, on_time_until=w.on_time_until, end=w.end)
            for w in settings.get_checkin_windows()
        ],
    )


@router.get("/clock")
async def clock_endpoint(clock: Callable[[], datetime] = Depends(get_clock)):
    """Server UTC now and the campus wall clock used for check-in windows"""
    now = clock()
    return {
        "now_utc": iso_8601_utc(now),
        "now_campus": iso_campus(now),
        "timezone": settings.CAMPUS_TIMEZONE,
    }


@router.post("/check-in", response_model=CheckInResponse, status_code=201)
async def check_in_endpoint(
    payload: CheckInRequest,
    db: Session = Depends(get_db),
    clock: Callable[[], datetime] = Depends(get_clock),
    current_user: User = Depends(get_current_user),
):
    """
    Check in the current user.

    201 with the decision and the stored record when accepted. Rejections:
    400 location unavailable, 403 outside radius or outside window,
    409 already checked in, 500 when the record could not be saved.
    """
    attempt = _attempt_from(payload, current_user)
    _log.debug(
        "check_in: user_id=%s course_id=%s has_location=%s location_error=%s",
        current_user.id, payload.course_id, attempt.location is not None, payload.location_error,
    )
    decision, record = check_in(db, current_user, attempt, now=clock())
    return CheckInResponse(
        decision=CheckInDecisionOut(**decision.to_dict()),
        record=AttendanceRecordOut.model_validate(record),
    )


@router.post("/check-in/preview", response_model=CheckInDecisionOut)
async def preview_endpoint(
    payload: CheckInRequest,
    db: Session = Depends(get_db),
    clock: Callable[[], datetime] = Depends(get_clock),
    current_user: User = Depends(get_current_user),
):
    """Evaluate a check-in without recording it (distance, window, duplicate)"""
    decision = preview_check_in(db, current_user, _attempt_from(payload, current_user), now=clock())
    return CheckInDecisionOut(**decision.to_dict())


@router.get("/today", response_model=List[AttendanceRecordOut])
async def today_endpoint(
    db: Session = Depends(get_db),
    clock: Callable[[], datetime] = Depends(get_clock),
    current_user: User = Depends(get_current_user),
):
    """Own records for the current campus day"""
    return [AttendanceRecordOut.model_validate(r) for r in get_today_records(db, current_user.id, clock())]


@router.get("/my", response_model=AttendanceListResponse)
async def my_endpoint(
    from_date: Optional[date] = Query(None, alias="from", description="Start date (YYYY-MM-DD)"),
    to_date: Optional[date] = Query(None, alias="to", description="End date (YYYY-MM-DD)"),
    course_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Own attendance history, newest first"""
    records = list_my_attendance(db, current_user.id, from_date, to_date, course_id)
    return AttendanceListResponse(
        items=[AttendanceRecordOut.model_validate(r) for r in records],
        total=len(records),
    )


@router.get("/courses/{course_id}/summary", response_model=CourseAttendanceSummary)
async def course_summary_endpoint(
    course_id: int,
    band: Optional[str] = Query(None, pattern="^(low|medium|high)$", description="low <75, medium 75-89, high >=90"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.FACULTY)),
):
    """Per-student attendance tallies for a course (its professor or an admin)"""
    course = get_managed_course(db, course_id, current_user)
    rows = course_attendance_summary(db, course, band=band)
    return CourseAttendanceSummary(
        course_id=course.id,
        course_code=course.code,
        course_name=course.name,
        students=[StudentAttendanceSummary(**row) for row in rows],
    )


@router.post("/courses/{course_id}/alerts", response_model=NotificationOut, status_code=201)
async def low_attendance_alert_endpoint(
    course_id: int,
    payload: LowAttendanceAlertRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.FACULTY)),
):
    """Send a low attendance warning to an enrolled student"""
    return send_low_attendance_alert(db, course_id, payload.user_id, current_user)
