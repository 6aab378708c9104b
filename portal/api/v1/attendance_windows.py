"""
Per-course attendance window endpoints (course professor or admin)
"""
from datetime import datetime
from typing import Callable, List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from portal.core.deps import get_db, get_clock, get_current_user, require_roles
from portal.models.user import Role, User
from portal.schemas.attendance_window import (
    AttendanceWindowCreate,
    AttendanceWindowListResponse,
    AttendanceWindowOut,
    AttendanceWindowUpdate,
    WindowStatusOut,
)
from portal.services.attendance_window_service import (
    create_window,
    delete_window,
    evaluate_course_windows,
    list_windows,
    update_window,
)
from portal.services.course_service import get_course
from portal.utils.datetime_utils import to_campus_local

router = APIRouter()


@router.get("/{course_id}/windows", response_model=AttendanceWindowListResponse)
async def list_windows_endpoint(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Windows of a course ordered by day of week (0=Sunday) and start time"""
    get_course(db, course_id)
    windows = list_windows(db, course_id)
    return AttendanceWindowListResponse(
        items=[AttendanceWindowOut.model_validate(w) for w in windows],
        total=len(windows),
    )


@router.get("/{course_id}/windows/status", response_model=List[WindowStatusOut])
async def window_status_endpoint(
    course_id: int,
    db: Session = Depends(get_db),
    clock: Callable[[], datetime] = Depends(get_clock),
    current_user: User = Depends(get_current_user)
):
    """Evaluate every window of the course against the campus clock"""
    get_course(db, course_id)
    return [
        WindowStatusOut(
            window=AttendanceWindowOut.model_validate(window),
            in_window=evaluation.in_window,
            in_grace=evaluation.in_grace,
            is_late=evaluation.is_late,
        )
        for window, evaluation in evaluate_course_windows(db, course_id, to_campus_local(clock()))
    ]


@router.post("/{course_id}/windows", response_model=AttendanceWindowOut, status_code=201)
async def create_window_endpoint(
    course_id: int,
    data: AttendanceWindowCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.FACULTY))
):
    return create_window(db, course_id, data, current_user)


@router.patch("/{course_id}/windows/{window_id}", response_model=AttendanceWindowOut)
async def update_window_endpoint(
    course_id: int,
    window_id: int,
    data: AttendanceWindowUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.FACULTY))
):
    return update_window(db, course_id, window_id, data, current_user)


@router.delete("/{course_id}/windows/{window_id}", status_code=204)
async def delete_window_endpoint(
    course_id: int,
    window_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.FACULTY))
):
    delete_window(db, course_id, window_id, current_user)
