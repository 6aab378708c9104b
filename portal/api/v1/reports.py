"""
Reports and exports endpoints
"""
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from portal.core.deps import get_db, require_roles
from portal.models.user import Role, User
from portal.services.attendance_window_service import get_managed_course
from portal.services.audit_service import log_audit
from portal.services.report_service import ATTENDANCE_CSV_HEADERS, get_course_attendance_rows
from portal.utils.csv_export import stream_csv

router = APIRouter()


@router.get("/courses/{course_id}/attendance.csv")
async def export_course_attendance_csv(
    course_id: int,
    from_date: Optional[date] = Query(None, alias="from", description="Start date (YYYY-MM-DD)"),
    to_date: Optional[date] = Query(None, alias="to", description="End date (YYYY-MM-DD)"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.FACULTY))
):
    """
    Export a course's attendance records as CSV

    Only the course's professor (or an admin). Dates are campus-local.
    """
    course = get_managed_course(db, course_id, current_user)
    rows = get_course_attendance_rows(db, course, from_date, to_date)

    filename = f"attendance_{course.code}.csv"
    if from_date and to_date:
        filename = f"attendance_{course.code}_{from_date.strftime('%Y%m%d')}_{to_date.strftime('%Y%m%d')}.csv"

    log_audit(
        db=db,
        actor_id=current_user.id,
        action="REPORT_EXPORT",
        entity_type="report",
        entity_id=None,
        meta={
            "report_type": "course_attendance",
            "course_id": course.id,
            "from_date": str(from_date) if from_date else None,
            "to_date": str(to_date) if to_date else None,
            "row_count": len(rows)
        }
    )

    return stream_csv(headers=ATTENDANCE_CSV_HEADERS, rows=rows, filename=filename)
