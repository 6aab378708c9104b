"""
Course catalog, course management and enrollment endpoints.
Faculty manage their own courses; admins manage all; students enroll and drop.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from portal.core.deps import get_db, get_current_user, require_roles
from portal.models.course import Course
from portal.models.user import Role, User
from portal.schemas.course import (
    CourseCreate,
    CourseListResponse,
    CourseOut,
    CourseUpdate,
    EnrollmentOut,
    RosterEntry,
)
from portal.schemas.user import UserBrief
from portal.services.course_service import (
    create_course,
    delete_course,
    drop,
    enroll,
    enrolled_count,
    get_course,
    list_courses,
    list_my_enrollments,
    list_roster,
    update_course,
)

router = APIRouter()


def course_out(db: Session, course: Course) -> CourseOut:
    out = CourseOut.model_validate(course)
    out.professor_name = course.professor.full_name if course.professor else None
    out.enrolled_count = enrolled_count(db, course.id)
    return out


@router.get("", response_model=CourseListResponse)
async def list_courses_endpoint(
    search: Optional[str] = Query(None, description="Match on name, code or department"),
    department: Optional[str] = Query(None),
    credits: Optional[int] = Query(None, ge=0),
    semester: Optional[str] = Query(None),
    exclude_enrolled: bool = Query(False, description="Hide courses the current user is enrolled in"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Course catalog with search and filters"""
    courses, total = list_courses(
        db,
        search=search,
        department=department,
        credits=credits,
        semester=semester,
        exclude_enrolled_for=current_user.id if exclude_enrolled else None,
        skip=skip,
        limit=limit,
    )
    return CourseListResponse(items=[course_out(db, c) for c in courses], total=total)


@router.get("/teaching", response_model=List[CourseOut])
async def my_teaching_endpoint(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.FACULTY))
):
    """Courses taught by the current user"""
    courses, _ = list_courses(db, professor_id=current_user.id, limit=1000)
    return [course_out(db, c) for c in courses]


@router.get("/enrolled", response_model=List[EnrollmentOut])
async def my_enrollments_endpoint(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Enrollments of the current user with their courses"""
    return [
        EnrollmentOut(
            id=e.id,
            user_id=e.user_id,
            course_id=e.course_id,
            enrolled_at=e.enrolled_at,
            course=course_out(db, e.course),
        )
        for e in list_my_enrollments(db, current_user.id)
    ]


@router.post("", response_model=CourseOut, status_code=201)
async def create_course_endpoint(
    course_data: CourseCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.FACULTY))
):
    return course_out(db, create_course(db, course_data, current_user))


@router.get("/{course_id}", response_model=CourseOut)
async def get_course_endpoint(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return course_out(db, get_course(db, course_id))


@router.patch("/{course_id}", response_model=CourseOut)
async def update_course_endpoint(
    course_id: int,
    course_data: CourseUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.FACULTY))
):
    """Update a course (its professor or an admin)"""
    return course_out(db, update_course(db, course_id, course_data, current_user))


@router.delete("/{course_id}", status_code=204)
async def delete_course_endpoint(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.FACULTY))
):
    delete_course(db, course_id, current_user)


@router.post("/{course_id}/enroll", response_model=EnrollmentOut, status_code=201)
async def enroll_endpoint(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.STUDENT))
):
    """Enroll the current student. Full courses and duplicate enrollments are rejected with 400."""
    enrollment = enroll(db, course_id, current_user)
    return EnrollmentOut(
        id=enrollment.id,
        user_id=enrollment.user_id,
        course_id=enrollment.course_id,
        enrolled_at=enrollment.enrolled_at,
        course=course_out(db, enrollment.course),
    )


@router.delete("/{course_id}/enroll", status_code=204)
async def drop_endpoint(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.STUDENT))
):
    drop(db, course_id, current_user)


@router.get("/{course_id}/students", response_model=List[RosterEntry])
async def roster_endpoint(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.FACULTY))
):
    """Enrolled students of a course (its professor or an admin)"""
    return [
        RosterEntry(
            enrollment_id=e.id,
            enrolled_at=e.enrolled_at,
            student=UserBrief.model_validate(e.user),
        )
        for e in list_roster(db, course_id, current_user)
    ]
