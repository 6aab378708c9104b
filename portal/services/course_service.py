"""
Course service - catalog, course management and enrollment
"""
from sqlalchemy.orm import Session
from sqlalchemy import func, or_
from fastapi import HTTPException, status
from typing import List, Optional, Tuple
from portal.models.course import Course, Enrollment
from portal.models.notification import NotificationType
from portal.models.user import User, Role
from portal.schemas.course import CourseCreate, CourseUpdate
from portal.services.attendance_window_service import get_managed_course
from portal.services.audit_service import log_audit
from portal.services.notification_service import create_notification
from portal.utils.datetime_utils import now_utc


def _ensure_unique_code(db: Session, code: str, exclude_id: Optional[int] = None) -> None:
    query = db.query(Course).filter(func.lower(Course.code) == func.lower(code))
    if exclude_id is not None:
        query = query.filter(Course.id != exclude_id)
    if query.first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Course with code '{code}' already exists"
        )


def create_course(db: Session, course_data: CourseCreate, actor: User) -> Course:
    """
    Create a new course

    Faculty always own the courses they create; admins may assign any
    faculty member through professor_id.

    Raises:
        HTTPException: If the course code already exists or the professor is invalid
    """
    _ensure_unique_code(db, course_data.code)

    professor_id = actor.id
    if actor.role == Role.ADMIN and course_data.professor_id is not None:
        professor = db.query(User).filter(User.id == course_data.professor_id).first()
        if not professor or professor.role not in (Role.FACULTY.value, Role.ADMIN.value):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="professor_id must reference a faculty member"
            )
        professor_id = professor.id

    course = Course(
        name=course_data.name,
        code=course_data.code,
        semester=course_data.semester,
        professor_id=professor_id,
        credits=course_data.credits,
        department=course_data.department,
        capacity=course_data.capacity,
        location=course_data.location,
        session_times=course_data.session_times,
        description=course_data.description,
    )
    db.add(course)
    db.commit()
    db.refresh(course)

    log_audit(
        db=db,
        actor_id=actor.id,
        action="COURSE_CREATE",
        entity_type="courses",
        entity_id=course.id,
        meta={"code": course.code, "name": course.name, "professor_id": professor_id}
    )
    return course


def get_course(db: Session, course_id: int) -> Course:
    course = db.query(Course).filter(Course.id == course_id).first()
    if not course:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found")
    return course


def list_courses(
    db: Session,
    search: Optional[str] = None,
    department: Optional[str] = None,
    credits: Optional[int] = None,
    semester: Optional[str] = None,
    professor_id: Optional[int] = None,
    exclude_enrolled_for: Optional[int] = None,
    skip: int = 0,
    limit: int = 100,
) -> Tuple[List[Course], int]:
    """
    Catalog listing with search and filters

    Args:
        search: case-insensitive match on name, code or department
        exclude_enrolled_for: hide courses this user is already enrolled in

    Returns:
        (courses ordered by code, total before paging)
    """
    query = db.query(Course)

    if search:
        pattern = f"%{search.lower()}%"
        query = query.filter(or_(
            func.lower(Course.name).like(pattern),
            func.lower(Course.code).like(pattern),
            func.lower(Course.department).like(pattern),
        ))
    if department:
        query = query.filter(Course.department == department)
    if credits is not None:
        query = query.filter(Course.credits == credits)
    if semester:
        query = query.filter(Course.semester == semester)
    if professor_id is not None:
        query = query.filter(Course.professor_id == professor_id)
    if exclude_enrolled_for is not None:
        enrolled = db.query(Enrollment.course_id).filter(Enrollment.user_id == exclude_enrolled_for)
        query = query.filter(Course.id.notin_(enrolled))

    total = query.count()
    courses = query.order_by(Course.code).offset(skip).limit(limit).all()
    return courses, total


def update_course(db: Session, course_id: int, course_data: CourseUpdate, actor: User) -> Course:
    course = get_managed_course(db, course_id, actor)

    changes = course_data.model_dump(exclude_unset=True)
    if changes.get("code") is not None:
        _ensure_unique_code(db, changes["code"], exclude_id=course.id)

    for field, value in changes.items():
        if value is not None or field in ("location", "description"):
            setattr(course, field, value)
    db.commit()
    db.refresh(course)

    log_audit(
        db=db,
        actor_id=actor.id,
        action="COURSE_UPDATE",
        entity_type="courses",
        entity_id=course.id,
        meta=changes
    )
    return course


def delete_course(db: Session, course_id: int, actor: User) -> None:
    """Delete a course with its enrollments and attendance windows. Courses with records or grades stay."""
    course = get_managed_course(db, course_id, actor)
    if course.attendance_records or course.grades:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Course has attendance records or grades and cannot be deleted"
        )
    code = course.code
    db.delete(course)
    db.commit()

    log_audit(
        db=db,
        actor_id=actor.id,
        action="COURSE_DELETE",
        entity_type="courses",
        entity_id=course_id,
        meta={"code": code}
    )


def enrolled_count(db: Session, course_id: int) -> int:
    return db.query(Enrollment).filter(Enrollment.course_id == course_id).count()


def enroll(db: Session, course_id: int, student: User) -> Enrollment:
    """
    Enroll a student in a course

    Raises:
        HTTPException: 404 unknown course, 400 already enrolled or course full
    """
    course = get_course(db, course_id)

    existing = db.query(Enrollment).filter(
        Enrollment.user_id == student.id,
        Enrollment.course_id == course.id
    ).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You are already enrolled in this course."
        )

    if enrolled_count(db, course.id) >= course.capacity:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="This course is at full capacity."
        )

    enrollment = Enrollment(user_id=student.id, course_id=course.id, enrolled_at=now_utc())
    db.add(enrollment)
    db.commit()
    db.refresh(enrollment)

    create_notification(
        db,
        user_id=student.id,
        title="Course Enrollment Successful",
        message=f"You have successfully enrolled in {course.name}",
        type=NotificationType.ENROLLMENT,
    )
    log_audit(
        db=db,
        actor_id=student.id,
        action="ENROLLMENT_CREATE",
        entity_type="enrollments",
        entity_id=enrollment.id,
        meta={"course_id": course.id, "code": course.code}
    )
    return enrollment


def drop(db: Session, course_id: int, student: User) -> None:
    enrollment = db.query(Enrollment).filter(
        Enrollment.user_id == student.id,
        Enrollment.course_id == course_id
    ).first()
    if not enrollment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="You are not enrolled in this course"
        )
    enrollment_id = enrollment.id
    db.delete(enrollment)
    db.commit()

    log_audit(
        db=db,
        actor_id=student.id,
        action="ENROLLMENT_DROP",
        entity_type="enrollments",
        entity_id=enrollment_id,
        meta={"course_id": course_id}
    )


def list_my_enrollments(db: Session, user_id: int) -> List[Enrollment]:
    return (
        db.query(Enrollment)
        .filter(Enrollment.user_id == user_id)
        .order_by(Enrollment.enrolled_at.desc(), Enrollment.id.desc())
        .all()
    )


def list_roster(db: Session, course_id: int, actor: User) -> List[Enrollment]:
    """Enrollments of a course for its professor (or an admin)"""
    course = get_managed_course(db, course_id, actor)
    return (
        db.query(Enrollment)
        .filter(Enrollment.course_id == course.id)
        .order_by(Enrollment.enrolled_at, Enrollment.id)
        .all()
    )
