"""
Grade service - final course grades, letter grades and GPA
"""
from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from typing import Dict, List, Optional
from portal.models.course import Course, Enrollment
from portal.models.grade import Grade
from portal.models.notification import NotificationType
from portal.models.user import User
from portal.services.attendance_window_service import get_managed_course
from portal.services.audit_service import log_audit
from portal.services.notification_service import create_notification
from portal.utils.datetime_utils import now_utc

# Lower bound (inclusive) of each letter, best first
LETTER_GRADES = (
    (90, "A"),
    (80, "B"),
    (70, "C"),
    (60, "D"),
)


def letter_grade(score: float) -> str:
    for floor, letter in LETTER_GRADES:
        if score >= floor:
            return letter
    return "F"


def calculate_gpa(grades: List[Grade]) -> float:
    """Credit-weighted mean of final grades, rounded to 2 decimals; 0 when there are no credits."""
    total_credits = sum(g.course.credits for g in grades)
    if not total_credits:
        return 0.0
    weighted = sum(g.final_grade * g.course.credits for g in grades)
    return round(weighted / total_credits, 2)


def _require_enrolled(db: Session, course_id: int, user_id: int) -> None:
    enrolled = db.query(Enrollment).filter(
        Enrollment.course_id == course_id,
        Enrollment.user_id == user_id
    ).first()
    if not enrolled:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Student is not enrolled in this course"
        )


def _get_grade(db: Session, course_id: int, user_id: int) -> Optional[Grade]:
    return db.query(Grade).filter(Grade.course_id == course_id, Grade.user_id == user_id).first()


def post_grade(db: Session, course_id: int, user_id: int, final_grade: float, actor: User) -> Grade:
    """
    Post or replace the final grade of an enrolled student

    Only the course's professor (or an admin) may post. The student is
    notified either way.
    """
    course = get_managed_course(db, course_id, actor)
    _require_enrolled(db, course.id, user_id)

    grade = _get_grade(db, course.id, user_id)
    action = "GRADE_UPDATE" if grade else "GRADE_POST"
    if grade is None:
        grade = Grade(user_id=user_id, course_id=course.id)
        db.add(grade)
    grade.final_grade = final_grade
    grade.posted_by = actor.id
    grade.posted_at = now_utc()
    db.commit()
    db.refresh(grade)

    create_notification(
        db,
        user_id=user_id,
        title="Grade Posted",
        message=f"Your final grade for {course.name} has been posted: {final_grade:g} ({letter_grade(final_grade)})",
        type=NotificationType.GRADE,
    )
    log_audit(
        db=db,
        actor_id=actor.id,
        action=action,
        entity_type="grades",
        entity_id=grade.id,
        meta={"course_id": course.id, "user_id": user_id, "final_grade": final_grade}
    )
    return grade


def delete_grade(db: Session, course_id: int, user_id: int, actor: User) -> None:
    course = get_managed_course(db, course_id, actor)
    grade = _get_grade(db, course.id, user_id)
    if not grade:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Grade not found")
    grade_id = grade.id
    db.delete(grade)
    db.commit()

    log_audit(
        db=db,
        actor_id=actor.id,
        action="GRADE_DELETE",
        entity_type="grades",
        entity_id=grade_id,
        meta={"course_id": course.id, "user_id": user_id}
    )


def list_course_grades(db: Session, course_id: int, actor: User) -> List[Dict]:
    """Every enrolled student of the course with their grade, or None when not posted yet"""
    course = get_managed_course(db, course_id, actor)
    grades = {g.user_id: g for g in db.query(Grade).filter(Grade.course_id == course.id).all()}
    rows = []
    for enrollment in sorted(course.enrollments, key=lambda e: e.id):
        student = enrollment.user
        rows.append({
            "user_id": student.id,
            "full_name": student.full_name,
            "email": student.email,
            "student_id": student.student_id,
            "grade": grades.get(student.id),
        })
    return rows


def grade_report(db: Session, user_id: int) -> Dict:
    """
    Transcript-style report for a student

    Returns:
        dict with items (grade + course details + letter), gpa, total_credits
        and completed_courses
    """
    grades = (
        db.query(Grade)
        .join(Course, Grade.course_id == Course.id)
        .filter(Grade.user_id == user_id)
        .order_by(Grade.posted_at.desc(), Grade.id.desc())
        .all()
    )
    items = [
        {
            "id": g.id,
            "user_id": g.user_id,
            "course_id": g.course_id,
            "final_grade": g.final_grade,
            "posted_at": g.posted_at,
            "course_name": g.course.name,
            "course_code": g.course.code,
            "credits": g.course.credits,
            "semester": g.course.semester,
            "department": g.course.department,
        }
        for g in grades
    ]
    return {
        "user_id": user_id,
        "items": items,
        "gpa": calculate_gpa(grades),
        "total_credits": sum(g.course.credits for g in grades),
        "completed_courses": len(grades),
    }
