"""
Grade endpoints: faculty post grades for their courses, students read their report
"""
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from portal.core.deps import get_db, get_current_user, require_roles
from portal.models.user import Role, User
from portal.schemas.grade import CourseGradeRow, GradeOut, GradePost, GradeReport, GradeUpdate
from portal.services.grade_service import delete_grade, grade_report, list_course_grades, post_grade

router = APIRouter()


@router.get("/report", response_model=GradeReport)
async def my_report_endpoint(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Own grades with letters, GPA and credits"""
    return grade_report(db, current_user.id)


@router.get("/report/{user_id}", response_model=GradeReport)
async def student_report_endpoint(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.ADMIN))
):
    return grade_report(db, user_id)


@router.get("/courses/{course_id}", response_model=List[CourseGradeRow])
async def course_grades_endpoint(
    course_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.FACULTY))
):
    """Enrolled students of the course with their grade so far"""
    rows = list_course_grades(db, course_id, current_user)
    return [
        CourseGradeRow(
            user_id=row["user_id"],
            full_name=row["full_name"],
            email=row["email"],
            student_id=row["student_id"],
            grade=GradeOut.model_validate(row["grade"]) if row["grade"] else None,
        )
        for row in rows
    ]


@router.post("/courses/{course_id}", response_model=GradeOut, status_code=201)
async def post_grade_endpoint(
    course_id: int,
    data: GradePost,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.FACULTY))
):
    """Post (or replace) the final grade of an enrolled student"""
    return GradeOut.model_validate(post_grade(db, course_id, data.user_id, data.final_grade, current_user))


@router.put("/courses/{course_id}/students/{user_id}", response_model=GradeOut)
async def update_grade_endpoint(
    course_id: int,
    user_id: int,
    data: GradeUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.FACULTY))
):
    return GradeOut.model_validate(post_grade(db, course_id, user_id, data.final_grade, current_user))


@router.delete("/courses/{course_id}/students/{user_id}", status_code=204)
async def delete_grade_endpoint(
    course_id: int,
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.FACULTY))
):
    delete_grade(db, course_id, user_id, current_user)
