"""
Tests for grade posting and the grade report
"""
import pytest
from fastapi import status

from portal.models.course import Course, Enrollment
from portal.models.notification import Notification
from portal.services.grade_service import letter_grade


@pytest.mark.parametrize("score,letter", [
    (100, "A"), (90, "A"), (89.9, "B"), (80, "B"), (70, "C"), (60, "D"), (59.99, "F"), (0, "F"),
])
def test_letter_grade(score, letter):
    assert letter_grade(score) == letter


def test_professor_posts_grade_and_student_is_notified(client, db, faculty, student, course, enrolled, auth_headers):
    response = client.post(
        f"/api/v1/grades/courses/{course.id}",
        json={"user_id": student.id, "final_grade": 87.5},
        headers=auth_headers(faculty.email),
    )

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["final_grade"] == 87.5
    assert response.json()["letter_grade"] == "B"
    notification = db.query(Notification).filter(Notification.user_id == student.id).one()
    assert notification.type == "grade"


def test_reposting_replaces_the_grade(client, db, faculty, student, course, enrolled, auth_headers):
    headers = auth_headers(faculty.email)
    client.post(f"/api/v1/grades/courses/{course.id}", json={"user_id": student.id, "final_grade": 70}, headers=headers)
    response = client.put(
        f"/api/v1/grades/courses/{course.id}/students/{student.id}",
        json={"final_grade": 91},
        headers=headers,
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["letter_grade"] == "A"

    rows = client.get(f"/api/v1/grades/courses/{course.id}", headers=headers).json()
    assert len(rows) == 1
    assert rows[0]["grade"]["final_grade"] == 91


@pytest.mark.parametrize("value", [-1, 100.5])
def test_grade_must_be_between_0_and_100(client, db, faculty, student, course, enrolled, auth_headers, value):
    response = client.post(
        f"/api/v1/grades/courses/{course.id}",
        json={"user_id": student.id, "final_grade": value},
        headers=auth_headers(faculty.email),
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_grade_requires_enrollment(client, db, faculty, student, course, auth_headers):
    response = client.post(
        f"/api/v1/grades/courses/{course.id}",
        json={"user_id": student.id, "final_grade": 80},
        headers=auth_headers(faculty.email),
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_students_cannot_post_grades(client, db, student, course, enrolled, auth_headers):
    response = client.post(
        f"/api/v1/grades/courses/{course.id}",
        json={"user_id": student.id, "final_grade": 100},
        headers=auth_headers(student.email),
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_grade_report_gpa_is_credit_weighted(client, db, faculty, student, course, enrolled, auth_headers):
    lab = Course(
        name="Physics Lab",
        code="PHYS101L",
        semester="Fall 2026",
        professor_id=faculty.id,
        credits=1,
        department="Physics",
        capacity=20,
    )
    db.add(lab)
    db.commit()
    db.add(Enrollment(user_id=student.id, course_id=lab.id))
    db.commit()

    headers = auth_headers(faculty.email)
    client.post(f"/api/v1/grades/courses/{course.id}", json={"user_id": student.id, "final_grade": 90}, headers=headers)
    client.post(f"/api/v1/grades/courses/{lab.id}", json={"user_id": student.id, "final_grade": 70}, headers=headers)

    response = client.get("/api/v1/grades/report", headers=auth_headers(student.email))

    assert response.status_code == status.HTTP_200_OK
    report = response.json()
    # (90 * 3 + 70 * 1) / 4
    assert report["gpa"] == 85.0
    assert report["total_credits"] == 4
    assert report["completed_courses"] == 2
    assert {item["course_code"]: item["letter_grade"] for item in report["items"]} == {"CS210": "A", "PHYS101L": "C"}


def test_empty_grade_report(client, db, student, auth_headers):
    report = client.get("/api/v1/grades/report", headers=auth_headers(student.email)).json()
    assert report["gpa"] == 0.0
    assert report["items"] == []


def test_delete_grade(client, db, faculty, student, course, enrolled, auth_headers):
    headers = auth_headers(faculty.email)
    client.post(f"/api/v1/grades/courses/{course.id}", json={"user_id": student.id, "final_grade": 65}, headers=headers)
    url = f"/api/v1/grades/courses/{course.id}/students/{student.id}"
    assert client.delete(url, headers=headers).status_code == status.HTTP_204_NO_CONTENT
    assert client.delete(url, headers=headers).status_code == status.HTTP_404_NOT_FOUND
