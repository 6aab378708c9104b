"""
Tests for course attendance summaries and low attendance alerts
"""
from datetime import date, datetime, timezone

import pytest
from fastapi import status

from portal.models.attendance import AttendanceRecord
from portal.models.course import Enrollment
from portal.models.notification import Notification
from portal.services.attendance_service import attendance_band, attendance_rate
from portal.tests.conftest import CAMPUS_LAT, CAMPUS_LNG


def _record(db, user, course, day, status_value):
    record = AttendanceRecord(
        user_id=user.id,
        course_id=course.id,
        attendance_date=day,
        checked_in_at=datetime(day.year, day.month, day.day, 6, 0, tzinfo=timezone.utc),
        latitude=CAMPUS_LAT,
        longitude=CAMPUS_LNG,
        distance_meters=0.0,
        status=status_value,
    )
    db.add(record)
    db.commit()
    return record


@pytest.mark.parametrize("present,late,total,expected", [
    (0, 0, 0, 0.0),
    (3, 0, 4, 75.0),
    (1, 1, 3, 67.0),
    (1, 0, 8, 13.0),  # 12.5 rounds half up
    (9, 1, 10, 100.0),
])
def test_attendance_rate(present, late, total, expected):
    assert attendance_rate(present, late, total) == expected


@pytest.mark.parametrize("rate,band", [(0, "low"), (74.9, "low"), (75, "medium"), (89, "medium"), (90, "high")])
def test_attendance_band(rate, band):
    assert attendance_band(rate) == band


@pytest.fixture
def second_student(db, make_user, course):
    other = make_user("second@myisu.edu.sa", full_name="Ali Second")
    db.add(Enrollment(user_id=other.id, course_id=course.id))
    db.commit()
    return other


def test_course_summary_tallies_each_enrolled_student(
    client, db, faculty, student, course, enrolled, second_student, auth_headers
):
    _record(db, student, course, date(2026, 10, 4), "present")
    _record(db, student, course, date(2026, 10, 6), "late")
    _record(db, student, course, date(2026, 10, 11), "absent")
    _record(db, student, course, date(2026, 10, 13), "present")

    response = client.get(
        f"/api/v1/attendance/courses/{course.id}/summary",
        headers=auth_headers(faculty.email),
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["course_code"] == "CS210"
    rows = {row["user_id"]: row for row in data["students"]}
    assert rows[student.id]["present"] == 2
    assert rows[student.id]["late"] == 1
    assert rows[student.id]["absent"] == 1
    assert rows[student.id]["total"] == 4
    assert rows[student.id]["attendance_rate"] == 75.0
    assert rows[student.id]["band"] == "medium"
    assert rows[student.id]["last_attendance"] == "2026-10-13"
    assert rows[second_student.id]["total"] == 0
    assert rows[second_student.id]["attendance_rate"] == 0.0
    assert rows[second_student.id]["last_attendance"] is None


def test_course_summary_band_filter(client, db, faculty, student, course, enrolled, second_student, auth_headers):
    _record(db, student, course, date(2026, 10, 4), "present")

    response = client.get(
        f"/api/v1/attendance/courses/{course.id}/summary",
        params={"band": "low"},
        headers=auth_headers(faculty.email),
    )
    assert [row["user_id"] for row in response.json()["students"]] == [second_student.id]


def test_course_summary_is_for_the_professor(client, db, student, course, enrolled, auth_headers):
    response = client.get(
        f"/api/v1/attendance/courses/{course.id}/summary",
        headers=auth_headers(student.email),
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_low_attendance_alert_notifies_student(client, db, faculty, student, course, enrolled, auth_headers):
    _record(db, student, course, date(2026, 10, 4), "present")
    _record(db, student, course, date(2026, 10, 6), "absent")

    response = client.post(
        f"/api/v1/attendance/courses/{course.id}/alerts",
        json={"user_id": student.id},
        headers=auth_headers(faculty.email),
    )

    assert response.status_code == status.HTTP_201_CREATED
    notification = db.query(Notification).filter(Notification.user_id == student.id).one()
    assert notification.title == "Low Attendance Warning"
    assert notification.type == "attendance"
    assert notification.message.startswith("Your attendance in Data Structures is 50%.")


def test_low_attendance_alert_requires_enrollment(client, db, faculty, course, make_user, auth_headers):
    outsider = make_user("outsider@myisu.edu.sa")
    response = client.post(
        f"/api/v1/attendance/courses/{course.id}/alerts",
        json={"user_id": outsider.id},
        headers=auth_headers(faculty.email),
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND
