"""
Tests for the attendance check-in endpoints
"""
from datetime import time

import pytest
from fastapi import status
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from portal.core.config import settings
from portal.models.attendance import AttendanceRecord, AttendanceWindow
from portal.models.audit_log import AuditLog
from portal.services import attendance_service
from portal.tests.conftest import CAMPUS_LAT, CAMPUS_LNG, campus_time

CHECK_IN_URL = "/api/v1/attendance/check-in"


def _at_campus(**extra):
    return {"lat": CAMPUS_LAT, "lng": CAMPUS_LNG, "accuracy": 12.0, **extra}


def _record_count(db: Session) -> int:
    return db.query(AttendanceRecord).count()


def test_check_in_at_campus_at_0850_is_present(client, db, student, auth_headers, set_clock):
    set_clock(campus_time(8, 50))
    response = client.post(CHECK_IN_URL, json=_at_campus(), headers=auth_headers(student.email))

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["decision"]["accepted"] is True
    assert data["decision"]["status"] == "present"
    assert data["decision"]["message"] == "Successfully checked in! Status: Present"
    assert data["record"]["user_id"] == student.id
    assert data["record"]["course_id"] is None
    assert data["record"]["attendance_date"] == "2026-10-18"
    assert data["record"]["checked_in_at"] == "2026-10-18T08:50:00+03:00"
    assert data["record"]["latitude"] == CAMPUS_LAT
    assert data["record"]["longitude"] == CAMPUS_LNG
    assert data["record"]["window_label"] == "morning"
    assert _record_count(db) == 1

    audit = db.query(AuditLog).filter(AuditLog.action == "ATTENDANCE_CHECK_IN").one()
    assert audit.actor_id == student.id


def test_check_in_at_0910_is_late(client, db, student, auth_headers, set_clock):
    set_clock(campus_time(9, 10))
    response = client.post(CHECK_IN_URL, json=_at_campus(), headers=auth_headers(student.email))

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["record"]["status"] == "late"


def test_check_in_1000m_away_is_rejected_without_writing(client, db, student, auth_headers, set_clock):
    set_clock(campus_time(8, 50))
    response = client.post(
        CHECK_IN_URL,
        json={"lat": CAMPUS_LAT + 0.0089932, "lng": CAMPUS_LNG},
        headers=auth_headers(student.email),
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN
    detail = response.json()["detail"]
    assert detail["reason"] == "OUTSIDE_RADIUS"
    assert round(detail["distance_meters"]) == 1000
    assert detail["required_meters"] == 500
    assert detail["meters_over_limit"] == 500
    assert "You are 1000m away (500m over the limit)" in detail["message"]
    assert _record_count(db) == 0


@pytest.mark.parametrize("hour,minute", [(10, 0), (14, 20)])
def test_check_in_outside_window_is_rejected(client, db, student, auth_headers, set_clock, hour, minute):
    set_clock(campus_time(hour, minute))
    response = client.post(CHECK_IN_URL, json=_at_campus(), headers=auth_headers(student.email))

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["detail"]["reason"] == "OUTSIDE_WINDOW"
    assert _record_count(db) == 0


def test_second_check_in_same_day_is_rejected(client, db, student, auth_headers, set_clock):
    headers = auth_headers(student.email)
    set_clock(campus_time(8, 50))
    assert client.post(CHECK_IN_URL, json=_at_campus(), headers=headers).status_code == status.HTTP_201_CREATED

    # afternoon window, still the same campus day
    set_clock(campus_time(13, 50))
    response = client.post(CHECK_IN_URL, json=_at_campus(), headers=headers)

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["detail"]["reason"] == "ALREADY_CHECKED_IN"
    assert response.json()["detail"]["message"] == "You have already checked in today."
    assert _record_count(db) == 1


def test_next_day_check_in_is_allowed(client, db, student, auth_headers, set_clock):
    headers = auth_headers(student.email)
    set_clock(campus_time(8, 50))
    client.post(CHECK_IN_URL, json=_at_campus(), headers=headers)
    set_clock(campus_time(8, 50, day=19))
    response = client.post(CHECK_IN_URL, json=_at_campus(), headers=headers)

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["record"]["attendance_date"] == "2026-10-19"


def test_location_error_is_reported_with_sub_reason(client, db, student, auth_headers, set_clock):
    set_clock(campus_time(8, 50))
    response = client.post(
        CHECK_IN_URL,
        json={"location_error": "permission_denied"},
        headers=auth_headers(student.email),
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    detail = response.json()["detail"]
    assert detail["reason"] == "LOCATION_UNAVAILABLE"
    assert detail["location_state"] == "permission_denied"
    assert _record_count(db) == 0


def test_missing_coordinates_are_pending(client, db, student, auth_headers, set_clock):
    set_clock(campus_time(8, 50))
    response = client.post(CHECK_IN_URL, json={}, headers=auth_headers(student.email))

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"]["location_state"] == "pending"


def test_stale_reading_times_out(client, db, student, auth_headers, set_clock):
    set_clock(campus_time(8, 50))
    response = client.post(
        CHECK_IN_URL,
        json=_at_campus(captured_at=campus_time(8, 48).isoformat()),
        headers=auth_headers(student.email),
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"]["location_state"] == "timeout"


def test_half_a_coordinate_pair_is_invalid(client, db, student, auth_headers):
    response = client.post(CHECK_IN_URL, json={"lat": CAMPUS_LAT}, headers=auth_headers(student.email))
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_check_in_requires_auth(client, db):
    response = client.post(CHECK_IN_URL, json=_at_campus())
    assert response.status_code in [status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN]


def test_lost_race_on_unique_index_is_persistence_failed(
    client, db, student, auth_headers, set_clock, monkeypatch
):
    headers = auth_headers(student.email)
    set_clock(campus_time(8, 50))
    assert client.post(CHECK_IN_URL, json=_at_campus(), headers=headers).status_code == status.HTTP_201_CREATED

    # Simulate a concurrent request that passed the duplicate check before the first write landed
    monkeypatch.setattr(attendance_service, "has_record_for_day", lambda *args: False)
    response = client.post(CHECK_IN_URL, json=_at_campus(), headers=headers)

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = response.json()["detail"]
    assert detail["reason"] == "PERSISTENCE_FAILED"
    assert detail["message"] == "An error occurred while checking in. Please try again."
    assert _record_count(db) == 1


def test_failed_audit_write_leaves_no_record(client, db, student, auth_headers, set_clock, monkeypatch):
    def failing_audit(*args, **kwargs):
        raise OperationalError("INSERT INTO audit_logs", {}, Exception("audit table locked"))

    monkeypatch.setattr(attendance_service, "log_audit", failing_audit)
    set_clock(campus_time(8, 50))
    response = client.post(CHECK_IN_URL, json=_at_campus(), headers=auth_headers(student.email))

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = response.json()["detail"]
    assert detail["reason"] == "PERSISTENCE_FAILED"
    assert detail["message"] == "An error occurred while checking in. Please try again."
    assert "audit table locked" not in response.text
    assert _record_count(db) == 0
    assert db.query(AuditLog).filter(AuditLog.action == "ATTENDANCE_CHECK_IN").count() == 0

    # nothing half-written blocks the retry
    monkeypatch.undo()
    retry = client.post(CHECK_IN_URL, json=_at_campus(), headers=auth_headers(student.email))
    assert retry.status_code == status.HTTP_201_CREATED


def test_course_check_in_is_separate_from_campus_check_in(
    client, db, student, course, enrolled, auth_headers, set_clock
):
    headers = auth_headers(student.email)
    set_clock(campus_time(8, 50))
    assert client.post(CHECK_IN_URL, json=_at_campus(), headers=headers).status_code == status.HTTP_201_CREATED
    response = client.post(CHECK_IN_URL, json=_at_campus(course_id=course.id), headers=headers)

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["record"]["course_id"] == course.id
    assert _record_count(db) == 2


def test_course_check_in_requires_enrollment(client, db, student, course, auth_headers, set_clock):
    set_clock(campus_time(8, 50))
    response = client.post(CHECK_IN_URL, json=_at_campus(course_id=course.id), headers=auth_headers(student.email))
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["detail"] == "You are not enrolled in this course"


class TestCourseWindowStrategy:
    @pytest.fixture(autouse=True)
    def course_strategy(self, monkeypatch):
        monkeypatch.setattr(settings, "CHECKIN_WINDOW_STRATEGY", "course")

    @pytest.fixture
    def sunday_window(self, db, course):
        window = AttendanceWindow(
            course_id=course.id,
            day_of_week=0,
            start_time=time(9, 0),
            end_time=time(10, 0),
            grace_period_minutes=15,
        )
        db.add(window)
        db.commit()
        return window

    def test_uses_course_windows(self, client, db, student, course, enrolled, sunday_window, auth_headers, set_clock):
        set_clock(campus_time(9, 30))
        response = client.post(CHECK_IN_URL, json=_at_campus(course_id=course.id), headers=auth_headers(student.email))

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["record"]["status"] == "late"
        assert response.json()["record"]["window_label"] == "Sunday 09:00-10:00"

    def test_fixed_window_time_is_outside_course_window(
        self, client, db, student, course, enrolled, sunday_window, auth_headers, set_clock
    ):
        set_clock(campus_time(8, 50))
        response = client.post(CHECK_IN_URL, json=_at_campus(course_id=course.id), headers=auth_headers(student.email))

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["detail"]["reason"] == "OUTSIDE_WINDOW"
        assert "Sunday 09:00-10:00" in response.json()["detail"]["message"]

    def test_course_is_required(self, client, db, student, auth_headers, set_clock):
        set_clock(campus_time(9, 30))
        response = client.post(CHECK_IN_URL, json=_at_campus(), headers=auth_headers(student.email))
        assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_preview_does_not_write(client, db, student, auth_headers, set_clock):
    set_clock(campus_time(8, 50))
    response = client.post(
        "/api/v1/attendance/check-in/preview",
        json=_at_campus(),
        headers=auth_headers(student.email),
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["accepted"] is True
    assert response.json()["status"] == "present"
    assert _record_count(db) == 0


def test_preview_returns_rejections_as_body(client, db, student, auth_headers, set_clock):
    set_clock(campus_time(10, 0))
    response = client.post(
        "/api/v1/attendance/check-in/preview",
        json=_at_campus(),
        headers=auth_headers(student.email),
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["reason"] == "OUTSIDE_WINDOW"


def test_today_and_my_list_own_records(client, db, student, make_user, auth_headers, set_clock):
    other = make_user("other@myisu.edu.sa")
    set_clock(campus_time(8, 50))
    client.post(CHECK_IN_URL, json=_at_campus(), headers=auth_headers(student.email))
    client.post(CHECK_IN_URL, json=_at_campus(), headers=auth_headers(other.email))

    headers = auth_headers(student.email)
    today = client.get("/api/v1/attendance/today", headers=headers)
    assert today.status_code == status.HTTP_200_OK
    assert [r["user_id"] for r in today.json()] == [student.id]

    my = client.get("/api/v1/attendance/my", params={"from": "2026-10-01", "to": "2026-10-31"}, headers=headers)
    assert my.json()["total"] == 1

    empty = client.get("/api/v1/attendance/my", params={"from": "2026-11-01"}, headers=headers)
    assert empty.json()["total"] == 0


def test_campus_info(client, db, student, auth_headers):
    response = client.get("/api/v1/attendance/campus", headers=auth_headers(student.email))
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["latitude"] == CAMPUS_LAT
    assert data["allowed_radius_meters"] == 500.0
    assert data["timezone"] == "Asia/Riyadh"
    assert [w["label"] for w in data["windows"]] == ["morning", "afternoon"]
