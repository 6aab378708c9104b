"""
Tests for notification listing and read state
"""
from fastapi import status

from portal.models.notification import NotificationType
from portal.services.notification_service import create_notification


def test_list_mark_read_and_counts(client, db, student, make_user, auth_headers):
    other = make_user("other@myisu.edu.sa")
    first = create_notification(db, student.id, "Reminder", "Quiz on Sunday", NotificationType.REMINDER)
    create_notification(db, student.id, "Grade Posted", "Your grade is in", NotificationType.GRADE)
    create_notification(db, other.id, "Not yours", "Hidden", NotificationType.REMINDER)
    headers = auth_headers(student.email)

    listing = client.get("/api/v1/notifications", headers=headers).json()
    assert listing["total"] == 2
    assert listing["unread"] == 2

    response = client.post(f"/api/v1/notifications/{first.id}/read", headers=headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["read"] is True

    unread = client.get("/api/v1/notifications", params={"unread_only": True}, headers=headers).json()
    assert [n["title"] for n in unread["items"]] == ["Grade Posted"]
    assert client.get("/api/v1/notifications/unread-count", headers=headers).json() == {"unread": 1}

    assert client.post("/api/v1/notifications/read-all", headers=headers).json() == {"updated": 1}
    assert client.get("/api/v1/notifications/unread-count", headers=headers).json() == {"unread": 0}


def test_cannot_mark_someone_elses_notification(client, db, student, make_user, auth_headers):
    other = make_user("other@myisu.edu.sa")
    theirs = create_notification(db, other.id, "Private", "Not for you", NotificationType.REMINDER)

    response = client.post(f"/api/v1/notifications/{theirs.id}/read", headers=auth_headers(student.email))
    assert response.status_code == status.HTTP_404_NOT_FOUND
