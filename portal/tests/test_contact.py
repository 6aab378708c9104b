"""
Tests for the contact form
"""
from fastapi import status

from portal.models.contact_message import ContactMessage

CONTACT_URL = "/api/v1/contact"


def _message(**overrides):
    return {
        "full_name": "Visiting Parent",
        "email": "Parent@Example.com",
        "message": "When does registration for the spring semester open?",
        **overrides,
    }


def test_anonymous_visitor_can_send_a_message(client, db):
    response = client.post(CONTACT_URL, json=_message())

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["user_id"] is None
    assert response.json()["email"] == "parent@example.com"
    stored = db.query(ContactMessage).one()
    assert stored.full_name == "Visiting Parent"


def test_signed_in_sender_is_linked(client, db, student, auth_headers):
    response = client.post(
        CONTACT_URL,
        json=_message(full_name="Sara Student", email=student.email),
        headers=auth_headers(student.email),
    )

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["user_id"] == student.id


def test_invalid_token_is_rejected_even_though_login_is_optional(client, db):
    response = client.post(CONTACT_URL, json=_message(), headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert db.query(ContactMessage).count() == 0


def test_message_needs_valid_email_and_text(client, db):
    assert client.post(CONTACT_URL, json=_message(email="not-an-email")).status_code == 422
    assert client.post(CONTACT_URL, json=_message(message="")).status_code == 422
    assert db.query(ContactMessage).count() == 0


def test_only_admins_read_messages(client, db, admin, faculty, auth_headers):
    client.post(CONTACT_URL, json=_message())
    client.post(CONTACT_URL, json=_message(full_name="Second Sender", email="second@example.com"))

    assert client.get(CONTACT_URL, headers=auth_headers(faculty.email)).status_code == status.HTTP_403_FORBIDDEN
    assert client.get(CONTACT_URL).status_code in [status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN]

    listing = client.get(CONTACT_URL, headers=auth_headers(admin.email)).json()
    assert listing["total"] == 2
    assert [m["full_name"] for m in listing["items"]] == ["Second Sender", "Visiting Parent"]
