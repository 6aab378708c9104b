"""
Pytest configuration and fixtures
"""
import os

# Settings are read at import time; tests never touch a real database
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-the-portal-test-suite")

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from portal.main import app
from portal.db.base import Base
from portal.core.deps import get_db, get_clock
from portal.core.security import hash_password
from portal.models import User, Role, Course, Enrollment  # noqa: F401  (registers every table)

CAMPUS_TZ = ZoneInfo("Asia/Riyadh")
CAMPUS_LAT = 24.552041628310768
CAMPUS_LNG = 46.684321294327596

# Use in-memory SQLite for testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


# Enable foreign keys for SQLite
@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def campus_time(hour: int, minute: int, second: int = 0, year: int = 2026, month: int = 10, day: int = 18) -> datetime:
    """A moment on the campus wall clock. 2026-10-18 is a Sunday."""
    return datetime(year, month, day, hour, minute, second, tzinfo=CAMPUS_TZ)


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db):
    """Test client fixture with database override"""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def set_clock():
    """Pin the server clock used by check-in endpoints: set_clock(campus_time(8, 50))"""
    def _set(moment: datetime) -> None:
        app.dependency_overrides[get_clock] = lambda: (lambda: moment)
    yield _set
    app.dependency_overrides.pop(get_clock, None)


@pytest.fixture
def make_user(db):
    """Factory creating an active user with password 'testpass123'"""
    def _make(email: str, role: Role = Role.STUDENT, full_name: str = "Test User", **fields) -> User:
        fields.setdefault("active", True)
        user = User(
            email=email,
            password_hash=hash_password("testpass123"),
            role=role.value,
            full_name=full_name,
            **fields,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def auth_headers(client):
    """Factory returning Authorization headers for a user created with make_user"""
    def _headers(email: str, password: str = "testpass123") -> dict:
        response = client.post("/api/v1/auth/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}
    return _headers


@pytest.fixture
def student(make_user):
    return make_user("student@myisu.edu.sa", Role.STUDENT, "Sara Student", student_id="441100200")


@pytest.fixture
def faculty(make_user):
    return make_user("faculty@myisu.edu.sa", Role.FACULTY, "Fahad Faculty", department="Computer Science")


@pytest.fixture
def admin(make_user):
    return make_user("admin@myisu.edu.sa", Role.ADMIN, "Portal Admin")


@pytest.fixture
def course(db, faculty):
    course = Course(
        name="Data Structures",
        code="CS210",
        semester="Fall 2026",
        professor_id=faculty.id,
        credits=3,
        department="Computer Science",
        capacity=2,
        session_times="Sun/Tue 09:00-10:15",
    )
    db.add(course)
    db.commit()
    db.refresh(course)
    return course


@pytest.fixture
def enrolled(db, student, course):
    enrollment = Enrollment(user_id=student.id, course_id=course.id)
    db.add(enrollment)
    db.commit()
    db.refresh(enrollment)
    return enrollment
