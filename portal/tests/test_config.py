"""
Tests for settings validation
"""
import pytest
from pydantic import ValidationError

from portal.core.config import Settings

REQUIRED = {"DATABASE_URL": "sqlite:///:memory:", "JWT_SECRET_KEY": "k" * 40}


def _settings(**overrides) -> Settings:
    return Settings(**{**REQUIRED, **overrides})


def test_defaults():
    settings = _settings()
    assert settings.CHECKIN_WINDOW_STRATEGY == "fixed"
    assert settings.CAMPUS_RADIUS_METERS == 500.0
    assert [w.label for w in settings.get_checkin_windows()] == ["morning", "afternoon"]


def test_campus_location():
    campus = _settings(CAMPUS_LATITUDE=21.5, CAMPUS_LONGITUDE=39.2, CAMPUS_RADIUS_METERS=250).get_campus_location()
    assert campus.point.latitude == 21.5
    assert campus.point.longitude == 39.2
    assert campus.allowed_radius_meters == 250


@pytest.mark.parametrize("field,value", [
    ("CHECKIN_WINDOWS", "08:45-09:00"),
    ("CHECKIN_WINDOWS", "09:15-09:00-08:45"),
    ("CHECKIN_WINDOWS", "25:00-25:10-25:20"),
    ("CHECKIN_WINDOW_STRATEGY", "weekly"),
    ("CAMPUS_TIMEZONE", "Mars/Olympus_Mons"),
    ("CAMPUS_RADIUS_METERS", 0),
    ("APP_ENV", "dev"),
])
def test_invalid_values_are_rejected(field, value):
    with pytest.raises(ValidationError):
        _settings(**{field: value})


def test_strategy_is_case_insensitive():
    assert _settings(CHECKIN_WINDOW_STRATEGY="Course").CHECKIN_WINDOW_STRATEGY == "course"


def test_production_requires_strong_secret_and_origins():
    with pytest.raises(ValueError, match="JWT_SECRET_KEY"):
        _settings(APP_ENV="prod", JWT_SECRET_KEY="short").validate_production()
    with pytest.raises(ValueError, match="ALLOWED_ORIGINS"):
        _settings(APP_ENV="prod").validate_production()
    _settings(APP_ENV="prod", ALLOWED_ORIGINS="https://portal.myisu.edu.sa").validate_production()


def test_allowed_origins_list():
    settings = _settings(ALLOWED_ORIGINS="https://a.example, https://b.example,")
    assert settings.get_allowed_origins_list() == ["https://a.example", "https://b.example"]
