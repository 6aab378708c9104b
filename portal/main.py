"""
MYISU portal backend - main application entry point
"""
import logging
from urllib.parse import urlparse, urlunparse

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import OperationalError

from portal.api.router import api_router
from portal.core.config import settings
from portal.core.errors import (
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler,
    operational_error_handler,
)
from portal.core.logging import setup_logging
from portal.db.session import SessionLocal, create_sqlite_schema
from portal.services.user_service import bootstrap_initial_admin

# Setup logging first
setup_logging()
logger = logging.getLogger(__name__)


def _mask_database_url(url: str) -> str:
    """Mask password in DATABASE_URL for safe logging; show full path for sqlite."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return "***"
    if parsed.scheme.startswith("sqlite"):
        return url
    if parsed.password:
        netloc = f"{parsed.username}:****@{parsed.hostname or ''}"
        if parsed.port:
            netloc += f":{parsed.port}"
        return urlunparse(parsed._replace(netloc=netloc))
    return url


app = FastAPI(
    title="MYISU Portal Backend",
    description="Student information portal: courses, geofenced attendance check-in, grades and notifications",
    version=settings.VERSION or "1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(OperationalError, operational_error_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Include all API routes under /api/v1
app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
def startup_log_config() -> None:
    """Log DATABASE_URL at startup so it can be verified against Alembic."""
    logger.info("DATABASE_URL (app): %s", _mask_database_url(settings.DATABASE_URL))
    logger.info(
        "Check-in: campus=(%s, %s) radius=%sm tz=%s strategy=%s",
        settings.CAMPUS_LATITUDE, settings.CAMPUS_LONGITUDE, settings.CAMPUS_RADIUS_METERS,
        settings.CAMPUS_TIMEZONE, settings.CHECKIN_WINDOW_STRATEGY,
    )


@app.on_event("startup")
def startup_bootstrap() -> None:
    """
    Create SQLite tables for local runs, then make sure at least one admin exists.
    """
    create_sqlite_schema()
    db = SessionLocal()
    try:
        bootstrap_initial_admin(db)
    except OperationalError as e:
        db.rollback()
        if "no such table" in str(e).lower():
            logger.warning("Database tables not ready yet, skipping initial bootstrap")
        else:
            logger.error("Database error during admin bootstrap: %s", e)
    finally:
        db.close()
