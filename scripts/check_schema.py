#!/usr/bin/env python3
"""
Check that the portal tables and the one-check-in-per-day index exist.
Uses the same DATABASE_URL as the app (from portal.core.config.settings).
Run from project root: python scripts/check_schema.py
"""
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import create_engine, inspect

from portal.core.config import settings

REQUIRED_TABLES = [
    "users",
    "courses",
    "enrollments",
    "attendance_records",
    "attendance_windows",
    "grades",
    "notifications",
    "contact_messages",
    "audit_logs",
]
DAILY_INDEX = "uq_attendance_records_user_course_day"


def main() -> int:
    url = settings.DATABASE_URL
    print(f"DATABASE_URL: {url if url.startswith('sqlite') else url.split('@')[-1]}")
    engine = create_engine(url)
    inspector = inspect(engine)

    existing = set(inspector.get_table_names())
    missing = [t for t in REQUIRED_TABLES if t not in existing]
    for table in REQUIRED_TABLES:
        print(f"{table:20} {'exists' if table in existing else 'MISSING'}")

    has_index = "attendance_records" in existing and any(
        ix["name"] == DAILY_INDEX for ix in inspector.get_indexes("attendance_records")
    )
    print(f"{DAILY_INDEX}: {'exists' if has_index else 'MISSING'}")

    if missing or not has_index:
        print("Run: alembic upgrade head (from the project root)", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
