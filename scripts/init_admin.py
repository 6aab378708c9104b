#!/usr/bin/env python3
"""
Create the initial admin account if none exists yet.
Uses INITIAL_ADMIN_EMAIL / INITIAL_ADMIN_PASSWORD and the app's DATABASE_URL.
Run from project root: python scripts/init_admin.py
"""
import sys
import os

# Ensure portal is importable when run as a file
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from portal.core.logging import setup_logging
from portal.db.session import SessionLocal
from portal.services.user_service import bootstrap_initial_admin


def main() -> int:
    setup_logging()
    db = SessionLocal()
    try:
        admin = bootstrap_initial_admin(db)
    finally:
        db.close()

    if admin is None:
        print("Admin user already exists (or INITIAL_ADMIN_EMAIL is taken), nothing to do")
        return 0
    print(f"Initial admin created: {admin.email}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
