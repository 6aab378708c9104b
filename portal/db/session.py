"""
Database session management
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from portal.core.config import settings
from portal.db.base import Base

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    echo=False
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def create_sqlite_schema() -> None:
    """Create all tables for local SQLite databases; PostgreSQL is migrated with Alembic."""
    if settings.DATABASE_URL.startswith("sqlite"):
        import portal.models  # noqa: F401  (register every table on Base.metadata)
        Base.metadata.create_all(bind=engine)
