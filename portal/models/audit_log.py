"""
Audit log model
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
from portal.db.base import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    actor_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    action = Column(String, nullable=False)  # e.g. "ATTENDANCE_CHECK_IN", "COURSE_CREATE"
    entity_type = Column(String, nullable=False)  # e.g. "attendance_records", "courses"
    entity_id = Column(Integer, nullable=True)
    meta_json = Column(JSON, nullable=True)
    # Set explicitly by log_audit; SQLite server defaults drop the timezone
    created_at = Column(DateTime(timezone=True), nullable=False)
