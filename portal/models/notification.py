"""
Notification model. Rows are fetched by clients; there is no push channel.
"""
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
from portal.db.base import Base


class NotificationType(str, enum.Enum):
    ATTENDANCE = "attendance"
    GRADE = "grade"
    ENROLLMENT = "enrollment"
    REMINDER = "reminder"


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String, nullable=False)
    read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)

    user = relationship("User", backref="notifications")
