"""
Attendance models: append-only check-in records and faculty-managed attendance windows.
"""
from sqlalchemy import (
    Column, Integer, Float, String, Date, Time, DateTime, ForeignKey,
    CheckConstraint, Index,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
from portal.db.base import Base


class AttendanceStatus(str, enum.Enum):
    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"


class AttendanceRecord(Base):
    """One accepted check-in. Rows are written once and never updated."""
    __tablename__ = "attendance_records"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=True, index=True)
    attendance_date = Column(Date, nullable=False, index=True)  # campus-local calendar day
    checked_in_at = Column(DateTime(timezone=True), nullable=False)  # server UTC instant
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    accuracy_meters = Column(Float, nullable=True)
    distance_meters = Column(Float, nullable=False)
    status = Column(String, nullable=False)
    window_label = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)

    user = relationship("User", backref="attendance_records")
    course = relationship("Course", backref="attendance_records")


# One record per user per course (or no course) per campus day. NULL course ids
# would never collide in a plain unique constraint, hence the coalesce.
Index(
    "uq_attendance_records_user_course_day",
    AttendanceRecord.user_id,
    func.coalesce(AttendanceRecord.course_id, 0),
    AttendanceRecord.attendance_date,
    unique=True,
)


class AttendanceWindow(Base):
    """Recurring weekly check-in window for a course. day_of_week: 0=Sunday .. 6=Saturday."""
    __tablename__ = "attendance_windows"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    grace_period_minutes = Column(Integer, nullable=False, default=15)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)

    __table_args__ = (
        CheckConstraint("day_of_week >= 0 AND day_of_week <= 6", name="ck_attendance_windows_day_of_week"),
        CheckConstraint("start_time < end_time", name="ck_attendance_windows_start_before_end"),
        CheckConstraint("grace_period_minutes >= 0", name="ck_attendance_windows_grace_non_negative"),
    )

    course = relationship("Course", back_populates="attendance_windows")
