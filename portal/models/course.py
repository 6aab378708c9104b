"""
Course and enrollment models
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from portal.db.base import Base


class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    code = Column(String, unique=True, nullable=False, index=True)
    semester = Column(String, nullable=False)
    professor_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    credits = Column(Integer, nullable=False, default=3)
    department = Column(String, nullable=False)
    capacity = Column(Integer, nullable=False, default=30)
    location = Column(String, nullable=True)
    session_times = Column(String, nullable=False, default="")  # free text, e.g. "Sun/Tue 09:00-10:15"
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)

    __table_args__ = (
        CheckConstraint("credits >= 0", name="ck_courses_credits_non_negative"),
        CheckConstraint("capacity >= 0", name="ck_courses_capacity_non_negative"),
    )

    professor = relationship("User", backref="taught_courses")
    enrollments = relationship("Enrollment", back_populates="course", cascade="all, delete-orphan")
    attendance_windows = relationship("AttendanceWindow", back_populates="course", cascade="all, delete-orphan")


class Enrollment(Base):
    __tablename__ = "enrollments"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)
    enrolled_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_enrollments_user_course"),
    )

    user = relationship("User", backref="enrollments")
    course = relationship("Course", back_populates="enrollments")
