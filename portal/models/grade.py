"""
Final course grade model
"""
from sqlalchemy import Column, Integer, Float, DateTime, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from portal.db.base import Base


class Grade(Base):
    __tablename__ = "grades"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)
    final_grade = Column(Float, nullable=False)  # 0-100
    posted_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    posted_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_grades_user_course"),
        CheckConstraint("final_grade >= 0 AND final_grade <= 100", name="ck_grades_final_grade_range"),
    )

    user = relationship("User", foreign_keys=[user_id], backref="grades")
    course = relationship("Course", backref="grades")
