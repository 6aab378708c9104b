"""
Database models
"""
from portal.models.user import User, Role
from portal.models.course import Course, Enrollment
from portal.models.attendance import AttendanceRecord, AttendanceWindow, AttendanceStatus
from portal.models.grade import Grade
from portal.models.notification import Notification, NotificationType
from portal.models.audit_log import AuditLog
from portal.models.contact_message import ContactMessage

__all__ = [
    "User",
    "Role",
    "Course",
    "Enrollment",
    "AttendanceRecord",
    "AttendanceWindow",
    "AttendanceStatus",
    "Grade",
    "Notification",
    "NotificationType",
    "AuditLog",
    "ContactMessage",
]
