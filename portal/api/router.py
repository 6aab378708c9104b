"""
Main API router
"""
from fastapi import APIRouter

from portal.api.v1 import (
    health,
    version,
    auth,
    users,
    courses,
    attendance,
    attendance_windows,
    grades,
    notifications,
    dashboard,
    reports,
    contact,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(version.router, tags=["version"])
api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(courses.router, prefix="/courses", tags=["courses"])
api_router.include_router(attendance_windows.router, prefix="/courses", tags=["attendance-windows"])
api_router.include_router(attendance.router, prefix="/attendance", tags=["attendance"])
api_router.include_router(grades.router, prefix="/grades", tags=["grades"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])
api_router.include_router(contact.router, prefix="/contact", tags=["contact"])
