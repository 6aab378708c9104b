"""
Service-wide constants
"""

SERVICE_NAME = "myisu-portal-backend"
SYSTEM_CREDIT = "MYISU Student Information Portal"
