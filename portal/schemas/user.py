"""
User schemas
"""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_serializer, field_validator

from portal.core.security import validate_password
from portal.models.user import Role
from portal.utils.datetime_utils import iso_campus


class UserOut(BaseModel):
    """User profile output. Datetimes on the campus clock."""
    id: int
    email: str
    role: str
    full_name: Optional[str] = None
    department: Optional[str] = None
    academic_year: Optional[str] = None
    student_id: Optional[str] = None
    phone: Optional[str] = None
    active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", when_used="always")
    def _ser_datetime(self, dt: Optional[datetime]) -> Optional[str]:
        return iso_campus(dt)


class UserBrief(BaseModel):
    """Minimal user reference embedded in rosters and reports"""
    id: int
    email: str
    full_name: Optional[str] = None
    student_id: Optional[str] = None
    phone: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ProfileUpdate(BaseModel):
    """Fields a user may change on their own profile"""
    full_name: Optional[str] = Field(None, min_length=1)
    department: Optional[str] = None
    academic_year: Optional[str] = None
    student_id: Optional[str] = None
    phone: Optional[str] = None


class AdminUserCreate(BaseModel):
    """Admin-created account; any role allowed"""
    email: EmailStr
    password: str
    full_name: str = Field(..., min_length=1)
    role: Role
    department: Optional[str] = None
    academic_year: Optional[str] = None
    student_id: Optional[str] = None
    phone: Optional[str] = None

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_password(v)


class AdminUserUpdate(ProfileUpdate):
    role: Optional[Role] = None
    active: Optional[bool] = None


class UserListResponse(BaseModel):
    items: List[UserOut]
    total: int
