"""
Authentication schemas
"""
from typing import Optional
from pydantic import BaseModel, Field, EmailStr, field_validator

from portal.core.security import validate_password
from portal.models.user import Role


class LoginRequest(BaseModel):
    """Login request schema"""
    email: EmailStr = Field(..., description="Account email")
    password: str = Field(..., description="Password")


class RegisterRequest(BaseModel):
    """Self-service sign-up. Admin accounts are created by admins, not here."""
    email: EmailStr
    password: str
    full_name: str = Field(..., min_length=1)
    role: Role = Field(default=Role.STUDENT, description="student or faculty")
    department: Optional[str] = None
    academic_year: Optional[str] = None
    student_id: Optional[str] = None
    phone: Optional[str] = None

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_password(v)

    @field_validator("role")
    @classmethod
    def check_role(cls, v: Role) -> Role:
        if v == Role.ADMIN:
            raise ValueError("admin accounts cannot be self-registered")
        return v


class TokenResponse(BaseModel):
    """Token response schema"""
    access_token: str
    token_type: str = "bearer"


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str

    @field_validator("new_password")
    @classmethod
    def check_new_password(cls, v: str) -> str:
        return validate_password(v)
