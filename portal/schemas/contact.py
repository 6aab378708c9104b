"""
Contact form schemas
"""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_serializer

from portal.utils.datetime_utils import iso_campus


class ContactMessageCreate(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    message: str = Field(..., min_length=1, max_length=5000)


class ContactMessageOut(BaseModel):
    id: int
    user_id: Optional[int] = None
    full_name: str
    email: str
    message: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", when_used="always")
    def _ser_datetime(self, dt: Optional[datetime]) -> Optional[str]:
        return iso_campus(dt)


class ContactMessageListResponse(BaseModel):
    items: List[ContactMessageOut]
    total: int
