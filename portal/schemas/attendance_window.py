"""
Per-course attendance window schemas
"""
from datetime import datetime, time
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator

from portal.utils.datetime_utils import iso_campus


class AttendanceWindowCreate(BaseModel):
    """day_of_week: 0=Sunday .. 6=Saturday"""
    day_of_week: int = Field(..., ge=0, le=6)
    start_time: time
    end_time: time
    grace_period_minutes: int = Field(default=15, ge=0)

    @model_validator(mode="after")
    def check_times(self):
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self


class AttendanceWindowUpdate(BaseModel):
    day_of_week: Optional[int] = Field(None, ge=0, le=6)
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    grace_period_minutes: Optional[int] = Field(None, ge=0)


class AttendanceWindowOut(BaseModel):
    id: int
    course_id: int
    day_of_week: int
    start_time: time
    end_time: time
    grace_period_minutes: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", when_used="always")
    def _ser_datetime(self, dt: Optional[datetime]) -> Optional[str]:
        return iso_campus(dt)


class AttendanceWindowListResponse(BaseModel):
    items: List[AttendanceWindowOut]
    total: int


class WindowStatusOut(BaseModel):
    """Result of evaluating one window against the current campus time"""
    window: AttendanceWindowOut
    in_window: bool
    in_grace: bool
    is_late: bool
