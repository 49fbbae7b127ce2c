"""
Pydantic schemas for activity recording.
"""
from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from shepherd.features.activity.models import AttendanceStatus


class AttendanceCreate(BaseModel):
    """Mark attendance; member_id defaults to the caller."""
    member_id: Optional[str] = Field(None, max_length=26)
    attended_on: Optional[date] = None
    status: AttendanceStatus = AttendanceStatus.PRESENT


class AttendanceResponse(BaseModel):
    id: str
    organization_id: str
    member_id: str
    attended_on: date
    status: str
    recorded_by_id: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MinistryActivityCreate(BaseModel):
    """Record a ministry act; member_id defaults to the caller."""
    member_id: Optional[str] = Field(None, max_length=26)
    kind: str = Field("outreach", min_length=1, max_length=50)
    occurred_at: Optional[datetime] = None
    notes: Optional[str] = Field(None, max_length=2000)


class MinistryActivityResponse(BaseModel):
    id: str
    organization_id: str
    member_id: str
    kind: str
    occurred_at: datetime
    notes: Optional[str] = None
    recorded_by_id: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
