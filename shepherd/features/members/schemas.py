"""
Pydantic schemas for member requests and responses.
"""
from datetime import datetime
from typing import Any
from pydantic import BaseModel, EmailStr, Field, field_validator


def primary_role(raw: Any) -> str | None:
    """
    Reduce a stored role assignment to the member's single active role.

    Some records keep roles as a list (or a list of ``{"role": {"name": ...}}``
    objects); the first entry is the primary role.
    """
    if isinstance(raw, (list, tuple)):
        raw = raw[0] if raw else None
    if isinstance(raw, dict):
        inner = raw.get("role", raw)
        raw = inner.get("name") if isinstance(inner, dict) else inner
    if not isinstance(raw, str) or not raw.strip():
        return None
    return raw.strip().lower()


class MemberCreate(BaseModel):
    """Schema for registering a member in the caller's organization."""
    appwrite_id: str = Field(..., min_length=1, max_length=255, description="Identity provider user ID")
    email: EmailStr
    full_name: str = Field(..., min_length=1, max_length=255)
    role: str = Field(default="newcomer", description="Role name, or a role list whose first entry is used")
    joined_at: datetime | None = None

    @field_validator("role", mode="before")
    @classmethod
    def resolve_primary_role(cls, v: Any) -> str:
        role = primary_role(v)
        if role is None:
            raise ValueError("A role is required")
        return role


class MemberResponse(BaseModel):
    """Schema for member responses."""
    id: str
    organization_id: str
    email: str
    full_name: str
    role: str
    joined_at: datetime | None = None
    is_active: bool
    last_login_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class MemberPublic(BaseModel):
    """Limited member information."""
    id: str
    full_name: str
    role: str

    model_config = {"from_attributes": True}
