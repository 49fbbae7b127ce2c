"""
Pydantic schemas for permission checks.
"""
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, field_validator


class PermissionCheckRequest(BaseModel):
    """Schema for checking whether the caller holds a grant."""
    module: str = Field(..., min_length=1, max_length=100, description="Module name (e.g. 'users', 'finances')")
    action: str = Field(default="read", min_length=1, max_length=50, description="Action (defaults to 'read')")

    @field_validator("module", "action")
    @classmethod
    def lowercase(cls, v: str) -> str:
        return v.strip().lower()


class PermissionCheckResponse(BaseModel):
    """Schema for permission check response."""
    allowed: bool
    role: str
    reason: Optional[str] = None


class MyPermissionsResponse(BaseModel):
    """The caller's role and every module/action it is granted."""
    role: str
    display_name: Optional[str] = None
    rank: Optional[int] = None
    is_root: bool
    permissions: Dict[str, List[str]] = {}
