"""
Pydantic schemas for audit responses.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict


class AuditEntryResponse(BaseModel):
    """Schema for audit entry response."""
    id: str
    organization_id: str
    performed_by_id: Optional[str]
    subject_id: Optional[str]
    kind: str
    target: Optional[str]
    old_value: Optional[Dict[str, Any]]
    new_value: Optional[Dict[str, Any]]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuditEntryListResponse(BaseModel):
    """Schema for paginated audit entry list."""
    items: List[AuditEntryResponse]
    total: int
    page: int
    page_size: int
    pages: int
