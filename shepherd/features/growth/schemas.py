"""
Pydantic schemas for promotion endpoints.
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from shepherd.features.growth.evaluator import PromotionRecommendation
from shepherd.features.members.models import Member


class CandidateResponse(BaseModel):
    member_id: str
    full_name: str
    email: str
    current_role: str
    recommended_role: str
    justification: str
    tenure_days: int
    attendance_rate: int
    ministry_activity_count: int
    computed_at: datetime
    rules_version: str

    @classmethod
    def build(cls, recommendation: PromotionRecommendation, member: Member) -> "CandidateResponse":
        metrics = recommendation.metrics
        return cls(
            member_id=member.id,
            full_name=member.full_name,
            email=member.email,
            current_role=recommendation.current_role,
            recommended_role=recommendation.recommended_role,
            justification=recommendation.justification,
            tenure_days=metrics.tenure_days,
            attendance_rate=round(metrics.attendance_rate),
            ministry_activity_count=metrics.ministry_activity_count,
            computed_at=recommendation.computed_at,
            rules_version=recommendation.rules_version,
        )


class CandidateListResponse(BaseModel):
    rules_version: str
    candidates: List[CandidateResponse]


class ApplyPromotionRequest(BaseModel):
    subject_id: str = Field(..., min_length=1, max_length=26)
    new_role: str = Field(..., min_length=1, max_length=50)
    expected_role: Optional[str] = Field(None, description="Role the caller saw; a mismatch is rejected with 409")

    @field_validator("new_role", "expected_role")
    @classmethod
    def lowercase_role(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().lower() if v is not None else v
