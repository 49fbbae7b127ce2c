"""
Promotion API routes.
"""
from typing import Annotated, List
from fastapi import APIRouter, Depends, Query, Request, status

from sqlalchemy.ext.asyncio import AsyncSession

from shepherd.core import config
from shepherd.core.database.engine import get_db
from shepherd.features.audit import recorder
from shepherd.features.audit.schemas import AuditEntryResponse
from shepherd.features.growth.rules import DEFAULT_RULES
from shepherd.features.growth.schemas import ApplyPromotionRequest, CandidateListResponse, CandidateResponse
from shepherd.features.growth.service import evaluate_promotions, apply_promotion, list_candidates
from shepherd.features.members.dependencies import get_current_member
from shepherd.features.members.models import Member
from shepherd.features.permissions.dependencies import require_permission
from shepherd.features.roles.dependencies import get_role_table
from shepherd.features.roles.table import RoleTable
from shepherd.limiter import limiter


router = APIRouter()


@router.get("/candidates", response_model=CandidateListResponse)
async def promotion_candidates(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_member: Annotated[Member, Depends(require_permission("users", "manage_roles"))],
    table: Annotated[RoleTable, Depends(get_role_table)]
):
    """Members eligible for promotion, longest-standing first. The caller is never listed."""
    recommendations = await evaluate_promotions(
        db,
        current_member.organization_id,
        exclude_member_id=current_member.id,
        table=table,
        rules=DEFAULT_RULES,
    )
    members = {m.id: m for m in await list_candidates(db, current_member.organization_id, current_member.id)}
    return CandidateListResponse(
        rules_version=DEFAULT_RULES.version,
        candidates=[CandidateResponse.build(r, members[r.member_id]) for r in recommendations],
    )


@router.post("/apply", response_model=AuditEntryResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(config.RATE_LIMIT)
async def apply(
    request: Request,
    promotion: ApplyPromotionRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_member: Annotated[Member, Depends(get_current_member)],
    table: Annotated[RoleTable, Depends(get_role_table)]
):
    """Apply a promotion (root role only). Returns the audit entry written with it."""
    return await apply_promotion(
        db,
        promotion.subject_id,
        promotion.new_role,
        current_member,
        table=table,
        rules=DEFAULT_RULES,
        expected_role=promotion.expected_role,
    )


@router.get("/history", response_model=List[AuditEntryResponse])
async def promotion_history(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_member: Annotated[Member, Depends(require_permission("users", "manage_roles"))],
    limit: int = Query(config.PROMOTION_HISTORY_LIMIT, ge=1, le=100)
):
    """Most recent role changes in the caller's organization."""
    return await recorder.promotion_history(db, current_member.organization_id, limit=limit)
