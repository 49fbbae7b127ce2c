"""
Audit trail API routes.
"""
from typing import Annotated, List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from shepherd.core.database.engine import get_db
from shepherd.core.exceptions import MemberNotFound, PermissionDenied
from shepherd.features.audit import recorder
from shepherd.features.audit.models import AuditEntry
from shepherd.features.audit.schemas import AuditEntryListResponse, AuditEntryResponse
from shepherd.features.members.dependencies import get_current_member
from shepherd.features.members.models import Member
from shepherd.features.permissions.dependencies import require_permission
from shepherd.features.permissions.resolver import allow
from shepherd.features.roles.dependencies import get_role_table
from shepherd.features.roles.table import RoleTable


router = APIRouter()


@router.get("/members/{member_id}/history", response_model=List[AuditEntryResponse])
async def member_history(
    member_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_member: Annotated[Member, Depends(get_current_member)],
    table: Annotated[RoleTable, Depends(get_role_table)],
    limit: int = Query(50, ge=1, le=500),
):
    """
    Audit history of one member, most recent first.

    Members may read their own history; anyone else needs audit read.
    """
    if member_id != current_member.id and not allow(table, current_member.role, "audit", "read"):
        raise PermissionDenied("Permission denied: read on audit")

    subject = await db.get(Member, member_id)
    if subject is None or subject.organization_id != current_member.organization_id:
        raise MemberNotFound(f"Member {member_id} not found")

    return await recorder.history(db, member_id, limit=limit)


@router.get("/logs", response_model=AuditEntryListResponse)
async def list_audit_logs(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_member: Annotated[Member, Depends(require_permission("audit", "read"))],
    skip: int = 0,
    limit: int = 50,
    kind: Optional[str] = None,
    performed_by_id: Optional[str] = None,
    subject_id: Optional[str] = None,
):
    """List the organization's audit entries with optional filtering."""
    stmt = select(AuditEntry).where(AuditEntry.organization_id == current_member.organization_id)

    if kind:
        stmt = stmt.where(AuditEntry.kind == kind)
    if performed_by_id:
        stmt = stmt.where(AuditEntry.performed_by_id == performed_by_id)
    if subject_id:
        stmt = stmt.where(AuditEntry.subject_id == subject_id)

    # Get total count
    count_stmt = select(func.count()).select_from(stmt.subquery())
    total_result = await db.execute(count_stmt)
    total = total_result.scalar() or 0

    # Get paginated results
    stmt = stmt.order_by(AuditEntry.created_at.desc(), AuditEntry.id.desc()).offset(skip).limit(limit)
    result = await db.execute(stmt)
    entries = result.scalars().all()

    pages = (total + limit - 1) // limit if limit > 0 else 0
    page = (skip // limit) + 1 if limit > 0 else 1

    return AuditEntryListResponse(
        items=[AuditEntryResponse.model_validate(entry) for entry in entries],
        total=total,
        page=page,
        page_size=limit,
        pages=pages
    )
