"""
Member feature routes.
"""
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shepherd.core.database.engine import get_db
from shepherd.features.audit import recorder
from shepherd.features.audit.models import AuditKind
from shepherd.features.members.dependencies import get_current_member
from shepherd.features.members.models import Member
from shepherd.features.members.schemas import MemberCreate, MemberPublic, MemberResponse
from shepherd.features.permissions.dependencies import require_permission
from shepherd.features.roles.dependencies import get_role_table
from shepherd.features.roles.table import RoleTable
from shepherd.utils import get_logger


log = get_logger(__name__)
router = APIRouter()


@router.get("/me", response_model=MemberResponse)
async def get_current_member_profile(
    member: Annotated[Member, Depends(get_current_member)]
):
    """Get current authenticated member's profile."""
    return member


@router.get("/", response_model=list[MemberPublic])
async def list_members(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_member: Annotated[Member, Depends(require_permission("users", "read"))],
    skip: int = 0,
    limit: int = 100,
    role: str | None = None
):
    """List members of the caller's organization."""
    stmt = select(Member).where(Member.organization_id == current_member.organization_id)
    if role:
        stmt = stmt.where(Member.role == role.strip().lower())
    stmt = stmt.order_by(Member.full_name).offset(skip).limit(limit)
    result = await db.execute(stmt)
    return result.scalars().all()


@router.post("/", response_model=MemberResponse, status_code=status.HTTP_201_CREATED)
async def register_member(
    member_data: MemberCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_member: Annotated[Member, Depends(require_permission("users", "create"))],
    table: Annotated[RoleTable, Depends(get_role_table)]
):
    """
    Register an identity-provider user as a member of the caller's organization.

    Only the root role may register another root-role member.
    """
    if member_data.role not in table:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown role '{member_data.role}'"
        )
    if table.is_root(member_data.role) and not table.is_root(current_member.role):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Only the {table.root.display_name} role may register that role"
        )

    member = Member(organization_id=current_member.organization_id, **member_data.model_dump())
    try:
        db.add(member)
        await db.flush()
        await recorder.record(
            db,
            performed_by=current_member,
            subject=member,
            change=recorder.AuditChange(
                kind=AuditKind.MEMBER_REGISTERED.value,
                new_value={"role": member.role, "email": member.email},
                target="member",
            ),
        )
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A member with this identity is already registered"
        )
    await db.refresh(member)
    log.info(f"Member {member.id} registered as {member.role} by {current_member.id}")
    return member
