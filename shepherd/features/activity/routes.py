"""
Activity recording API routes.

Recording for yourself needs ``create`` on the module; recording for another
member of the organization additionally needs ``mark_others``.
"""
from datetime import date, datetime, timezone
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shepherd.core.database.engine import get_db
from shepherd.core.exceptions import MemberNotFound, PermissionDenied
from shepherd.features.activity.models import AttendanceRecord, MinistryActivity
from shepherd.features.activity.schemas import (
    AttendanceCreate,
    AttendanceResponse,
    MinistryActivityCreate,
    MinistryActivityResponse,
)
from shepherd.features.members.models import Member
from shepherd.features.permissions.dependencies import require_permission
from shepherd.features.permissions.resolver import allow
from shepherd.features.roles.dependencies import get_role_table
from shepherd.features.roles.table import RoleTable
from shepherd.utils import get_logger


log = get_logger(__name__)
router = APIRouter()


async def resolve_subject(
    db: AsyncSession,
    current_member: Member,
    table: RoleTable,
    module: str,
    member_id: str | None
) -> Member:
    """The member an activity is recorded for, after the mark_others check."""
    if not member_id or member_id == current_member.id:
        return current_member
    if not allow(table, current_member.role, module, "mark_others"):
        raise PermissionDenied(f"Permission denied: mark_others on {module}")
    subject = await db.get(Member, member_id)
    if subject is None or subject.organization_id != current_member.organization_id:
        raise MemberNotFound(f"Member {member_id} not found")
    return subject


@router.post("/attendance", response_model=AttendanceResponse, status_code=status.HTTP_201_CREATED)
async def mark_attendance(
    attendance: AttendanceCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_member: Annotated[Member, Depends(require_permission("attendance", "create"))],
    table: Annotated[RoleTable, Depends(get_role_table)]
):
    """Mark one day's attendance."""
    subject = await resolve_subject(db, current_member, table, "attendance", attendance.member_id)
    record = AttendanceRecord(
        organization_id=subject.organization_id,
        member_id=subject.id,
        attended_on=attendance.attended_on or date.today(),
        status=attendance.status.value,
        recorded_by_id=current_member.id,
    )
    try:
        db.add(record)
        await db.commit()
        await db.refresh(record)
    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Attendance for this member and day is already recorded"
        )
    log.info(f"Attendance {record.status} on {record.attended_on} for {subject.id} by {current_member.id}")
    return record


@router.post("/ministry", response_model=MinistryActivityResponse, status_code=status.HTTP_201_CREATED)
async def record_ministry_activity(
    activity: MinistryActivityCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_member: Annotated[Member, Depends(require_permission("ministry", "create"))],
    table: Annotated[RoleTable, Depends(get_role_table)]
):
    """Record an outreach, soul-winning or other ministry act."""
    subject = await resolve_subject(db, current_member, table, "ministry", activity.member_id)
    record = MinistryActivity(
        organization_id=subject.organization_id,
        member_id=subject.id,
        kind=activity.kind.strip().lower(),
        occurred_at=activity.occurred_at or datetime.now(timezone.utc),
        notes=activity.notes,
        recorded_by_id=current_member.id,
    )
    db.add(record)
    await db.commit()
    await db.refresh(record)
    log.info(f"Ministry activity {record.kind} for {subject.id} by {current_member.id}")
    return record
