"""
Activity counter queries.
"""
from datetime import date
from typing import Dict, Iterable, Optional
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from shepherd.features.activity.models import AttendanceRecord, MinistryActivity, PRESENT_STATUSES
from shepherd.features.growth.metrics import ActivityCounters


async def count_present(
    db: AsyncSession,
    member_ids: Iterable[str],
    since: Optional[date] = None,
    until: Optional[date] = None
) -> Dict[str, int]:
    """Present/late attendance days per member within [since, until]."""
    ids = list(member_ids)
    if not ids:
        return {}
    stmt = (
        select(AttendanceRecord.member_id, func.count(AttendanceRecord.id))
        .where(AttendanceRecord.member_id.in_(ids))
        .where(AttendanceRecord.status.in_(PRESENT_STATUSES))
        .group_by(AttendanceRecord.member_id)
    )
    if since is not None:
        stmt = stmt.where(AttendanceRecord.attended_on >= since)
    if until is not None:
        stmt = stmt.where(AttendanceRecord.attended_on <= until)
    result = await db.execute(stmt)
    return {member_id: count for member_id, count in result.all()}


async def count_ministry_activity(db: AsyncSession, member_ids: Iterable[str]) -> Dict[str, int]:
    ids = list(member_ids)
    if not ids:
        return {}
    result = await db.execute(
        select(MinistryActivity.member_id, func.count(MinistryActivity.id))
        .where(MinistryActivity.member_id.in_(ids))
        .group_by(MinistryActivity.member_id)
    )
    return {member_id: count for member_id, count in result.all()}


async def get_activity_counters(
    db: AsyncSession,
    member_ids: Iterable[str],
    until: Optional[date] = None
) -> Dict[str, ActivityCounters]:
    """
    Counters for a batch of members.

    Members with no activity still get a zeroed ActivityCounters entry.
    """
    ids = list(member_ids)
    present = await count_present(db, ids, until=until)
    ministry = await count_ministry_activity(db, ids)
    return {
        member_id: ActivityCounters(
            present_count=present.get(member_id, 0),
            ministry_activity_count=ministry.get(member_id, 0),
        )
        for member_id in ids
    }
