"""
Audit/history recorder.

record() only adds and flushes; committing is left to the caller so that a
mutation and its audit entry share one transaction.
"""
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shepherd.features.audit.models import AuditEntry, AuditKind
from shepherd.features.members.models import Member
from shepherd.utils import get_logger


log = get_logger(__name__)


@dataclass(frozen=True)
class AuditChange:
    kind: str
    old_value: Optional[Dict[str, Any]] = None
    new_value: Optional[Dict[str, Any]] = None
    target: Optional[str] = None


def role_change(old_role: str, new_role: str, justification: Optional[str] = None) -> AuditChange:
    new_value: Dict[str, Any] = {"role": new_role}
    if justification:
        new_value["justification"] = justification
    return AuditChange(
        kind=AuditKind.ROLE_CHANGE.value,
        old_value={"role": old_role},
        new_value=new_value,
        target="role",
    )


async def record(
    db: AsyncSession,
    performed_by: Member,
    subject: Optional[Member],
    change: AuditChange
) -> AuditEntry:
    """
    Append an audit entry to the current transaction.

    The entry is scoped to the actor's organization.
    """
    entry = AuditEntry(
        organization_id=performed_by.organization_id,
        performed_by_id=performed_by.id,
        subject_id=subject.id if subject is not None else None,
        kind=change.kind,
        target=change.target,
        old_value=change.old_value,
        new_value=change.new_value,
    )
    db.add(entry)
    await db.flush()
    log.debug(f"Audit {entry.kind} by {performed_by.id} on {entry.subject_id or entry.target}")
    return entry


async def history(db: AsyncSession, subject_id: str, limit: Optional[int] = 50) -> List[AuditEntry]:
    """Entries about one member, most recent first."""
    stmt = (
        select(AuditEntry)
        .where(AuditEntry.subject_id == subject_id)
        .order_by(AuditEntry.created_at.desc(), AuditEntry.id.desc())
    )
    if limit:
        stmt = stmt.limit(limit)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def promotion_history(db: AsyncSession, organization_id: str, limit: int = 10) -> List[AuditEntry]:
    """Most recent role changes in one organization."""
    result = await db.execute(
        select(AuditEntry)
        .where(
            AuditEntry.organization_id == organization_id,
            AuditEntry.kind == AuditKind.ROLE_CHANGE.value,
        )
        .order_by(AuditEntry.created_at.desc(), AuditEntry.id.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def latest_role_changes(db: AsyncSession, member_ids: Iterable[str]) -> Dict[str, str]:
    """
    Most recent recorded target role per member.

    Members without a recorded role change are absent from the result.
    """
    ids = list(member_ids)
    if not ids:
        return {}
    result = await db.execute(
        select(AuditEntry)
        .where(
            AuditEntry.subject_id.in_(ids),
            AuditEntry.kind == AuditKind.ROLE_CHANGE.value,
        )
        .order_by(AuditEntry.created_at.desc(), AuditEntry.id.desc())
    )
    latest: Dict[str, str] = {}
    for entry in result.scalars():
        if entry.subject_id in latest:
            continue
        role = (entry.new_value or {}).get("role")
        if role:
            latest[entry.subject_id] = role
    return latest
