"""
Promotion evaluation and application against the database.

evaluate_promotions() only reads. apply_promotion() writes the new role and
its audit entry in one transaction. There is no conditional update: two
concurrent applies on one member both succeed, the later role write wins and
each leaves its own audit entry. Callers that want stale-role detection pass
``expected_role``, which is checked against a fresh read of the member.
"""
from datetime import datetime, timezone
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shepherd.core.exceptions import (
    InvalidTransition,
    MemberNotFound,
    PermissionDenied,
    StaleSubject,
    StorageFailure,
)
from shepherd.features.activity.repository import get_activity_counters
from shepherd.features.audit import recorder
from shepherd.features.audit.models import AuditEntry
from shepherd.features.growth.evaluator import PromotionRecommendation, evaluate
from shepherd.features.growth.metrics import ActivityCounters, metrics_for
from shepherd.features.growth.rules import DEFAULT_RULES, RuleSet
from shepherd.features.members.models import Member
from shepherd.features.roles.table import RoleTable, normalize_role
from shepherd.utils import get_logger


log = get_logger(__name__)


async def list_candidates(
    db: AsyncSession,
    organization_id: str,
    exclude_member_id: Optional[str] = None
) -> List[Member]:
    """Active members of the organization, longest-standing first."""
    stmt = (
        select(Member)
        .where(Member.organization_id == organization_id, Member.is_active.is_(True))
        .order_by(Member.joined_at.is_(None), Member.joined_at.asc(), Member.id)
    )
    if exclude_member_id:
        stmt = stmt.where(Member.id != exclude_member_id)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def evaluate_promotions(
    db: AsyncSession,
    organization_id: str,
    *,
    exclude_member_id: Optional[str] = None,
    table: RoleTable,
    rules: RuleSet = DEFAULT_RULES,
    now: Optional[datetime] = None
) -> List[PromotionRecommendation]:
    """
    Recommendations for every eligible member of an organization.

    A recommendation is dropped when its target role is not part of the
    tenant's role table, or when the member's most recent recorded role
    change already moved them to that role.

    Raises:
        StorageFailure: if members or counters cannot be read
    """
    now = now or datetime.now(timezone.utc)
    try:
        members = await list_candidates(db, organization_id, exclude_member_id)
        ids = [m.id for m in members]
        counters = await get_activity_counters(db, ids, until=now.date())
        recorded = await recorder.latest_role_changes(db, ids)
    except SQLAlchemyError as exc:
        log.error(f"Could not load promotion inputs for {organization_id}: {exc}")
        raise StorageFailure("Could not load member activity") from exc

    recommendations: List[PromotionRecommendation] = []
    for member in members:
        if member.role not in table:
            log.debug(f"Member {member.id} has role {member.role!r} outside the role table; skipped")
            continue
        metrics = metrics_for(member.joined_at, counters.get(member.id, ActivityCounters()), now)
        recommendation = evaluate(member.id, member.role, metrics, now, rules)
        if recommendation is None:
            continue
        if recommendation.recommended_role not in table:
            log.warning(
                f"Rule target {recommendation.recommended_role!r} is not a role in {table.version}; skipped"
            )
            continue
        if recorded.get(member.id) == recommendation.recommended_role:
            log.debug(f"Member {member.id} already has a recorded change to {recommendation.recommended_role}")
            continue
        recommendations.append(recommendation)

    log.debug(f"{len(recommendations)} recommendations for {organization_id} from {len(members)} members")
    return recommendations


def can_apply_promotions(table: RoleTable, role: Optional[str]) -> bool:
    """Only the maximum-rank role may apply promotions."""
    return table.is_root(role)


async def apply_promotion(
    db: AsyncSession,
    subject_id: str,
    new_role: str,
    acting_member: Member,
    *,
    table: RoleTable,
    rules: RuleSet = DEFAULT_RULES,
    expected_role: Optional[str] = None
) -> AuditEntry:
    """
    Move a member one step up the ladder and record it.

    The target must be reachable from the member's current role by a single
    rule, whether or not a recommendation was computed for it.

    Raises:
        PermissionDenied: acting member is not the root role
        MemberNotFound: subject missing or in another organization
        StaleSubject: subject's role differs from ``expected_role``
        InvalidTransition: no rule moves the current role to ``new_role``
        StorageFailure: the write failed; nothing was committed
    """
    if not can_apply_promotions(table, acting_member.role):
        log.info(f"Member {acting_member.id} ({acting_member.role}) may not apply promotions")
        raise PermissionDenied("Only the root role may apply promotions")

    target = normalize_role(new_role)
    try:
        result = await db.execute(
            select(Member)
            .where(Member.id == subject_id)
            .execution_options(populate_existing=True)
        )
        subject = result.scalar_one_or_none()
    except SQLAlchemyError as exc:
        raise StorageFailure("Could not load member") from exc

    if subject is None or subject.organization_id != acting_member.organization_id:
        raise MemberNotFound(f"Member {subject_id} not found")

    current = normalize_role(subject.role)
    if expected_role is not None and normalize_role(expected_role) != current:
        raise StaleSubject(f"Member role is now {current!r}, expected {normalize_role(expected_role)!r}")

    if target is None or target not in table or current is None or not rules.is_reachable(current, target):
        raise InvalidTransition(f"Cannot promote from {current!r} to {new_role!r}")

    rule = next(r for r in rules.rules_from(current) if r.to_role == target)
    try:
        subject.role = target
        entry = await recorder.record(
            db,
            performed_by=acting_member,
            subject=subject,
            change=recorder.role_change(current, target, rule.justification),
        )
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        log.error(f"Promotion of {subject_id} to {target} failed: {exc}")
        raise StorageFailure("Could not save the promotion") from exc

    log.info(f"Member {subject.id} promoted {current} -> {target} by {acting_member.id}")
    return entry
