"""Promotion evaluation and application against an in-memory database."""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from shepherd.core.exceptions import (
    InvalidTransition,
    MemberNotFound,
    PermissionDenied,
    StaleSubject,
    StorageFailure,
)
from shepherd.features.activity.models import AttendanceRecord, MinistryActivity
from shepherd.features.audit import recorder
from shepherd.features.audit.models import AuditEntry
from shepherd.features.growth.service import apply_promotion, can_apply_promotions, evaluate_promotions
from shepherd.features.members.models import Member
from shepherd.features.organizations.models import Organization
from shepherd.features.roles.table import build_role_table

NOW = datetime(2025, 7, 1, 12, 0, tzinfo=timezone.utc)


async def attend(db, member: Member, times: int) -> None:
    for week in range(times):
        db.add(AttendanceRecord(
            organization_id=member.organization_id,
            member_id=member.id,
            attended_on=(NOW - timedelta(days=7 * week)).date(),
        ))
    await db.commit()


async def minister(db, member: Member, times: int) -> None:
    for _ in range(times):
        db.add(MinistryActivity(organization_id=member.organization_id, member_id=member.id, kind="outreach"))
    await db.commit()


async def audit_count(session_factory) -> int:
    async with session_factory() as session:
        return await session.scalar(select(func.count()).select_from(AuditEntry))


async def role_of(session_factory, member_id: str) -> str:
    async with session_factory() as session:
        return (await session.get(Member, member_id)).role


class TestEvaluatePromotions:
    @pytest.mark.asyncio
    async def test_recommends_eligible_members_oldest_first(self, db, make_member, role_table) -> None:
        pastor = await make_member("pastor", days=2000)
        newcomer = await make_member("newcomer", days=31)
        member = await make_member("member", days=120)
        await make_member("member", days=89)
        await attend(db, newcomer, 5)
        await attend(db, member, 17)
        await minister(db, member, 2)

        recs = await evaluate_promotions(
            db, pastor.organization_id, exclude_member_id=pastor.id, table=role_table, now=NOW
        )
        assert [(r.member_id, r.recommended_role) for r in recs] == [
            (member.id, "worker"),
            (newcomer.id, "member"),
        ]

    @pytest.mark.asyncio
    async def test_requester_and_inactive_members_are_excluded(self, db, make_member, role_table) -> None:
        worker = await make_member("worker", days=400)
        await minister(db, worker, 10)
        inactive = await make_member("worker", days=400, is_active=False)
        await minister(db, inactive, 10)

        recs = await evaluate_promotions(
            db, worker.organization_id, exclude_member_id=worker.id, table=role_table, now=NOW
        )
        assert recs == []

    @pytest.mark.asyncio
    async def test_other_organizations_are_not_evaluated(self, db, make_member, role_table) -> None:
        other = Organization(name="Other Church")
        db.add(other)
        await db.commit()
        outsider = await make_member("worker", days=400, organization_id=other.id)
        await minister(db, outsider, 10)
        pastor = await make_member("pastor", days=400)

        recs = await evaluate_promotions(db, pastor.organization_id, table=role_table, now=NOW)
        assert recs == []

    @pytest.mark.asyncio
    async def test_recorded_change_to_the_same_role_is_not_recommended_again(
        self, db, make_member, role_table
    ) -> None:
        pastor = await make_member("pastor", days=2000)
        worker = await make_member("worker", days=400)
        await minister(db, worker, 10)
        await recorder.record(db, pastor, worker, recorder.role_change("worker", "admin"))
        await db.commit()

        recs = await evaluate_promotions(db, pastor.organization_id, table=role_table, now=NOW)
        assert recs == []

    @pytest.mark.asyncio
    async def test_evaluation_is_idempotent(self, db, make_member, role_table) -> None:
        pastor = await make_member("pastor", days=2000)
        newcomer = await make_member("newcomer", days=40)
        await attend(db, newcomer, 6)

        first = await evaluate_promotions(db, pastor.organization_id, table=role_table, now=NOW)
        second = await evaluate_promotions(db, pastor.organization_id, table=role_table, now=NOW)
        assert first == second
        assert len(first) == 1


class TestApplyPromotion:
    @pytest.mark.asyncio
    async def test_root_applies_promotion_with_one_audit_entry(
        self, db, make_member, role_table, session_factory
    ) -> None:
        pastor = await make_member("pastor", days=2000)
        newcomer = await make_member("newcomer", days=31)

        entry = await apply_promotion(db, newcomer.id, "member", pastor, table=role_table)

        assert entry.kind == "role_change"
        assert entry.performed_by_id == pastor.id
        assert entry.subject_id == newcomer.id
        assert entry.old_value == {"role": "newcomer"}
        assert entry.new_value == {"role": "member", "justification": "Consistent attendance for 30+ days"}
        assert await role_of(session_factory, newcomer.id) == "member"
        assert await audit_count(session_factory) == 1

    @pytest.mark.asyncio
    async def test_worker_is_denied_and_nothing_is_written(
        self, db, make_member, role_table, session_factory
    ) -> None:
        worker = await make_member("worker", days=400)
        newcomer = await make_member("newcomer", days=31)

        with pytest.raises(PermissionDenied):
            await apply_promotion(db, newcomer.id, "member", worker, table=role_table)

        assert await role_of(session_factory, newcomer.id) == "newcomer"
        assert await audit_count(session_factory) == 0

    @pytest.mark.asyncio
    async def test_admin_with_manage_roles_is_still_denied(self, db, make_member, role_table) -> None:
        admin = await make_member("admin", days=400)
        newcomer = await make_member("newcomer", days=31)
        with pytest.raises(PermissionDenied):
            await apply_promotion(db, newcomer.id, "member", admin, table=role_table)

    @pytest.mark.asyncio
    async def test_target_must_be_one_rule_away(self, db, make_member, role_table, session_factory) -> None:
        pastor = await make_member("pastor", days=2000)
        newcomer = await make_member("newcomer", days=31)

        with pytest.raises(InvalidTransition):
            await apply_promotion(db, newcomer.id, "worker", pastor, table=role_table)
        with pytest.raises(InvalidTransition):
            await apply_promotion(db, newcomer.id, "bishop", pastor, table=role_table)
        assert await audit_count(session_factory) == 0

    @pytest.mark.asyncio
    async def test_stale_expected_role(self, db, make_member, role_table, session_factory) -> None:
        pastor = await make_member("pastor", days=2000)
        member = await make_member("member", days=200)

        with pytest.raises(StaleSubject):
            await apply_promotion(db, member.id, "member", pastor, table=role_table, expected_role="newcomer")
        assert await audit_count(session_factory) == 0

    @pytest.mark.asyncio
    async def test_expected_role_matching_current_role_succeeds(self, db, make_member, role_table) -> None:
        pastor = await make_member("pastor", days=2000)
        member = await make_member("member", days=200)
        entry = await apply_promotion(db, member.id, "Worker", pastor, table=role_table, expected_role="MEMBER")
        assert entry.new_value["role"] == "worker"

    @pytest.mark.asyncio
    async def test_subject_in_another_organization(self, db, make_member, role_table) -> None:
        other = Organization(name="Other Church")
        db.add(other)
        await db.commit()
        outsider = await make_member("newcomer", days=31, organization_id=other.id)
        pastor = await make_member("pastor", days=2000)

        with pytest.raises(MemberNotFound):
            await apply_promotion(db, outsider.id, "member", pastor, table=role_table)
        with pytest.raises(MemberNotFound):
            await apply_promotion(db, "01HZZZZZZZZZZZZZZZZZZZZZZZ", "member", pastor, table=role_table)

    @pytest.mark.asyncio
    async def test_repeated_apply_sees_the_committed_role(
        self, db, make_member, role_table, session_factory
    ) -> None:
        pastor = await make_member("pastor", days=2000)
        newcomer = await make_member("newcomer", days=31)

        await apply_promotion(db, newcomer.id, "member", pastor, table=role_table)
        with pytest.raises(InvalidTransition):
            await apply_promotion(db, newcomer.id, "member", pastor, table=role_table)

        assert await audit_count(session_factory) == 1
        assert len(await recorder.history(db, newcomer.id)) == 1

    @pytest.mark.asyncio
    async def test_storage_failure_rolls_back(self, db, make_member, role_table, session_factory) -> None:
        pastor = await make_member("pastor", days=2000)
        newcomer = await make_member("newcomer", days=31)
        # Rollback expires loaded instances; keep the key as a plain string
        newcomer_id = newcomer.id

        with patch.object(db, "commit", side_effect=OperationalError("COMMIT", {}, Exception("disk I/O error"))):
            with pytest.raises(StorageFailure) as excinfo:
                await apply_promotion(db, newcomer_id, "member", pastor, table=role_table)

        assert isinstance(excinfo.value.__cause__, OperationalError)
        assert await role_of(session_factory, newcomer_id) == "newcomer"
        assert await audit_count(session_factory) == 0

    @pytest.mark.asyncio
    async def test_root_applies_without_explicit_grants(self, db, make_member) -> None:
        table = build_role_table({
            "pastor": {"rank": 50, "permissions": {}},
            "member": {"rank": 20},
            "newcomer": {"rank": 10},
        })
        pastor = await make_member("pastor", days=2000)
        newcomer = await make_member("newcomer", days=31)

        entry = await apply_promotion(db, newcomer.id, "member", pastor, table=table)
        assert entry.new_value["role"] == "member"

    def test_only_the_root_role_may_apply(self, role_table) -> None:
        assert can_apply_promotions(role_table, "Pastor")
        assert not can_apply_promotions(role_table, "admin")
        assert not can_apply_promotions(role_table, None)
