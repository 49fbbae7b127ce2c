"""Audit recorder and activity counters against an in-memory database."""

from datetime import date, timedelta

import pytest

from shepherd.features.activity.models import AttendanceRecord, MinistryActivity
from shepherd.features.activity.repository import count_present, get_activity_counters
from shepherd.features.audit import recorder
from shepherd.features.audit.models import AuditEntry, AuditKind
from sqlalchemy import func, select


class TestRecorder:
    @pytest.mark.asyncio
    async def test_record_flushes_without_committing(self, db, make_member, session_factory) -> None:
        pastor = await make_member("pastor", days=900)
        member = await make_member("member", days=100)

        entry = await recorder.record(db, pastor, member, recorder.role_change("member", "worker"))
        assert entry.id is not None
        assert entry.organization_id == pastor.organization_id

        await db.rollback()
        async with session_factory() as other:
            count = await other.scalar(select(func.count()).select_from(AuditEntry))
        assert count == 0

    @pytest.mark.asyncio
    async def test_history_is_most_recent_first(self, db, make_member) -> None:
        pastor = await make_member("pastor", days=900)
        member = await make_member("newcomer", days=100)
        await recorder.record(db, pastor, member, recorder.role_change("newcomer", "member"))
        await recorder.record(db, pastor, member, recorder.role_change("member", "worker"))
        await db.commit()

        entries = await recorder.history(db, member.id)
        assert [e.new_value["role"] for e in entries] == ["worker", "member"]
        assert entries[0].old_value == {"role": "member"}
        assert await recorder.history(db, pastor.id) == []

    @pytest.mark.asyncio
    async def test_promotion_history_is_limited_to_role_changes(self, db, make_member) -> None:
        pastor = await make_member("pastor", days=900)
        members = [await make_member("newcomer", days=60) for _ in range(3)]
        for m in members:
            await recorder.record(db, pastor, m, recorder.role_change("newcomer", "member"))
        await recorder.record(
            db, pastor, None,
            recorder.AuditChange(kind=AuditKind.ROLE_OVERRIDE.value, target="worker", new_value={"rank": 31}),
        )
        await db.commit()

        latest_two = await recorder.promotion_history(db, pastor.organization_id, limit=2)
        assert len(latest_two) == 2
        assert all(e.kind == AuditKind.ROLE_CHANGE.value for e in latest_two)
        assert [e.subject_id for e in latest_two] == [members[2].id, members[1].id]

    @pytest.mark.asyncio
    async def test_latest_role_changes(self, db, make_member) -> None:
        pastor = await make_member("pastor", days=900)
        a = await make_member("member", days=200)
        b = await make_member("member", days=200)
        await recorder.record(db, pastor, a, recorder.role_change("newcomer", "member"))
        await recorder.record(db, pastor, a, recorder.role_change("member", "worker"))
        await db.commit()

        assert await recorder.latest_role_changes(db, [a.id, b.id]) == {a.id: "worker"}
        assert await recorder.latest_role_changes(db, []) == {}


class TestActivityCounters:
    @pytest.mark.asyncio
    async def test_counts_present_and_late_only(self, db, make_member) -> None:
        member = await make_member("newcomer", days=30)
        today = date(2025, 7, 1)
        for offset, status in enumerate(["present", "late", "absent", "present"]):
            db.add(AttendanceRecord(
                organization_id=member.organization_id,
                member_id=member.id,
                attended_on=today - timedelta(days=7 * offset),
                status=status,
            ))
        db.add(MinistryActivity(organization_id=member.organization_id, member_id=member.id, kind="outreach"))
        await db.commit()

        assert await count_present(db, [member.id]) == {member.id: 3}
        assert await count_present(db, [member.id], since=today - timedelta(days=10)) == {member.id: 2}

        counters = await get_activity_counters(db, [member.id])
        assert counters[member.id].present_count == 3
        assert counters[member.id].ministry_activity_count == 1

    @pytest.mark.asyncio
    async def test_members_without_activity_get_zero_counters(self, db, make_member) -> None:
        member = await make_member("member", days=10)
        counters = await get_activity_counters(db, [member.id])
        assert counters[member.id].present_count == 0
        assert counters[member.id].ministry_activity_count == 0
