"""
Activity records that feed growth metrics.
"""
from datetime import date, datetime
from sqlalchemy import String, ForeignKey, Date, DateTime, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column
import enum

from shepherd.core.database.base import Base, TimestampMixin, generate_ulid


class AttendanceStatus(str, enum.Enum):
    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"


# Statuses that count towards attendance rate
PRESENT_STATUSES = (AttendanceStatus.PRESENT.value, AttendanceStatus.LATE.value)


class AttendanceRecord(Base, TimestampMixin):
    """
    One member's attendance at one service/meeting day.
    """
    __tablename__ = "attendance_records"
    __table_args__ = (
        UniqueConstraint("member_id", "attended_on", name="uq_attendance_member_day"),
    )

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    organization_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    member_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("members.id", ondelete="CASCADE"), nullable=False, index=True
    )

    attended_on: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=AttendanceStatus.PRESENT.value)

    recorded_by_id: Mapped[str | None] = mapped_column(String(26), ForeignKey("members.id"), nullable=True)

    def __repr__(self) -> str:
        return f"<AttendanceRecord(member_id={self.member_id}, on={self.attended_on}, status={self.status})>"


class MinistryActivity(Base, TimestampMixin):
    """
    A recorded ministry act attributed to a member (outreach, soul winning, ...).
    """
    __tablename__ = "ministry_activities"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    organization_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    member_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("members.id", ondelete="CASCADE"), nullable=False, index=True
    )

    kind: Mapped[str] = mapped_column(String(50), nullable=False, default="outreach", index=True)
    occurred_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    recorded_by_id: Mapped[str | None] = mapped_column(String(26), ForeignKey("members.id"), nullable=True)

    def __repr__(self) -> str:
        return f"<MinistryActivity(member_id={self.member_id}, kind={self.kind!r})>"
