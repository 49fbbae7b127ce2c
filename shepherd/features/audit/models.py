"""
Audit entry model.
"""
from datetime import datetime, timezone
from typing import Any, Dict
from sqlalchemy import String, ForeignKey, DateTime, JSON, Index
from sqlalchemy.orm import Mapped, mapped_column
import enum

from shepherd.core.database.base import Base, generate_ulid


class AuditKind(str, enum.Enum):
    ROLE_CHANGE = "role_change"
    ROLE_OVERRIDE = "role_override"
    MEMBER_REGISTERED = "member_registered"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEntry(Base):
    """
    One recorded mutation.

    Rows are only ever inserted; there is no updated_at column and no code
    path that updates or deletes an entry.
    """
    __tablename__ = "audit_entries"
    __table_args__ = (
        Index("ix_audit_entries_org_kind_created", "organization_id", "kind", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    organization_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Actor
    performed_by_id: Mapped[str | None] = mapped_column(
        String(26), ForeignKey("members.id", ondelete="SET NULL"), nullable=True, index=True
    )
    # Member the change applies to; null for tenant-level changes such as role overrides
    subject_id: Mapped[str | None] = mapped_column(
        String(26), ForeignKey("members.id", ondelete="SET NULL"), nullable=True, index=True
    )

    kind: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    target: Mapped[str | None] = mapped_column(String(100), nullable=True)

    old_value: Mapped[Dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    new_value: Mapped[Dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    # Set client side so entries written within the same second still order
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<AuditEntry(id={self.id}, kind={self.kind}, subject_id={self.subject_id})>"
