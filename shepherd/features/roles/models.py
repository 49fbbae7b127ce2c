"""
Tenant role overrides.

The built-in ladder lives in configuration; an organization may override a
role's grants, rank or display name by storing a row here.
"""
from typing import Any, Dict
from sqlalchemy import String, ForeignKey, JSON, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from shepherd.core.database.base import Base, TimestampMixin, generate_ulid


class OrganizationRole(Base, TimestampMixin):
    """
    Organization-scoped override of a configured role.

    Null columns inherit the configured value.
    Example permissions: {"finances": ["read"], "reports": true}
    """
    __tablename__ = "organization_roles"
    __table_args__ = (
        UniqueConstraint("organization_id", "name", name="uq_organization_roles_org_name"),
    )

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    organization_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    name: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    rank: Mapped[int | None] = mapped_column(Integer, nullable=True)
    display_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Grant map stored as JSON
    permissions: Mapped[Dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    def as_config(self) -> Dict[str, Any]:
        return {
            "rank": self.rank,
            "display_name": self.display_name,
            "description": self.description,
            "permissions": self.permissions,
        }

    def __repr__(self) -> str:
        return f"<OrganizationRole(id={self.id}, org_id={self.organization_id}, name={self.name!r})>"
