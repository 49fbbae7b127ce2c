"""
Member model with ULID primary keys.
"""
from datetime import datetime
from sqlalchemy import String, Boolean, ForeignKey, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shepherd.core.database.base import Base, TimestampMixin, generate_ulid


class Member(Base, TimestampMixin):
    """
    An authenticated person inside one organization.

    ``role`` is a single scalar identifier; list-shaped role assignments are
    reduced to their primary role before they reach this table.
    """
    __tablename__ = "members"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    organization_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # Identity provider subject (the "userId" claim of the bearer token)
    appwrite_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)

    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)

    role: Mapped[str] = mapped_column(String(50), nullable=False, default="newcomer", index=True)

    # Missing join date means zero tenure
    joined_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    organization: Mapped["Organization"] = relationship(  # type: ignore
        "Organization",
        back_populates="members",
        lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<Member(id={self.id}, email={self.email!r}, role={self.role!r})>"
