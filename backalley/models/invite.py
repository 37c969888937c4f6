"""Invite ORM: one-time registration codes and per-author issuance quotas.

Invariants:
    - code is globally unique (unique constraint is the only uniqueness check)
    - redeemed_by_author_id moves from NULL to an author id at most once
    - Redeemed invites are kept (never deleted) for audit history
    - InviteQuota.remaining never goes below zero (CHECK constraint + conditional UPDATE)
"""

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, String, Integer, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from backalley.db.base import Base


class Invite(Base):
    """Invite code issued by an author against their quota."""
    __tablename__ = "invites"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(
        String(100), nullable=False, unique=True, index=True,
    )
    issuing_author_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("authors.id", ondelete="CASCADE"), nullable=False,
    )
    redeemed_by_author_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("authors.id", ondelete="SET NULL"), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )


class InviteQuota(Base):
    """How many more invites an author may issue."""
    __tablename__ = "invite_quotas"
    __table_args__ = (
        CheckConstraint("remaining >= 0", name="ck_invite_quotas_remaining"),
    )

    author_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("authors.id", ondelete="CASCADE"), primary_key=True,
    )
    remaining: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
