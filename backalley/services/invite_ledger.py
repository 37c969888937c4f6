"""Invite Ledger: quota-bounded invite issuance and single-use redemption.

Invariants:
    - issue() decrements the issuer's quota by exactly 1 and inserts the invite, or
      changes nothing (QuotaExhaustedError, DuplicateCodeError)
    - Codes are stored stripped; a blank code is InvalidInviteError before any quota is spent
    - remaining never goes negative: the decrement is a conditional UPDATE on remaining > 0
    - redeem() flips redeemed_by_author_id from NULL exactly once; a second attempt on
      the same code (sequential or concurrent) gets InvalidInviteError
    - Code uniqueness is enforced only by the unique index on invites.code
    - redeem() does not commit: the caller owns the transaction so redemption and
      author creation commit or roll back together

Design Decisions:
    - Conditional UPDATE ... WHERE redeemed_by_author_id IS NULL and rowcount check:
      the store's row locking serializes racers, no in-process locks
    - Redeemed invites are marked, not deleted
"""

import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from backalley.core.domain_types import AuthorId, InviteCode
from backalley.core.errors import (
    DuplicateCodeError, InvalidInviteError, QuotaExhaustedError,
)
from backalley.core.records import InviteRecord
from backalley.models.invite import Invite, InviteQuota

logger = logging.getLogger(__name__)


def _to_record(invite: Invite) -> InviteRecord:
    return InviteRecord(
        code=InviteCode(invite.code),
        issuing_author_id=AuthorId(invite.issuing_author_id),
        redeemed_by_author_id=(
            AuthorId(invite.redeemed_by_author_id)
            if invite.redeemed_by_author_id is not None else None
        ),
    )


class InviteLedger:
    """Invite issuance and redemption against the relational store."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def issue(self, issuing_author_id: AuthorId, code: str) -> InviteRecord:
        """Spend one unit of quota on a new invite code. Commits."""
        code = code.strip()
        if not code:
            # registration strips codes, so a blank one could never be redeemed
            raise InvalidInviteError()
        result = await self.db.execute(
            update(InviteQuota)
            .where(InviteQuota.author_id == issuing_author_id)
            .where(InviteQuota.remaining > 0)
            .values(remaining=InviteQuota.remaining - 1)
            .execution_options(synchronize_session=False),
        )
        if result.rowcount == 0:
            await self.db.rollback()
            logger.info("Invite quota exhausted", extra={"author_id": issuing_author_id})
            raise QuotaExhaustedError(issuing_author_id)

        invite = Invite(
            code=code, issuing_author_id=issuing_author_id, redeemed_by_author_id=None,
        )
        self.db.add(invite)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.info("Duplicate invite code", extra={"author_id": issuing_author_id})
            raise DuplicateCodeError()

        logger.info("Invite issued", extra={"author_id": issuing_author_id})
        return _to_record(invite)

    async def find_redeemable(self, code: str) -> InviteRecord | None:
        """Unredeemed invite for code, or None. Advisory only; redeem() re-checks."""
        result = await self.db.execute(
            select(Invite)
            .where(Invite.code == code)
            .where(Invite.redeemed_by_author_id.is_(None)),
        )
        invite = result.scalar_one_or_none()
        return _to_record(invite) if invite else None

    async def redeem(self, code: str, new_author_id: AuthorId) -> InviteRecord:
        """Mark code as redeemed by new_author_id. Does not commit."""
        result = await self.db.execute(
            update(Invite)
            .where(Invite.code == code)
            .where(Invite.redeemed_by_author_id.is_(None))
            .values(redeemed_by_author_id=new_author_id)
            .execution_options(synchronize_session=False),
        )
        if result.rowcount == 0:
            raise InvalidInviteError()

        issuer = await self.db.execute(
            select(Invite.issuing_author_id).where(Invite.code == code),
        )
        return InviteRecord(
            code=InviteCode(code),
            issuing_author_id=AuthorId(issuer.scalar_one()),
            redeemed_by_author_id=new_author_id,
        )

    async def grant_quota(self, author_id: AuthorId, allowance: int) -> None:
        """Create the author's quota row. Does not commit."""
        self.db.add(InviteQuota(author_id=author_id, remaining=allowance))
        await self.db.flush()

    async def remaining(self, author_id: AuthorId) -> int:
        result = await self.db.execute(
            select(InviteQuota.remaining).where(InviteQuota.author_id == author_id),
        )
        return result.scalar_one_or_none() or 0
