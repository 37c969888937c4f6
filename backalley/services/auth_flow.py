"""Registration & Login Flow: turns credentials (+ invite) into an authenticated session.

Invariants:
    - register(): invite redemption, author insert and quota grant commit as one
      transaction; any failure rolls all three back (no consumed invite without author)
    - register() checks the invite before the name: unknown/used code -> InvalidInviteError
      even when the name is also taken
    - login(): unknown name -> AuthorNotFoundError, bad password -> WrongCredentialsError,
      no session minted on either
    - login() with a live session for the same author reuses it (token unchanged)

Design Decisions:
    - bcrypt runs in a worker thread (asyncio.to_thread), off the event loop
    - A live session presented for a different author does not count as "already
      logged in"; a fresh session is issued for the authenticating author
"""

import asyncio
import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from backalley.core.credential_hasher import CredentialHasher
from backalley.core.domain_types import AuthorId, SessionToken
from backalley.core.errors import (
    AuthorNotFoundError, InvalidInviteError, NameTakenError, WrongCredentialsError,
)
from backalley.core.records import AuthorRecord, IssuedSession
from backalley.models.author import Author
from backalley.services.invite_ledger import InviteLedger
from backalley.services.session_policy import SessionPolicy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    session: IssuedSession
    reused: bool


@dataclass(frozen=True)
class AuthorStatus:
    author: AuthorRecord
    invites_remaining: int


class AuthFlow:
    """Orchestrates hasher, invite ledger and session policy per request."""

    def __init__(
        self,
        db: AsyncSession,
        hasher: CredentialHasher,
        policy: SessionPolicy,
        invite_quota_default: int,
    ):
        self.db = db
        self.hasher = hasher
        self.policy = policy
        self.ledger = InviteLedger(db)
        self.invite_quota_default = invite_quota_default

    async def register(self, name: str, password: str, code: str) -> IssuedSession:
        if await self.ledger.find_redeemable(code) is None:
            await self.db.rollback()
            logger.info("Registration rejected: invalid invite")
            raise InvalidInviteError()

        password_hash = await asyncio.to_thread(self.hasher.hash, password)
        author_id = await self._create_author_with_invite(name, password_hash, code)

        logger.info("Author registered", extra={"author_id": author_id})
        return await self.policy.issue(author_id)

    async def _create_author_with_invite(
        self, name: str, password_hash: str, code: str,
    ) -> AuthorId:
        author = Author(name=name, password_hash=password_hash)
        self.db.add(author)
        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            logger.info("Registration rejected: name taken")
            raise NameTakenError(name)

        author_id = AuthorId(author.id)
        try:
            await self.ledger.redeem(code, author_id)
            await self.ledger.grant_quota(author_id, self.invite_quota_default)
            await self.db.commit()
        except InvalidInviteError:
            await self.db.rollback()
            logger.info("Registration rejected: invite redeemed concurrently")
            raise
        except IntegrityError:
            await self.db.rollback()
            raise NameTakenError(name)
        return author_id

    async def login(
        self, name: str, password: str, presented_token: SessionToken | None = None,
    ) -> LoginResult:
        result = await self.db.execute(
            select(Author.id, Author.password_hash).where(Author.name == name),
        )
        row = result.one_or_none()
        if row is None:
            logger.info("Login rejected: author not found")
            raise AuthorNotFoundError(name)

        author_id = AuthorId(row.id)
        if not await asyncio.to_thread(self.hasher.verify, password, row.password_hash):
            logger.info("Login rejected: wrong password", extra={"author_id": author_id})
            raise WrongCredentialsError()

        existing = await self.policy.resolve(presented_token)
        if existing is not None and existing.author_id == author_id:
            return LoginResult(session=existing, reused=True)

        session = await self.policy.issue(author_id)
        return LoginResult(session=session, reused=False)

    async def logout(self, token: SessionToken | None) -> None:
        await self.policy.invalidate(token)

    async def status(self, author_id: AuthorId) -> AuthorStatus | None:
        result = await self.db.execute(
            select(Author.id, Author.name).where(Author.id == author_id),
        )
        row = result.one_or_none()
        if row is None:
            return None
        return AuthorStatus(
            author=AuthorRecord(id=AuthorId(row.id), name=row.name),
            invites_remaining=await self.ledger.remaining(author_id),
        )
