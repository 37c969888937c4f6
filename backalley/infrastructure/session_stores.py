"""Session Stores: SessionStore implementations (in-memory and relational).

Invariants:
    - write() upserts: existing token -> payload overwritten, else inserted
    - read() raises SessionNotFoundError for unknown tokens
    - invalidate() is idempotent
    - No TTL logic: payloads are stored and returned verbatim

Design Decisions:
    - SqlSessionStore commits per call on the request's AsyncSession; session writes
      are never part of a larger unit of work
    - Upsert is UPDATE-then-INSERT; a concurrent INSERT of the same token surfaces as
      IntegrityError and is retried as an UPDATE
"""

import logging

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from backalley.core.domain_types import SessionToken
from backalley.core.errors import SessionNotFoundError
from backalley.infrastructure.observability import token_prefix
from backalley.models.auth_session import AuthSession

logger = logging.getLogger(__name__)


class InMemorySessionStore:
    """Dict-backed store for tests and single-process development."""

    def __init__(self):
        self._payloads: dict[str, str] = {}

    async def write(self, token: SessionToken, payload: str) -> None:
        self._payloads[token] = payload

    async def read(self, token: SessionToken) -> str:
        try:
            return self._payloads[token]
        except KeyError:
            raise SessionNotFoundError() from None

    async def invalidate(self, token: SessionToken) -> None:
        self._payloads.pop(token, None)

    def __len__(self) -> int:
        return len(self._payloads)


class SqlSessionStore:
    """Relational store over the `sessions` table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def write(self, token: SessionToken, payload: str) -> None:
        if await self._update(token, payload):
            await self.db.commit()
            return
        self.db.add(AuthSession(token=token, payload=payload))
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.info(
                "Concurrent session insert, retrying as update",
                extra={"token_prefix": token_prefix(token)},
            )
            await self._update(token, payload)
            await self.db.commit()

    async def read(self, token: SessionToken) -> str:
        result = await self.db.execute(
            select(AuthSession.payload).where(AuthSession.token == token),
        )
        payload = result.scalar_one_or_none()
        if payload is None:
            raise SessionNotFoundError()
        return payload

    async def invalidate(self, token: SessionToken) -> None:
        await self.db.execute(
            delete(AuthSession).where(AuthSession.token == token),
        )
        await self.db.commit()

    async def _update(self, token: SessionToken, payload: str) -> bool:
        result = await self.db.execute(
            update(AuthSession)
            .where(AuthSession.token == token)
            .values(payload=payload),
        )
        return result.rowcount > 0
