"""Session Policy: issues, resolves and invalidates sessions over any SessionStore.

Invariants:
    - issue() mints a fresh token with expires_at = now + ttl and persists it
    - resolve() returns None (invalid) for missing, undecodable or expired payloads
    - resolve() never deletes an expired row; expiry is passive
    - require_authenticated() raises NotAuthenticatedError instead of returning None

Design Decisions:
    - Pure rules live in core/session_policy.py; this class only adds the store IO
    - Clock is injected so expiry is testable without sleeping
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable

from backalley.core.domain_types import AuthorId, SessionToken
from backalley.core.errors import NotAuthenticatedError, SessionNotFoundError
from backalley.core.records import IssuedSession
from backalley.core.repository_protocols import SessionStore
from backalley.core.session_policy import (
    build_payload, decode_payload, encode_payload, is_live, mint_token,
)
from backalley.infrastructure.observability import token_prefix

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionPolicy:
    """Session lifecycle rules layered over a blind payload store."""

    def __init__(
        self,
        store: SessionStore,
        ttl: timedelta,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.ttl = ttl
        self.clock = clock

    async def issue(self, author_id: AuthorId) -> IssuedSession:
        token = mint_token()
        payload = build_payload(author_id, self.clock(), self.ttl)
        await self.store.write(token, encode_payload(payload))
        logger.info(
            "Session issued",
            extra={"author_id": author_id, "token_prefix": token_prefix(token)},
        )
        return IssuedSession(
            token=token, author_id=payload.author_id, expires_at=payload.expires_at,
        )

    async def resolve(self, token: SessionToken | None) -> IssuedSession | None:
        if not token:
            return None
        try:
            raw = await self.store.read(token)
        except SessionNotFoundError:
            return None
        payload = decode_payload(raw)
        if payload is None:
            logger.warning(
                "Undecodable session payload",
                extra={"token_prefix": token_prefix(token)},
            )
            return None
        if not is_live(payload, self.clock()):
            return None
        return IssuedSession(
            token=token, author_id=payload.author_id, expires_at=payload.expires_at,
        )

    async def require_authenticated(self, token: SessionToken | None) -> AuthorId:
        session = await self.resolve(token)
        if session is None:
            raise NotAuthenticatedError()
        return session.author_id

    async def invalidate(self, token: SessionToken | None) -> None:
        if token:
            await self.store.invalidate(token)
