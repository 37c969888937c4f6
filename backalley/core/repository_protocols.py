"""Boundary Protocols: contracts between core and shell.

Invariants:
    - Core never imports from shell; dependency arrows point inward only
    - Implementations provided by shell (infrastructure/) via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: implementations do IO, callers in services/ await them
"""

from typing import Protocol

from backalley.core.domain_types import SessionToken


class SessionStore(Protocol):
    """Blind token -> payload store. No TTL logic lives here.

    read() raises SessionNotFoundError when the token is absent.
    invalidate() is idempotent.
    """
    async def write(self, token: SessionToken, payload: str) -> None: ...
    async def read(self, token: SessionToken) -> str: ...
    async def invalidate(self, token: SessionToken) -> None: ...


class ObjectStoragePresigner(Protocol):
    """Issues short-lived upload URLs for an object key."""
    def presign_put(
        self, object_key: str, content_type: str, size: int,
    ) -> str: ...

    def public_url(self, object_key: str) -> str: ...
