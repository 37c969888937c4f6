"""Session Policy Rules: pure minting, encoding and validity checks for sessions.

Invariants:
    - Tokens carry 256 bits from the OS CSPRNG (secrets.token_urlsafe(32))
    - expires_at = now + ttl at creation, never extended afterwards
    - A payload is live iff it decodes and expires_at > now
    - decode_payload() returns None on any malformed payload, never raises

Design Decisions:
    - Payload is JSON text so any key-value backend can store it blindly
    - Timestamps are timezone-aware UTC; naive values are read as UTC
"""

import json
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from backalley.core.domain_types import AuthorId, SessionToken

TOKEN_BYTES = 32


@dataclass(frozen=True)
class SessionPayload:
    """What the session store holds for a token."""
    author_id: AuthorId
    expires_at: datetime


def mint_token() -> SessionToken:
    return SessionToken(secrets.token_urlsafe(TOKEN_BYTES))


def build_payload(author_id: AuthorId, now: datetime, ttl: timedelta) -> SessionPayload:
    return SessionPayload(author_id=author_id, expires_at=as_utc(now) + ttl)


def encode_payload(payload: SessionPayload) -> str:
    return json.dumps({
        "author_id": payload.author_id,
        "expires_at": payload.expires_at.isoformat(),
    })


def decode_payload(raw: str) -> SessionPayload | None:
    """Parse stored payload text. Anything unexpected yields None."""
    try:
        data = json.loads(raw)
        author_id = data["author_id"]
        expires_at = datetime.fromisoformat(data["expires_at"])
    except (TypeError, ValueError, KeyError):
        return None
    if not isinstance(author_id, int) or isinstance(author_id, bool):
        return None
    return SessionPayload(author_id=AuthorId(author_id), expires_at=as_utc(expires_at))


def is_live(payload: SessionPayload, now: datetime) -> bool:
    return payload.expires_at > as_utc(now)


def as_utc(moment: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on round-trip)."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)
