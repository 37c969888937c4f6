"""Value Records: plain, immutable rows handed across the service boundary.

Invariants:
    - Records carry identifiers, never ORM objects or lazy relationships
    - Joins happen in explicit queries in services/, records only hold results
"""

from dataclasses import dataclass, field
from datetime import datetime

from backalley.core.domain_types import AuthorId, InviteCode, PostId, ReplyId, SessionToken


@dataclass(frozen=True)
class AuthorRecord:
    id: AuthorId
    name: str


@dataclass(frozen=True)
class InviteRecord:
    code: InviteCode
    issuing_author_id: AuthorId
    redeemed_by_author_id: AuthorId | None = None

    @property
    def is_redeemed(self) -> bool:
        return self.redeemed_by_author_id is not None


@dataclass(frozen=True)
class IssuedSession:
    """A live session as handed to the HTTP layer for the client cookie."""
    token: SessionToken
    author_id: AuthorId
    expires_at: datetime


@dataclass(frozen=True)
class ReplyRecord:
    id: ReplyId
    post_id: PostId
    author_name: str
    text: str
    created_at: datetime
    image_url: str | None = None


@dataclass(frozen=True)
class PostRecord:
    id: PostId
    room: str
    author_name: str
    text: str
    created_at: datetime
    image_url: str | None = None
    replies: tuple[ReplyRecord, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ImageUpload:
    url: str
    object_url: str
