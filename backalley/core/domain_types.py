"""Domain Types: rich types that replace bare primitives across the codebase.

Invariants:
    - AuthorId, PostId, RoomId wrap ints; SessionToken and InviteCode wrap str
    - All valid states encoded as Enums, no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

AuthorId = NewType("AuthorId", int)
RoomId = NewType("RoomId", int)
PostId = NewType("PostId", int)
ReplyId = NewType("ReplyId", int)


# ─── Credential Types ────────────────────────────────────────────

SessionToken = NewType("SessionToken", str)
InviteCode = NewType("InviteCode", str)
PasswordHash = NewType("PasswordHash", str)


# ─── Enums ───────────────────────────────────────────────────────

class ThrottleDecision(str, Enum):
    """Outcome of the duplicate-content lookback."""
    ALLOW = "allow"
    SUPPRESSED = "suppressed"


class RateLimitName(str, Enum):
    """Rate limiters registered at startup."""
    AUTH = "auth_limit"
    POST = "post_limit"
