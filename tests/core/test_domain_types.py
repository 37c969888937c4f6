"""Domain Types: verifies rich type definitions and enum values.

Tests:
    - NewType wrappers exist and are callable
    - Enums have expected members and serialize to string
    - Record helpers (InviteRecord.is_redeemed)
"""

from backalley.core.domain_types import (
    AuthorId, PostId, RoomId, SessionToken, InviteCode,
    RateLimitName, ThrottleDecision,
)
from backalley.core.records import InviteRecord


def test_identity_types_wrap_int():
    assert AuthorId(3) == 3
    assert RoomId(4) == 4
    assert PostId(5) == 5


def test_credential_types_wrap_str():
    assert SessionToken("abc") == "abc"
    assert InviteCode("welcome") == "welcome"


def test_throttle_decision_has_two_outcomes():
    assert set(ThrottleDecision) == {ThrottleDecision.ALLOW, ThrottleDecision.SUPPRESSED}


def test_rate_limit_names_match_registered_limiters():
    assert RateLimitName.AUTH.value == "auth_limit"
    assert RateLimitName.POST.value == "post_limit"


def test_invite_record_redeemed_flag():
    fresh = InviteRecord(code=InviteCode("abc"), issuing_author_id=AuthorId(1))
    used = InviteRecord(
        code=InviteCode("abc"), issuing_author_id=AuthorId(1),
        redeemed_by_author_id=AuthorId(2),
    )
    assert not fresh.is_redeemed
    assert used.is_redeemed
