"""Content Throttle Rules: pure cooldown check for duplicate posts and replies.

Invariants:
    - SUPPRESSED iff a prior identical item exists and now - created_at <= cooldown
    - No prior item means ALLOW
    - is_postable() rejects empty and whitespace-only text
"""

from datetime import datetime, timedelta

from backalley.core.domain_types import ThrottleDecision
from backalley.core.session_policy import as_utc


def check_cooldown(
    last_created_at: datetime | None, now: datetime, cooldown: timedelta,
) -> ThrottleDecision:
    """Decide whether a new identical item may be created at `now`."""
    if last_created_at is None:
        return ThrottleDecision.ALLOW
    if as_utc(now) - as_utc(last_created_at) <= cooldown:
        return ThrottleDecision.SUPPRESSED
    return ThrottleDecision.ALLOW


def is_postable(text: str | None) -> bool:
    return bool(text and text.strip())
