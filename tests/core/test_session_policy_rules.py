"""Session Policy Rules: token minting, payload encoding, liveness.

Tests cover:
    - Tokens are unique and URL-safe with 256 bits of entropy
    - expires_at = now + ttl
    - Payload survives encode/decode; malformed payloads decode to None
    - is_live is strict (a payload expiring exactly now is dead)
    - Naive datetimes are read as UTC
"""

import json
import string
from datetime import datetime, timedelta, timezone

import pytest

from backalley.core.session_policy import (
    as_utc, build_payload, decode_payload, encode_payload, is_live, mint_token,
)

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
TTL = timedelta(hours=24)


def test_tokens_are_unique():
    tokens = {mint_token() for _ in range(200)}
    assert len(tokens) == 200


def test_token_is_url_safe_and_long_enough():
    token = mint_token()
    allowed = set(string.ascii_letters + string.digits + "-_")
    assert set(token) <= allowed
    # 32 random bytes -> 43 base64url chars
    assert len(token) >= 43


def test_build_payload_sets_expiry_from_ttl():
    payload = build_payload(7, NOW, TTL)
    assert payload.author_id == 7
    assert payload.expires_at == NOW + TTL


def test_encoded_payload_decodes_to_same_values():
    payload = build_payload(7, NOW, TTL)
    decoded = decode_payload(encode_payload(payload))
    assert decoded == payload


def test_encoded_payload_is_json_with_iso_expiry():
    raw = encode_payload(build_payload(7, NOW, TTL))
    data = json.loads(raw)
    assert data["author_id"] == 7
    assert datetime.fromisoformat(data["expires_at"]) == NOW + TTL


# ─── Malformed payloads ──────────────────────────────────────────

@pytest.mark.parametrize("raw", [
    "",
    "not json",
    "[]",
    "null",
    json.dumps({"author_id": 7}),
    json.dumps({"expires_at": NOW.isoformat()}),
    json.dumps({"author_id": "7", "expires_at": NOW.isoformat()}),
    json.dumps({"author_id": True, "expires_at": NOW.isoformat()}),
    json.dumps({"author_id": 7, "expires_at": "tomorrow"}),
])
def test_malformed_payload_decodes_to_none(raw):
    assert decode_payload(raw) is None


# ─── Liveness ────────────────────────────────────────────────────

def test_payload_is_live_before_expiry():
    payload = build_payload(7, NOW, TTL)
    assert is_live(payload, NOW + TTL - timedelta(seconds=1))


def test_payload_is_dead_at_expiry():
    payload = build_payload(7, NOW, TTL)
    assert not is_live(payload, NOW + TTL)


def test_payload_is_dead_after_expiry():
    payload = build_payload(7, NOW, TTL)
    assert not is_live(payload, NOW + TTL + timedelta(seconds=1))


def test_naive_datetime_is_read_as_utc():
    naive = datetime(2026, 1, 1, 12, 0)
    assert as_utc(naive) == NOW
    assert as_utc(naive).tzinfo is timezone.utc


def test_aware_datetime_is_converted_to_utc():
    plus_two = timezone(timedelta(hours=2))
    assert as_utc(datetime(2026, 1, 1, 14, 0, tzinfo=plus_two)) == NOW
