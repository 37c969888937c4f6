"""Error Hierarchy: codes, HTTP statuses and the REST envelope.

Tests cover:
    - Every domain error is a ForumError with a stable code and status
    - to_response() envelope shape
    - ErrorContext holds only the timestamp and the back-off hint
    - RateLimitedError carries retry_after_ms in its context
"""

from dataclasses import fields

import pytest

from backalley.core.errors import (
    AuthorNotFoundError, ConfigurationMissingError, DatabaseError,
    DuplicateCodeError, ErrorCategory, ErrorContext, ErrorSeverity, ForumError,
    ImageQuotaExceededError, InvalidInviteError, NameTakenError,
    NotAuthenticatedError, QuotaExhaustedError, RateLimitedError,
    ResourceNotFoundError, SessionNotFoundError, UploadRejectedError,
    WrongCredentialsError,
)


@pytest.mark.parametrize("error,code,status", [
    (NotAuthenticatedError(), "NOT_AUTHENTICATED", 403),
    (AuthorNotFoundError("ghost"), "AUTHOR_NOT_FOUND", 401),
    (WrongCredentialsError(), "WRONG_CREDENTIALS", 401),
    (SessionNotFoundError(), "SESSION_NOT_FOUND", 404),
    (InvalidInviteError(), "INVALID_INVITE", 403),
    (DuplicateCodeError(), "DUPLICATE_CODE", 409),
    (NameTakenError("alice"), "NAME_TAKEN", 409),
    (QuotaExhaustedError(1), "QUOTA_EXHAUSTED", 403),
    (RateLimitedError("auth_limit", 500), "RATE_LIMITED", 429),
    (ImageQuotaExceededError(100), "IMAGE_QUOTA_EXCEEDED", 403),
    (UploadRejectedError(0, 10), "UPLOAD_REJECTED", 400),
    (ResourceNotFoundError("Room", "nowhere"), "RESOURCE_NOT_FOUND", 404),
    (ConfigurationMissingError("password_pepper"), "CONFIGURATION_MISSING", 500),
    (DatabaseError("boom", "commit"), "DATABASE_ERROR", 503),
])
def test_error_code_and_status(error, code, status):
    assert isinstance(error, ForumError)
    assert error.code == code
    assert error.http_status == status


def test_login_messages_match_client_contract():
    assert AuthorNotFoundError("ghost").message == "author not found"
    assert WrongCredentialsError().message == "wrong password"


def test_invite_messages_match_client_contract():
    assert QuotaExhaustedError(1).message == "out of invites"
    assert DuplicateCodeError().message == "code already exists"


def test_to_response_envelope():
    body = InvalidInviteError().to_response()
    error = body["error"]
    assert error["code"] == "INVALID_INVITE"
    assert error["category"] == ErrorCategory.BUSINESS_RULE.value
    assert error["severity"] == ErrorSeverity.INFO.value
    assert error["message"] == "Invite code is invalid or already redeemed"
    assert "timestamp" in error
    assert error["context"] == {"retry_after_ms": None}


def test_rate_limited_carries_retry_after():
    error = RateLimitedError("post_limit", 1500)
    assert error.limiter == "post_limit"
    assert error.to_response()["error"]["context"]["retry_after_ms"] == 1500


def test_configuration_missing_is_critical():
    assert ConfigurationMissingError("password_pepper").severity is ErrorSeverity.CRITICAL


def test_error_context_fields():
    assert [f.name for f in fields(ErrorContext)] == ["timestamp", "retry_after_ms"]
