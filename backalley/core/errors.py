"""Error Hierarchy: typed, categorized exceptions for every BackAlley failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are expected, locally recoverable rejections
    - Infrastructure errors (500-level) abort the operation; ConfigurationMissingError aborts startup
    - to_response() produces the REST envelope
    - No secret material (passwords, peppers, session tokens) in messages

Design Decisions:
    - Single hierarchy with ForumError base: the global handler in api/error_handlers.py catches all
    - A suppressed duplicate post is a ThrottleDecision value, not an exception
"""

from dataclasses import dataclass, field
from enum import Enum
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    RATE_LIMIT = "rate_limit"
    CONFIGURATION = "configuration"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """When the error happened and, for throttling, how long to back off."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    retry_after_ms: int | None = None


class ForumError(Exception):
    """Base exception for all BackAlley errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }


# ─── Authentication ──────────────────────────────────────────────

class NotAuthenticatedError(ForumError):
    """Session token missing, unknown, undecodable or expired."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Session timed out", "NOT_AUTHENTICATED",
            ErrorCategory.AUTHENTICATION, ErrorSeverity.WARNING, context, 403,
        )


class AuthorNotFoundError(ForumError):
    """Login named an author that does not exist."""
    def __init__(self, name: str, context: ErrorContext | None = None):
        super().__init__(
            "author not found", "AUTHOR_NOT_FOUND",
            ErrorCategory.AUTHENTICATION, ErrorSeverity.INFO, context, 401,
        )
        self.name = name


class WrongCredentialsError(ForumError):
    """Password did not verify against the stored hash."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "wrong password", "WRONG_CREDENTIALS",
            ErrorCategory.AUTHENTICATION, ErrorSeverity.INFO, context, 401,
        )


class SessionNotFoundError(ForumError):
    """Session store has no record for the token."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Session not found", "SESSION_NOT_FOUND",
            ErrorCategory.RESOURCE_NOT_FOUND, ErrorSeverity.INFO, context, 404,
        )


# ─── Invites & registration ──────────────────────────────────────

class InvalidInviteError(ForumError):
    """Invite code unknown or already redeemed."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Invite code is invalid or already redeemed", "INVALID_INVITE",
            ErrorCategory.BUSINESS_RULE, ErrorSeverity.INFO, context, 403,
        )


class DuplicateCodeError(ForumError):
    """Invite code already exists."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "code already exists", "DUPLICATE_CODE",
            ErrorCategory.CONFLICT, ErrorSeverity.INFO, context, 409,
        )


class NameTakenError(ForumError):
    """Author name already registered."""
    def __init__(self, name: str, context: ErrorContext | None = None):
        super().__init__(
            f"Author name '{name}' is taken", "NAME_TAKEN",
            ErrorCategory.CONFLICT, ErrorSeverity.INFO, context, 409,
        )
        self.name = name


class QuotaExhaustedError(ForumError):
    """Issuer has no invites left."""
    def __init__(self, author_id: int, context: ErrorContext | None = None):
        super().__init__(
            "out of invites", "QUOTA_EXHAUSTED",
            ErrorCategory.BUSINESS_RULE, ErrorSeverity.INFO, context, 403,
        )
        self.author_id = author_id


# ─── Abuse mitigation ────────────────────────────────────────────

class RateLimitedError(ForumError):
    """Caller exceeded the request window for this route group."""
    def __init__(self, limiter: str, retry_after_ms: int, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.retry_after_ms = retry_after_ms
        super().__init__(
            f"Too many requests ({limiter})", "RATE_LIMITED",
            ErrorCategory.RATE_LIMIT, ErrorSeverity.WARNING, ctx, 429,
        )
        self.limiter = limiter


class ImageQuotaExceededError(ForumError):
    """Author reached the maximum number of uploaded images."""
    def __init__(self, quota: int, context: ErrorContext | None = None):
        super().__init__(
            "image upload limit reached", "IMAGE_QUOTA_EXCEEDED",
            ErrorCategory.BUSINESS_RULE, ErrorSeverity.INFO, context, 403,
        )
        self.quota = quota


class UploadRejectedError(ForumError):
    """Declared upload size is zero, negative or above the limit."""
    def __init__(self, size: int, max_bytes: int, context: ErrorContext | None = None):
        super().__init__(
            f"File size {size} outside 1..{max_bytes} bytes", "UPLOAD_REJECTED",
            ErrorCategory.VALIDATION, ErrorSeverity.INFO, context, 400,
        )


class ResourceNotFoundError(ForumError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class ConfigurationMissingError(ForumError):
    """Required configuration absent at startup."""
    def __init__(self, setting: str, context: ErrorContext | None = None):
        super().__init__(
            f"Required setting '{setting}' is missing",
            "CONFIGURATION_MISSING", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.setting = setting


class DatabaseError(ForumError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class ObjectStorageError(ForumError):
    """Presigning an upload URL failed."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Object storage error: {message}",
            "OBJECT_STORAGE_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, context, 503,
        )
