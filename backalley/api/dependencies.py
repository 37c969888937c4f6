"""Request Dependencies: per-request wiring of settings, stores, policies and gates.

Invariants:
    - Every gated route resolves the session cookie through SessionPolicy on each request
    - current_author_id raises NotAuthenticatedError; optional_author_id returns None
    - rate_limit checks run on the event loop (async def), never in the threadpool
    - Rate limiters are keyed by the caller's network address
    - Process-wide collaborators (limiters, presigner) are built once from settings;
      tests replace them through app.dependency_overrides

Design Decisions:
    - Services are constructed per request around the request's AsyncSession
"""

import logging
from functools import lru_cache
from typing import Callable

from fastapi import Depends, Request
from limits.aio.storage import MemoryStorage
from sqlalchemy.ext.asyncio import AsyncSession

from backalley.config import Settings, get_settings
from backalley.core.credential_hasher import CredentialHasher
from backalley.core.domain_types import AuthorId, RateLimitName, SessionToken
from backalley.core.errors import RateLimitedError
from backalley.infrastructure.database import get_db
from backalley.infrastructure.object_storage import S3Presigner
from backalley.infrastructure.rate_limiter import ClientRateLimiter
from backalley.infrastructure.session_stores import SqlSessionStore
from backalley.services.auth_flow import AuthFlow
from backalley.services.content_service import ContentService
from backalley.services.image_service import ImageService
from backalley.services.invite_ledger import InviteLedger
from backalley.services.session_policy import SessionPolicy

logger = logging.getLogger(__name__)


# ─── Process-wide collaborators ──────────────────────────────────

class RateLimiterRegistry:
    """Named client limiters built from settings over one in-memory storage."""

    def __init__(self, settings: Settings):
        storage = MemoryStorage()
        self._limiters = {
            RateLimitName.AUTH: ClientRateLimiter(
                RateLimitName.AUTH.value,
                settings.auth_rate_limit, settings.auth_rate_period_seconds, storage,
            ),
            RateLimitName.POST: ClientRateLimiter(
                RateLimitName.POST.value,
                settings.post_rate_limit, settings.post_rate_period_seconds, storage,
            ),
        }

    def __getitem__(self, name: RateLimitName) -> ClientRateLimiter:
        return self._limiters[name]


@lru_cache
def get_rate_limiters() -> RateLimiterRegistry:
    return RateLimiterRegistry(get_settings())


@lru_cache
def get_presigner() -> S3Presigner:
    settings = get_settings()
    return S3Presigner(
        endpoint_url=settings.s3_endpoint,
        bucket=settings.s3_bucket,
        public_base_url=settings.s3_public_base_url,
        access_key_id=settings.aws_access_key_id,
        secret_access_key=settings.aws_secret_access_key,
        region=settings.s3_region,
        url_ttl_seconds=settings.image_url_ttl_seconds,
    )


def get_hasher(settings: Settings = Depends(get_settings)) -> CredentialHasher:
    return CredentialHasher(settings.password_pepper, settings.bcrypt_rounds)


# ─── Sessions ────────────────────────────────────────────────────

def get_session_policy(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> SessionPolicy:
    return SessionPolicy(SqlSessionStore(db), settings.session_ttl)


def session_token(
    request: Request, settings: Settings = Depends(get_settings),
) -> SessionToken | None:
    token = request.cookies.get(settings.session_cookie_name)
    return SessionToken(token) if token else None


async def optional_author_id(
    token: SessionToken | None = Depends(session_token),
    policy: SessionPolicy = Depends(get_session_policy),
) -> AuthorId | None:
    session = await policy.resolve(token)
    return session.author_id if session else None


async def current_author_id(
    token: SessionToken | None = Depends(session_token),
    policy: SessionPolicy = Depends(get_session_policy),
) -> AuthorId:
    return await policy.require_authenticated(token)


# ─── Services ────────────────────────────────────────────────────

def get_auth_flow(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    hasher: CredentialHasher = Depends(get_hasher),
    policy: SessionPolicy = Depends(get_session_policy),
) -> AuthFlow:
    return AuthFlow(db, hasher, policy, settings.invite_quota_default)


def get_invite_ledger(db: AsyncSession = Depends(get_db)) -> InviteLedger:
    return InviteLedger(db)


def get_content_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> ContentService:
    return ContentService(db, settings.content_cooldown)


def get_image_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    presigner: S3Presigner = Depends(get_presigner),
) -> ImageService:
    return ImageService(
        db, presigner, settings.image_max_bytes, settings.image_quota_per_author,
    )


# ─── Rate limiting ───────────────────────────────────────────────

def client_address(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def rate_limit(name: RateLimitName) -> Callable:
    """Dependency factory: refuse with 429 once the caller's window is full."""

    async def _check(
        request: Request,
        limiters: RateLimiterRegistry = Depends(get_rate_limiters),
    ) -> None:
        limiter = limiters[name]
        key = client_address(request)
        if not await limiter.hit(key):
            raise RateLimitedError(name.value, await limiter.retry_after_ms(key))

    return _check
