"""Author Routes: register, login, logout, invite issuance and status.

Invariants:
    - register: any rejection answers 403 "failed" (invite-invalid and name-taken look identical)
    - login: rejections answer 401 with the specific reason ("author not found" / "wrong password")
    - login with a live session for the same author does not set a new cookie
    - invite issuance and status require a live session (NotAuthenticatedError -> 403)
    - a blank invite code answers 403 INVALID_INVITE and spends nothing
    - register, login and invite sit behind the auth rate limiter
"""

import logging

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import JSONResponse, PlainTextResponse

from backalley.api.dependencies import (
    current_author_id, get_auth_flow, get_invite_ledger, rate_limit,
    session_token,
)
from backalley.config import Settings, get_settings
from backalley.core.domain_types import AuthorId, RateLimitName, SessionToken
from backalley.core.errors import (
    AuthorNotFoundError, DuplicateCodeError, InvalidInviteError, NameTakenError,
    QuotaExhaustedError, WrongCredentialsError,
)
from backalley.core.records import IssuedSession
from backalley.schemas.auth import (
    AuthorStatusResponse, InviteResponse, LoginRequest, MessageResponse,
    RegisterRequest,
)
from backalley.services.auth_flow import AuthFlow
from backalley.services.invite_ledger import InviteLedger

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/author", tags=["author"])


def set_session_cookie(
    response: Response, session: IssuedSession, settings: Settings,
) -> None:
    response.set_cookie(
        settings.session_cookie_name,
        session.token,
        max_age=settings.session_ttl_seconds,
        path="/",
        secure=True,
        httponly=True,
        samesite="none",
    )


@router.post(
    "/register",
    response_model=MessageResponse,
    dependencies=[Depends(rate_limit(RateLimitName.AUTH))],
)
async def register(
    body: RegisterRequest,
    response: Response,
    flow: AuthFlow = Depends(get_auth_flow),
    settings: Settings = Depends(get_settings),
):
    """Redeem an invite, create the author, start a session."""
    try:
        session = await flow.register(body.name, body.password, body.code)
    except (InvalidInviteError, NameTakenError) as e:
        logger.info(f"Registration failed: {e.code}", extra={"error_code": e.code})
        return PlainTextResponse("failed", status_code=status.HTTP_403_FORBIDDEN)
    set_session_cookie(response, session, settings)
    return MessageResponse(msg="ok")


@router.post(
    "/login",
    response_model=MessageResponse,
    dependencies=[Depends(rate_limit(RateLimitName.AUTH))],
)
async def login(
    body: LoginRequest,
    response: Response,
    flow: AuthFlow = Depends(get_auth_flow),
    token: SessionToken | None = Depends(session_token),
    settings: Settings = Depends(get_settings),
):
    """Verify credentials; reuse a live session or start a new one."""
    try:
        result = await flow.login(body.name, body.password, token)
    except (AuthorNotFoundError, WrongCredentialsError) as e:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"msg": e.message},
        )
    if not result.reused:
        set_session_cookie(response, result.session, settings)
    return MessageResponse(msg="ok")


@router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    flow: AuthFlow = Depends(get_auth_flow),
    token: SessionToken | None = Depends(session_token),
    settings: Settings = Depends(get_settings),
):
    await flow.logout(token)
    response.delete_cookie(
        settings.session_cookie_name, path="/", secure=True, samesite="none",
    )
    return MessageResponse(msg="ok")


@router.get(
    "/invite",
    response_model=InviteResponse,
    dependencies=[Depends(rate_limit(RateLimitName.AUTH))],
)
async def issue_invite(
    code: str = Query(min_length=1, max_length=100),
    author_id: AuthorId = Depends(current_author_id),
    ledger: InviteLedger = Depends(get_invite_ledger),
):
    """Spend one invite from the caller's quota on `code`."""
    try:
        await ledger.issue(author_id, code)
    except (QuotaExhaustedError, DuplicateCodeError) as e:
        return InviteResponse(message=e.message)
    return InviteResponse(message="success")


@router.get("/status", response_model=AuthorStatusResponse)
async def author_status(
    author_id: AuthorId = Depends(current_author_id),
    flow: AuthFlow = Depends(get_auth_flow),
):
    snapshot = await flow.status(author_id)
    if snapshot is None:
        return JSONResponse(
            status_code=status.HTTP_403_FORBIDDEN,
            content={"msg": "Session timed out"},
        )
    return AuthorStatusResponse(
        name=snapshot.author.name,
        invites_remaining=snapshot.invites_remaining,
    )
