"""Post Routes: room listings, single posts, and post/reply creation.

Invariants:
    - Creation answers {"msg": "ok"} when a row was written and {"msg": "ignored"}
      otherwise (no session, empty text, unknown room/post, post outside the room,
      throttled duplicate); the status code is 200 in both cases
    - Creation sits behind the post rate limiter
    - Reads need no session
"""

import logging

from fastapi import APIRouter, Depends

from backalley.api.dependencies import (
    get_content_service, optional_author_id, rate_limit,
)
from backalley.core.domain_types import AuthorId, RateLimitName
from backalley.core.errors import ResourceNotFoundError
from backalley.schemas.auth import MessageResponse
from backalley.schemas.post import PostDto, PostRequest
from backalley.services.content_service import ContentService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/posts", tags=["posts"])

_OK = MessageResponse(msg="ok")
_IGNORED = MessageResponse(msg="ignored")


@router.get("/{room}/", response_model=list[PostDto])
async def list_posts(
    room: str, content: ContentService = Depends(get_content_service),
):
    posts = await content.list_room_posts(room)
    if posts is None:
        raise ResourceNotFoundError("Room", room)
    return [PostDto.from_record(p) for p in posts]


@router.get("/{room}/{post_id}/", response_model=PostDto)
async def get_post(
    room: str, post_id: int,
    content: ContentService = Depends(get_content_service),
):
    post = await content.get_post(room, post_id)
    if post is None:
        raise ResourceNotFoundError("Post", str(post_id))
    return PostDto.from_record(post)


@router.post(
    "/{room}/",
    response_model=MessageResponse,
    dependencies=[Depends(rate_limit(RateLimitName.POST))],
)
async def create_post(
    room: str,
    body: PostRequest,
    author_id: AuthorId | None = Depends(optional_author_id),
    content: ContentService = Depends(get_content_service),
):
    if author_id is None:
        return _IGNORED
    post = await content.create_post(author_id, room, body.text)
    return _OK if post else _IGNORED


@router.post(
    "/{room}/{post_id}/",
    response_model=MessageResponse,
    dependencies=[Depends(rate_limit(RateLimitName.POST))],
)
async def create_reply(
    room: str,
    post_id: int,
    body: PostRequest,
    author_id: AuthorId | None = Depends(optional_author_id),
    content: ContentService = Depends(get_content_service),
):
    if author_id is None:
        return _IGNORED
    reply = await content.create_reply(author_id, room, post_id, body.text)
    return _OK if reply else _IGNORED
