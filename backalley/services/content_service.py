"""Content Service: post/reply creation behind the duplicate-content throttle, plus reads.

Invariants:
    - Empty or whitespace-only text is never stored
    - Identical text by the same author in the same scope (room for posts, post for
      replies) within the cooldown is SUPPRESSED: no row, None returned
    - Lookback and insert share one transaction; created_at is the `now` the check used
    - Unknown rooms/posts and vanished authors are silent no-ops (None), not errors
    - A reply targets a post only through the room it lives in
    - Reads are explicit joins returning plain records (no lazy relationship walks)
"""

import logging
from datetime import datetime, timedelta
from typing import Callable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backalley.core.content_throttle import check_cooldown, is_postable
from backalley.core.domain_types import AuthorId, PostId, ReplyId, ThrottleDecision
from backalley.core.records import PostRecord, ReplyRecord
from backalley.models.author import Author
from backalley.models.post import Post, Reply
from backalley.models.room import Room
from backalley.services.session_policy import utc_now

logger = logging.getLogger(__name__)


class ContentService:
    """Creates and reads posts and replies."""

    def __init__(
        self,
        db: AsyncSession,
        cooldown: timedelta,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.db = db
        self.cooldown = cooldown
        self.clock = clock

    # ─── Writes ──────────────────────────────────────────────────

    async def create_post(
        self, author_id: AuthorId, room_name: str, text: str,
    ) -> PostRecord | None:
        if not is_postable(text):
            return None
        author_name = await self._author_name(author_id)
        room_id = await self._room_id(room_name)
        if author_name is None or room_id is None:
            await self.db.rollback()
            return None

        now = self.clock()
        last = await self.db.execute(
            select(Post.created_at)
            .where(Post.author_id == author_id)
            .where(Post.room_id == room_id)
            .where(Post.text == text)
            .order_by(Post.created_at.desc())
            .limit(1),
        )
        if check_cooldown(last.scalar_one_or_none(), now, self.cooldown) is ThrottleDecision.SUPPRESSED:
            await self.db.rollback()
            logger.info(
                "Duplicate post suppressed",
                extra={"author_id": author_id, "room": room_name},
            )
            return None

        post = Post(text=text, author_id=author_id, room_id=room_id, created_at=now)
        self.db.add(post)
        await self.db.commit()
        return PostRecord(
            id=PostId(post.id), room=room_name, author_name=author_name,
            text=text, created_at=now,
        )

    async def create_reply(
        self, author_id: AuthorId, room_name: str, post_id: int, text: str,
    ) -> ReplyRecord | None:
        if not is_postable(text):
            return None
        author_name = await self._author_name(author_id)
        # the post must live in the named room, matching get_post
        post_in_room = await self.db.execute(
            select(Post.id)
            .join(Room, Room.id == Post.room_id)
            .where(Post.id == post_id)
            .where(Room.name == room_name),
        )
        if author_name is None or post_in_room.scalar_one_or_none() is None:
            await self.db.rollback()
            return None

        now = self.clock()
        last = await self.db.execute(
            select(Reply.created_at)
            .where(Reply.author_id == author_id)
            .where(Reply.post_id == post_id)
            .where(Reply.text == text)
            .order_by(Reply.created_at.desc())
            .limit(1),
        )
        if check_cooldown(last.scalar_one_or_none(), now, self.cooldown) is ThrottleDecision.SUPPRESSED:
            await self.db.rollback()
            logger.info(
                "Duplicate reply suppressed",
                extra={"author_id": author_id, "post_id": post_id},
            )
            return None

        reply = Reply(text=text, author_id=author_id, post_id=post_id, created_at=now)
        self.db.add(reply)
        await self.db.commit()
        return ReplyRecord(
            id=ReplyId(reply.id), post_id=PostId(post_id), author_name=author_name,
            text=text, created_at=now,
        )

    async def ensure_room(self, name: str) -> int:
        """Return the room id, creating the room if needed. Commits."""
        room_id = await self._room_id(name)
        if room_id is not None:
            return room_id
        room = Room(name=name)
        self.db.add(room)
        await self.db.commit()
        return room.id

    # ─── Reads ───────────────────────────────────────────────────

    async def list_room_posts(self, room_name: str) -> list[PostRecord] | None:
        """Posts in a room, newest first, each with its replies oldest first."""
        room_id = await self._room_id(room_name)
        if room_id is None:
            return None
        result = await self.db.execute(
            select(Post.id, Post.text, Post.image_url, Post.created_at, Author.name)
            .join(Author, Author.id == Post.author_id)
            .where(Post.room_id == room_id)
            .order_by(Post.created_at.desc(), Post.id.desc()),
        )
        rows = result.all()
        replies = await self._replies_for([row.id for row in rows])
        return [
            PostRecord(
                id=PostId(row.id), room=room_name, author_name=row.name,
                text=row.text, created_at=row.created_at, image_url=row.image_url,
                replies=tuple(replies.get(row.id, ())),
            )
            for row in rows
        ]

    async def get_post(self, room_name: str, post_id: int) -> PostRecord | None:
        result = await self.db.execute(
            select(Post.id, Post.text, Post.image_url, Post.created_at, Author.name)
            .join(Author, Author.id == Post.author_id)
            .join(Room, Room.id == Post.room_id)
            .where(Post.id == post_id)
            .where(Room.name == room_name),
        )
        row = result.one_or_none()
        if row is None:
            return None
        replies = await self._replies_for([row.id])
        return PostRecord(
            id=PostId(row.id), room=room_name, author_name=row.name,
            text=row.text, created_at=row.created_at, image_url=row.image_url,
            replies=tuple(replies.get(row.id, ())),
        )

    # ─── Helpers ─────────────────────────────────────────────────

    async def _replies_for(self, post_ids: list[int]) -> dict[int, list[ReplyRecord]]:
        if not post_ids:
            return {}
        result = await self.db.execute(
            select(
                Reply.id, Reply.post_id, Reply.text, Reply.image_url,
                Reply.created_at, Author.name,
            )
            .join(Author, Author.id == Reply.author_id)
            .where(Reply.post_id.in_(post_ids))
            .order_by(Reply.created_at.asc(), Reply.id.asc()),
        )
        grouped: dict[int, list[ReplyRecord]] = {}
        for row in result.all():
            grouped.setdefault(row.post_id, []).append(ReplyRecord(
                id=ReplyId(row.id), post_id=PostId(row.post_id),
                author_name=row.name, text=row.text,
                created_at=row.created_at, image_url=row.image_url,
            ))
        return grouped

    async def _room_id(self, name: str) -> int | None:
        result = await self.db.execute(select(Room.id).where(Room.name == name))
        return result.scalar_one_or_none()

    async def _author_name(self, author_id: AuthorId) -> str | None:
        result = await self.db.execute(select(Author.name).where(Author.id == author_id))
        return result.scalar_one_or_none()
