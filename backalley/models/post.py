"""Post & Reply ORM: author content scoped to a room (posts) or a post (replies).

Invariants:
    - text is non-empty (enforced by ContentService before insert), max 200 chars
    - created_at is set by ContentService from its clock, the same instant the
      throttle check used
    - (author_id, room_id, created_at) and (author_id, post_id, created_at) are
      indexed for the duplicate-content lookback
"""

from datetime import datetime

from sqlalchemy import String, Text, Integer, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from backalley.db.base import Base

MAX_TEXT_LENGTH = 200


class Post(Base):
    __tablename__ = "posts"
    __table_args__ = (
        Index("ix_posts_author_room_created", "author_id", "room_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    text: Mapped[str] = mapped_column(String(MAX_TEXT_LENGTH), nullable=False)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    author_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("authors.id", ondelete="CASCADE"), nullable=False,
    )
    room_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )


class Reply(Base):
    __tablename__ = "replies"
    __table_args__ = (
        Index("ix_replies_author_post_created", "author_id", "post_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    text: Mapped[str] = mapped_column(String(MAX_TEXT_LENGTH), nullable=False)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    author_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("authors.id", ondelete="CASCADE"), nullable=False,
    )
    post_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
