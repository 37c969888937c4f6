"""Image ORM: one row per presigned upload handed to an author.

Invariants:
    - Row count per author equals authors.image_count, bounded by IMAGE_QUOTA_PER_AUTHOR
"""

from datetime import datetime, timezone

from sqlalchemy import BigInteger, Text, Integer, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from backalley.db.base import Base


class Image(Base):
    __tablename__ = "images"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    object_url: Mapped[str] = mapped_column(Text, nullable=False)
    size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    author_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("authors.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
