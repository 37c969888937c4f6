"""Author ORM: the root identity every other row references by id.

Invariants:
    - name is globally unique (unique index); immutable after registration
    - password_hash is a bcrypt string produced by CredentialHasher
    - image_count only moves through a conditional UPDATE bounded by the image quota
    - No relationship() back-pointers: joins are explicit queries in services/
"""

from datetime import datetime, timezone

from sqlalchemy import String, Text, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from backalley.db.base import Base

MAX_NAME_LENGTH = 200


class Author(Base):
    """Registered forum author."""
    __tablename__ = "authors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH), nullable=False, unique=True, index=True,
    )
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    image_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
