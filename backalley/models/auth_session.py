"""Session ORM: durable rows behind SqlSessionStore.

Invariants:
    - token is unique; one row per token
    - payload is opaque text (encoded by core/session_policy.py); no expiry column,
      expiry is enforced when the payload is decoded
"""

from sqlalchemy import String, Text, Integer
from sqlalchemy.orm import Mapped, mapped_column

from backalley.db.base import Base


class AuthSession(Base):
    """Stored session payload keyed by its opaque token."""
    __tablename__ = "sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    token: Mapped[str] = mapped_column(
        String(128), nullable=False, unique=True, index=True,
    )
    payload: Mapped[str] = mapped_column(Text, nullable=False)
