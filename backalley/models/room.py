"""Room ORM: named boards that posts are made into."""

from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column

from backalley.db.base import Base


class Room(Base):
    __tablename__ = "rooms"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(
        String(100), nullable=False, unique=True, index=True,
    )
