"""ORM Models: SQLAlchemy declarative models for all persisted entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Author is the root; every other table references it by id only

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all / autogenerate
"""

from backalley.models.author import Author  # noqa: F401
from backalley.models.auth_session import AuthSession  # noqa: F401
from backalley.models.invite import Invite, InviteQuota  # noqa: F401
from backalley.models.room import Room  # noqa: F401
from backalley.models.post import Post, Reply  # noqa: F401
from backalley.models.image import Image  # noqa: F401
