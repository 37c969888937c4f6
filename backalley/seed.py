"""Seed Script: creates rooms and a root author so the invite chain has a start.

Invariants:
    - Idempotent: existing rooms are kept, an existing root author is left untouched
    - The root author gets the default invite quota, like any registered author
    - Password is hashed with the same pepper the API uses (PASSWORD_PEPPER)

Usage:
    python -m backalley.seed --room general --room random
    python -m backalley.seed --root-author admin --root-password '...'
"""

import argparse
import asyncio
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backalley.config import Settings, get_settings
from backalley.core.credential_hasher import CredentialHasher
from backalley.core.domain_types import AuthorId
from backalley.db.session import create_session_factory
from backalley.infrastructure.observability import setup_logging
from backalley.models.author import Author
from backalley.services.content_service import ContentService
from backalley.services.invite_ledger import InviteLedger

logger = logging.getLogger(__name__)


async def seed_rooms(db: AsyncSession, names: list[str], settings: Settings) -> list[int]:
    content = ContentService(db, settings.content_cooldown)
    return [await content.ensure_room(name) for name in names]


async def seed_root_author(
    db: AsyncSession, name: str, password: str, settings: Settings,
) -> AuthorId | None:
    """Create the root author with a fresh invite quota. None if the name exists."""
    existing = await db.execute(select(Author.id).where(Author.name == name))
    if existing.scalar_one_or_none() is not None:
        logger.info(f"Root author '{name}' already exists, skipping")
        return None

    hasher = CredentialHasher(settings.password_pepper, settings.bcrypt_rounds)
    author = Author(name=name, password_hash=hasher.hash(password))
    db.add(author)
    await db.flush()
    author_id = AuthorId(author.id)
    await InviteLedger(db).grant_quota(author_id, settings.invite_quota_default)
    await db.commit()
    logger.info("Root author created", extra={"author_id": author_id})
    return author_id


async def run(args: argparse.Namespace, settings: Settings) -> None:
    engine, factory = create_session_factory(settings.database_url)
    try:
        async with factory() as db:
            if args.room:
                await seed_rooms(db, args.room, settings)
                logger.info(f"Rooms ready: {', '.join(args.room)}")
            if args.root_author:
                await seed_root_author(db, args.root_author, args.root_password, settings)
    finally:
        await engine.dispose()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed BackAlley rooms and root author")
    parser.add_argument("--room", action="append", default=[], help="Room name (repeatable)")
    parser.add_argument("--root-author", help="Name of the first author")
    parser.add_argument("--root-password", help="Password for the first author")
    args = parser.parse_args(argv)
    if args.root_author and not args.root_password:
        parser.error("--root-author requires --root-password")
    return args


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    settings = get_settings()
    setup_logging(settings.log_level, "text")
    asyncio.run(run(args, settings))


if __name__ == "__main__":
    main()
