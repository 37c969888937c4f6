"""Async Session Factory: DB sessions for scripts running outside FastAPI.

Invariants:
    - Used by backalley.seed; request handling goes through infrastructure/database.py
    - The caller owns the returned engine and disposes it when done
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine,
)


def create_session_factory(
    database_url: str,
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """Create an engine and an async session factory bound to it."""
    engine = create_async_engine(database_url, echo=False)
    return engine, async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False,
    )
