"""BackAlley API: FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map ForumError -> structured JSON responses
    - CORS configured from settings (credentials allowed for the session cookie)
    - Settings load at import: a missing PASSWORD_PEPPER raises ConfigurationMissingError
      and the process does not start
    - Database initialized on startup via lifespan context manager
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backalley.api.error_handlers import register_error_handlers
from backalley.api.routes import auth, health, images, posts
from backalley.config import get_settings
from backalley.db.base import Base
from backalley.infrastructure import database
from backalley.infrastructure.observability import setup_logging
import backalley.models  # noqa: F401

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = database.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    if settings.database_create_all:
        async with manager.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    logger.info("BackAlley API started")
    yield
    await manager.dispose()
    logger.info("BackAlley API shutting down")


app = FastAPI(
    title="BackAlley API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["Content-Type", "Authorization"],
    expose_headers=["Set-Cookie"],
)

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(posts.router)
app.include_router(images.router)

register_error_handlers(app)


@app.get("/")
async def root():
    return {"msg": "Hello, world!"}
