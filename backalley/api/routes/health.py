"""Health & Readiness Probes: is the process up, and can it serve the forum.

Invariants:
    - GET /api/v1/health/ always returns 200 while the process runs
    - GET /api/v1/health/ready returns 503 "database_unavailable" when the database
      does not answer, and 503 "schema_missing" (naming the tables) before migrations ran
"""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from backalley.infrastructure import database

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


def _not_ready(reason: str, **detail) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "not_ready", "reason": reason, **detail},
    )


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    return {
        "status": "healthy",
        "service": "backalley-api",
        "version": "1.0.0",
    }


@router.get("/ready")
async def readiness_check():
    """Database reachable and the forum schema migrated."""
    manager = database.db_manager
    if manager is None or not await manager.health_check():
        return _not_ready("database_unavailable")

    missing = await manager.missing_tables()
    if missing:
        logger.warning(f"Readiness: forum tables missing: {', '.join(missing)}")
        return _not_ready("schema_missing", missing_tables=missing)

    return {"status": "ready", "checks": {"database": "healthy", "schema": "migrated"}}
