"""Health check endpoints."""

from typing import Literal

import structlog
from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from passgate.infrastructure.database import Database

logger = structlog.get_logger()
router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: Literal["healthy", "unhealthy"]
    version: str


@router.get("", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Health check endpoint with database verification.

    Raises:
        HTTPException: 503 if the database is unavailable.
    """
    try:
        database: Database = request.app.state.database
        await database.execute("SELECT 1")
        return HealthResponse(status="healthy", version=request.app.version)
    except Exception as e:
        logger.error("health_check_failed", error=str(e), error_type=type(e).__name__)
        raise HTTPException(
            status_code=503,
            detail=f"Service unhealthy: {type(e).__name__}",
        ) from e
