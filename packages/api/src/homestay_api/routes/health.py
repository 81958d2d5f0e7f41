# This project was developed with assistance from AI tools.
"""Liveness and database readiness checks."""

import logging

from homestay_db import get_db
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .. import __version__
from ..schemas.health import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=list[HealthResponse])
async def health_check(session: AsyncSession = Depends(get_db)) -> list[HealthResponse]:
    """Report API and database health. Always 200 so probes can read the detail."""
    checks = [
        HealthResponse(
            name="API",
            status="healthy",
            message="API is running",
            version=__version__,
        )
    ]
    try:
        await session.execute(text("SELECT 1"))
        checks.append(
            HealthResponse(
                name="Database",
                status="healthy",
                message="Database connection succeeded",
                version=__version__,
            )
        )
    except SQLAlchemyError as exc:
        logger.warning("Database health check failed: %s", exc)
        checks.append(
            HealthResponse(
                name="Database",
                status="unhealthy",
                message="Database connection failed",
                version=__version__,
            )
        )
    return checks
