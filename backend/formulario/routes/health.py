"""
Formulario Backend — Health Check Route
=========================================

What:  GET /api/health for monitoring and load balancer probes.
How:   Runs SELECT 1 against the database and reports the result.

Status levels:
    - ok:        Database reachable
    - degraded:  Database unreachable (the process still answers)
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from formulario import __version__
from formulario.database import get_db_session
from formulario.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(db: AsyncSession = Depends(get_db_session)) -> HealthResponse:
    db_status = "connected"
    status = "ok"
    message = "API funcionando correctamente"

    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        status = "degraded"
        message = "API activa sin conexión a la base de datos"
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=status,
        message=message,
        version=__version__,
        database=db_status,
    )
