"""
Health check endpoint with database, import and LLM status
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text
from api.dependencies import get_db, get_job_registry, get_script_generator
from schemas.api import HealthCheckResponse
from ingestion.jobs import JobRegistry
from ingestion.generators.script_generator import ScriptGenerator
from sqlalchemy.exc import SQLAlchemyError
from datetime import datetime
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(
    db: AsyncSession = Depends(get_db),
    registry: JobRegistry = Depends(get_job_registry),
    generator: ScriptGenerator = Depends(get_script_generator)
):
    """
    Health check endpoint.

    Returns:
    - Database connectivity status
    - Whether the LLM service answers
    - Number of running imports
    """
    db_connected = False

    try:
        await db.execute(text("SELECT 1"))
        db_connected = True
    except SQLAlchemyError as e:
        logger.error(f"Database connection failed: {str(e)}")

    llm_available = await generator.is_available()

    if not db_connected:
        overall = "unhealthy"
    elif not llm_available:
        overall = "degraded"
    else:
        overall = "healthy"

    return HealthCheckResponse(
        status=overall,
        timestamp=datetime.utcnow(),
        database_connected=db_connected,
        llm_available=llm_available,
        active_imports=len(registry.active())
    )
