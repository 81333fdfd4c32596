"""
Zone import endpoints (start and poll)
"""

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from api.dependencies import get_db, get_job_registry, get_import_runner, require_admin
from api.routes.zones import get_zone_or_404
from schemas.api import ImportStartedResponse, ImportConflictResponse
from schemas.imports import ImportJobStatus
from ingestion.jobs import JobRegistry
from ingestion.runner import ImportRunner
from core.exceptions import ImportConflictError, ImportNotFoundError
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/admin/import", tags=["Import"], dependencies=[Depends(require_admin)])


@router.post(
    "/{zone_id}",
    response_model=ImportStartedResponse,
    status_code=status.HTTP_202_ACCEPTED,
    responses={409: {"model": ImportConflictResponse}}
)
async def start_import(
    zone_id: str,
    request: Request,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    registry: JobRegistry = Depends(get_job_registry),
    runner: ImportRunner = Depends(get_import_runner)
):
    """
    Start importing POIs for a zone in the background.

    Returns 409 with the running import's status when one is in progress.
    """
    request_id = getattr(request.state, "request_id", "-")
    zone = await get_zone_or_404(db, zone_id)

    try:
        job = registry.start(zone.id)
    except ImportConflictError as e:
        logger.info(f"[{request_id}] Import already running for zone {zone.id}")
        body = ImportConflictResponse(error=e.message, status=e.status)
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=body.model_dump(mode="json"))

    background_tasks.add_task(runner.run, job, zone.lat, zone.lng, zone.radius_km)
    logger.info(f"[{request_id}] Import scheduled for zone {zone.id} ({zone.name})")

    return ImportStartedResponse(
        message="Import started",
        status_url=f"/admin/import/{zone.id}/status",
        status=job.status.model_copy()
    )


@router.get("/{zone_id}/status", response_model=ImportJobStatus)
async def get_import_status(zone_id: str, registry: JobRegistry = Depends(get_job_registry)):
    try:
        return registry.get(zone_id)
    except ImportNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
