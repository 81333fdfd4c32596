"""
Zone administration endpoints
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from typing import List, Optional
from api.dependencies import get_db, require_admin
from schemas.api import ZoneCreate, ZoneResponse, ZonePoisResponse, PoiResponse
from models.zone import Zone
from models.poi import Poi
from models.base import Category
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/admin/zones", tags=["Zones"])


async def get_zone_or_404(db: AsyncSession, zone_id: str) -> Zone:
    zone = await db.get(Zone, zone_id)
    if zone is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Zone not found")
    return zone


@router.get("", response_model=List[ZoneResponse])
async def list_zones(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Zone).order_by(Zone.name))
    return [ZoneResponse.model_validate(zone) for zone in result.scalars().all()]


@router.post(
    "",
    response_model=ZoneResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)]
)
async def create_zone(payload: ZoneCreate, request: Request, db: AsyncSession = Depends(get_db)):
    request_id = getattr(request.state, "request_id", "-")
    zone = Zone(**payload.model_dump())
    db.add(zone)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Zone '{payload.name}' already exists"
        )

    await db.refresh(zone)
    logger.info(f"[{request_id}] Created zone {zone.id} ({zone.name})")
    return ZoneResponse.model_validate(zone)


@router.get("/{zone_id}", response_model=ZoneResponse)
async def get_zone(zone_id: str, db: AsyncSession = Depends(get_db)):
    return ZoneResponse.model_validate(await get_zone_or_404(db, zone_id))


@router.get("/{zone_id}/pois", response_model=ZonePoisResponse)
async def list_zone_pois(
    zone_id: str,
    category: Optional[Category] = Query(None, description="Filter by category"),
    db: AsyncSession = Depends(get_db)
):
    """POIs imported into a zone, optionally filtered by category."""
    zone = await get_zone_or_404(db, zone_id)

    query = select(Poi).where(Poi.zone_id == zone_id)
    if category:
        query = query.where(Poi.category == category)
    result = await db.execute(query.order_by(Poi.name))

    return ZonePoisResponse(
        zone=ZoneResponse.model_validate(zone),
        pois=[PoiResponse.from_orm(poi) for poi in result.scalars().all()]
    )
