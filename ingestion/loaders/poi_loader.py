"""
Persist enriched POIs with idempotent upsert logic
"""

from typing import Dict, List, NamedTuple
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from models.poi import Poi
from models.zone import Zone
from schemas.poi import EnrichedPoiCreate
from core.exceptions import UpsertError
import logging

logger = logging.getLogger(__name__)

# Fields refreshed on every re-import. osm_id, zone_id, imported_at and the
# audio-guide fields are left as they are.
MUTABLE_FIELDS = (
    "name",
    "lat",
    "lng",
    "category",
    "short_description",
    "osm_tags",
    "wikidata_id",
    "wikidata_description",
    "image_url",
    "wikipedia_url",
    "wikipedia_content",
)


class UpsertResult(NamedTuple):
    created: int
    updated: int


class PoiLoader:
    """
    Load POIs keyed on osm_id.

    Ensures:
    - Re-importing the same OSM elements updates rows instead of duplicating them
    - The whole batch commits or rolls back as one transaction
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def bulk_upsert(self, items: List[EnrichedPoiCreate], zone_id: str) -> UpsertResult:
        """
        Insert new POIs and update known ones.

        Items without an osm_id are always inserted.

        Raises:
            UpsertError: On any database failure (transaction rolled back)
        """
        if not items:
            return UpsertResult(created=0, updated=0)

        created = 0
        updated = 0

        try:
            osm_ids = [item.osm_id for item in items if item.osm_id]
            known: Dict[str, Poi] = {}
            if osm_ids:
                result = await self.db.execute(select(Poi).where(Poi.osm_id.in_(osm_ids)))
                known = {poi.osm_id: poi for poi in result.scalars().all()}

            for item in items:
                data = item.model_dump()
                existing = known.get(item.osm_id) if item.osm_id else None

                if existing is not None:
                    for field in MUTABLE_FIELDS:
                        setattr(existing, field, data[field])
                    existing.updated_at = datetime.utcnow()
                    updated += 1
                    continue

                poi = Poi(**data, zone_id=zone_id)
                self.db.add(poi)
                if item.osm_id:
                    # Later duplicates in the same batch update this row
                    known[item.osm_id] = poi
                created += 1

            await self.db.commit()

        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Bulk upsert failed for zone {zone_id}: {e}")
            raise UpsertError(
                "Failed to upsert POIs",
                context={"zone_id": zone_id, "records_to_load": len(items)},
                original_exception=e
            )

        logger.info(f"Upserted {len(items)} POIs into zone {zone_id}: {created} created, {updated} updated")
        return UpsertResult(created=created, updated=updated)

    async def update_zone_stats(self, zone_id: str) -> None:
        """Refresh last_import_at and poi_count. Failures are logged only."""
        try:
            zone = await self.db.get(Zone, zone_id)
            if zone is None:
                logger.warning(f"Zone {zone_id} not found, stats not updated")
                return

            result = await self.db.execute(
                select(func.count()).select_from(Poi).where(Poi.zone_id == zone_id)
            )
            zone.poi_count = result.scalar_one()
            zone.last_import_at = datetime.utcnow()
            await self.db.commit()
            logger.info(f"Zone {zone_id} stats updated: {zone.poi_count} POIs")

        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to update stats for zone {zone_id}: {e}")
