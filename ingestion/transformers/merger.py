"""
Combine a fetched POI with its enrichment results into a persistable record
"""

from typing import Dict, List, Optional
from schemas.poi import RawPoi, EnrichmentRecord, NarrativeContent, EnrichedPoiCreate
from ingestion.transformers.categories import map_category
from core.config import settings
import logging

logger = logging.getLogger(__name__)


def normalize_wikidata_id(raw: Optional[str]) -> Optional[str]:
    """
    Canonical knowledge-base id: trimmed, entity-URI prefix removed,
    upper-cased and starting with Q. Returns None for empty input.
    """
    if not raw:
        return None
    value = raw.strip().rstrip("/")
    if "/" in value:
        value = value.rsplit("/", 1)[-1]
    value = value.upper()
    if not value:
        return None
    if not value.startswith("Q"):
        value = f"Q{value}"
    return value


class PoiMerger:
    """
    Merge RawPoi + EnrichmentRecord + NarrativeContent.

    Precedence:
    - short_description: Wikidata description, else Wikipedia extract, else ""
    - wikipedia_url: article URL from Wikidata, else resolved article, else OSM tag
    """

    def __init__(self, radius_meters: Optional[int] = None):
        self.radius_meters = radius_meters or settings.DEFAULT_POI_RADIUS_METERS

    def merge(
        self,
        raw: RawPoi,
        metadata: Optional[EnrichmentRecord] = None,
        content: Optional[NarrativeContent] = None
    ) -> EnrichedPoiCreate:
        description = metadata.description if metadata else None
        short_description = description or (content.extract if content else None) or ""

        wikipedia_url = (
            (metadata.wikipedia_url if metadata else None)
            or (content.url if content else None)
            or raw.wikipedia_url
        )

        return EnrichedPoiCreate(
            name=raw.name,
            lat=raw.lat,
            lng=raw.lng,
            radius_meters=self.radius_meters,
            category=map_category(raw.tags),
            short_description=short_description,
            osm_id=raw.osm_id,
            osm_type=raw.osm_type.value,
            osm_tags=raw.osm_tags,
            wikidata_id=normalize_wikidata_id(raw.wikidata_id),
            wikidata_description=description,
            image_url=metadata.image_url if metadata else None,
            wikipedia_url=wikipedia_url,
            wikipedia_content=content.content if content else None,
        )

    def merge_all(
        self,
        raw_pois: List[RawPoi],
        metadata: Dict[str, EnrichmentRecord],
        contents: Dict[str, NarrativeContent]
    ) -> List[EnrichedPoiCreate]:
        merged = []
        for raw in raw_pois:
            qid = normalize_wikidata_id(raw.wikidata_id)
            merged.append(self.merge(
                raw,
                metadata.get(qid) if qid else None,
                contents.get(qid) if qid else None,
            ))
        logger.debug(f"Merged {len(merged)} POIs")
        return merged
