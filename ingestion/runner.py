# ============================================================================
# File: ingestion/runner.py
# Description: Zone import orchestrator (fetch -> enrich -> merge -> save)
# ============================================================================
"""
Import Runner - Orchestrates one zone import.

This module drives an ImportJob through its states:
- Fetching POIs from OpenStreetMap (fatal on failure)
- Enriching with Wikidata metadata (progress 0-25%) and Wikipedia content
  (progress 25-75%), tolerating per-item failures
- Merging and persisting in a single transaction (fatal on failure)
- Refreshing zone statistics (failure logged only)
"""

from typing import Callable, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from ingestion.jobs import ImportJob
from ingestion.extractors.overpass import OverpassFetcher
from ingestion.enrichers.wikidata import WikidataEnricher
from ingestion.enrichers.wikipedia import WikipediaEnricher
from ingestion.transformers.merger import PoiMerger, normalize_wikidata_id
from ingestion.loaders.poi_loader import PoiLoader
from models.base import ImportState
from core.config import settings
from core.exceptions import PipelineException

logger = logging.getLogger(__name__)

METADATA_PROGRESS = (0, 25)
CONTENT_PROGRESS = (25, 75)
SAVING_PROGRESS = 80


def _scaled(job: ImportJob, span) -> Callable[[int, int], None]:
    low, high = span

    def report(processed: int, total: int) -> None:
        if total:
            job.report_progress(low + (high - low) * processed / total)

    return report


class ImportRunner:
    """
    Import Orchestrator

    Responsibilities:
    - Move the job through pending -> fetching -> enriching -> saving -> completed
    - Record fatal failures on the job instead of raising (runs as a background task)
    - Use its own database session for the whole run
    """

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        fetcher: OverpassFetcher,
        metadata_enricher: WikidataEnricher,
        content_enricher: WikipediaEnricher,
        merger: Optional[PoiMerger] = None,
        preferred_language: Optional[str] = None
    ):
        self.session_factory = session_factory
        self.fetcher = fetcher
        self.metadata_enricher = metadata_enricher
        self.content_enricher = content_enricher
        self.merger = merger or PoiMerger()
        self.preferred_language = preferred_language or settings.PREFERRED_LANGUAGE

    async def run(self, job: ImportJob, lat: float, lng: float, radius_km: float) -> None:
        """
        Run the import for job.zone_id.

        Never raises: any failure ends the job in the error state.
        """
        zone_id = job.zone_id
        logger.info(f"[import {zone_id}] starting around ({lat}, {lng}) radius {radius_km}km")

        try:
            # --------------------------------------------------
            # PHASE 1: FETCH
            # --------------------------------------------------
            job.transition(ImportState.FETCHING)
            raw_pois = await self.fetcher.fetch_pois(lat, lng, radius_km)
            job.set_total(len(raw_pois))

            if not raw_pois:
                logger.info(f"[import {zone_id}] no POIs found")
                job.complete(created=0, updated=0)
                return

            # --------------------------------------------------
            # PHASE 2: ENRICH
            # --------------------------------------------------
            job.transition(ImportState.ENRICHING)
            ids: List[str] = []
            for raw in raw_pois:
                qid = normalize_wikidata_id(raw.wikidata_id)
                if qid and qid not in ids:
                    ids.append(qid)

            metadata = await self.metadata_enricher.enrich_batch(
                ids, on_progress=_scaled(job, METADATA_PROGRESS)
            )
            job.report_progress(METADATA_PROGRESS[1])

            contents = await self.content_enricher.enrich_batch(
                ids, self.preferred_language, on_progress=_scaled(job, CONTENT_PROGRESS)
            )
            job.report_progress(CONTENT_PROGRESS[1])

            enriched = self.merger.merge_all(raw_pois, metadata, contents)

            # --------------------------------------------------
            # PHASE 3: SAVE
            # --------------------------------------------------
            job.transition(ImportState.SAVING)
            job.report_progress(SAVING_PROGRESS)

            async with self.session_factory() as session:
                loader = PoiLoader(session)
                result = await loader.bulk_upsert(enriched, zone_id)
                await loader.update_zone_stats(zone_id)

            job.complete(created=result.created, updated=result.updated)
            logger.info(
                f"[import {zone_id}] completed: {len(raw_pois)} POIs, "
                f"{result.created} created, {result.updated} updated"
            )

        except PipelineException as e:
            logger.error(
                f"[import {zone_id}] failed: {e.message}",
                extra={"error_context": e.to_dict()}
            )
            job.fail(e.message)

        except Exception as e:
            logger.exception(f"[import {zone_id}] unexpected error")
            job.fail(str(e) or type(e).__name__)
