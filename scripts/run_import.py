"""
Script to import POIs for one zone from the command line

Usage:
    python scripts/run_import.py "Paris Centre"
    python scripts/run_import.py "Lyon" --create --lat 45.764 --lng 4.8357 --radius-km 3
"""

import argparse
import asyncio
import sys
import os
import logging

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from core.config import settings
from core.cache import InMemoryCache
from core.logging import setup_logging
from core.rate_limiter import RateLimiter
from ingestion.extractors.overpass import OverpassFetcher
from ingestion.enrichers.wikidata import WikidataEnricher
from ingestion.enrichers.wikipedia import WikipediaEnricher
from ingestion.jobs import JobRegistry
from ingestion.runner import ImportRunner
from models.base import ImportState
from models.zone import Zone

setup_logging()
logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Import POIs for a zone")
    parser.add_argument("zone", help="Zone name")
    parser.add_argument("--create", action="store_true", help="Create the zone when it does not exist")
    parser.add_argument("--lat", type=float, help="Zone center latitude (with --create)")
    parser.add_argument("--lng", type=float, help="Zone center longitude (with --create)")
    parser.add_argument("--radius-km", type=float, default=settings.DEFAULT_ZONE_RADIUS_KM)
    return parser.parse_args(argv)


async def run_import(args) -> int:
    """Run one import and return the process exit code"""

    engine = create_async_engine(settings.DATABASE_URL, echo=False)

    AsyncSessionLocal = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    try:
        async with AsyncSessionLocal() as session:
            result = await session.execute(select(Zone).where(Zone.name == args.zone))
            zone = result.scalar_one_or_none()

            if zone is None:
                if not args.create or args.lat is None or args.lng is None:
                    logger.error(f"Zone '{args.zone}' not found (use --create --lat --lng to create it)")
                    return 1
                zone = Zone(name=args.zone, lat=args.lat, lng=args.lng, radius_km=args.radius_km)
                session.add(zone)
                await session.commit()
                logger.info(f"Created zone {zone.id} ({zone.name})")

        runner = ImportRunner(
            session_factory=AsyncSessionLocal,
            fetcher=OverpassFetcher(RateLimiter("overpass", settings.OVERPASS_MIN_INTERVAL_MS)),
            metadata_enricher=WikidataEnricher(
                RateLimiter("wikidata", settings.WIKIDATA_MIN_INTERVAL_MS),
                cache=InMemoryCache()
            ),
            content_enricher=WikipediaEnricher(
                RateLimiter("wikipedia", settings.WIKIPEDIA_MIN_INTERVAL_MS),
                cache=InMemoryCache()
            ),
        )

        job = JobRegistry().start(zone.id)
        await runner.run(job, zone.lat, zone.lng, zone.radius_km)

        status = job.status
        if status.status == ImportState.ERROR:
            logger.error(f"Import failed for {zone.name}: {status.error}")
            return 1

        logger.info(
            f"Import completed for {zone.name}: "
            f"Total={status.total}, Created={status.created}, Updated={status.updated}"
        )
        return 0

    finally:
        await engine.dispose()


if __name__ == "__main__":
    sys.exit(asyncio.run(run_import(parse_args())))
