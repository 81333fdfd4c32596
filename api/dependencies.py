"""
FastAPI dependency providers.

Rate limiters, caches and the job registry are created once per process and
shared by every request and background import.
"""

from functools import lru_cache
from typing import AsyncGenerator, Optional
from fastapi import Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.database import async_session_maker, get_session
from core.rate_limiter import RateLimiter
from core.cache import InMemoryCache
from ingestion.jobs import JobRegistry
from ingestion.runner import ImportRunner
from ingestion.extractors.overpass import OverpassFetcher
from ingestion.enrichers.wikidata import WikidataEnricher
from ingestion.enrichers.wikipedia import WikipediaEnricher
from ingestion.generators.script_generator import ScriptGenerator


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Database session per request"""
    async for session in get_session():
        yield session


async def require_admin(x_admin_token: Optional[str] = Header(None)) -> None:
    if x_admin_token != settings.ADMIN_TOKEN:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing admin token"
        )


@lru_cache
def get_job_registry() -> JobRegistry:
    return JobRegistry()


@lru_cache
def get_overpass_limiter() -> RateLimiter:
    return RateLimiter("overpass", settings.OVERPASS_MIN_INTERVAL_MS)


@lru_cache
def get_wikidata_limiter() -> RateLimiter:
    return RateLimiter("wikidata", settings.WIKIDATA_MIN_INTERVAL_MS)


@lru_cache
def get_wikipedia_limiter() -> RateLimiter:
    return RateLimiter("wikipedia", settings.WIKIPEDIA_MIN_INTERVAL_MS)


@lru_cache
def get_wikidata_enricher() -> WikidataEnricher:
    return WikidataEnricher(get_wikidata_limiter(), cache=InMemoryCache())


@lru_cache
def get_wikipedia_enricher() -> WikipediaEnricher:
    return WikipediaEnricher(get_wikipedia_limiter(), cache=InMemoryCache())


@lru_cache
def get_import_runner() -> ImportRunner:
    return ImportRunner(
        session_factory=async_session_maker,
        fetcher=OverpassFetcher(get_overpass_limiter()),
        metadata_enricher=get_wikidata_enricher(),
        content_enricher=get_wikipedia_enricher(),
    )


@lru_cache
def get_script_generator() -> ScriptGenerator:
    return ScriptGenerator()
