"""
POI import pipeline components.

Modules:
    base: Shared HTTP plumbing with rate limiting and retry logic
    jobs: Import job state machine and per-zone job registry
    runner: Import orchestrator that coordinates fetch, enrich and save phases

Subpackages:
    extractors: OpenStreetMap (Overpass) fetcher
    enrichers: Wikidata metadata and Wikipedia content enrichers
    transformers: Category mapping, HTML stripping and record merging
    generators: Audio-guide script generation through Ollama
    loaders: Database loader with idempotent upsert

Architecture:
    An import runs in three phases:

    1. Fetch - Query Overpass for the zone; a failure aborts the import
    2. Enrich - Batch Wikidata lookups, then Wikipedia content per id;
       individual failures leave the affected fields empty
    3. Save - Upsert keyed on OSM id in one transaction

Usage:
    from ingestion.jobs import JobRegistry
    from ingestion.runner import ImportRunner

    registry = JobRegistry()
    job = registry.start(zone.id)
    await runner.run(job, zone.lat, zone.lng, zone.radius_km)

    print(registry.get(zone.id).status)

Error Handling:
    All components raise exceptions from core.exceptions. The runner turns
    fatal ones into the job's error state and never re-raises.
"""

__all__ = [
    "HttpSource",
    "ImportJob",
    "JobRegistry",
    "ImportRunner",
    "OverpassFetcher",
    "WikidataEnricher",
    "WikipediaEnricher",
    "ScriptGenerator",
    "PoiLoader",
]
