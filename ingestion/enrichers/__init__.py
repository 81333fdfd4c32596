"""
Knowledge-base enrichers (structured metadata and narrative content).
"""

from ingestion.enrichers.wikidata import WikidataEnricher
from ingestion.enrichers.wikipedia import WikipediaEnricher

__all__ = ["WikidataEnricher", "WikipediaEnricher"]
