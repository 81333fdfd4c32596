"""
Geographic data source extractors.
"""

from ingestion.extractors.overpass import OverpassFetcher, build_query

__all__ = ["OverpassFetcher", "build_query"]
