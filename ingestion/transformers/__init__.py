"""
Pure transformations applied between fetching and persisting POIs.
"""

from ingestion.transformers.categories import map_category, extract_osm_tags, CATEGORY_RULES
from ingestion.transformers.html import strip_html
from ingestion.transformers.merger import PoiMerger, normalize_wikidata_id

__all__ = [
    "CATEGORY_RULES",
    "map_category",
    "extract_osm_tags",
    "strip_html",
    "PoiMerger",
    "normalize_wikidata_id",
]
