"""
Database loaders.
"""

from ingestion.loaders.poi_loader import PoiLoader, UpsertResult

__all__ = ["PoiLoader", "UpsertResult"]
