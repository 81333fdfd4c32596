"""
SQLAlchemy ORM models for database tables.

Models:
    base: Base declarative class and shared enums (Category, OsmType, ImportState)
    zone: Operator-defined import zones with import statistics
    poi: Enriched points of interest

Database Schema:
    All models inherit from the Base declarative class. JSON columns use
    JSONB on PostgreSQL and generic JSON on other dialects.

Usage:
    from models import Zone, Poi
    from models.base import Category

Relationships:
    - Zone → Poi (one-to-many)
"""

from models.base import Base, Category, OsmType, ImportState
from models.zone import Zone
from models.poi import Poi

__all__ = [
    "Base",
    "Category",
    "OsmType",
    "ImportState",
    "Zone",
    "Poi",
]
