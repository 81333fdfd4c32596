"""
Pydantic schemas for POI records as they move through the pipeline
"""

from pydantic import BaseModel, Field, validator
from typing import Optional, List, Dict
from models.base import Category, OsmType


class RawPoi(BaseModel):
    """POI as returned by the Overpass fetcher, before any enrichment."""

    osm_id: str = Field(..., min_length=2, max_length=50)
    osm_type: OsmType
    name: str = Field(..., min_length=1, max_length=500)
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    tags: Dict[str, str] = Field(default_factory=dict)
    osm_tags: List[str] = Field(default_factory=list)
    wikidata_id: Optional[str] = None
    wikipedia_url: Optional[str] = None

    class Config:
        frozen = True


class EnrichmentRecord(BaseModel):
    """Structured metadata resolved from Wikidata for one knowledge-base id."""

    wikidata_id: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    wikipedia_url: Optional[str] = None


class NarrativeContent(BaseModel):
    """Long-form Wikipedia text resolved for one knowledge-base id."""

    title: str
    extract: str
    content: str
    url: str
    language: str


class EnrichedPoiCreate(BaseModel):
    """
    Schema for persisting an enriched POI.

    Ensures:
    - Required fields are present
    - Types are correct
    - Names are cleaned
    """

    name: str = Field(..., min_length=1, max_length=500)
    lat: float
    lng: float
    radius_meters: int = Field(50, ge=1)
    category: Category = Category.AUTRE
    short_description: str = ""

    osm_id: Optional[str] = Field(None, max_length=50)
    osm_type: Optional[str] = None
    osm_tags: List[str] = Field(default_factory=list)

    wikidata_id: Optional[str] = None
    wikidata_description: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=2048)
    wikipedia_url: Optional[str] = Field(None, max_length=2048)
    wikipedia_content: Optional[str] = None

    @validator("name")
    def clean_name(cls, v):
        """Clean and normalize name"""
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be empty after stripping")
        return v

    @validator("short_description", pre=True)
    def default_short_description(cls, v):
        return v or ""


class ResolvedTitle(BaseModel):
    """Wikipedia article title a knowledge-base id resolves to in one language."""

    title: str
    language: str
