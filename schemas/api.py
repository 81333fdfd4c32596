"""
Pydantic schemas for API request/response models
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from models.base import Category
from schemas.audio import AudioSegment, PlaybackMode
from schemas.imports import ImportJobStatus


# ============================================================================
# Health Check Schemas
# ============================================================================

class HealthCheckResponse(BaseModel):
    """Health check response model"""
    status: str = Field(..., description="Overall system status: healthy, degraded, unhealthy")
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    database_connected: bool
    llm_available: bool
    active_imports: int = 0


# ============================================================================
# Zone Schemas
# ============================================================================

class ZoneCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    radius_km: float = Field(5.0, gt=0, le=50)


class ZoneResponse(BaseModel):
    id: str
    name: str
    lat: float
    lng: float
    radius_km: float
    last_import_at: Optional[datetime] = None
    poi_count: int = 0

    class Config:
        from_attributes = True


# ============================================================================
# POI Schemas
# ============================================================================

class PoiResponse(BaseModel):
    id: str
    name: str
    lat: float
    lng: float
    radius_meters: int
    category: Category
    short_description: str

    osm_id: Optional[str] = None
    osm_tags: Optional[List[str]] = None
    wikidata_id: Optional[str] = None
    wikidata_description: Optional[str] = None
    image_url: Optional[str] = None
    wikipedia_url: Optional[str] = None
    has_wikipedia_content: bool = False
    has_audio_guide: bool = False

    zone_id: Optional[str] = None
    imported_at: datetime
    updated_at: datetime

    @classmethod
    def from_orm(cls, poi):
        """Custom from_orm to expose content flags instead of full text"""
        return cls(
            id=poi.id,
            name=poi.name,
            lat=poi.lat,
            lng=poi.lng,
            radius_meters=poi.radius_meters,
            category=poi.category,
            short_description=poi.short_description or "",
            osm_id=poi.osm_id,
            osm_tags=poi.osm_tags,
            wikidata_id=poi.wikidata_id,
            wikidata_description=poi.wikidata_description,
            image_url=poi.image_url,
            wikipedia_url=poi.wikipedia_url,
            has_wikipedia_content=bool(poi.wikipedia_content),
            has_audio_guide=bool(poi.story_segments),
            zone_id=poi.zone_id,
            imported_at=poi.imported_at,
            updated_at=poi.updated_at,
        )


class ZonePoisResponse(BaseModel):
    zone: ZoneResponse
    pois: List[PoiResponse]


# ============================================================================
# Import Schemas
# ============================================================================

class ImportStartedResponse(BaseModel):
    message: str
    status_url: str
    status: ImportJobStatus


class ImportConflictResponse(BaseModel):
    error: str
    status: ImportJobStatus


# ============================================================================
# Audio Guide Schemas
# ============================================================================

class AudioGuideRequest(BaseModel):
    custom_prompt: Optional[str] = Field(None, max_length=10000)


class AudioGuideResponse(BaseModel):
    poi_id: str
    segments: List[AudioSegment]
    total_duration: int
    generated_at: datetime
    model: str


class PlaybackResponse(BaseModel):
    poi_id: str
    mode: PlaybackMode
    segments: List[AudioSegment]
    total_duration: int


class ModelsResponse(BaseModel):
    models: List[str]

