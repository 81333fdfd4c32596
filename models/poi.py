from sqlalchemy import Column, String, Integer, Float, Enum, DateTime, Text, ForeignKey, Index
from sqlalchemy.orm import relationship
from datetime import datetime
from models.base import Base, Category, JSONType, generate_uuid


class Poi(Base):
    """
    Enriched point of interest.

    Field Mapping Strategy:

    Overpass (OpenStreetMap):
    - type initial + id -> osm_id (e.g. "N12345"), de-duplication key
    - tags.name -> name
    - lat/lon (or center) -> lat/lng
    - tourism/historic/amenity/building/leisure -> osm_tags, category
    - tags.wikidata -> wikidata_id

    Wikidata:
    - schema:description -> wikidata_description, short_description
    - wdt:P18 -> image_url
    - article sitelink -> wikipedia_url

    Wikipedia:
    - cleaned article text -> wikipedia_content (kept apart from short_description)

    Audio guide (generated on demand):
    - segments -> story_segments, concatenated text -> tts_text
    """
    __tablename__ = "pois"

    id = Column(String(36), primary_key=True, default=generate_uuid)

    # Core fields
    name = Column(String(500), nullable=False, index=True)
    lat = Column(Float, nullable=False)
    lng = Column(Float, nullable=False)
    radius_meters = Column(Integer, nullable=False, default=50)
    category = Column(Enum(Category), nullable=False, default=Category.AUTRE, index=True)
    short_description = Column(Text, nullable=False, default="")

    # OpenStreetMap
    osm_id = Column(String(50), nullable=True, unique=True)
    osm_type = Column(String(20), nullable=True)
    osm_tags = Column(JSONType, nullable=True)

    # Wikidata / Wikipedia
    wikidata_id = Column(String(50), nullable=True, index=True)
    wikidata_description = Column(Text, nullable=True)
    image_url = Column(String(2048), nullable=True)
    wikipedia_url = Column(String(2048), nullable=True)
    wikipedia_content = Column(Text, nullable=True)

    # Audio guide
    tts_text = Column(Text, nullable=True)
    story_segments = Column(JSONType, nullable=True)
    audio_model = Column(String(100), nullable=True)
    audio_generated_at = Column(DateTime, nullable=True)

    # Zone
    zone_id = Column(String(36), ForeignKey("zones.id"), nullable=True, index=True)

    # Timestamps
    imported_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    zone = relationship("Zone", back_populates="pois")

    __table_args__ = (
        Index("idx_poi_zone_category", "zone_id", "category"),
    )
