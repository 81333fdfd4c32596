from sqlalchemy import Column, String, Integer, Float, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime
from models.base import Base, generate_uuid


class Zone(Base):
    """
    Operator-defined circular area that scopes one import run.

    Import statistics (last_import_at, poi_count) are refreshed after every
    successful import of the zone.
    """
    __tablename__ = "zones"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(200), nullable=False, unique=True, index=True)

    # Center + radius
    lat = Column(Float, nullable=False)
    lng = Column(Float, nullable=False)
    radius_km = Column(Float, nullable=False, default=5.0)

    # Import statistics
    last_import_at = Column(DateTime, nullable=True)
    poi_count = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    pois = relationship("Poi", back_populates="zone")
