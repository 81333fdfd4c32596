"""
Import job status schema
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from models.base import ImportState


class ImportJobStatus(BaseModel):
    """
    Progress of the latest import of a zone.

    Mutated in place by the running job and polled by callers; only
    ingestion.jobs.ImportJob should change it.
    """

    zone_id: str
    status: ImportState = ImportState.PENDING
    progress: int = Field(0, ge=0, le=100)
    total: int = 0
    created: int = 0
    updated: int = 0
    error: Optional[str] = None
    started_at: datetime = Field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return not self.status.is_terminal

    class Config:
        json_schema_extra = {
            "example": {
                "zone_id": "5b0f8c1e-2f5a-4d0e-9a44-1b8f0c2d6e71",
                "status": "enriching",
                "progress": 40,
                "total": 38,
                "created": 0,
                "updated": 0,
                "error": None,
                "started_at": "2024-01-15T10:00:00Z",
                "completed_at": None
            }
        }
