from sqlalchemy import JSON
from sqlalchemy.orm import declarative_base
from sqlalchemy.dialects.postgresql import JSONB
import enum
import uuid

Base = declarative_base()

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def generate_uuid() -> str:
    return str(uuid.uuid4())


# ============================================================================
# ENUMS
# ============================================================================

class Category(str, enum.Enum):
    """POI category shown to visitors"""
    MONUMENTS = "Monuments"
    MUSEES = "Musees"
    ART = "Art"
    INSOLITE = "Insolite"
    AUTRE = "Autre"


class OsmType(str, enum.Enum):
    """OpenStreetMap element types"""
    NODE = "node"
    WAY = "way"
    RELATION = "relation"


class ImportState(str, enum.Enum):
    """Import job state"""
    PENDING = "pending"
    FETCHING = "fetching"
    ENRICHING = "enriching"
    SAVING = "saving"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (ImportState.COMPLETED, ImportState.ERROR)
