"""
Audio-guide script schemas and playback modes
"""

from pydantic import BaseModel, Field
from typing import Dict, List
from datetime import datetime
import enum


class SegmentType(str, enum.Enum):
    """Narrative role of a segment. Declaration order is playback order."""
    HOOK = "hook"
    ESSENTIAL = "essential"
    CONTEXT = "context"
    ANECDOTES = "anecdotes"
    DETAILS = "details"
    TRANSITION = "transition"


SEGMENT_ORDER: Dict[SegmentType, int] = {
    segment_type: position for position, segment_type in enumerate(SegmentType)
}


class PlaybackMode(str, enum.Enum):
    EXPRESS = "express"
    STANDARD = "standard"
    COMPLETE = "complete"


PLAYBACK_MODES: Dict[PlaybackMode, Dict] = {
    PlaybackMode.EXPRESS: {
        "name": "Express",
        "description": "1-2 min - Idéal en voiture ou visite rapide",
        "segments": [SegmentType.HOOK, SegmentType.ESSENTIAL, SegmentType.TRANSITION],
    },
    PlaybackMode.STANDARD: {
        "name": "Standard",
        "description": "3-4 min - Visite à pied classique",
        "segments": [SegmentType.HOOK, SegmentType.ESSENTIAL, SegmentType.CONTEXT, SegmentType.TRANSITION],
    },
    PlaybackMode.COMPLETE: {
        "name": "Complet",
        "description": "5-7 min - Pour les passionnés",
        "segments": list(SegmentType),
    },
}


class AudioSegment(BaseModel):
    id: str
    type: SegmentType
    title: str
    content: str
    duration_estimate: int = Field(..., ge=0, description="Estimated spoken duration in seconds")


class AudioScript(BaseModel):
    segments: List[AudioSegment]
    total_duration: int
    generated_at: datetime = Field(default_factory=datetime.utcnow)
    model: str


def segments_for_mode(segments: List[AudioSegment], mode: PlaybackMode) -> List[AudioSegment]:
    """Keep the segments a playback mode reads aloud, in taxonomy order."""
    allowed = set(PLAYBACK_MODES[PlaybackMode(mode)]["segments"])
    selected = [segment for segment in segments if segment.type in allowed]
    return sorted(selected, key=lambda segment: SEGMENT_ORDER[segment.type])
