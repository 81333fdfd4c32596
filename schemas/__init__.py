"""
Pydantic schemas for data validation and serialization.

Schemas:
    poi: POI records as they move through the pipeline (RawPoi,
        EnrichmentRecord, NarrativeContent, EnrichedPoiCreate)
    audio: Audio-guide segments, scripts and playback modes
    imports: Import job status
    api: API endpoint request/response schemas

Usage:
    from schemas.poi import RawPoi, EnrichedPoiCreate
    from schemas.audio import PlaybackMode, segments_for_mode

Example:
    poi = RawPoi(
        osm_id="N12345",
        osm_type=OsmType.NODE,
        name="Tour Eiffel",
        lat=48.8584,
        lng=2.2945,
        wikidata_id="Q243"
    )

    # RawPoi is frozen once built
    assert poi.osm_id == "N12345"
"""

from schemas.poi import RawPoi, EnrichmentRecord, NarrativeContent, EnrichedPoiCreate, ResolvedTitle
from schemas.audio import AudioSegment, AudioScript, SegmentType, PlaybackMode, PLAYBACK_MODES, segments_for_mode
from schemas.imports import ImportJobStatus

__all__ = [
    "RawPoi",
    "EnrichmentRecord",
    "NarrativeContent",
    "EnrichedPoiCreate",
    "ResolvedTitle",
    "AudioSegment",
    "AudioScript",
    "SegmentType",
    "PlaybackMode",
    "PLAYBACK_MODES",
    "segments_for_mode",
    "ImportJobStatus",
]
