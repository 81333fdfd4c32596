"""
Audio-guide generation and playback endpoints
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import datetime
from api.dependencies import get_db, get_script_generator, require_admin
from schemas.api import AudioGuideRequest, AudioGuideResponse, PlaybackResponse, ModelsResponse
from schemas.audio import AudioSegment, PlaybackMode, segments_for_mode
from models.poi import Poi
from ingestion.generators.script_generator import ScriptGenerator
from core.exceptions import LLMServiceUnavailableError, ScriptGenerationError
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Audio guide"])


async def get_poi_or_404(db: AsyncSession, poi_id: str) -> Poi:
    poi = await db.get(Poi, poi_id)
    if poi is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="POI not found")
    return poi


@router.post(
    "/admin/pois/{poi_id}/audio-guide",
    response_model=AudioGuideResponse,
    dependencies=[Depends(require_admin)]
)
async def generate_audio_guide(
    poi_id: str,
    request: Request,
    payload: AudioGuideRequest = AudioGuideRequest(),
    db: AsyncSession = Depends(get_db),
    generator: ScriptGenerator = Depends(get_script_generator)
):
    """
    Generate and store a segmented audio-guide script from the POI's
    Wikipedia content.
    """
    request_id = getattr(request.state, "request_id", "-")
    poi = await get_poi_or_404(db, poi_id)

    if not poi.wikipedia_content:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="POI has no Wikipedia content to build an audio guide from"
        )

    if not await generator.is_available():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="LLM service is not available"
        )

    try:
        script = await generator.generate(
            poi.name,
            poi.wikipedia_content,
            poi.category.value,
            custom_prompt=payload.custom_prompt
        )
    except LLMServiceUnavailableError as e:
        logger.error(f"[{request_id}] {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)
    except ScriptGenerationError as e:
        logger.error(f"[{request_id}] {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)

    poi.story_segments = [segment.model_dump(mode="json") for segment in script.segments]
    poi.tts_text = "\n\n".join(segment.content for segment in script.segments)
    poi.audio_model = script.model
    poi.audio_generated_at = script.generated_at
    poi.updated_at = datetime.utcnow()
    await db.commit()

    logger.info(f"[{request_id}] Stored audio guide for POI {poi.id}: {len(script.segments)} segments")

    return AudioGuideResponse(
        poi_id=poi.id,
        segments=script.segments,
        total_duration=script.total_duration,
        generated_at=script.generated_at,
        model=script.model
    )


@router.get("/pois/{poi_id}/audio-guide", response_model=PlaybackResponse)
async def get_audio_guide(
    poi_id: str,
    mode: PlaybackMode = Query(PlaybackMode.STANDARD, description="Playback mode"),
    db: AsyncSession = Depends(get_db)
):
    """Stored audio-guide segments for a playback mode, in narrative order."""
    poi = await get_poi_or_404(db, poi_id)
    if not poi.story_segments:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="POI has no audio guide")

    segments = segments_for_mode([AudioSegment(**raw) for raw in poi.story_segments], mode)
    return PlaybackResponse(
        poi_id=poi.id,
        mode=mode,
        segments=segments,
        total_duration=sum(segment.duration_estimate for segment in segments)
    )


@router.get("/admin/llm/models", response_model=ModelsResponse, dependencies=[Depends(require_admin)])
async def list_llm_models(generator: ScriptGenerator = Depends(get_script_generator)):
    try:
        return ModelsResponse(models=await generator.list_models())
    except LLMServiceUnavailableError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=e.message)
