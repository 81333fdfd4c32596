"""
Audio-guide script generation through a local Ollama server
"""

from typing import List, Optional
from datetime import datetime
import httpx
import logging

from ingestion.generators.parsing import parse_segments
from ingestion.generators.prompts import build_prompt, build_user_prompt
from schemas.audio import AudioScript, AudioSegment, SegmentType
from core.config import settings
from core.exceptions import LLMServiceUnavailableError, ScriptGenerationError

logger = logging.getLogger(__name__)

WORDS_PER_MINUTE = 150


def estimate_duration(text: str) -> int:
    """Spoken duration in seconds at 150 words per minute."""
    words = len(text.split())
    return round(words / WORDS_PER_MINUTE * 60)


class ScriptGenerator:
    """
    Client for the Ollama HTTP API.

    Uses:
    - GET  /api/tags      availability check and model listing
    - POST /api/generate  non-streaming JSON-format completion
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        max_source_chars: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = (base_url or settings.OLLAMA_URL).rstrip("/")
        self.model = model or settings.OLLAMA_MODEL
        self.timeout = timeout or settings.OLLAMA_TIMEOUT
        self.max_source_chars = max_source_chars or settings.SCRIPT_MAX_SOURCE_CHARS
        self._transport = transport

    def _client(self, timeout: Optional[float] = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=timeout or self.timeout,
            headers={"User-Agent": settings.USER_AGENT},
            transport=self._transport,
        )

    async def is_available(self) -> bool:
        try:
            async with self._client(timeout=5.0) as client:
                response = await client.get(f"{self.base_url}/api/tags")
            return response.is_success
        except httpx.HTTPError:
            return False

    async def list_models(self) -> List[str]:
        try:
            async with self._client(timeout=10.0) as client:
                response = await client.get(f"{self.base_url}/api/tags")
                response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise LLMServiceUnavailableError(
                "Ollama is not available",
                context={"ollama_url": self.base_url},
                original_exception=e
            )
        return [model["name"] for model in data.get("models") or [] if model.get("name")]

    async def generate(
        self,
        poi_name: str,
        content: str,
        category: str,
        custom_prompt: Optional[str] = None
    ) -> AudioScript:
        """
        Generate a segmented audio-guide script for one POI.

        Args:
            poi_name: Name read in the script
            content: Narrative source text (truncated before prompting)
            category: POI category
            custom_prompt: Replaces the default user instruction when given

        Raises:
            LLMServiceUnavailableError: When Ollama cannot be reached or errors
            ScriptGenerationError: When the answer has no response field
        """
        user_prompt = custom_prompt or build_user_prompt(poi_name, content, category, self.max_source_chars)
        body = {
            "model": self.model,
            "prompt": build_prompt(user_prompt),
            "stream": False,
            "format": "json",
        }

        logger.info(f"Generating audio guide for '{poi_name}' with {self.model}")
        try:
            async with self._client() as client:
                response = await client.post(f"{self.base_url}/api/generate", json=body)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise LLMServiceUnavailableError(
                f"Ollama error: {e.response.status_code}",
                context={"ollama_url": self.base_url, "model": self.model, "status_code": e.response.status_code},
                original_exception=e
            )
        except httpx.HTTPError as e:
            raise LLMServiceUnavailableError(
                "Ollama is not reachable",
                context={"ollama_url": self.base_url, "model": self.model},
                original_exception=e
            )

        try:
            text = response.json()["response"]
        except (ValueError, KeyError, TypeError) as e:
            raise ScriptGenerationError(
                "Ollama answer has no response field",
                context={"model": self.model, "response_body": response.text[:500]},
                original_exception=e
            )

        script = self.build_script(str(text))
        logger.info(f"Generated {len(script.segments)} segments ({script.total_duration}s) for '{poi_name}'")
        return script

    def build_script(self, text: str) -> AudioScript:
        segments = [
            AudioSegment(
                id=f"seg-{position}",
                type=SegmentType(raw["type"]),
                title=raw["title"],
                content=raw["content"],
                duration_estimate=estimate_duration(raw["content"]),
            )
            for position, raw in enumerate(parse_segments(text), start=1)
        ]
        return AudioScript(
            segments=segments,
            total_duration=sum(segment.duration_estimate for segment in segments),
            generated_at=datetime.utcnow(),
            model=self.model,
        )
