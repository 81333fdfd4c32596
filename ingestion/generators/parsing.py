"""
Parsing of LLM output into raw audio-guide segments.

Strategies are tried in PARSE_STRATEGIES order; each returns a list of raw
segment dicts or None when it cannot make sense of the text. The last one
always succeeds.
"""

from typing import Any, Callable, Dict, List, Optional
import json
import re
import logging

from schemas.audio import SegmentType

logger = logging.getLogger(__name__)

RawSegment = Dict[str, str]

_EMBEDDED_OBJECT = re.compile(r"\{.*\}", re.DOTALL)
_FENCES = re.compile(r"```(?:json)?")

DEFAULT_TITLES = {
    SegmentType.HOOK: "Accroche",
    SegmentType.ESSENTIAL: "L'essentiel",
    SegmentType.CONTEXT: "Contexte historique",
    SegmentType.ANECDOTES: "Anecdotes",
    SegmentType.DETAILS: "Détails",
    SegmentType.TRANSITION: "Transition",
}

_VALID_TYPES = {segment_type.value for segment_type in SegmentType}


def _segments_from(data: Any) -> Optional[List[RawSegment]]:
    if not isinstance(data, dict) or not isinstance(data.get("segments"), list):
        return None

    segments: List[RawSegment] = []
    for item in data["segments"]:
        if not isinstance(item, dict):
            continue
        segment_type = str(item.get("type", "")).strip().lower()
        content = str(item.get("content") or "").strip()
        if segment_type not in _VALID_TYPES or not content:
            logger.debug(f"Discarding segment of type {segment_type!r}")
            continue
        title = str(item.get("title") or "").strip() or DEFAULT_TITLES[SegmentType(segment_type)]
        segments.append({"type": segment_type, "title": title, "content": content})

    return segments or None


def parse_strict_json(text: str) -> Optional[List[RawSegment]]:
    try:
        return _segments_from(json.loads(text))
    except (ValueError, TypeError):
        return None


def parse_embedded_json(text: str) -> Optional[List[RawSegment]]:
    """Object between the first "{" and the last "}" of the text."""
    match = _EMBEDDED_OBJECT.search(text or "")
    if not match:
        return None
    try:
        return _segments_from(json.loads(match.group(0)))
    except (ValueError, TypeError):
        return None


def fallback_single_segment(text: str) -> List[RawSegment]:
    content = _FENCES.sub("", text or "").strip()
    return [{
        "type": SegmentType.ESSENTIAL.value,
        "title": DEFAULT_TITLES[SegmentType.ESSENTIAL],
        "content": content,
    }]


PARSE_STRATEGIES: List[Callable[[str], Optional[List[RawSegment]]]] = [
    parse_strict_json,
    parse_embedded_json,
    fallback_single_segment,
]


def parse_segments(text: str) -> List[RawSegment]:
    for strategy in PARSE_STRATEGIES:
        segments = strategy(text)
        if segments:
            if strategy is not parse_strict_json:
                logger.warning(f"LLM output was not strict JSON, parsed with {strategy.__name__}")
            return segments
    return fallback_single_segment(text)
