"""
Audio-guide script generation.
"""

from ingestion.generators.script_generator import ScriptGenerator, estimate_duration
from ingestion.generators.parsing import PARSE_STRATEGIES, parse_segments

__all__ = ["ScriptGenerator", "estimate_duration", "PARSE_STRATEGIES", "parse_segments"]
