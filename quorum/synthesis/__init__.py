"""
Synthesis module: consolidating a fan-out into one answer.

Key exports:
- select_synthesis_model(): Fallback-aware choice of synthesis model
- synthesize(): One synthesis call over the successful fan-out responses
- DEFAULT_SYNTHESIS_PROMPT / SYNTHESIS_TEMPERATURE: Call parameters
"""

from quorum.synthesis.invoker import (
    DEFAULT_SYNTHESIS_PROMPT,
    SYNTHESIS_TEMPERATURE,
    build_synthesis_messages,
    format_responses_for_synthesis,
    synthesize,
)
from quorum.synthesis.selector import PREFERRED_SYNTHESIS_MODELS, select_synthesis_model

__all__ = [
    "DEFAULT_SYNTHESIS_PROMPT",
    "SYNTHESIS_TEMPERATURE",
    "PREFERRED_SYNTHESIS_MODELS",
    "build_synthesis_messages",
    "format_responses_for_synthesis",
    "select_synthesis_model",
    "synthesize",
]
