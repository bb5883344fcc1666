"""Synthesis: merge successful fan-out responses into one answer."""

import logging
from collections.abc import Mapping, Sequence

from quorum.config import get_settings
from quorum.dispatcher.handlers import dispatch
from quorum.schemas.conversation import (
    RESPONSE_SEPARATOR,
    Message,
    ModelResult,
    Role,
    SynthesisTurn,
    display_name_for,
)
from quorum.synthesis.selector import select_synthesis_model

logger = logging.getLogger(__name__)


# Low temperature keeps the synthesis faithful to the source responses
SYNTHESIS_TEMPERATURE = 0.3

DEFAULT_SYNTHESIS_PROMPT = """You are a synthesis assistant. Multiple AI models have provided responses to the same question.
Your task is to synthesize these responses into a single, comprehensive answer that captures the key insights from all models.

Be objective and highlight:
1. Common agreements across models
2. Unique insights from specific models
3. Any disagreements or different perspectives
4. A balanced conclusion

Keep the synthesis concise but thorough."""


def format_responses_for_synthesis(results: Sequence[ModelResult]) -> str:
    """
    Render successful results as attributed blocks.

    Each block is `**{display name}:**` followed by the response; blocks are
    separated by a horizontal rule. Failed results are skipped.
    """
    return RESPONSE_SEPARATOR.join(
        f"**{display_name_for(r.model)}:**\n{r.response}" for r in results if r.success
    )


def build_synthesis_messages(results: Sequence[ModelResult]) -> list[Message]:
    """The single user message sent to the synthesis model."""
    return [
        Message(
            role=Role.USER,
            content=f"Please synthesize these responses:\n\n{format_responses_for_synthesis(results)}",
        )
    ]


async def synthesize(
    results: Sequence[ModelResult],
    synthesis_model: str | None = None,
    synthesis_prompt: str | None = None,
    api_keys: Mapping[str, str] | None = None,
    source_index: int | None = None,
) -> SynthesisTurn:
    """
    Synthesize fan-out results with one model call.

    Args:
        results: Results of a fan-out; only successes are used.
        synthesis_model: Requested model (defaults to the configured SYNTHESIS_MODEL).
        synthesis_prompt: System prompt override for the synthesis call.
        api_keys: Caller-supplied keys by key name.
        source_index: Transcript position of the turn being summarized.

    Returns:
        SynthesisTurn naming the model that actually produced the text.

    Raises:
        NoCredentialsError: If no model has a usable key.
        UnknownProviderError, ConfigurationError, UpstreamError: From the call itself.
    """
    requested = synthesis_model or get_settings().synthesis_model
    model_id = select_synthesis_model(requested, api_keys)

    successful = sum(1 for r in results if r.success)
    if not successful:
        logger.warning("Synthesizing with no successful responses")
    logger.info(f"Running synthesis of {successful} responses via {model_id}")

    content = await dispatch(
        build_synthesis_messages(results),
        model_id,
        temperature=SYNTHESIS_TEMPERATURE,
        system_prompt=synthesis_prompt or DEFAULT_SYNTHESIS_PROMPT,
        api_keys=api_keys,
    )

    return SynthesisTurn(model=model_id, content=content, source_index=source_index)
