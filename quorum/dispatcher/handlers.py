"""
Dispatcher Handlers - Single and fan-out model calls.

This module routes a logical call to the right provider adapter and fans a
multi-model request out to several adapters concurrently.

Key components:
- ADAPTERS: provider tag -> adapter table, with the OpenAI-compatible
  adapter as the default for providers without a bespoke translation
- dispatch(): one call; errors propagate to the caller unchanged
- dispatch_many(): concurrent calls; every failure is captured as a failed
  ModelResult so one model can never abort the batch
"""

import asyncio
import logging
import time
from collections.abc import Mapping, Sequence

import httpx

from quorum.credentials import get_credential_resolver
from quorum.errors import QuorumError, UnknownModelError, UnknownProviderError
from quorum.providers.anthropic import AnthropicAdapter
from quorum.providers.base import ProviderAdapter
from quorum.providers.gemini import GeminiAdapter
from quorum.providers.openai import OpenAIAdapter, OpenAICompatibleAdapter
from quorum.registry.models import ModelMetadata, ModelProvider, get_model_registry
from quorum.schemas.conversation import Message, ModelResult, Role

logger = logging.getLogger(__name__)


DEFAULT_TEMPERATURE = 0.7

ADAPTERS: dict[ModelProvider, ProviderAdapter] = {
    ModelProvider.ANTHROPIC: AnthropicAdapter(),
    ModelProvider.OPENAI: OpenAIAdapter(),
    ModelProvider.GOOGLE: GeminiAdapter(),
}

COMPATIBLE_ADAPTER: ProviderAdapter = OpenAICompatibleAdapter()


def get_adapter(model: ModelMetadata) -> ProviderAdapter:
    """
    Select the adapter for a model's provider.

    Providers without a bespoke adapter use the OpenAI-compatible one,
    which needs the model's base URL.

    Raises:
        UnknownProviderError: If the model cannot be routed anywhere.
    """
    adapter = ADAPTERS.get(model.provider)
    if adapter is not None:
        return adapter
    if not model.base_url:
        raise UnknownProviderError(model.provider.value, model.model_id)
    return COMPATIBLE_ADAPTER


def prepare_messages(
    messages: Sequence[Message], system_prompt: str | None = None
) -> list[Message]:
    """Copy of the conversation with the system prompt prepended, if any."""
    if system_prompt:
        return [Message(role=Role.SYSTEM, content=system_prompt), *messages]
    return list(messages)


async def dispatch(
    messages: Sequence[Message],
    model_id: str,
    temperature: float = DEFAULT_TEMPERATURE,
    system_prompt: str | None = None,
    stream: bool = False,
    api_keys: Mapping[str, str] | None = None,
) -> str | httpx.Response:
    """
    Send a conversation to one model.

    This is the main entry point for single calls. It looks the model up,
    prepends the system prompt, resolves the API key and routes to the
    adapter for the model's provider.

    Args:
        messages: Conversation in order; not modified.
        model_id: Registry ID of the model to call.
        temperature: Sampling temperature.
        system_prompt: Optional system prompt sent as a leading system message.
        stream: Return the raw upstream response instead of text.
        api_keys: Caller-supplied keys by key name.

    Returns:
        Response text, or the unconsumed httpx.Response when streaming.

    Raises:
        UnknownModelError, UnknownProviderError, ConfigurationError, UpstreamError
    """
    model = get_model_registry().get_model(model_id)
    if model is None:
        raise UnknownModelError(model_id)

    adapter = get_adapter(model)
    final_messages = prepare_messages(messages, system_prompt)
    api_key = get_credential_resolver().resolve(model.provider, api_keys)

    logger.info(f"Dispatching to {model.model_id} via {model.provider.value}")
    start_time = time.perf_counter()

    try:
        result = await adapter.invoke(final_messages, model, temperature, stream, api_key)
    except QuorumError as e:
        logger.error(f"LLM call failed for {model_id}: {e}")
        raise

    latency_ms = (time.perf_counter() - start_time) * 1000
    logger.info(
        f"{adapter.name} dispatch completed: model={model.model_id}, "
        f"latency={latency_ms:.0f}ms, stream={stream}"
    )
    return result


async def _dispatch_captured(
    messages: Sequence[Message],
    model_id: str,
    temperature: float,
    system_prompt: str | None,
    api_keys: Mapping[str, str] | None,
) -> ModelResult:
    """
    Call one model and capture the outcome as a ModelResult.

    Never raises: every failure becomes a failed result carrying the error text.
    """
    try:
        response = await dispatch(
            messages,
            model_id,
            temperature=temperature,
            system_prompt=system_prompt,
            api_keys=api_keys,
        )
    except QuorumError as e:
        return ModelResult.failed(model_id, str(e), e.code)
    except Exception as e:
        logger.exception(f"Unexpected failure calling {model_id}")
        return ModelResult.failed(model_id, str(e) or type(e).__name__, "INTERNAL_ERROR")

    return ModelResult.succeeded(model_id, response)


async def dispatch_many(
    messages: Sequence[Message],
    model_ids: Sequence[str],
    temperature: float = DEFAULT_TEMPERATURE,
    system_prompt: str | None = None,
    api_keys: Mapping[str, str] | None = None,
) -> list[ModelResult]:
    """
    Send a conversation to several models concurrently.

    All calls run at once; the batch takes as long as the slowest call.
    Results come back in the order of `model_ids`, whatever order the
    calls complete in, and a failed call never affects the others.

    Args:
        messages: Conversation in order; not modified.
        model_ids: Models to call, in the order results should be returned.
        temperature: Sampling temperature for every call.
        system_prompt: Optional system prompt for every call.
        api_keys: Caller-supplied keys by key name.

    Returns:
        One ModelResult per entry in model_ids, in the same order.
    """
    logger.info(f"Fanning out to {len(model_ids)} models: {', '.join(model_ids)}")

    results = await asyncio.gather(
        *(
            _dispatch_captured(messages, model_id, temperature, system_prompt, api_keys)
            for model_id in model_ids
        )
    )

    succeeded = sum(1 for r in results if r.success)
    logger.info(f"Fan-out complete: {succeeded}/{len(model_ids)} models succeeded")
    return list(results)
