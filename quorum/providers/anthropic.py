"""Anthropic Messages API adapter."""

from collections.abc import Sequence
from typing import Any

import httpx

from quorum.providers.base import ProviderAdapter, first_item
from quorum.registry.models import ModelMetadata
from quorum.schemas.conversation import Message, Role


ANTHROPIC_API_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"

# Output ceilings by tier: Opus 32K, Sonnet 64K
OPUS_MAX_TOKENS = 32000
DEFAULT_MAX_TOKENS = 64000


def max_output_tokens(model: ModelMetadata) -> int:
    """Output ceiling for a model: registry value first, then by name tier."""
    if model.max_tokens:
        return model.max_tokens
    if "opus" in model.api_model_name:
        return OPUS_MAX_TOKENS
    return DEFAULT_MAX_TOKENS


def build_anthropic_payload(
    messages: Sequence[Message],
    model: ModelMetadata,
    temperature: float,
    stream: bool,
) -> dict[str, Any]:
    """
    Build a Messages API request body.

    The first system message moves to the top-level `system` field; every
    system message is removed from `messages`.
    """
    system_message = next((m for m in messages if m.role == Role.SYSTEM), None)

    payload: dict[str, Any] = {
        "model": model.api_model_name,
        "max_tokens": max_output_tokens(model),  # required by Anthropic
        "temperature": temperature,
        "stream": stream,
    }
    if system_message is not None:
        payload["system"] = system_message.content
    payload["messages"] = [
        {
            "role": "assistant" if m.role == Role.ASSISTANT else "user",
            "content": m.content,
        }
        for m in messages
        if m.role != Role.SYSTEM
    ]
    return payload


class AnthropicAdapter(ProviderAdapter):
    """Anthropic Claude via the native Messages API."""

    name = "Anthropic"

    def missing_key_message(self, model: ModelMetadata) -> str:
        return "ANTHROPIC_API_KEY not configured"

    def default_error_message(self, model: ModelMetadata) -> str:
        return "Anthropic API error"

    async def invoke(
        self,
        messages: Sequence[Message],
        model: ModelMetadata,
        temperature: float,
        stream: bool,
        api_key: str | None,
    ) -> str | httpx.Response:
        api_key = self.require_key(model, api_key)

        response = await self.post(
            model,
            ANTHROPIC_API_URL,
            build_anthropic_payload(messages, model, temperature, stream),
            headers={
                "Content-Type": "application/json",
                "x-api-key": api_key,
                "anthropic-version": ANTHROPIC_VERSION,
            },
            stream=stream,
        )
        if stream:
            return response

        block = first_item(self.read_json(model, response).get("content"))
        text = block.get("text") if isinstance(block, dict) else None
        return text or ""
