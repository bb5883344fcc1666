"""
OpenAI Chat Completions adapters.

OpenAIAdapter talks to api.openai.com. OpenAICompatibleAdapter reuses the
same wire format against a provider-specific base URL and is the default
adapter for every provider without a bespoke translation (xAI, DeepInfra).
"""

from collections.abc import Sequence
from typing import Any

import httpx

from quorum.providers.base import ProviderAdapter, first_item
from quorum.registry.models import ModelMetadata
from quorum.schemas.conversation import Message


OPENAI_API_URL = "https://api.openai.com/v1/chat/completions"

# GPT-5 models reject any caller-supplied temperature
_FIXED_TEMPERATURE_PREFIXES = ("gpt-5",)


def supports_temperature(model: ModelMetadata) -> bool:
    """Whether the model accepts a temperature field at all."""
    return not model.api_model_name.startswith(_FIXED_TEMPERATURE_PREFIXES)


def build_chat_payload(
    messages: Sequence[Message],
    model: ModelMetadata,
    temperature: float | None,
    stream: bool,
) -> dict[str, Any]:
    """
    Build a Chat Completions request body.

    Messages pass through as role/content pairs. `temperature` is omitted
    entirely when None.
    """
    payload: dict[str, Any] = {
        "model": model.api_model_name,
        "messages": [{"role": m.role.value, "content": m.content} for m in messages],
    }
    if temperature is not None:
        payload["temperature"] = temperature
    payload["stream"] = stream
    return payload


def extract_chat_text(data: dict[str, Any]) -> str:
    """Text of the first choice, or '' when absent."""
    choice = first_item(data.get("choices"))
    if not isinstance(choice, dict):
        return ""
    message = choice.get("message")
    if not isinstance(message, dict):
        return ""
    return message.get("content") or ""


class OpenAIAdapter(ProviderAdapter):
    """OpenAI via the native Chat Completions API."""

    name = "OpenAI"

    def missing_key_message(self, model: ModelMetadata) -> str:
        return "OPENAI_API_KEY not configured"

    def default_error_message(self, model: ModelMetadata) -> str:
        return "OpenAI API error"

    def endpoint(self, model: ModelMetadata) -> str:
        return OPENAI_API_URL

    def request_temperature(self, model: ModelMetadata, temperature: float) -> float | None:
        return temperature if supports_temperature(model) else None

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
            self.endpoint(model),
            build_chat_payload(
                messages, model, self.request_temperature(model, temperature), stream
            ),
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {api_key}",
            },
            stream=stream,
        )
        if stream:
            return response

        return extract_chat_text(self.read_json(model, response))


class OpenAICompatibleAdapter(OpenAIAdapter):
    """Any provider serving the OpenAI Chat Completions format at its own base URL."""

    name = "OpenAI-compatible"

    def missing_key_message(self, model: ModelMetadata) -> str:
        return f"API key not configured for {model.provider.value}"

    def default_error_message(self, model: ModelMetadata) -> str:
        return f"{model.provider.value} API error"

    def endpoint(self, model: ModelMetadata) -> str:
        return f"{model.base_url.rstrip('/')}/chat/completions"

    def request_temperature(self, model: ModelMetadata, temperature: float) -> float | None:
        return temperature
