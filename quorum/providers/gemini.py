"""Google Gemini generateContent adapter."""

from collections.abc import Sequence
from typing import Any

import httpx

from quorum.providers.base import ProviderAdapter, first_item
from quorum.registry.models import ModelMetadata
from quorum.schemas.conversation import Message, Role


GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"


def build_gemini_contents(messages: Sequence[Message]) -> list[dict[str, Any]]:
    """
    Convert messages to Gemini `contents`.

    Gemini has no system field: the first system message is prepended to a
    leading user turn, or inserted as a new leading user turn otherwise.
    """
    system_message = next((m for m in messages if m.role == Role.SYSTEM), None)

    contents: list[dict[str, Any]] = [
        {
            "role": "model" if m.role == Role.ASSISTANT else "user",
            "parts": [{"text": m.content}],
        }
        for m in messages
        if m.role != Role.SYSTEM
    ]

    if system_message is not None:
        if contents and contents[0]["role"] == "user":
            first_part = contents[0]["parts"][0]
            first_part["text"] = f"{system_message.content}\n\n{first_part['text']}"
        else:
            contents.insert(
                0, {"role": "user", "parts": [{"text": system_message.content}]}
            )

    return contents


def gemini_endpoint(model: ModelMetadata, stream: bool) -> str:
    """Model URL; streaming and non-streaming calls use different verbs."""
    verb = "streamGenerateContent" if stream else "generateContent"
    return f"{GEMINI_API_BASE}/{model.api_model_name}:{verb}"


class GeminiAdapter(ProviderAdapter):
    """Google Gemini via the native generateContent API."""

    name = "Gemini"

    def missing_key_message(self, model: ModelMetadata) -> str:
        return "GOOGLE_API_KEY not configured"

    def default_error_message(self, model: ModelMetadata) -> str:
        return "Google API error"

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
            gemini_endpoint(model, stream),
            {
                "contents": build_gemini_contents(messages),
                "generationConfig": {"temperature": temperature},
            },
            headers={"Content-Type": "application/json"},
            stream=stream,
            params={"key": api_key},  # Gemini takes the key in the query string
        )
        if stream:
            return response

        candidate = first_item(self.read_json(model, response).get("candidates"))
        if not isinstance(candidate, dict):
            return ""
        content = candidate.get("content")
        part = first_item(content.get("parts")) if isinstance(content, dict) else None
        text = part.get("text") if isinstance(part, dict) else None
        return text or ""
