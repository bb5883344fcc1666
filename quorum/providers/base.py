"""
Provider Adapter Base

Shared plumbing for every provider adapter:
- A lazily created httpx.AsyncClient shared by all outbound calls
- ProviderAdapter: abstract translation unit between normalized messages
  and one provider family's wire protocol
- Error-envelope extraction for non-success responses

Adapters return either the extracted response text or, when streaming was
requested, the unconsumed httpx.Response. A streamed response must be read
with `aiter_bytes()` and closed with `aclose()` by the caller.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

import httpx

from quorum.config import get_settings
from quorum.errors import ConfigurationError, UpstreamError
from quorum.registry.models import ModelMetadata
from quorum.schemas.conversation import Message

logger = logging.getLogger(__name__)


_http_client: httpx.AsyncClient | None = None


def get_http_client() -> httpx.AsyncClient:
    """
    Get the shared async HTTP client (lazy initialization).

    Returns:
        AsyncClient configured with the request timeout from settings.
    """
    global _http_client
    if _http_client is None or _http_client.is_closed:
        settings = get_settings()
        _http_client = httpx.AsyncClient(timeout=settings.request_timeout_sec)
        logger.debug("Initialized shared HTTP client")
    return _http_client


async def close_http_client() -> None:
    """Close the shared HTTP client, if one was created."""
    global _http_client
    if _http_client is not None:
        await _http_client.aclose()
        _http_client = None


def extract_error_message(response: httpx.Response) -> str | None:
    """
    Pull the provider's message out of an `{"error": {"message": ...}}` envelope.

    Gemini sometimes wraps the envelope in a one-element list.

    Returns:
        The message, or None if the body has no usable envelope.
    """
    try:
        data = response.json()
    except ValueError:
        return None

    if isinstance(data, list) and data:
        data = data[0]
    if not isinstance(data, dict):
        return None

    error = data.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        if isinstance(message, str) and message:
            return message
    return None


class ProviderAdapter(ABC):
    """Abstract base for one provider wire-protocol family."""

    #: Short family name used in log lines
    name: str = "provider"

    @abstractmethod
    async def invoke(
        self,
        messages: Sequence[Message],
        model: ModelMetadata,
        temperature: float,
        stream: bool,
        api_key: str | None,
    ) -> str | httpx.Response:
        """
        Send a conversation to the provider.

        Args:
            messages: Normalized conversation, system messages included.
            model: Registry entry of the model being called.
            temperature: Sampling temperature requested by the caller.
            stream: Return the raw response body instead of text.
            api_key: Resolved API key, or None if none is available.

        Returns:
            Response text, or the unconsumed httpx.Response when streaming.

        Raises:
            ConfigurationError: If api_key is missing.
            UpstreamError: If the provider reports a failure or cannot be reached.
        """
        ...

    @abstractmethod
    def missing_key_message(self, model: ModelMetadata) -> str:
        """Error text used when no API key is available."""
        ...

    @abstractmethod
    def default_error_message(self, model: ModelMetadata) -> str:
        """Error text used when a failure response carries no message."""
        ...

    def require_key(self, model: ModelMetadata, api_key: str | None) -> str:
        """Return the key, or raise ConfigurationError if it is missing."""
        if not api_key:
            raise ConfigurationError(model.provider.value, self.missing_key_message(model))
        return api_key

    async def post(
        self,
        model: ModelMetadata,
        url: str,
        payload: dict[str, Any],
        headers: dict[str, str],
        stream: bool,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        """
        POST a JSON body and check the status.

        Non-streaming responses are fully read. Streaming responses are
        returned with the body unread.

        Raises:
            UpstreamError: On transport failure or non-2xx status.
        """
        client = get_http_client()
        request = client.build_request(
            "POST", url, json=payload, headers=headers, params=params
        )

        try:
            response = await client.send(request, stream=stream)
        except httpx.HTTPError as e:
            raise UpstreamError(
                model.provider.value, f"{self.default_error_message(model)}: {e}"
            ) from e

        if not response.is_success:
            if stream:
                await response.aread()
                await response.aclose()
            message = extract_error_message(response) or self.default_error_message(model)
            logger.warning(
                f"{self.name} returned {response.status_code} for {model.model_id}: {message}"
            )
            raise UpstreamError(model.provider.value, message, response.status_code)

        return response

    def read_json(self, model: ModelMetadata, response: httpx.Response) -> dict[str, Any]:
        """Decode a successful response body, tolerating non-object payloads."""
        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(
                model.provider.value,
                f"{self.default_error_message(model)}: response was not valid JSON",
                response.status_code,
            ) from e
        return data if isinstance(data, dict) else {}


def first_item(value: Any) -> Any:
    """First element of a non-empty list, otherwise None."""
    if isinstance(value, list) and value:
        return value[0]
    return None
