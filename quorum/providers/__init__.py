"""
Providers module: wire-protocol adapters for each provider family.

Key exports:
- ProviderAdapter: Abstract base for one wire-protocol family
- AnthropicAdapter: Anthropic Messages API
- OpenAIAdapter: OpenAI Chat Completions API
- OpenAICompatibleAdapter: Chat Completions at a provider-specific base URL
- GeminiAdapter: Google generateContent API
- get_http_client / close_http_client: Shared httpx.AsyncClient lifecycle
"""

from quorum.providers.anthropic import AnthropicAdapter
from quorum.providers.base import (
    ProviderAdapter,
    close_http_client,
    extract_error_message,
    get_http_client,
)
from quorum.providers.gemini import GeminiAdapter
from quorum.providers.openai import OpenAIAdapter, OpenAICompatibleAdapter

__all__ = [
    "ProviderAdapter",
    "AnthropicAdapter",
    "OpenAIAdapter",
    "OpenAICompatibleAdapter",
    "GeminiAdapter",
    "get_http_client",
    "close_http_client",
    "extract_error_message",
]
