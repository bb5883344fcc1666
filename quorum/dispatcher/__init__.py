"""
Dispatcher module: Routing calls to provider adapters.

This module provides a unified interface for sending a conversation to one
or many models across providers (Anthropic, OpenAI, Google, xAI, DeepInfra).

Key exports:
- dispatch(): Single call routed to the model's provider adapter
- dispatch_many(): Concurrent fan-out with per-model failure capture
- get_adapter(): Provider adapter lookup (OpenAI-compatible by default)
- prepare_messages(): System prompt handling shared by all calls
"""

from quorum.dispatcher.handlers import (
    ADAPTERS,
    COMPATIBLE_ADAPTER,
    DEFAULT_TEMPERATURE,
    dispatch,
    dispatch_many,
    get_adapter,
    prepare_messages,
)

__all__ = [
    "ADAPTERS",
    "COMPATIBLE_ADAPTER",
    "DEFAULT_TEMPERATURE",
    "dispatch",
    "dispatch_many",
    "get_adapter",
    "prepare_messages",
]
