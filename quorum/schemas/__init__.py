"""
Schemas module: Pydantic data and request/response models.

This module provides validated data models for the engine and its API:
- Conversation model: messages, per-model results, transcript turns
- Request/response models for /api/llm and /cost
- Error response and health check models

Example usage:
    from quorum.schemas import Message, Role

    conversation = [Message(role=Role.USER, content="Hello")]
"""

from quorum.schemas.conversation import (
    # Conversation model
    Message,
    ModelResult,
    MultiModelTurn,
    Role,
    SynthesisTurn,
    TranscriptTurn,
    # Conversion utilities
    display_name_for,
    to_model_messages,
)

from quorum.schemas.api import (
    # Request models
    ChatRequest,
    ConversationCostRequest,
    LLMRequest,
    MultiChatRequest,
    SynthesizeRequest,
    # Response models
    ChatResponse,
    ConversationCostResponse,
    ModelCostEntry,
    MultiChatResponse,
    SynthesizeResponse,
    # Error models
    ErrorCodes,
    ErrorDetail,
    ErrorResponse,
    # Health models
    ComponentHealth,
    HealthResponse,
    # Conversion utilities
    cost_response_from_summary,
)

__all__ = [
    # Conversation model
    "Role",
    "Message",
    "ModelResult",
    "MultiModelTurn",
    "SynthesisTurn",
    "TranscriptTurn",
    "display_name_for",
    "to_model_messages",
    # Request models
    "ChatRequest",
    "MultiChatRequest",
    "SynthesizeRequest",
    "LLMRequest",
    "ConversationCostRequest",
    # Response models
    "ChatResponse",
    "MultiChatResponse",
    "SynthesizeResponse",
    "ModelCostEntry",
    "ConversationCostResponse",
    # Error models
    "ErrorCodes",
    "ErrorDetail",
    "ErrorResponse",
    # Health models
    "ComponentHealth",
    "HealthResponse",
    # Conversion utilities
    "cost_response_from_summary",
]
