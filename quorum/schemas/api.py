"""
Pydantic Schemas for the Quorum API

This module defines the request and response models for the HTTP surface:
- LLMRequest: `chat`, `multi-chat` and `synthesize` actions, discriminated on `action`
- Responses for each action
- Conversation cost request/response
- Error responses and health check schemas

Request fields accept the camelCase names the browser client sends
(`systemPrompt`, `apiKeys`, ...) as well as their snake_case names.
"""

from typing import TYPE_CHECKING, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from quorum.schemas.conversation import Message, ModelResult, TranscriptTurn

if TYPE_CHECKING:
    from quorum.metrics.conversation import ConversationCost


# =============================================================================
# REQUEST MODELS
# =============================================================================


class _CallerRequest(BaseModel):
    """Fields shared by every action that reaches a provider."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    api_keys: dict[str, str | None] = Field(
        default_factory=dict,
        alias="apiKeys",
        description="Caller-supplied provider keys by key name (e.g. OPENAI_API_KEY)",
    )

    @field_validator("api_keys")
    @classmethod
    def drop_null_keys(cls, v: dict[str, str | None]) -> dict[str, str]:
        """Null key values count as absent."""
        return {name: value for name, value in v.items() if value is not None}


class ChatRequest(_CallerRequest):
    """
    Single-model call.

    Example:
        {
            "action": "chat",
            "messages": [{"role": "user", "content": "Hi"}],
            "model": "gpt-5-mini"
        }
    """

    action: Literal["chat"]

    messages: list[Message] = Field(..., min_length=1, description="Conversation in order")

    model: str = Field(..., description="Registry ID of the model to call")

    temperature: float | None = Field(
        default=None, ge=0.0, le=2.0, description="Sampling temperature"
    )

    system_prompt: str | None = Field(
        default=None, alias="systemPrompt", description="Optional system prompt"
    )

    stream: bool = Field(
        default=False, description="Return the provider's raw response stream"
    )


class MultiChatRequest(_CallerRequest):
    """
    Fan-out to several models at once.

    Example:
        {
            "action": "multi-chat",
            "messages": [{"role": "user", "content": "Hi"}],
            "models": ["gpt-5-mini", "claude-sonnet-4"]
        }
    """

    action: Literal["multi-chat"]

    messages: list[Message] = Field(..., min_length=1, description="Conversation in order")

    models: list[str] = Field(..., min_length=1, description="Models to call, in result order")

    temperature: float | None = Field(
        default=None, ge=0.0, le=2.0, description="Sampling temperature"
    )

    system_prompt: str | None = Field(
        default=None, alias="systemPrompt", description="Optional system prompt"
    )


class SynthesizeRequest(_CallerRequest):
    """Synthesis over the results of a fan-out."""

    action: Literal["synthesize"]

    responses: list[ModelResult] = Field(..., description="Fan-out results to synthesize")

    synthesis_model: str | None = Field(
        default=None,
        alias="synthesisModel",
        description="Requested synthesis model (falls back if its key is unavailable)",
    )

    synthesis_prompt: str | None = Field(
        default=None,
        alias="synthesisPrompt",
        description="System prompt override for the synthesis call",
    )


# Discriminated on `action`; bind with Body(discriminator="action")
LLMRequest = Union[ChatRequest, MultiChatRequest, SynthesizeRequest]


class ConversationCostRequest(BaseModel):
    """Transcript to estimate the cost of."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    messages: list[TranscriptTurn] = Field(
        default_factory=list, description="Transcript in conversation order"
    )

    system_prompt: str | None = Field(
        default="", alias="systemPrompt", description="System prompt sent with every fan-out"
    )


# =============================================================================
# RESPONSE MODELS
# =============================================================================


class ChatResponse(BaseModel):
    """Response text of a single-model call."""

    response: str


class MultiChatResponse(BaseModel):
    """One result per requested model, in request order."""

    responses: list[ModelResult]


class SynthesizeResponse(BaseModel):
    """Synthesized answer and the model that produced it."""

    synthesis: str

    model: str


class ModelCostEntry(BaseModel):
    """Per-model share of a conversation's cost."""

    cost_usd: float = Field(..., ge=0.0)

    tokens: int = Field(..., ge=0)


class ConversationCostResponse(BaseModel):
    """
    Estimated cost of a conversation.

    Token counts are approximations (about four characters per token).
    """

    model_config = ConfigDict(protected_namespaces=())

    total_cost_usd: float = Field(..., ge=0.0)

    total_input_tokens: int = Field(..., ge=0)

    total_output_tokens: int = Field(..., ge=0)

    total_tokens: int = Field(..., ge=0)

    model_costs: dict[str, ModelCostEntry] = Field(default_factory=dict)

    formatted: str = Field(..., description="Total cost with six decimal places")


# =============================================================================
# ERROR MODELS
# =============================================================================


class ErrorCodes:
    """
    Standard error codes for API responses.

    Engine failures reuse the `code` of the raised QuorumError.
    """

    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNKNOWN_MODEL = "UNKNOWN_MODEL"
    UNKNOWN_PROVIDER = "UNKNOWN_PROVIDER"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    NO_CREDENTIALS = "NO_CREDENTIALS"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorDetail(BaseModel):
    """
    Detailed error information for API error responses.

    Provides machine-readable error codes, human-readable messages,
    and optional field information for validation errors.
    """

    code: str = Field(
        ...,
        description="Machine-readable error code for programmatic handling",
    )

    message: str = Field(
        ...,
        description="Human-readable error message",
    )

    field: str | None = Field(
        default=None,
        description="Field that caused the error (for validation errors)",
    )


class ErrorResponse(BaseModel):
    """
    Standard error response format for all API errors.

    Example:
        {
            "error": {
                "code": "UNKNOWN_MODEL",
                "message": "Unknown model: gpt-2",
                "field": null
            }
        }
    """

    error: ErrorDetail


# =============================================================================
# HEALTH MODELS
# =============================================================================


class ComponentHealth(BaseModel):
    """Health status of one component."""

    name: str

    status: Literal["healthy", "degraded", "unhealthy"]

    message: str | None = None


class HealthResponse(BaseModel):
    """Overall service health."""

    status: Literal["healthy", "degraded", "unhealthy"]

    service: str

    version: str

    components: list[ComponentHealth] = Field(default_factory=list)

    uptime_seconds: float | None = Field(default=None, ge=0.0)


# =============================================================================
# CONVERSION UTILITIES
# =============================================================================


def cost_response_from_summary(summary: "ConversationCost") -> ConversationCostResponse:
    """
    Convert a ConversationCost dataclass to its API response model.

    Args:
        summary: Result of calculate_conversation_cost()

    Returns:
        ConversationCostResponse ready for serialization
    """
    return ConversationCostResponse(
        total_cost_usd=summary.total_cost_usd,
        total_input_tokens=summary.total_input_tokens,
        total_output_tokens=summary.total_output_tokens,
        total_tokens=summary.total_tokens,
        model_costs={
            model_id: ModelCostEntry(cost_usd=entry.cost_usd, tokens=entry.tokens)
            for model_id, entry in summary.model_costs.items()
        },
        formatted=summary.formatted,
    )
