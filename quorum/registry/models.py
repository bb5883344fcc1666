"""
Model Registry

This module defines the pool of models a conversation can be sent to, with
metadata for each model:
- Anthropic (Claude 4 series): native Messages API
- OpenAI (GPT-5 series): native Chat Completions API
- Google (Gemini 2.5 series): native generateContent API
- xAI (Grok 4 series): OpenAI-compatible API
- DeepInfra (Llama 4, DeepSeek, Qwen3, Kimi, GPT-OSS): OpenAI-compatible API

Each model entry includes:
- Model ID, display name and provider
- Wire model name and endpoint base (OpenAI-compatible providers only)
- Cost per 1M tokens (input/output)
- Output token ceiling where the provider requires one

Registration order is significant: synthesis falls back to the first
registered model with a usable API key.
"""

from enum import Enum
from pydantic import BaseModel, ConfigDict, Field


XAI_BASE_URL = "https://api.x.ai/v1"
DEEPINFRA_BASE_URL = "https://api.deepinfra.com/v1/openai"


class ModelProvider(str, Enum):
    """Supported inference providers."""

    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    GOOGLE = "google"
    XAI = "xai"
    DEEPINFRA = "deepinfra"


class ModelMetadata(BaseModel):
    """
    Complete metadata for a registered model.

    This class holds all information needed to:
    1. Dispatch requests to the correct provider adapter
    2. Build the provider request body
    3. Estimate costs from response text
    """

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model_id: str = Field(
        ...,
        description="Unique identifier used by callers",
    )

    display_name: str = Field(
        ...,
        description="Human-readable model name",
    )

    provider: ModelProvider = Field(
        ...,
        description="Inference provider",
    )

    api_model_name: str = Field(
        ...,
        description="Model name used in provider API calls",
    )

    base_url: str | None = Field(
        default=None,
        description="Endpoint base for OpenAI-compatible providers",
    )

    cost_per_1m_input_tokens: float | None = Field(
        default=None,
        ge=0,
        description="Cost in USD per 1 million input tokens",
    )

    cost_per_1m_output_tokens: float | None = Field(
        default=None,
        ge=0,
        description="Cost in USD per 1 million output tokens",
    )

    max_tokens: int | None = Field(
        default=None,
        gt=0,
        description="Max output tokens sent with every request, if the provider needs one",
    )

    @property
    def is_priced(self) -> bool:
        """True when both input and output rates are known."""
        return (
            self.cost_per_1m_input_tokens is not None
            and self.cost_per_1m_output_tokens is not None
        )


class ModelRegistry:
    """
    Central registry of all available models.

    The registry follows a singleton-like pattern where model definitions
    are loaded once and reused throughout the application lifecycle. It is
    read-only after construction, so concurrent dispatches share it freely.

    Attributes:
        _models: Dictionary mapping model IDs to their metadata, in registration order
    """

    def __init__(self) -> None:
        self._models: dict[str, ModelMetadata] = {}
        self._initialize_models()

    def _initialize_models(self) -> None:
        """Register all available models with their metadata."""

        # Anthropic - Claude 4 series
        self._register(
            ModelMetadata(
                model_id="claude-opus-4",
                display_name="Claude Opus 4",
                provider=ModelProvider.ANTHROPIC,
                api_model_name="claude-opus-4-1",
                cost_per_1m_input_tokens=3.00,
                cost_per_1m_output_tokens=15.00,
                max_tokens=32000,
            )
        )
        self._register(
            ModelMetadata(
                model_id="claude-sonnet-4",
                display_name="Claude Sonnet 4",
                provider=ModelProvider.ANTHROPIC,
                api_model_name="claude-sonnet-4-0",
                cost_per_1m_input_tokens=3.00,
                cost_per_1m_output_tokens=15.00,
                max_tokens=64000,
            )
        )

        # OpenAI - GPT-5 series
        self._register(
            ModelMetadata(
                model_id="gpt-5",
                display_name="GPT-5",
                provider=ModelProvider.OPENAI,
                api_model_name="gpt-5",
                cost_per_1m_input_tokens=1.25,
                cost_per_1m_output_tokens=10.00,
            )
        )
        self._register(
            ModelMetadata(
                model_id="gpt-5-mini",
                display_name="GPT-5 Mini",
                provider=ModelProvider.OPENAI,
                api_model_name="gpt-5-mini",
                cost_per_1m_input_tokens=0.25,
                cost_per_1m_output_tokens=2.00,
            )
        )
        self._register(
            ModelMetadata(
                model_id="gpt-5-nano",
                display_name="GPT-5 Nano",
                provider=ModelProvider.OPENAI,
                api_model_name="gpt-5-nano",
                cost_per_1m_input_tokens=0.50,
                cost_per_1m_output_tokens=0.40,
            )
        )

        # Google - Gemini 2.5 series
        self._register(
            ModelMetadata(
                model_id="gemini-2.5-pro",
                display_name="Gemini 2.5 Pro",
                provider=ModelProvider.GOOGLE,
                api_model_name="gemini-2.5-pro",
                cost_per_1m_input_tokens=1.25,
                cost_per_1m_output_tokens=10.00,
            )
        )
        self._register(
            ModelMetadata(
                model_id="gemini-2.5-flash",
                display_name="Gemini 2.5 Flash",
                provider=ModelProvider.GOOGLE,
                api_model_name="gemini-2.5-flash",
                cost_per_1m_input_tokens=0.15,
                cost_per_1m_output_tokens=2.50,  # thinking mode
            )
        )
        self._register(
            ModelMetadata(
                model_id="gemini-2.5-flash-lite",
                display_name="Gemini 2.5 Flash Lite",
                provider=ModelProvider.GOOGLE,
                api_model_name="gemini-2.5-flash-lite",
                cost_per_1m_input_tokens=0.10,
                cost_per_1m_output_tokens=0.40,
            )
        )

        # xAI - Grok series
        self._register(
            ModelMetadata(
                model_id="grok-4",
                display_name="Grok 4",
                provider=ModelProvider.XAI,
                api_model_name="grok-4",
                base_url=XAI_BASE_URL,
                cost_per_1m_input_tokens=3.00,
                cost_per_1m_output_tokens=15.00,
            )
        )
        self._register(
            ModelMetadata(
                model_id="grok-4-fast-reasoning",
                display_name="Grok 4 Fast (Reasoning)",
                provider=ModelProvider.XAI,
                api_model_name="grok-4-fast-reasoning",
                base_url=XAI_BASE_URL,
                cost_per_1m_input_tokens=0.20,
                cost_per_1m_output_tokens=0.50,
            )
        )
        self._register(
            ModelMetadata(
                model_id="grok-4-fast-non-reasoning",
                display_name="Grok 4 Fast",
                provider=ModelProvider.XAI,
                api_model_name="grok-4-fast-non-reasoning",
                base_url=XAI_BASE_URL,
                cost_per_1m_input_tokens=0.20,
                cost_per_1m_output_tokens=0.50,
            )
        )

        # DeepInfra-hosted open models
        self._register(
            ModelMetadata(
                model_id="llama-4-maverick",
                display_name="Llama 4 Maverick",
                provider=ModelProvider.DEEPINFRA,
                api_model_name="meta-llama/Llama-4-Maverick-17B-128E-Instruct-FP8",
                base_url=DEEPINFRA_BASE_URL,
                cost_per_1m_input_tokens=0.20,
                cost_per_1m_output_tokens=0.60,
            )
        )
        self._register(
            ModelMetadata(
                model_id="llama-4-scout",
                display_name="Llama 4 Scout",
                provider=ModelProvider.DEEPINFRA,
                api_model_name="meta-llama/Llama-4-Scout-17B-16E-Instruct",
                base_url=DEEPINFRA_BASE_URL,
                cost_per_1m_input_tokens=0.10,
                cost_per_1m_output_tokens=0.30,
            )
        )
        self._register(
            ModelMetadata(
                model_id="deepseek-v3.1-terminus",
                display_name="DeepSeek V3.1 Terminus",
                provider=ModelProvider.DEEPINFRA,
                api_model_name="deepseek-ai/DeepSeek-V3.1-Terminus",
                base_url=DEEPINFRA_BASE_URL,
                cost_per_1m_input_tokens=0.216,
                cost_per_1m_output_tokens=0.27,
            )
        )
        self._register(
            ModelMetadata(
                model_id="deepseek-r1",
                display_name="DeepSeek R1",
                provider=ModelProvider.DEEPINFRA,
                api_model_name="deepseek-ai/DeepSeek-R1-Turbo",
                base_url=DEEPINFRA_BASE_URL,
                cost_per_1m_input_tokens=0.55,
                cost_per_1m_output_tokens=2.19,
            )
        )
        self._register(
            ModelMetadata(
                model_id="qwen3-next-80b-thinking",
                display_name="Qwen3 Next 80B Thinking",
                provider=ModelProvider.DEEPINFRA,
                api_model_name="Qwen/Qwen3-Next-80B-A3B-Thinking",
                base_url=DEEPINFRA_BASE_URL,
                cost_per_1m_input_tokens=0.14,
                cost_per_1m_output_tokens=1.40,
            )
        )
        self._register(
            ModelMetadata(
                model_id="qwen3-next-80b-instruct",
                display_name="Qwen3 Next 80B Instruct",
                provider=ModelProvider.DEEPINFRA,
                api_model_name="Qwen/Qwen3-Next-80B-A3B-Instruct",
                base_url=DEEPINFRA_BASE_URL,
                cost_per_1m_input_tokens=0.14,
                cost_per_1m_output_tokens=1.40,
            )
        )
        self._register(
            ModelMetadata(
                model_id="kimi-k2-instruct",
                display_name="Kimi K2 Instruct",
                provider=ModelProvider.DEEPINFRA,
                api_model_name="moonshotai/Kimi-K2-Instruct-0905",
                base_url=DEEPINFRA_BASE_URL,
                cost_per_1m_input_tokens=0.40,
                cost_per_1m_output_tokens=0.50,
            )
        )
        self._register(
            ModelMetadata(
                model_id="gpt-oss-120b",
                display_name="GPT-OSS 120B",
                provider=ModelProvider.DEEPINFRA,
                api_model_name="openai/gpt-oss-120b",
                base_url=DEEPINFRA_BASE_URL,
                cost_per_1m_input_tokens=0.05,
                cost_per_1m_output_tokens=0.45,
            )
        )
        self._register(
            ModelMetadata(
                model_id="gpt-oss-20b",
                display_name="GPT-OSS 20B",
                provider=ModelProvider.DEEPINFRA,
                api_model_name="openai/gpt-oss-20b",
                base_url=DEEPINFRA_BASE_URL,
                cost_per_1m_input_tokens=0.04,
                cost_per_1m_output_tokens=0.15,
            )
        )

    def _register(self, model: ModelMetadata) -> None:
        """Register a model in the registry."""
        if model.model_id in self._models:
            raise ValueError(f"Duplicate model ID: {model.model_id}")
        self._models[model.model_id] = model

    def get_model(self, model_id: str) -> ModelMetadata | None:
        """
        Retrieve model metadata by ID.

        Args:
            model_id: The unique identifier of the model

        Returns:
            ModelMetadata if found, None otherwise
        """
        return self._models.get(model_id)

    def list_models(self) -> list[ModelMetadata]:
        """
        Return all registered models in registration order.

        Returns:
            List of all ModelMetadata instances
        """
        return list(self._models.values())

    def list_models_by_provider(self) -> dict[ModelProvider, list[ModelMetadata]]:
        """
        Return models grouped by provider.

        Providers appear in the order their first model was registered, and
        each list keeps registration order.

        Returns:
            Dictionary mapping provider to its models
        """
        grouped: dict[ModelProvider, list[ModelMetadata]] = {}
        for model in self._models.values():
            grouped.setdefault(model.provider, []).append(model)
        return grouped

    def get_model_ids(self) -> list[str]:
        """
        Return all registered model IDs.

        Returns:
            List of model ID strings
        """
        return list(self._models.keys())


_registry_instance: ModelRegistry | None = None


def get_model_registry() -> ModelRegistry:
    """
    Get the global model registry instance.

    Uses lazy initialization to create the registry only when needed.
    This ensures consistent access to model metadata throughout the application.

    Returns:
        The singleton ModelRegistry instance
    """
    global _registry_instance
    if _registry_instance is None:
        _registry_instance = ModelRegistry()
    return _registry_instance
