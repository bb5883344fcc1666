"""
Synthesis model selection.

Picks the model that will synthesize a fan-out by walking an ordered
fallback chain and taking the first model whose API key resolves:
1. The model the caller asked for
2. PREFERRED_SYNTHESIS_MODELS, in priority order
3. Every registered model, in registration order

Each candidate is checked once for credential availability only; no call
is made here.
"""

import logging
from collections.abc import Mapping

from quorum.credentials import CredentialResolver, get_credential_resolver
from quorum.errors import NoCredentialsError
from quorum.registry.models import ModelRegistry, get_model_registry

logger = logging.getLogger(__name__)


PREFERRED_SYNTHESIS_MODELS: tuple[str, ...] = (
    "gemini-2.5-flash",  # Primary default
    "gpt-5-mini",
    "claude-sonnet-4",
    "llama-4-maverick",  # Open model
)


def select_synthesis_model(
    requested: str | None,
    api_keys: Mapping[str, str] | None = None,
    registry: ModelRegistry | None = None,
    resolver: CredentialResolver | None = None,
) -> str:
    """
    Choose the synthesis model.

    Args:
        requested: Model ID the caller asked for, if any.
        api_keys: Caller-supplied keys by key name.
        registry: Model registry (defaults to the global instance).
        resolver: Credential resolver (defaults to the global instance).

    Returns:
        ID of the first candidate with a usable API key.

    Raises:
        NoCredentialsError: If no registered model has a usable key.
    """
    registry = registry or get_model_registry()
    resolver = resolver or get_credential_resolver()

    candidates = [model_id for model_id in (requested, *PREFERRED_SYNTHESIS_MODELS) if model_id]
    for model_id in candidates:
        model = registry.get_model(model_id)
        if model and resolver.resolve(model.provider, api_keys):
            if model_id != requested:
                logger.info(f"Synthesis model {requested!r} unavailable, using {model_id}")
            return model_id

    # Last resort: any available model
    for model in registry.list_models():
        if resolver.resolve(model.provider, api_keys):
            logger.info(f"Synthesis falling back to first available model: {model.model_id}")
            return model.model_id

    raise NoCredentialsError()
