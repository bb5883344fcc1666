"""
Registry module: Model pool configuration and metadata.

This module contains:
- models.py: provider-grouped model registry with pricing and endpoint metadata

Public API:
- ModelProvider: Enum for inference providers
- ModelMetadata: Pydantic model for model configuration
- ModelRegistry: Central registry class
- get_model_registry: Singleton accessor function
"""

from quorum.registry.models import (
    ModelMetadata,
    ModelProvider,
    ModelRegistry,
    get_model_registry,
)

__all__ = [
    "ModelProvider",
    "ModelMetadata",
    "ModelRegistry",
    "get_model_registry",
]
