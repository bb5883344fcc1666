"""Domain-level exceptions for the dispatch engine."""


class QuorumError(Exception):
    """Base class for every failure the engine reports."""

    code = "QUORUM_ERROR"


class UnknownModelError(QuorumError):
    """Raised when a model ID is not in the registry."""

    code = "UNKNOWN_MODEL"

    def __init__(self, model_id: str) -> None:
        self.model_id = model_id
        super().__init__(f"Unknown model: {model_id}")


class UnknownProviderError(QuorumError):
    """Raised when a registry entry cannot be routed to any adapter."""

    code = "UNKNOWN_PROVIDER"

    def __init__(self, provider: str, model_id: str | None = None) -> None:
        self.provider = provider
        self.model_id = model_id
        super().__init__(f"Unknown provider: {provider}")


class ConfigurationError(QuorumError):
    """Raised when no usable API key is available for a provider."""

    code = "CONFIGURATION_ERROR"

    def __init__(self, provider: str, message: str) -> None:
        self.provider = provider
        super().__init__(message)


class UpstreamError(QuorumError):
    """Raised when a provider answers with a non-success status or cannot be reached."""

    code = "UPSTREAM_ERROR"

    def __init__(
        self, provider: str, message: str, status_code: int | None = None
    ) -> None:
        self.provider = provider
        self.status_code = status_code
        super().__init__(message)


class NoCredentialsError(QuorumError):
    """Raised when no registered model has a usable API key for synthesis."""

    code = "NO_CREDENTIALS"

    def __init__(self, message: str = "No API keys configured for synthesis") -> None:
        super().__init__(message)
