"""
Credential Resolver

Decides which API key a provider call uses. Server-held keys (from Settings)
are used only when the process runs in development mode, or when the caller
presents the configured shared auth token in its OPENAI_API_KEY slot.
Otherwise the caller's own per-provider key is used verbatim.

This is a trust boundary: the order of the checks and the exact token
comparison must not change.
"""

import logging
import secrets
from collections.abc import Mapping

from quorum.config import Settings, get_settings
from quorum.registry.models import ModelProvider

logger = logging.getLogger(__name__)


PROVIDER_KEY_NAMES: dict[ModelProvider, str] = {
    ModelProvider.ANTHROPIC: "ANTHROPIC_API_KEY",
    ModelProvider.OPENAI: "OPENAI_API_KEY",
    ModelProvider.GOOGLE: "GOOGLE_API_KEY",
    ModelProvider.XAI: "XAI_API_KEY",
    ModelProvider.DEEPINFRA: "DEEPINFRA_API_KEY",
}

# Callers send the shared auth token in place of their OpenAI key
AUTH_TOKEN_KEY_NAME = "OPENAI_API_KEY"


class CredentialResolver:
    """
    Resolve the API key for a provider call.

    The resolver only reads settings; it holds no per-call state and is
    safe to share between concurrent dispatches.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()

    def uses_server_keys(self, api_keys: Mapping[str, str] | None = None) -> bool:
        """
        Check whether server-held keys may be used for this caller.

        Args:
            api_keys: Keys supplied by the caller, by key name.

        Returns:
            True in development mode, or when the caller's token matches AUTH_TOKEN.
        """
        if self._settings.is_development:
            return True

        if self._settings.auth_token is None:
            return False
        expected = self._settings.auth_token.get_secret_value()
        if not expected:
            return False

        supplied = (api_keys or {}).get(AUTH_TOKEN_KEY_NAME)
        if not supplied:
            return False
        return secrets.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))

    def resolve(
        self, provider: ModelProvider, api_keys: Mapping[str, str] | None = None
    ) -> str | None:
        """
        Return the API key to use for a provider.

        Args:
            provider: Provider the call is routed to.
            api_keys: Keys supplied by the caller, by key name. Missing
                      names are treated as empty.

        Returns:
            The key, or None when no non-empty key is available.
        """
        key_name = PROVIDER_KEY_NAMES[provider]

        if self.uses_server_keys(api_keys):
            secret = getattr(self._settings, key_name.lower())
            value = secret.get_secret_value() if secret is not None else ""
        else:
            value = (api_keys or {}).get(key_name) or ""

        return value or None


_resolver: CredentialResolver | None = None


def get_credential_resolver() -> CredentialResolver:
    """
    Get the global credential resolver instance.

    Returns:
        Singleton CredentialResolver bound to the cached settings
    """
    global _resolver
    if _resolver is None:
        _resolver = CredentialResolver()
    return _resolver
