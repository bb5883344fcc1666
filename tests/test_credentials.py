"""
Credential Resolver Tests

Validates when server-held keys are used and when the caller's own keys are.

Test Categories:
1. TestServerKeyGate - development mode and shared auth token
2. TestResolve - per-provider key selection
"""

import pytest

from quorum.credentials import CredentialResolver, get_credential_resolver
from quorum.registry.models import ModelProvider


@pytest.fixture
def server_keys():
    """Server-held keys for every provider."""
    return {
        "anthropic_api_key": "sk-ant-server",
        "openai_api_key": "sk-openai-server",
        "google_api_key": "google-server",
        "xai_api_key": "xai-server",
        "deepinfra_api_key": "deepinfra-server",
    }


class TestServerKeyGate:
    """Tests for CredentialResolver.uses_server_keys()."""

    def test_development_mode_uses_server_keys(self, make_settings):
        resolver = CredentialResolver(make_settings(environment="development"))

        assert resolver.uses_server_keys({}) is True

    def test_production_without_token_uses_caller_keys(self, make_settings):
        resolver = CredentialResolver(make_settings(environment="production"))

        assert resolver.uses_server_keys({"OPENAI_API_KEY": "anything"}) is False

    def test_matching_token_unlocks_server_keys(self, make_settings):
        resolver = CredentialResolver(
            make_settings(environment="production", auth_token="shared-secret")
        )

        assert resolver.uses_server_keys({"OPENAI_API_KEY": "shared-secret"}) is True

    def test_token_must_match_exactly(self, make_settings):
        resolver = CredentialResolver(
            make_settings(environment="production", auth_token="shared-secret")
        )

        assert resolver.uses_server_keys({"OPENAI_API_KEY": "shared-secret "}) is False
        assert resolver.uses_server_keys({"OPENAI_API_KEY": "SHARED-SECRET"}) is False
        assert resolver.uses_server_keys({}) is False
        assert resolver.uses_server_keys(None) is False

    def test_empty_token_never_matches(self, make_settings):
        """An empty configured token does not unlock server keys."""
        resolver = CredentialResolver(make_settings(environment="production", auth_token=""))

        assert resolver.uses_server_keys({"OPENAI_API_KEY": ""}) is False

    def test_token_only_checked_in_openai_slot(self, make_settings):
        resolver = CredentialResolver(
            make_settings(environment="production", auth_token="shared-secret")
        )

        assert resolver.uses_server_keys({"ANTHROPIC_API_KEY": "shared-secret"}) is False


class TestResolve:
    """Tests for CredentialResolver.resolve()."""

    def test_development_returns_server_key(self, make_settings, server_keys):
        resolver = CredentialResolver(make_settings(environment="development", **server_keys))

        assert resolver.resolve(ModelProvider.ANTHROPIC, {}) == "sk-ant-server"
        assert resolver.resolve(ModelProvider.DEEPINFRA, None) == "deepinfra-server"

    def test_development_ignores_caller_keys(self, make_settings, server_keys, caller_keys):
        resolver = CredentialResolver(make_settings(environment="development", **server_keys))

        assert resolver.resolve(ModelProvider.GOOGLE, caller_keys) == "google-server"

    def test_token_holder_gets_every_server_key(self, make_settings, server_keys):
        resolver = CredentialResolver(
            make_settings(environment="production", auth_token="shared-secret", **server_keys)
        )
        api_keys = {"OPENAI_API_KEY": "shared-secret"}

        assert resolver.resolve(ModelProvider.OPENAI, api_keys) == "sk-openai-server"
        assert resolver.resolve(ModelProvider.XAI, api_keys) == "xai-server"

    def test_caller_keys_used_verbatim(self, make_settings, server_keys, caller_keys):
        resolver = CredentialResolver(make_settings(environment="production", **server_keys))

        assert resolver.resolve(ModelProvider.ANTHROPIC, caller_keys) == "sk-ant-caller"
        assert resolver.resolve(ModelProvider.XAI, caller_keys) == "xai-caller"

    def test_missing_caller_key_is_none(self, make_settings):
        resolver = CredentialResolver(make_settings(environment="production"))

        assert resolver.resolve(ModelProvider.GOOGLE, {"OPENAI_API_KEY": "sk-x"}) is None
        assert resolver.resolve(ModelProvider.GOOGLE, None) is None

    def test_empty_caller_key_is_none(self, make_settings):
        resolver = CredentialResolver(make_settings(environment="production"))

        assert resolver.resolve(ModelProvider.OPENAI, {"OPENAI_API_KEY": ""}) is None

    def test_missing_server_key_is_none(self, make_settings):
        resolver = CredentialResolver(make_settings(environment="development"))

        assert resolver.resolve(ModelProvider.ANTHROPIC, {}) is None

    def test_singleton_uses_environment(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "development")
        monkeypatch.setenv("XAI_API_KEY", "xai-from-env")

        assert get_credential_resolver().resolve(ModelProvider.XAI, {}) == "xai-from-env"
        assert get_credential_resolver() is get_credential_resolver()
