"""
Unit Tests for LLMProviderFactory

Tests provider instantiation, caching, auto-selection, legacy name mapping,
and error handling for the LLM provider factory.
"""

import pytest
from unittest.mock import Mock, patch

from mediator.llm.config import AnthropicConfig, LLMConfig, OllamaConfig, OpenAIConfig
from mediator.llm.errors import ConfigurationError
from mediator.llm.factory import AutoSelectionConfig, LLMProviderFactory
from mediator.llm.providers.base import BaseLLMProvider
from mediator.llm.providers.cloud_openai import CloudOpenAIProvider
from mediator.llm.providers.local_ollama import LocalOllamaProvider


@pytest.fixture
def llm_config():
    """Create test LLM configuration."""
    return LLMConfig(
        ollama=OllamaConfig(base_url="http://localhost:11434"),
        openai=OpenAIConfig(api_key="test_openai_key"),
        anthropic=AnthropicConfig(api_key="test_anthropic_key"),
    )


@pytest.fixture
def factory(llm_config):
    return LLMProviderFactory(llm_config)


class TestLLMProviderFactoryInstantiation:
    """Test provider instantiation by name."""

    def test_factory_initialization(self, llm_config):
        factory = LLMProviderFactory(llm_config)

        assert factory.config == llm_config
        assert isinstance(factory.auto_selection, AutoSelectionConfig)
        assert factory._provider_cache == {}

    def test_create_ollama_provider(self, factory):
        provider = factory.create_provider("local-ollama")

        assert isinstance(provider, BaseLLMProvider)
        assert provider.config.base_url == "http://localhost:11434"

    def test_create_openai_provider(self, factory):
        provider = factory.create_provider("cloud-openai")

        assert isinstance(provider, CloudOpenAIProvider)
        assert provider.config.api_key == "test_openai_key"

    @patch("anthropic.Anthropic")
    def test_create_anthropic_provider(self, mock_anthropic, factory):
        provider = factory.create_provider("cloud-anthropic")

        assert isinstance(provider, BaseLLMProvider)
        assert provider.config.api_key == "test_anthropic_key"

    def test_unknown_provider_raises_error(self, factory):
        with pytest.raises(ConfigurationError) as exc_info:
            factory.create_provider("unknown-provider")

        assert "Unknown provider: unknown-provider" in str(exc_info.value)
        assert "Valid options:" in str(exc_info.value)

    def test_missing_openai_key(self):
        factory = LLMProviderFactory(LLMConfig())
        with pytest.raises(ConfigurationError, match="OPENAI_API_KEY"):
            factory.create_provider("cloud-openai")

    def test_missing_anthropic_key(self):
        factory = LLMProviderFactory(LLMConfig())
        with pytest.raises(ConfigurationError, match="ANTHROPIC_API_KEY"):
            factory.create_provider("cloud-anthropic")


class TestProviderCaching:
    """Test provider caching prevents redundant instantiation."""

    def test_cached_provider_returned_on_subsequent_calls(self, factory):
        provider1 = factory.create_provider("cloud-openai")
        provider2 = factory.create_provider("cloud-openai")

        assert provider1 is provider2
        assert factory._provider_cache["cloud-openai"] is provider1

    def test_clear_cache(self, factory):
        factory.create_provider("cloud-openai")
        factory.create_provider("local-ollama")

        factory.clear_cache()

        assert factory._provider_cache == {}


class TestLegacyNames:

    @pytest.mark.parametrize("legacy,canonical", [
        ("openai", "cloud-openai"),
        ("ollama", "local-ollama"),
    ])
    def test_legacy_names_map_to_canonical(self, factory, legacy, canonical):
        provider = factory.create_provider(legacy)
        assert factory._provider_cache[canonical] is provider


class TestAutoSelection:
    """Test auto-selection walks the priority order."""

    def test_first_valid_provider_selected(self, factory):
        with patch.object(CloudOpenAIProvider, "validate_requirements", return_value=True):
            provider = factory.create_provider("auto")

        assert isinstance(provider, CloudOpenAIProvider)

    def test_falls_through_to_next_provider(self, llm_config):
        factory = LLMProviderFactory(
            llm_config,
            auto_selection=AutoSelectionConfig(priority_order=["cloud-openai", "local-ollama"]),
        )
        with patch.object(CloudOpenAIProvider, "validate_requirements", return_value=False), \
                patch.object(LocalOllamaProvider, "validate_requirements", return_value=True):
            provider = factory.create_provider("auto")

        assert isinstance(provider, LocalOllamaProvider)

    def test_no_provider_available(self):
        factory = LLMProviderFactory(
            LLMConfig(),
            auto_selection=AutoSelectionConfig(priority_order=["cloud-openai", "local-ollama"]),
        )
        with patch.object(LocalOllamaProvider, "validate_requirements", return_value=False):
            with pytest.raises(ConfigurationError) as exc_info:
                factory.create_provider("auto")

        message = str(exc_info.value)
        assert "No LLM providers available" in message
        assert "cloud-openai: OpenAI API key not configured" in message
        assert "local-ollama: validation failed" in message
