"""
LLM Provider Factory

Creates providers by name, caches instances and auto-selects the first
available provider in priority order.
"""

import logging
import threading
from typing import Dict, Optional, List
from dataclasses import dataclass, field

from mediator.llm.config import LLMConfig
from mediator.llm.providers.base import BaseLLMProvider
from mediator.llm.providers.local_ollama import LocalOllamaProvider
from mediator.llm.providers.cloud_openai import CloudOpenAIProvider
from mediator.llm.providers.cloud_anthropic import CloudAnthropicProvider
from mediator.llm.errors import ConfigurationError


logger = logging.getLogger(__name__)

PROVIDER_NAMES = ["cloud-openai", "cloud-anthropic", "local-ollama"]

LEGACY_NAMES = {
    "openai": "cloud-openai",
    "claude": "cloud-anthropic",
    "anthropic": "cloud-anthropic",
    "ollama": "local-ollama",
}


@dataclass
class AutoSelectionConfig:
    """Configuration for auto-selection behavior.

    Attributes:
        priority_order: Providers to try in order
    """
    priority_order: List[str] = field(default_factory=lambda: list(PROVIDER_NAMES))


class LLMProviderFactory:
    """Factory for LLM providers with auto-selection support.

    Example:
        >>> factory = LLMProviderFactory(LLMConfig.load_from_yaml())
        >>> provider = factory.create_provider("auto")
    """

    def __init__(
        self,
        config: LLMConfig,
        auto_selection: Optional[AutoSelectionConfig] = None
    ):
        self.config = config
        self.auto_selection = auto_selection or AutoSelectionConfig()
        self._provider_cache: Dict[str, BaseLLMProvider] = {}
        self._lock = threading.Lock()

    def create_provider(self, provider: str) -> BaseLLMProvider:
        """Create (or return the cached) provider for a name.

        Args:
            provider: Provider name, legacy alias, or "auto"

        Raises:
            ConfigurationError: If the provider is unknown or unavailable
        """
        provider = LEGACY_NAMES.get(provider, provider)

        with self._lock:
            if provider == "auto":
                return self._auto_select_provider()

            if provider in self._provider_cache:
                return self._provider_cache[provider]

            provider_instance = self._instantiate_provider(provider)
            self._provider_cache[provider] = provider_instance
            return provider_instance

    def _auto_select_provider(self) -> BaseLLMProvider:
        """Return the first provider in priority order that validates."""
        errors = []

        for provider in self.auto_selection.priority_order:
            if provider in self._provider_cache:
                return self._provider_cache[provider]
            try:
                provider_instance = self._instantiate_provider(provider)
                if provider_instance.validate_requirements():
                    logger.info(f"Auto-selected content provider: {provider}")
                    self._provider_cache[provider] = provider_instance
                    return provider_instance
                errors.append(f"{provider}: validation failed")
            except Exception as e:
                errors.append(f"{provider}: {e}")

        error_details = "\n".join(f"  - {err}" for err in errors)
        raise ConfigurationError(
            f"No LLM providers available. Tried:\n{error_details}\n\n"
            "Setup instructions:\n"
            "  - cloud-openai: Set OPENAI_API_KEY environment variable\n"
            "  - cloud-anthropic: Set ANTHROPIC_API_KEY environment variable\n"
            "  - local-ollama: Start local service with 'ollama serve'"
        )

    def _instantiate_provider(self, provider: str) -> BaseLLMProvider:
        if provider == "cloud-openai":
            if not self.config.openai.api_key:
                raise ConfigurationError(
                    "OpenAI API key not configured. "
                    "Set OPENAI_API_KEY environment variable or provide in config."
                )
            return CloudOpenAIProvider(self.config.openai)

        elif provider == "local-ollama":
            return LocalOllamaProvider(self.config.ollama)

        elif provider == "cloud-anthropic":
            if not self.config.anthropic.api_key:
                raise ConfigurationError(
                    "Anthropic API key not configured. "
                    "Set ANTHROPIC_API_KEY environment variable or provide in config."
                )
            return CloudAnthropicProvider(self.config.anthropic)

        raise ConfigurationError(
            f"Unknown provider: {provider}. "
            f"Valid options: {', '.join(PROVIDER_NAMES)}, auto"
        )

    def clear_cache(self):
        """Forget instantiated providers so the next call re-creates them."""
        with self._lock:
            self._provider_cache.clear()
