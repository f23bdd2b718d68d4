"""
LLM Infrastructure Layer

Provider implementations, configuration and the content-generation service
that the mediation core consumes.

Architecture:
    Infrastructure Layer (this module)
        ↓
    Mediation core (cache, transformation, validation_context)
        ↓
    Surfaces (CLI, REST API)

Usage:
    >>> from mediator.llm import LLMConfig, LLMProviderFactory, ProviderContentService
    >>> factory = LLMProviderFactory(LLMConfig.load_from_yaml())
    >>> service = ProviderContentService(factory, provider="auto")
"""

from mediator.llm.providers.base import BaseLLMProvider, LLMRequest, LLMResponse
from mediator.llm.factory import LLMProviderFactory, AutoSelectionConfig
from mediator.llm.config import (
    LLMConfig,
    OllamaConfig,
    OpenAIConfig,
    AnthropicConfig,
)
from mediator.llm.errors import (
    LLMError,
    ConfigurationError,
    ProviderError,
    ProviderNotAvailableError,
    RateLimitError,
    AuthenticationError,
    InvalidRequestError,
)
from mediator.llm.service import (
    ContentGenerationService,
    ProviderContentService,
    GenerationOptions,
    ask_json,
)

__all__ = [
    "BaseLLMProvider",
    "LLMRequest",
    "LLMResponse",
    "LLMProviderFactory",
    "AutoSelectionConfig",
    "LLMConfig",
    "OllamaConfig",
    "OpenAIConfig",
    "AnthropicConfig",
    "LLMError",
    "ConfigurationError",
    "ProviderError",
    "ProviderNotAvailableError",
    "RateLimitError",
    "AuthenticationError",
    "InvalidRequestError",
    "ContentGenerationService",
    "ProviderContentService",
    "GenerationOptions",
    "ask_json",
]
