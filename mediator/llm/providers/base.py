"""
Base LLM Provider Protocol

Abstract base class and standardized request/response formats shared by the
OpenAI, Anthropic and Ollama providers that back the content-generation
collaborator.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Any, Optional


@dataclass
class LLMRequest:
    """Standardized request format for all LLM providers.

    Attributes:
        prompt: The complete prompt text to send to the LLM
        max_tokens: Maximum number of tokens to generate in the response
        temperature: Sampling temperature (0.0 = deterministic)
        model: Optional specific model to use (overrides provider default)
        metadata: Additional provider-specific parameters
    """
    prompt: str
    max_tokens: int
    temperature: float
    model: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Validate request parameters."""
        if not self.prompt:
            raise ValueError("Prompt cannot be empty")
        if self.max_tokens <= 0:
            raise ValueError("max_tokens must be positive")
        if not 0.0 <= self.temperature <= 2.0:
            raise ValueError("temperature must be between 0.0 and 2.0")


@dataclass
class LLMResponse:
    """Standardized response format from all LLM providers.

    Attributes:
        content: The generated text content from the LLM
        model_used: The actual model that processed the request
        tokens_used: Total number of tokens consumed (input + output)
        cost_usd: Estimated cost in USD for this API call
        metadata: Additional provider-specific response data
    """
    content: str
    model_used: str
    tokens_used: int
    cost_usd: float
    metadata: Dict[str, Any] = field(default_factory=dict)


class BaseLLMProvider(ABC):
    """Contract every LLM provider implementation follows.

    Providers accept a configuration object in ``__init__`` and own their
    own retry policy for transient failures.
    """

    @abstractmethod
    def generate(self, request: LLMRequest) -> LLMResponse:
        """Generate a completion.

        Raises:
            ProviderError: If the API call fails
            ProviderNotAvailableError: If the provider is not accessible
        """
        pass

    @abstractmethod
    def estimate_cost(self, request: LLMRequest) -> float:
        """Estimate cost in USD for the request (0.0 for local models)."""
        pass

    @abstractmethod
    def get_capabilities(self) -> Dict[str, Any]:
        """Return provider identifier, supported models and feature flags."""
        pass

    @abstractmethod
    def validate_requirements(self) -> bool:
        """Return True if the provider is ready to use."""
        pass

    @abstractmethod
    def get_context_window(self, model: str) -> int:
        """Return the maximum context window size in tokens for the model."""
        pass
