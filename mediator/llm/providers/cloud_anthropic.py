"""
Cloud Anthropic Claude Provider

Provider for Anthropic's Claude models via the Anthropic API.

Provider ID: cloud-anthropic
"""

from typing import Dict, Any

from mediator.llm.config import AnthropicConfig
from mediator.llm.providers.base import BaseLLMProvider, LLMRequest, LLMResponse
from mediator.llm.errors import (
    ProviderError,
    AuthenticationError,
    RateLimitError,
    InvalidRequestError,
    TimeoutError,
    NetworkError,
    ProviderNotAvailableError,
)
from mediator.llm.retry import retry_with_backoff


class CloudAnthropicProvider(BaseLLMProvider):
    """Cloud Anthropic Claude LLM provider.

    Example:
        >>> provider = CloudAnthropicProvider(AnthropicConfig(api_key="sk-ant-..."))
        >>> response = provider.generate(
        >>>     LLMRequest(prompt="Summarize this record", max_tokens=500, temperature=0.2)
        >>> )
    """

    # USD per 1M tokens
    PRICING = {
        "claude-3-5-sonnet-20241022": {"input": 3.00, "output": 15.00},
        "claude-3-5-haiku-20241022": {"input": 0.80, "output": 4.00},
        "claude-3-opus-20240229": {"input": 15.00, "output": 75.00},
        "claude-3-haiku-20240307": {"input": 0.25, "output": 1.25},
    }

    CONTEXT_WINDOWS = {
        "claude-3-5-sonnet-20241022": 200_000,
        "claude-3-5-haiku-20241022": 200_000,
        "claude-3-opus-20240229": 200_000,
        "claude-3-haiku-20240307": 200_000,
    }

    def __init__(self, config: AnthropicConfig):
        """Initialize the provider.

        Raises:
            AuthenticationError: If no API key is configured
            ProviderNotAvailableError: If the anthropic package is not installed
        """
        if not config.api_key:
            raise AuthenticationError(
                "Anthropic API key not found. Set ANTHROPIC_API_KEY environment "
                "variable or provide api_key in configuration."
            )

        self.config = config

        try:
            import anthropic
            self.client = anthropic.Anthropic(api_key=self.config.api_key)
        except ImportError:
            raise ProviderNotAvailableError(
                "anthropic package not installed. Install with: pip install anthropic"
            )

    @retry_with_backoff(max_attempts=3, base_delay=1.0)
    def generate(self, request: LLMRequest) -> LLMResponse:
        """Generate a completion using Claude."""
        model = request.model or self.config.default_model

        try:
            response = self.client.messages.create(
                model=model,
                max_tokens=request.max_tokens or self.config.max_tokens,
                temperature=request.temperature,
                messages=[{"role": "user", "content": request.prompt}],
                timeout=self.config.timeout
            )
        except Exception as e:
            error_msg = str(e).lower()

            if "rate_limit" in error_msg or "429" in error_msg:
                raise RateLimitError(f"Claude rate limit exceeded: {e}")
            elif "authentication" in error_msg or "api_key" in error_msg:
                raise AuthenticationError(f"Claude authentication failed: {e}")
            elif "timeout" in error_msg or "timed out" in error_msg:
                raise TimeoutError(f"Claude request timed out: {e}")
            elif "connection" in error_msg:
                raise NetworkError(f"Network error connecting to Anthropic: {e}")
            elif "invalid" in error_msg:
                raise InvalidRequestError(f"Invalid Claude request: {e}")
            else:
                raise ProviderError(f"Claude API error: {e}")

        content = "".join(
            getattr(block, "text", "") for block in response.content
        )
        input_tokens = response.usage.input_tokens
        output_tokens = response.usage.output_tokens

        return LLMResponse(
            content=content,
            model_used=model,
            tokens_used=input_tokens + output_tokens,
            cost_usd=self._calculate_cost(model, input_tokens, output_tokens),
            metadata={
                "provider": "anthropic",
                "input_tokens": input_tokens,
                "output_tokens": output_tokens,
            }
        )

    def estimate_cost(self, request: LLMRequest) -> float:
        model = request.model or self.config.default_model
        # Rough approximation: 1 token is about 0.75 words
        input_tokens = int(len(request.prompt.split()) * 1.3)
        output_tokens = request.max_tokens or self.config.max_tokens
        return self._calculate_cost(model, input_tokens, output_tokens)

    def _calculate_cost(self, model: str, input_tokens: int, output_tokens: int) -> float:
        if self.config.pricing_override and model in self.config.pricing_override:
            pricing = self.config.pricing_override[model]
        else:
            pricing = self.PRICING.get(model)

        if not pricing:
            return 0.0

        return (
            (input_tokens / 1_000_000) * pricing["input"]
            + (output_tokens / 1_000_000) * pricing["output"]
        )

    def get_capabilities(self) -> Dict[str, Any]:
        return {
            "provider": "cloud-anthropic",
            "default_model": self.config.default_model,
            "supported_models": list(self.PRICING.keys()),
            "max_context_window": max(self.CONTEXT_WINDOWS.values()),
            "supports_streaming": True,
        }

    def validate_requirements(self) -> bool:
        return self.client is not None and bool(self.config.api_key)

    def get_context_window(self, model: str) -> int:
        return self.CONTEXT_WINDOWS.get(model, 200_000)
