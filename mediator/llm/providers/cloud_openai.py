"""
Cloud OpenAI LLM Provider

Provider for OpenAI chat models. Handles authentication, API calls, token
counting with tiktoken and cost estimation.

Provider ID: cloud-openai
"""

from typing import Dict, Any

from mediator.llm.config import OpenAIConfig
from mediator.llm.providers.base import BaseLLMProvider, LLMRequest, LLMResponse
from mediator.llm.errors import (
    ProviderError,
    RateLimitError,
    AuthenticationError,
    InvalidRequestError,
    TimeoutError,
    NetworkError
)
from mediator.llm.retry import retry_with_backoff


class CloudOpenAIProvider(BaseLLMProvider):
    """Cloud OpenAI LLM provider.

    Example:
        >>> provider = CloudOpenAIProvider(OpenAIConfig(api_key="sk-..."))
        >>> response = provider.generate(
        >>>     LLMRequest(prompt="Map these fields", max_tokens=500, temperature=0.2)
        >>> )
    """

    # USD per 1K tokens
    PRICING = {
        "gpt-4o-mini": {"input_per_1k": 0.00015, "output_per_1k": 0.0006},
        "gpt-4o": {"input_per_1k": 0.0025, "output_per_1k": 0.01},
        "gpt-4-turbo": {"input_per_1k": 0.01, "output_per_1k": 0.03},
        "gpt-4": {"input_per_1k": 0.03, "output_per_1k": 0.06},
        "gpt-3.5-turbo": {"input_per_1k": 0.0005, "output_per_1k": 0.0015},
    }

    CONTEXT_WINDOWS = {
        "gpt-4o-mini": 128000,
        "gpt-4o": 128000,
        "gpt-4-turbo": 128000,
        "gpt-4": 8192,
        "gpt-3.5-turbo": 16385,
    }

    def __init__(self, config: OpenAIConfig):
        self.config = config
        self._client = None
        self._tiktoken_encoding = None

    @property
    def client(self):
        """Lazy-load the OpenAI client."""
        if self._client is None:
            import openai
            self._client = openai.OpenAI(
                api_key=self.config.api_key,
                timeout=self.config.timeout
            )
        return self._client

    def _count_tokens(self, text: str) -> int:
        """Count tokens with the cl100k_base encoding."""
        if self._tiktoken_encoding is None:
            import tiktoken
            self._tiktoken_encoding = tiktoken.get_encoding("cl100k_base")
        return len(self._tiktoken_encoding.encode(text))

    def _pricing(self, model: str) -> Dict[str, float]:
        if self.config.pricing_override and model in self.config.pricing_override:
            return self.config.pricing_override[model]
        return self.PRICING.get(model, self.PRICING["gpt-4o"])

    @retry_with_backoff(max_attempts=3, base_delay=1.0)
    def generate(self, request: LLMRequest) -> LLMResponse:
        """Generate a completion from OpenAI.

        Transient errors (rate limits, timeouts, network issues) are retried
        with exponential backoff.

        Raises:
            RateLimitError: If rate limit is exceeded (transient, will retry)
            AuthenticationError: If authentication fails (permanent, no retry)
            InvalidRequestError: If request is invalid (permanent, no retry)
            TimeoutError: If request times out (transient, will retry)
            NetworkError: If network error occurs (transient, will retry)
            ProviderError: For other provider errors
        """
        model = request.model or self.config.default_model

        try:
            response = self.client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "user", "content": request.prompt}
                ],
                max_tokens=request.max_tokens,
                temperature=request.temperature,
                **request.metadata
            )
        except Exception as e:
            error_msg = str(e).lower()

            if "rate" in error_msg or "429" in error_msg:
                raise RateLimitError(f"OpenAI rate limit exceeded: {e}")
            elif "auth" in error_msg or "401" in error_msg or "403" in error_msg:
                raise AuthenticationError(f"OpenAI authentication failed: {e}")
            elif "invalid" in error_msg or "400" in error_msg:
                raise InvalidRequestError(f"Invalid OpenAI request: {e}")
            elif "timeout" in error_msg or "timed out" in error_msg:
                raise TimeoutError(f"OpenAI request timed out: {e}")
            elif "network" in error_msg or "connection" in error_msg:
                raise NetworkError(f"Network error connecting to OpenAI: {e}")
            else:
                raise ProviderError(f"OpenAI API call failed: {e}")

        content = response.choices[0].message.content or ""

        input_tokens = self._count_tokens(request.prompt)
        output_tokens = self._count_tokens(content)
        pricing = self._pricing(model)
        cost = (
            (input_tokens / 1000) * pricing["input_per_1k"]
            + (output_tokens / 1000) * pricing["output_per_1k"]
        )

        return LLMResponse(
            content=content,
            model_used=model,
            tokens_used=input_tokens + output_tokens,
            cost_usd=cost,
            metadata={
                "input_tokens": input_tokens,
                "output_tokens": output_tokens,
                "finish_reason": response.choices[0].finish_reason,
                "response_id": response.id,
            }
        )

    def estimate_cost(self, request: LLMRequest) -> float:
        """Estimate cost, using max_tokens as the output upper bound."""
        model = request.model or self.config.default_model
        pricing = self._pricing(model)
        input_tokens = self._count_tokens(request.prompt)
        return (
            (input_tokens / 1000) * pricing["input_per_1k"]
            + (request.max_tokens / 1000) * pricing["output_per_1k"]
        )

    def get_capabilities(self) -> Dict[str, Any]:
        return {
            "provider": "cloud-openai",
            "supported_models": list(self.PRICING.keys()),
            "max_tokens": max(self.CONTEXT_WINDOWS.values()),
            "supports_streaming": True,
            "supports_functions": True,
        }

    def validate_requirements(self) -> bool:
        """Check availability by listing models."""
        if not self.config.api_key:
            return False

        try:
            self.client.models.list()
            return True
        except Exception:
            return False

    def get_context_window(self, model: str) -> int:
        if model not in self.CONTEXT_WINDOWS:
            raise ValueError(
                f"Model '{model}' not supported. "
                f"Supported models: {list(self.CONTEXT_WINDOWS.keys())}"
            )
        return self.CONTEXT_WINDOWS[model]
