"""
Local Ollama LLM Provider

Provider for models served by a local Ollama daemon. Talks to the HTTP API
with requests and reports zero cost.

Provider ID: local-ollama
"""

import requests
from typing import Dict, Any, Optional

from mediator.llm.config import OllamaConfig
from mediator.llm.providers.base import BaseLLMProvider, LLMRequest, LLMResponse
from mediator.llm.errors import (
    ProviderError,
    ProviderNotAvailableError,
    TimeoutError,
)
from mediator.llm.retry import retry_with_backoff


class LocalOllamaProvider(BaseLLMProvider):
    """Local Ollama LLM provider.

    Deployment: Local (runs on user's machine)
    Access Method: Local HTTP server
    """

    # Approximate context windows; Ollama models vary
    CONTEXT_WINDOWS = {
        "llama3": 8192,
        "llama3.1": 131072,
        "llama2": 4096,
        "mistral": 8192,
        "qwen2": 32768,
        "phi3": 4096,
    }

    def __init__(self, config: OllamaConfig):
        self.config = config

    def _make_request(self, endpoint: str, data: Optional[Dict] = None) -> Dict:
        """Make an HTTP request to the Ollama API.

        Raises:
            ProviderNotAvailableError: If the daemon cannot be reached
            TimeoutError: If the request times out
            ProviderError: For any other request failure
        """
        url = f"{self.config.base_url}{endpoint}"

        try:
            if data:
                response = requests.post(url, json=data, timeout=self.config.timeout)
            else:
                response = requests.get(url, timeout=self.config.timeout)

            response.raise_for_status()
            return response.json()

        except requests.exceptions.ConnectionError:
            raise ProviderNotAvailableError(
                f"Cannot connect to Ollama at {self.config.base_url}. "
                "Is Ollama running? Start with: ollama serve"
            )
        except requests.exceptions.Timeout:
            raise TimeoutError(
                f"Ollama request timed out after {self.config.timeout}s"
            )
        except requests.exceptions.RequestException as e:
            raise ProviderError(f"Ollama API request failed: {e}")

    @staticmethod
    def _count_tokens_approximate(text: str) -> int:
        """Approximate token count (1 token is about 4 characters)."""
        return len(text) // 4

    @retry_with_backoff(max_attempts=2, base_delay=1.0)
    def generate(self, request: LLMRequest) -> LLMResponse:
        model = request.model or self.config.default_model

        payload = {
            "model": model,
            "prompt": request.prompt,
            "stream": False,
            "options": {
                "temperature": request.temperature,
                "num_predict": request.max_tokens,
            }
        }
        if request.metadata.get("format") == "json":
            payload["format"] = "json"

        response_data = self._make_request("/api/generate", payload)
        content = response_data.get("response", "")

        input_tokens = self._count_tokens_approximate(request.prompt)
        output_tokens = self._count_tokens_approximate(content)

        return LLMResponse(
            content=content,
            model_used=model,
            tokens_used=input_tokens + output_tokens,
            cost_usd=0.0,
            metadata={
                "input_tokens": input_tokens,
                "output_tokens": output_tokens,
                "eval_count": response_data.get("eval_count", 0),
                "eval_duration": response_data.get("eval_duration", 0),
            }
        )

    def estimate_cost(self, request: LLMRequest) -> float:
        return 0.0

    def get_capabilities(self) -> Dict[str, Any]:
        available_models = []
        try:
            response = self._make_request("/api/tags")
            available_models = [m["name"] for m in response.get("models", [])]
        except (ProviderError, ProviderNotAvailableError):
            pass

        return {
            "provider": "local-ollama",
            "supported_models": available_models or list(self.CONTEXT_WINDOWS.keys()),
            "max_tokens": max(self.CONTEXT_WINDOWS.values()),
            "supports_streaming": True,
            "cost_per_token": 0.0,
        }

    def validate_requirements(self) -> bool:
        """Ping the Ollama daemon."""
        try:
            self._make_request("/api/tags")
            return True
        except (ProviderError, ProviderNotAvailableError):
            return False

    def get_context_window(self, model: str) -> int:
        if model in self.CONTEXT_WINDOWS:
            return self.CONTEXT_WINDOWS[model]

        base_model = model.split(":")[0]
        return self.CONTEXT_WINDOWS.get(base_model, 4096)
