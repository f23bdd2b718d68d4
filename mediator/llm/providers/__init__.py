"""
LLM Providers

Provider implementations following the {deployment}_{service}.py pattern:
    - LocalOllamaProvider: Local Ollama service (local_ollama.py)
    - CloudOpenAIProvider: OpenAI API (cloud_openai.py)
    - CloudAnthropicProvider: Anthropic API (cloud_anthropic.py)
"""

from mediator.llm.providers.base import BaseLLMProvider, LLMRequest, LLMResponse

__all__ = [
    "BaseLLMProvider",
    "LLMRequest",
    "LLMResponse",
]
