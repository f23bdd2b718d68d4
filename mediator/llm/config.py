"""
LLM Configuration Management

Configuration for the content-generation providers. Values are resolved with
the following precedence:
1. Environment variables (highest priority)
2. Config file values (``llm`` section of .semantic-mediator/config.yaml)
3. Default values (lowest priority)

Usage:
    >>> from mediator.llm.config import LLMConfig
    >>> llm_config = LLMConfig.load_from_yaml('.semantic-mediator/config.yaml')
    >>> print(llm_config.ollama.base_url)
"""

from dataclasses import dataclass, field
from typing import Optional, Any, Dict
import os
import yaml
from pathlib import Path


DEFAULT_CONFIG_PATH = '.semantic-mediator/config.yaml'


@dataclass
class OllamaConfig:
    """Configuration for the local Ollama provider.

    Attributes:
        base_url: Base URL for Ollama API
        default_model: Model used when a request names none
        max_tokens: Default maximum tokens for responses
        temperature: Default sampling temperature
        timeout: Request timeout in seconds (local models may be slower)
    """
    base_url: str = "http://localhost:11434"
    default_model: str = "llama3"
    max_tokens: int = 4096
    temperature: float = 0.2
    timeout: int = 120


@dataclass
class OpenAIConfig:
    """Configuration for the OpenAI provider.

    Attributes:
        api_key: OpenAI API key (required for cloud-openai)
        default_model: Model used when a request names none
        max_tokens: Default maximum tokens for responses
        temperature: Default sampling temperature
        timeout: Request timeout in seconds
        pricing_override: Optional {"model": {"input_per_1k": x, "output_per_1k": y}}
    """
    api_key: str = ""
    default_model: str = "gpt-4o-mini"
    max_tokens: int = 4096
    temperature: float = 0.2
    timeout: int = 60
    pricing_override: Optional[Dict[str, Dict[str, float]]] = None


@dataclass
class AnthropicConfig:
    """Configuration for the Anthropic provider.

    Attributes:
        api_key: Anthropic API key (required for cloud-anthropic)
        default_model: Model used when a request names none
        max_tokens: Default maximum tokens for responses
        temperature: Default sampling temperature
        timeout: Request timeout in seconds
        pricing_override: Optional {"model": {"input": x, "output": y}} per 1M tokens
    """
    api_key: str = ""
    default_model: str = "claude-3-5-sonnet-20241022"
    max_tokens: int = 4096
    temperature: float = 0.2
    timeout: int = 60
    pricing_override: Optional[Dict[str, Dict[str, float]]] = None


@dataclass
class LLMConfig:
    """Complete provider configuration.

    Attributes:
        ollama: Configuration for the local Ollama provider
        openai: Configuration for the OpenAI provider
        anthropic: Configuration for the Anthropic provider
    """
    ollama: OllamaConfig = field(default_factory=OllamaConfig)
    openai: OpenAIConfig = field(default_factory=OpenAIConfig)
    anthropic: AnthropicConfig = field(default_factory=AnthropicConfig)

    @classmethod
    def load_from_yaml(cls, config_path: Optional[str] = None) -> 'LLMConfig':
        """Load provider configuration from the ``llm`` section of a YAML file.

        Missing files are not an error; defaults and environment apply.
        """
        llm_section = {}
        config_file = Path(config_path or DEFAULT_CONFIG_PATH)
        if config_file.exists():
            with open(config_file, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f) or {}
                llm_section = config_data.get('llm', {}) or {}

        return cls.load_from_dict(llm_section)

    @classmethod
    def load_from_dict(cls, llm_section: Dict[str, Any]) -> 'LLMConfig':
        """Load provider configuration from a dictionary.

        Args:
            llm_section: Dictionary shaped like the ``llm`` YAML section

        Returns:
            LLMConfig with environment overrides applied

        Example:
            >>> LLMConfig.load_from_dict({'ollama': {'base_url': 'http://gpu:11434'}})
        """
        ollama = llm_section.get('ollama', {}) or {}
        openai = llm_section.get('openai', {}) or {}
        anthropic = llm_section.get('anthropic', {}) or {}
        resolve = cls._resolve_value

        ollama_config = OllamaConfig(
            base_url=resolve(ollama.get('base_url'), 'OLLAMA_BASE_URL', OllamaConfig.base_url),
            default_model=resolve(ollama.get('default_model'), 'OLLAMA_MODEL', OllamaConfig.default_model),
            max_tokens=int(resolve(ollama.get('max_tokens'), 'OLLAMA_MAX_TOKENS', OllamaConfig.max_tokens)),
            temperature=float(resolve(ollama.get('temperature'), 'OLLAMA_TEMPERATURE', OllamaConfig.temperature)),
            timeout=int(resolve(ollama.get('timeout'), 'OLLAMA_TIMEOUT', OllamaConfig.timeout)),
        )

        openai_config = OpenAIConfig(
            api_key=resolve(openai.get('api_key'), 'OPENAI_API_KEY', ''),
            default_model=resolve(openai.get('default_model'), 'OPENAI_MODEL', OpenAIConfig.default_model),
            max_tokens=int(resolve(openai.get('max_tokens'), 'OPENAI_MAX_TOKENS', OpenAIConfig.max_tokens)),
            temperature=float(resolve(openai.get('temperature'), 'OPENAI_TEMPERATURE', OpenAIConfig.temperature)),
            timeout=int(resolve(openai.get('timeout'), 'OPENAI_TIMEOUT', OpenAIConfig.timeout)),
            pricing_override=openai.get('pricing_override'),
        )

        anthropic_config = AnthropicConfig(
            api_key=resolve(anthropic.get('api_key'), 'ANTHROPIC_API_KEY', ''),
            default_model=resolve(anthropic.get('default_model'), 'ANTHROPIC_MODEL', AnthropicConfig.default_model),
            max_tokens=int(resolve(anthropic.get('max_tokens'), 'ANTHROPIC_MAX_TOKENS', AnthropicConfig.max_tokens)),
            temperature=float(resolve(anthropic.get('temperature'), 'ANTHROPIC_TEMPERATURE', AnthropicConfig.temperature)),
            timeout=int(resolve(anthropic.get('timeout'), 'ANTHROPIC_TIMEOUT', AnthropicConfig.timeout)),
            pricing_override=anthropic.get('pricing_override'),
        )

        return cls(ollama=ollama_config, openai=openai_config, anthropic=anthropic_config)

    @staticmethod
    def _resolve_value(config_value: Any, env_var: str, default: Any) -> Any:
        """Resolve a value with precedence: ENV > Config > Default.

        Example:
            >>> # With OLLAMA_BASE_URL="http://remote:11434" in environment
            >>> LLMConfig._resolve_value(None, 'OLLAMA_BASE_URL', 'http://localhost:11434')
            'http://remote:11434'
        """
        env_value = os.getenv(env_var)
        if env_value is not None:
            return env_value

        if config_value is not None:
            return config_value

        return default
