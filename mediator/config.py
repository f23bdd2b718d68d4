"""
Mediator Configuration

Top-level configuration for the semantic mediator. Values are resolved with
the same precedence as the provider configuration:
1. Environment variables (highest priority)
2. Config file values (.semantic-mediator/config.yaml)
3. Default values (lowest priority)

Example config file:

    llm:
      openai:
        default_model: gpt-4o-mini
    cache:
      capacity: 512
      decay_seconds: 7200
    mediation:
      provider: cloud-openai
      translate_threshold: 0.85
      context_threshold: 0.95
      resolution_threshold: 0.95
    logging:
      level: debug
      file: logs/mediator.log
"""

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from mediator.llm.config import DEFAULT_CONFIG_PATH, LLMConfig
from mediator.llm.errors import ConfigurationError


@dataclass
class CacheConfig:
    """Transformation cache settings.

    Attributes:
        capacity: Maximum number of cached paths
        decay_seconds: Age scale of the eviction score
    """
    capacity: int = 256
    decay_seconds: float = 3600.0


@dataclass
class MediationConfig:
    """Mediation behaviour settings.

    Attributes:
        provider: Content-generation provider name or "auto"
        translate_threshold: Cache similarity threshold for translate
        context_threshold: Cache similarity threshold for validation contexts
        resolution_threshold: Cache similarity threshold for conflict resolutions
        keyword_table: Optional path to a custom focus keyword table
        prompts_dir: Optional directory of prompt template overrides
    """
    provider: str = "auto"
    translate_threshold: float = 0.85
    context_threshold: float = 0.95
    resolution_threshold: float = 0.95
    keyword_table: Optional[str] = None
    prompts_dir: Optional[str] = None


@dataclass
class LoggingSettings:
    level: str = "info"
    file: Optional[str] = None


@dataclass
class MediatorConfig:
    """Complete mediator configuration."""
    llm: LLMConfig = field(default_factory=LLMConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    mediation: MediationConfig = field(default_factory=MediationConfig)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    @classmethod
    def load_from_yaml(cls, config_path: Optional[str] = None) -> 'MediatorConfig':
        """Load configuration from a YAML file.

        A missing file is not an error; defaults and environment apply. An
        explicitly requested file that does not exist is.

        Raises:
            ConfigurationError: If the file is unreadable or values are invalid
        """
        config_file = Path(config_path or DEFAULT_CONFIG_PATH)
        data: Dict[str, Any] = {}

        if config_file.exists():
            try:
                with open(config_file, 'r', encoding='utf-8') as f:
                    data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in {config_file}: {e}")
            if not isinstance(data, dict):
                raise ConfigurationError(f"Config file {config_file} must contain a mapping")
        elif config_path:
            raise ConfigurationError(f"Config file not found: {config_file}")

        return cls.load_from_dict(data)

    @classmethod
    def load_from_dict(cls, data: Dict[str, Any]) -> 'MediatorConfig':
        """Build configuration from a dictionary shaped like the YAML file."""
        cache = data.get('cache', {}) or {}
        mediation = data.get('mediation', {}) or {}
        log = data.get('logging', {}) or {}
        resolve = LLMConfig._resolve_value

        try:
            cache_config = CacheConfig(
                capacity=int(resolve(cache.get('capacity'), 'MEDIATOR_CACHE_CAPACITY', CacheConfig.capacity)),
                decay_seconds=float(resolve(
                    cache.get('decay_seconds'), 'MEDIATOR_CACHE_DECAY_SECONDS', CacheConfig.decay_seconds
                )),
            )
            mediation_config = MediationConfig(
                provider=str(resolve(mediation.get('provider'), 'MEDIATOR_PROVIDER', MediationConfig.provider)),
                translate_threshold=float(resolve(
                    mediation.get('translate_threshold'), 'MEDIATOR_TRANSLATE_THRESHOLD',
                    MediationConfig.translate_threshold
                )),
                context_threshold=float(resolve(
                    mediation.get('context_threshold'), 'MEDIATOR_CONTEXT_THRESHOLD',
                    MediationConfig.context_threshold
                )),
                resolution_threshold=float(resolve(
                    mediation.get('resolution_threshold'), 'MEDIATOR_RESOLUTION_THRESHOLD',
                    MediationConfig.resolution_threshold
                )),
                keyword_table=resolve(mediation.get('keyword_table'), 'MEDIATOR_KEYWORD_TABLE', None),
                prompts_dir=resolve(mediation.get('prompts_dir'), 'MEDIATOR_PROMPTS_DIR', None),
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid mediator configuration value: {e}")

        logging_settings = LoggingSettings(
            level=str(resolve(log.get('level'), 'MEDIATOR_LOG_LEVEL', LoggingSettings.level)),
            file=resolve(log.get('file'), 'MEDIATOR_LOG_FILE', None),
        )

        config = cls(
            llm=LLMConfig.load_from_dict(data.get('llm', {}) or {}),
            cache=cache_config,
            mediation=mediation_config,
            logging=logging_settings,
        )
        config.validate()
        return config

    def validate(self) -> None:
        """
        Raises:
            ConfigurationError: If a value is out of range
        """
        if self.cache.capacity <= 0:
            raise ConfigurationError(
                f"cache.capacity must be positive, got {self.cache.capacity}. "
                f"Set MEDIATOR_CACHE_CAPACITY or cache.capacity in the config file."
            )
        if self.cache.decay_seconds <= 0:
            raise ConfigurationError(
                f"cache.decay_seconds must be positive, got {self.cache.decay_seconds}"
            )
        for name in ('translate_threshold', 'context_threshold', 'resolution_threshold'):
            value = getattr(self.mediation, name)
            if not 0.0 <= value <= 1.0:
                raise ConfigurationError(
                    f"mediation.{name} must be between 0 and 1, got {value}"
                )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
