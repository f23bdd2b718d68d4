"""
Content Generation Service

The content-generation collaborator consumed by the mediation core. The core
only sees ``generate(prompt, options) -> text``; which LLM provider answers,
and how transient provider failures are retried, stays behind this seam.

Usage:
    >>> from mediator.llm.service import ProviderContentService
    >>> service = ProviderContentService(LLMProviderFactory(LLMConfig()), provider="auto")
    >>> text = service.generate("Describe this record", GenerationOptions(purpose="adhoc"))
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from mediator.errors import MediationError, UpstreamFailure
from mediator.llm.errors import LLMError
from mediator.llm.factory import LLMProviderFactory
from mediator.llm.providers.base import BaseLLMProvider, LLMRequest
from mediator.parsing import extract_json


logger = logging.getLogger(__name__)


@dataclass
class GenerationOptions:
    """Per-call options for content generation.

    Attributes:
        purpose: Name of the prompt template the call serves (for logs and fakes)
        max_tokens: Maximum tokens to generate
        temperature: Sampling temperature
        model: Optional model override
        metadata: Provider-specific extras
    """
    purpose: str = "adhoc"
    max_tokens: int = 2048
    temperature: float = 0.2
    model: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


class ContentGenerationService(ABC):
    """Contract for the content-generation collaborator.

    Implementations raise ``UpstreamFailure`` for any failure, including
    timeouts and unavailable providers.
    """

    @abstractmethod
    def generate(self, prompt: str, options: Optional[GenerationOptions] = None) -> str:
        """Return generated text for the prompt."""
        pass

    def generate_json(self, prompt: str, options: Optional[GenerationOptions] = None) -> Any:
        """Generate and parse a JSON answer.

        Raises:
            UpstreamFailure: If generation fails
            MalformedResponseError: If the answer holds no JSON
        """
        return extract_json(self.generate(prompt, options))


class ProviderContentService(ContentGenerationService):
    """Content generation backed by an ``LLMProviderFactory`` provider.

    The provider is resolved lazily on first use so that building a mediator
    never touches the network.
    """

    def __init__(
        self,
        factory: LLMProviderFactory,
        provider: str = "auto",
        default_options: Optional[GenerationOptions] = None
    ):
        self.factory = factory
        self.provider_name = provider
        self.default_options = default_options or GenerationOptions()
        self._provider: Optional[BaseLLMProvider] = None

    @property
    def provider(self) -> BaseLLMProvider:
        if self._provider is None:
            self._provider = self.factory.create_provider(self.provider_name)
        return self._provider

    def generate(self, prompt: str, options: Optional[GenerationOptions] = None) -> str:
        options = options or self.default_options
        start = time.time()

        try:
            request = LLMRequest(
                prompt=prompt,
                max_tokens=options.max_tokens,
                temperature=options.temperature,
                model=options.model,
                metadata=dict(options.metadata),
            )
            response = self.provider.generate(request)
        except (LLMError, ValueError) as e:
            logger.warning(f"Content generation for '{options.purpose}' failed: {e}")
            raise UpstreamFailure(f"Content generation failed ({options.purpose}): {e}") from e

        logger.debug(
            f"Content generation for '{options.purpose}' used {response.model_used}, "
            f"{response.tokens_used} tokens, ${response.cost_usd:.4f} "
            f"in {(time.time() - start) * 1000:.0f}ms"
        )
        return response.content


def ask_json(
    content: ContentGenerationService,
    prompts,
    template: str,
    options: Optional[GenerationOptions] = None,
    **context: Any
) -> Any:
    """Render a prompt template and return the parsed JSON answer.

    Args:
        content: Content-generation collaborator
        prompts: ``PromptLibrary`` used to render the template
        template: Template name
        options: Generation options; ``purpose`` defaults to the template name
        **context: Template variables

    Raises:
        UpstreamFailure: If generation fails or the answer is not JSON
    """
    prompt = prompts.render(template, **context)
    options = options or GenerationOptions(purpose=template)
    try:
        return content.generate_json(prompt, options)
    except MediationError:
        raise
    except Exception as e:
        # Injected collaborators may raise builtin errors (timeouts, lost connections)
        logger.warning(f"Content service raised {type(e).__name__} for {template}: {e}")
        raise UpstreamFailure(f"Content service failed for {template}: {type(e).__name__}: {e}") from e
