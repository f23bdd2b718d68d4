"""
LLM Infrastructure Error Classes

Exception hierarchy for the content-generation provider layer. Provider
implementations raise these; ``ProviderContentService`` converts them into
``mediator.errors.UpstreamFailure`` before they reach the mediation core.

Error Hierarchy:
    LLMError (base)
    ├── ConfigurationError (invalid/missing configuration)
    ├── ProviderError (provider operation failures)
    │   ├── RateLimitError (transient)
    │   ├── TimeoutError (transient)
    │   ├── NetworkError (transient)
    │   ├── AuthenticationError (permanent)
    │   └── InvalidRequestError (permanent)
    └── ProviderNotAvailableError (provider not accessible)
"""


class LLMError(Exception):
    """Base exception for all LLM infrastructure errors."""
    pass


class ConfigurationError(LLMError):
    """Raised when configuration is invalid or missing.

    The message should say which setting is wrong and how to fix it, e.g.
    "OpenAI API key not configured. Set OPENAI_API_KEY environment variable."
    """
    pass


class ProviderError(LLMError):
    """Raised when a provider operation fails during execution."""
    pass


class ProviderNotAvailableError(LLMError):
    """Raised when a provider cannot be used (service down, SDK missing)."""
    pass


class RateLimitError(ProviderError):
    """Provider rate limit exceeded. Transient, retried with backoff."""
    pass


class AuthenticationError(ProviderError):
    """Credentials are invalid or missing. Permanent, never retried."""
    pass


class InvalidRequestError(ProviderError):
    """Request parameters rejected by the provider. Permanent, never retried."""
    pass


class TimeoutError(ProviderError):
    """Provider request timed out. Transient, retried with backoff."""
    pass


class NetworkError(ProviderError):
    """Connectivity problem reaching the provider. Transient, retried with backoff."""
    pass
