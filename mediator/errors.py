"""
Mediation Error Classes

Exception hierarchy and error kinds used by the semantic mediation core.

Expected failures inside the core (a missing record, a result that does not
match its target descriptor) travel as result objects tagged with an
``ErrorKind``. Exceptions are raised at the public boundary and for
programming errors.

Error Hierarchy:
    MediationError (base)
    ├── NotFoundError (target/subject absent from the store)
    ├── UpstreamFailure (content-generation call failed or timed out)
    │   └── MalformedResponseError (answer could not be parsed)
    ├── TransformationExecutionError (a step handler failed)
    ├── PromptTemplateError (template missing or invalid)
    └── PromptRenderError (template could not be rendered)
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Classification attached to result objects for expected failures."""
    NOT_FOUND = "not_found"
    UPSTREAM_FAILURE = "upstream_failure"
    VALIDATION_FAILURE = "validation_failure"
    MALFORMED_RESPONSE = "malformed_response"


class MediationError(Exception):
    """Base exception for all mediation errors.

    Example:
        >>> try:
        >>>     mediator.enrich("generator", data, "auth flows")
        >>> except MediationError as e:
        >>>     logger.error(f"Mediation failed: {e}")
    """
    pass


class NotFoundError(MediationError):
    """Raised when a referenced record does not exist in the store."""

    def __init__(self, message: str, record_id: str = ""):
        super().__init__(message)
        self.record_id = record_id


class UpstreamFailure(MediationError):
    """Raised when the content-generation collaborator fails.

    Covers provider errors, timeouts and unavailable providers. Callers
    inside the core convert this into a fallback or a degraded result.
    """
    pass


class MalformedResponseError(UpstreamFailure):
    """Raised when a collaborator answer cannot be parsed into the expected shape.

    Attributes:
        response_text: The raw text returned by the collaborator
    """

    def __init__(self, message: str, response_text: str = ""):
        super().__init__(message)
        self.response_text = response_text


class TransformationExecutionError(MediationError):
    """Raised when a transformation step cannot be applied to the data."""

    def __init__(self, message: str, step_type: str = "", step_index: int = -1):
        super().__init__(message)
        self.step_type = step_type
        self.step_index = step_index


class PromptTemplateError(MediationError):
    """Raised when a prompt template is missing or structurally invalid."""
    pass


class PromptRenderError(MediationError):
    """Raised when a Jinja2 prompt template fails to render."""
    pass
