"""
Transformation Engine Package

Path generation, step execution and result validation.
"""

from mediator.transformation.engine import (
    FALLBACK_STEP_TYPE,
    FALLBACK_STRATEGY,
    TransformationEngine,
    ValidationOutcome,
    type_compatible,
)
from mediator.transformation.handlers import BUILTIN_HANDLERS, StepHandler, get_nested, set_nested

__all__ = [
    "FALLBACK_STEP_TYPE",
    "FALLBACK_STRATEGY",
    "TransformationEngine",
    "ValidationOutcome",
    "type_compatible",
    "BUILTIN_HANDLERS",
    "StepHandler",
    "get_nested",
    "set_nested",
]
