"""
Adaptive Validation Context

Strategy weights, keyword classification of prior findings, history
summaries and the context generator that combines them.
"""

from mediator.validation_context.classifier import DEFAULT_KEYWORD_TABLE, KeywordClassifier
from mediator.validation_context.generator import (
    CONTEXT_STEP_TYPE,
    ContextOutcome,
    ValidationContextGenerator,
)
from mediator.validation_context.history import score_trend, summarize_history
from mediator.validation_context.weights import (
    MAX_WEIGHT,
    STRATEGY_WEIGHTS,
    adjust_for_history,
    adjustment_factor,
    apply_overrides,
    resolve_base_weights,
)

__all__ = [
    "DEFAULT_KEYWORD_TABLE",
    "KeywordClassifier",
    "CONTEXT_STEP_TYPE",
    "ContextOutcome",
    "ValidationContextGenerator",
    "score_trend",
    "summarize_history",
    "MAX_WEIGHT",
    "STRATEGY_WEIGHTS",
    "adjust_for_history",
    "adjustment_factor",
    "apply_overrides",
    "resolve_base_weights",
]
