"""
Strategy Weight Tables

Base category weights per validation strategy, caller overrides and the
history-driven adjustment that raises the weight of categories with
recurring failures. Adjusted weights never exceed ``MAX_WEIGHT``.
"""

from typing import Dict, Mapping, Optional

from mediator.schemas.validation import CATEGORIES, ValidationStrategy


MAX_WEIGHT = 2.0
FAILURE_INCREMENT = 0.2

STRATEGY_WEIGHTS: Dict[ValidationStrategy, Dict[str, float]] = {
    ValidationStrategy.BALANCED: {
        "functionality": 1.0,
        "performance": 1.0,
        "security": 1.0,
        "maintainability": 1.0,
        "testability": 1.0,
    },
    ValidationStrategy.STRICT: {
        "functionality": 1.5,
        "performance": 1.0,
        "security": 1.2,
        "maintainability": 1.0,
        "testability": 1.0,
    },
    ValidationStrategy.LENIENT: {
        "functionality": 1.2,
        "performance": 0.8,
        "security": 0.8,
        "maintainability": 0.8,
        "testability": 0.7,
    },
    ValidationStrategy.PERFORMANCE: {
        "functionality": 1.0,
        "performance": 2.0,
        "security": 0.8,
        "maintainability": 0.7,
        "testability": 0.6,
    },
    ValidationStrategy.SECURITY: {
        "functionality": 1.0,
        "performance": 0.8,
        "security": 2.0,
        "maintainability": 0.8,
        "testability": 0.7,
    },
}


def resolve_base_weights(
    strategy: ValidationStrategy,
    custom_weights: Optional[Mapping[str, float]] = None
) -> Dict[str, float]:
    """Full weight table for a strategy.

    Raises:
        ValueError: If ``custom`` is requested without a complete table
    """
    if strategy == ValidationStrategy.CUSTOM:
        missing = [c for c in CATEGORIES if c not in (custom_weights or {})]
        if missing:
            raise ValueError(f"Custom strategy is missing weights for: {', '.join(missing)}")
        return {c: float(custom_weights[c]) for c in CATEGORIES}
    return dict(STRATEGY_WEIGHTS[ValidationStrategy(strategy)])


def apply_overrides(
    weights: Mapping[str, float],
    overrides: Optional[Mapping[str, float]] = None
) -> Dict[str, float]:
    """Replace only the overridden categories."""
    result = dict(weights)
    for category, value in (overrides or {}).items():
        if category in result:
            result[category] = float(value)
    return result


def adjustment_factor(base_weight: float, failures: int) -> float:
    """Multiplier for a category with ``failures`` matching prior failures.

    ``min(1 + 0.2k, 2.0 / base)``, floored at 1 so a weight already above
    the cap is never lowered.
    """
    if failures <= 0 or base_weight <= 0:
        return 1.0
    return max(1.0, min(1.0 + FAILURE_INCREMENT * failures, MAX_WEIGHT / base_weight))


def adjust_for_history(
    weights: Mapping[str, float],
    failure_counts: Mapping[str, int]
) -> Dict[str, float]:
    """Raise weights of categories with recurring failures.

    Args:
        weights: Weights after overrides
        failure_counts: Failing/partial detail count per category

    Returns:
        New weight table; each adjusted weight lies in [weight, 2.0]
    """
    result = dict(weights)
    for category, count in failure_counts.items():
        if category not in result:
            continue
        base = result[category]
        factor = adjustment_factor(base, count)
        if factor > 1.0:
            result[category] = min(base * factor, MAX_WEIGHT)
    return result
