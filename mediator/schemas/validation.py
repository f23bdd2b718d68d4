"""
Validation Context Schemas

Strategies, categories and the validation context produced for downstream
correctness checks, together with the history summary it carries.
"""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class Category(str, Enum):
    """Fixed validation categories."""
    FUNCTIONALITY = "functionality"
    PERFORMANCE = "performance"
    SECURITY = "security"
    MAINTAINABILITY = "maintainability"
    TESTABILITY = "testability"


CATEGORIES = [c.value for c in Category]


class ValidationStrategy(str, Enum):
    """Named presets of category weights."""
    BALANCED = "balanced"
    STRICT = "strict"
    LENIENT = "lenient"
    PERFORMANCE = "performance"
    SECURITY = "security"
    CUSTOM = "custom"


ScoreTrend = Literal["improving", "stable", "declining"]


class ValidationContextOptions(BaseModel):
    """Caller options for validation context generation.

    Attributes:
        strategy: Weight preset; ``custom`` requires a complete custom_weights table
        custom_weights: Full table for ``custom``, per-category overrides otherwise
        focus_areas: Explicit focus areas; when non-empty they replace derived ones
    """
    strategy: ValidationStrategy = ValidationStrategy.BALANCED
    custom_weights: Optional[Dict[str, float]] = None
    focus_areas: Optional[List[str]] = None

    @field_validator("custom_weights")
    @classmethod
    def check_weight_categories(cls, weights: Optional[Dict[str, float]]):
        if weights is None:
            return weights
        unknown = sorted(set(weights) - set(CATEGORIES))
        if unknown:
            raise ValueError(
                f"Unknown weight categories: {', '.join(unknown)}. "
                f"Valid categories: {', '.join(CATEGORIES)}"
            )
        negative = sorted(name for name, value in weights.items() if value < 0)
        if negative:
            raise ValueError(f"Weights must be non-negative: {', '.join(negative)}")
        return weights

    @model_validator(mode="after")
    def check_custom_table(self):
        if self.strategy == ValidationStrategy.CUSTOM:
            missing = [c for c in CATEGORIES if c not in (self.custom_weights or {})]
            if missing:
                raise ValueError(
                    f"Strategy 'custom' requires weights for every category; "
                    f"missing: {', '.join(missing)}"
                )
        return self

    @property
    def explicit_focus_areas(self) -> List[str]:
        """Caller focus areas, deduplicated in first-seen order."""
        return list(dict.fromkeys(self.focus_areas or []))


class ValidationHistorySummary(BaseModel):
    """Summary of earlier validation outcomes for the same subject."""
    validation_count: int = 0
    latest_score: Optional[float] = None
    score_trend: ScoreTrend = "stable"
    common_issues: List[str] = Field(default_factory=list)
    improvement_areas: List[str] = Field(default_factory=list)
    validation_dates: List[str] = Field(default_factory=list)


class SemanticContext(BaseModel):
    """Semantic bundle attached to a validation context.

    ``subject_features`` and ``relationship_analysis`` carry
    ``{"error": ..., "degraded": True}`` when extraction failed.
    """
    subject_features: Dict[str, Any] = Field(default_factory=dict)
    relationship_analysis: Dict[str, Any] = Field(default_factory=dict)
    target_summary: Dict[str, Any] = Field(default_factory=dict)
    history_summary: Optional[ValidationHistorySummary] = None


class ValidationContext(BaseModel):
    """Weighted, focus-scoped configuration for a downstream validation."""
    strategy: ValidationStrategy
    weights: Dict[str, float]
    focus_areas: List[str] = Field(default_factory=list)
    semantic_context: SemanticContext = Field(default_factory=SemanticContext)
