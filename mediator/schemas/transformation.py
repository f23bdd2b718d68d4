"""
Transformation Schemas

Transformation steps and paths, transformation history records and the
quality scores produced when a transformation is evaluated.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mediator.schemas.descriptor import SemanticDescriptor


def _new_id() -> str:
    return uuid.uuid4().hex


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class TransformationStep(BaseModel):
    """A single step of a transformation path.

    Attributes:
        type: Step type tag resolved to a handler at execution time
        parameters: Handler parameters
        description: Optional explanation from whoever generated the step
    """
    model_config = ConfigDict(frozen=True)

    type: str = Field(..., min_length=1)
    parameters: Dict[str, Any] = Field(default_factory=dict)
    description: str = ""


class TransformationPath(BaseModel):
    """Ordered recipe converting data of one shape into another.

    Attributes:
        id: Path identifier
        source: Descriptor of the input data
        target: Descriptor of the expected output
        steps: Steps in execution order (at least one)
        recommended_strategy: Strategy label from generation
        fallback: True when the path is the identity fallback
        metadata: Free-form generation details
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    source: SemanticDescriptor
    target: SemanticDescriptor
    steps: List[TransformationStep] = Field(..., min_length=1)
    recommended_strategy: str = "semantic"
    fallback: bool = False
    metadata: Dict[str, Any] = Field(default_factory=dict)


class TransformationRecord(BaseModel):
    """Append-only history entry for a tracked transformation."""
    model_config = ConfigDict(frozen=True)

    transformation_id: str = Field(default_factory=_new_id)
    source_module: str
    target_module: str
    source_data: Any = None
    transformed_data: Any = None
    timestamp: str = Field(default_factory=_utc_now)
    differences: Optional[Dict[str, Any]] = None
    analysis: Optional[Dict[str, Any]] = None


class QualityScores(BaseModel):
    """Quality evaluation of a transformation. Scores are clamped to 0-100.

    ``error`` is set when the evaluation could not be performed; all scores
    are then zero.
    """
    semantic_preservation: float = 0.0
    structural_adaptability: float = 0.0
    information_completeness: float = 0.0
    overall_quality: float = 0.0
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    error: Optional[str] = None

    @field_validator(
        "semantic_preservation",
        "structural_adaptability",
        "information_completeness",
        "overall_quality",
        mode="before",
    )
    @classmethod
    def clamp_score(cls, value: Any) -> float:
        try:
            score = float(value)
        except (TypeError, ValueError):
            return 0.0
        return max(0.0, min(100.0, score))
