"""
Mediation Schemas

Pydantic models for descriptors, transformation paths and records,
validation contexts and mediation results.
"""

from mediator.schemas.descriptor import AttributeSpec, SemanticDescriptor
from mediator.schemas.transformation import (
    TransformationStep,
    TransformationPath,
    TransformationRecord,
    QualityScores,
)
from mediator.schemas.validation import (
    CATEGORIES,
    Category,
    ValidationStrategy,
    ValidationContextOptions,
    ValidationHistorySummary,
    SemanticContext,
    ValidationContext,
)
from mediator.schemas.mediation import FieldConflict, ConflictResolution, Insights

__all__ = [
    "AttributeSpec",
    "SemanticDescriptor",
    "TransformationStep",
    "TransformationPath",
    "TransformationRecord",
    "QualityScores",
    "CATEGORIES",
    "Category",
    "ValidationStrategy",
    "ValidationContextOptions",
    "ValidationHistorySummary",
    "SemanticContext",
    "ValidationContext",
    "FieldConflict",
    "ConflictResolution",
    "Insights",
]
