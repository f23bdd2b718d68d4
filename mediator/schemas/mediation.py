"""
Mediation Result Schemas

Results returned by the conflict-resolution and insight operations.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, Field


class FieldConflict(BaseModel):
    """A field present in both versions with different values."""
    field: str
    value_a: Any = None
    value_b: Any = None


class ConflictResolution(BaseModel):
    """Reconciled record for two conflicting versions.

    Attributes:
        conflicts: Field-level conflicts detected locally
        resolved_data: Reconciled record
        resolutions: Per-field decisions
        explanation: Summary of the reconciliation
        strategy_used: Name of the strategy that produced the record
        confidence: Strategy confidence in [0, 1]
        cached: True when the resolution was served from the cache
    """
    module_a: str
    module_b: str
    conflicts: List[FieldConflict] = Field(default_factory=list)
    resolved_data: Any = None
    resolutions: List[Any] = Field(default_factory=list)
    explanation: str = ""
    strategy_used: str = ""
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    cached: bool = False


class Insights(BaseModel):
    """Insights extracted from pipeline data."""
    query: str
    key_insights: List[Any] = Field(default_factory=list)
    patterns: List[Any] = Field(default_factory=list)
    suggested_actions: List[Any] = Field(default_factory=list)
    summary: Optional[str] = None
