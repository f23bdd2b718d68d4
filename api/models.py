"""Pydantic request/response models for the REST API."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from mediator.schemas.validation import ValidationContextOptions


# --- Response Models ---

class MediationResponse(BaseModel):
    """Standard response for all mediation endpoints."""
    success: bool
    operation: str
    result: Optional[Any] = None
    error: Optional[str] = None


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    operations: List[str]
    cache_entries: int = 0


# --- Request Models ---

class TranslateRequest(BaseModel):
    source_module: str = Field(..., min_length=1, description="Stage that produced the data")
    target_module: str = Field(..., min_length=1, description="Stage that will consume the data")
    data: Any = Field(..., description="Payload to translate")
    context: Optional[Dict[str, Any]] = None


class EnrichRequest(BaseModel):
    module: str = Field(..., min_length=1)
    data: Any
    context_query: str = Field(..., description="Free-text query for related records")


class ResolveConflictsRequest(BaseModel):
    module_a: str = Field(..., min_length=1)
    data_a: Any
    module_b: str = Field(..., min_length=1)
    data_b: Any
    force_strategy: Optional[str] = Field(
        default=None,
        description="explicit_mapping, pattern_matching or llm_resolution",
    )


class InsightsRequest(BaseModel):
    data: Any
    query: str = Field(..., min_length=1)


class TrackRequest(BaseModel):
    source_module: str = Field(..., min_length=1)
    target_module: str = Field(..., min_length=1)
    source_data: Any
    transformed_data: Any
    track_differences: bool = True
    analyze_transformation: bool = False
    save_to_store: bool = True


class EvaluateRequest(BaseModel):
    source_data: Any
    transformed_data: Any
    expected_outcome: Optional[Any] = None


class ValidationContextRequest(BaseModel):
    target_id: str = Field(..., min_length=1)
    subject_id: str = Field(..., min_length=1)
    previous_validation_ids: List[str] = Field(default_factory=list)
    options: ValidationContextOptions = Field(default_factory=ValidationContextOptions)


class TargetSchemaRequest(BaseModel):
    module: str = Field(..., min_length=1)
    attributes: Dict[str, str] = Field(..., description="Attribute name -> type tag")
    description: str = ""


class RecordRequest(BaseModel):
    record: Dict[str, Any] = Field(..., description="Record to append to the store")
