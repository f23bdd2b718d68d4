"""Mediation endpoints: translate, enrich, conflicts, insights, tracking, evaluation."""

from fastapi import APIRouter, Depends

from api.auth import verify_api_key
from api.dependencies import get_mediator
from api.models import (
    EnrichRequest,
    EvaluateRequest,
    InsightsRequest,
    MediationResponse,
    ResolveConflictsRequest,
    TargetSchemaRequest,
    TrackRequest,
    TranslateRequest,
)
from mediator.service import SemanticMediator, TrackingOptions

router = APIRouter()


@router.post("/translate", response_model=MediationResponse)
def translate(
    request: TranslateRequest,
    mediator: SemanticMediator = Depends(get_mediator),
    _key=Depends(verify_api_key),
):
    """Translate data from one stage's shape into another's."""
    result = mediator.translate(
        request.source_module,
        request.target_module,
        request.data,
        context=request.context,
    )
    return MediationResponse(success=True, operation="translate", result=result)


@router.post("/enrich", response_model=MediationResponse)
def enrich(
    request: EnrichRequest,
    mediator: SemanticMediator = Depends(get_mediator),
    _key=Depends(verify_api_key),
):
    """Enrich data with related records from the store."""
    result = mediator.enrich(request.module, request.data, request.context_query)
    return MediationResponse(success=True, operation="enrich", result=result)


@router.post("/resolve-conflicts", response_model=MediationResponse)
def resolve_conflicts(
    request: ResolveConflictsRequest,
    mediator: SemanticMediator = Depends(get_mediator),
    _key=Depends(verify_api_key),
):
    resolution = mediator.resolve_conflicts(
        request.module_a,
        request.data_a,
        request.module_b,
        request.data_b,
        force_strategy=request.force_strategy,
    )
    return MediationResponse(
        success=True,
        operation="resolve-conflicts",
        result=resolution.model_dump(mode="json"),
    )


@router.post("/insights", response_model=MediationResponse)
def insights(
    request: InsightsRequest,
    mediator: SemanticMediator = Depends(get_mediator),
    _key=Depends(verify_api_key),
):
    result = mediator.extract_insights(request.data, request.query)
    return MediationResponse(success=True, operation="insights", result=result.model_dump(mode="json"))


@router.post("/track", response_model=MediationResponse)
def track(
    request: TrackRequest,
    mediator: SemanticMediator = Depends(get_mediator),
    _key=Depends(verify_api_key),
):
    """Record a transformation in the history."""
    record = mediator.track_transformation(
        request.source_module,
        request.target_module,
        request.source_data,
        request.transformed_data,
        TrackingOptions(
            track_differences=request.track_differences,
            analyze_transformation=request.analyze_transformation,
            save_to_store=request.save_to_store,
        ),
    )
    return MediationResponse(success=True, operation="track", result=record.model_dump(mode="json"))


@router.post("/evaluate", response_model=MediationResponse)
def evaluate(
    request: EvaluateRequest,
    mediator: SemanticMediator = Depends(get_mediator),
    _key=Depends(verify_api_key),
):
    """Score a transformation. Unavailable scoring is reported, not raised."""
    scores = mediator.evaluate_transformation(
        request.source_data, request.transformed_data, request.expected_outcome
    )
    return MediationResponse(
        success=scores.error is None,
        operation="evaluate",
        result=scores.model_dump(mode="json"),
        error=scores.error,
    )


@router.post("/targets", response_model=MediationResponse)
def register_target(
    request: TargetSchemaRequest,
    mediator: SemanticMediator = Depends(get_mediator),
    _key=Depends(verify_api_key),
):
    """Declare the fixed shape a module expects from translations."""
    descriptor = mediator.register_target(request.module, request.attributes, request.description)
    return MediationResponse(success=True, operation="targets", result=descriptor.summary())
