"""Cache inspection endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.auth import verify_api_key
from api.dependencies import get_mediator
from api.models import MediationResponse
from mediator.service import SemanticMediator

router = APIRouter()


@router.get("/cache/stats", response_model=MediationResponse)
def cache_stats(mediator: SemanticMediator = Depends(get_mediator), _key=Depends(verify_api_key)):
    return MediationResponse(success=True, operation="cache-stats", result=mediator.cache_stats())


@router.get("/cache/analysis", response_model=MediationResponse)
def cache_analysis(
    limit: int = Query(10, ge=1, le=100),
    mediator: SemanticMediator = Depends(get_mediator),
    _key=Depends(verify_api_key),
):
    """Usage report with content-service suggestions when available."""
    return MediationResponse(
        success=True,
        operation="cache-analysis",
        result=mediator.analyze_cache_usage(limit),
    )


@router.delete("/cache", response_model=MediationResponse)
def clear_cache(
    older_than: Optional[float] = Query(None, ge=0, description="Only entries unused for this many seconds"),
    mediator: SemanticMediator = Depends(get_mediator),
    _key=Depends(verify_api_key),
):
    removed = mediator.clear_cache(older_than)
    return MediationResponse(success=True, operation="cache-clear", result={"removed": removed})
