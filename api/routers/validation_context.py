"""Validation context endpoint."""

from fastapi import APIRouter, Depends

from api.auth import verify_api_key
from api.dependencies import get_mediator
from api.models import MediationResponse, ValidationContextRequest
from mediator.service import SemanticMediator

router = APIRouter()


@router.post("/validation-context", response_model=MediationResponse)
def validation_context(
    request: ValidationContextRequest,
    mediator: SemanticMediator = Depends(get_mediator),
    _key=Depends(verify_api_key),
):
    """Generate an adaptive validation context. Missing records return 404."""
    context = mediator.generate_validation_context(
        request.target_id,
        request.subject_id,
        request.previous_validation_ids,
        request.options,
    )
    return MediationResponse(
        success=True,
        operation="validation-context",
        result=context.model_dump(mode="json"),
    )
