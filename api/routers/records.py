"""Record store endpoints used to seed targets, subjects and validation history."""

from fastapi import APIRouter, Depends, HTTPException

from api.auth import verify_api_key
from api.dependencies import get_mediator
from api.models import MediationResponse, RecordRequest
from mediator.service import SemanticMediator

router = APIRouter()


@router.post("/records", response_model=MediationResponse, status_code=201)
def append_record(
    request: RecordRequest,
    mediator: SemanticMediator = Depends(get_mediator),
    _key=Depends(verify_api_key),
):
    record_id = mediator.store.append(request.record)
    return MediationResponse(success=True, operation="records", result={"id": record_id})


@router.get("/records/{record_id}", response_model=MediationResponse)
def get_record(
    record_id: str,
    mediator: SemanticMediator = Depends(get_mediator),
    _key=Depends(verify_api_key),
):
    record = mediator.store.get_by_id(record_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Record not found: {record_id}")
    return MediationResponse(success=True, operation="records", result=record)
