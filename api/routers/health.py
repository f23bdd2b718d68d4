"""Health and info endpoints."""

from fastapi import APIRouter, Depends

from api.dependencies import get_mediator
from api.models import HealthResponse
from mediator import __version__
from mediator.service import SemanticMediator

router = APIRouter()

OPERATIONS = [
    "translate",
    "enrich",
    "resolve-conflicts",
    "insights",
    "track",
    "evaluate",
    "validation-context",
]


@router.get("/health", response_model=HealthResponse)
def health(mediator: SemanticMediator = Depends(get_mediator)):
    """Health check endpoint."""
    return HealthResponse(
        status="ok",
        version=__version__,
        operations=OPERATIONS,
        cache_entries=len(mediator.cache),
    )


@router.get("/version")
def version():
    """Return API version."""
    return {"version": __version__}
