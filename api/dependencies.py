"""Request dependencies."""

from fastapi import Request

from mediator.service import SemanticMediator


def get_mediator(request: Request) -> SemanticMediator:
    """Mediator owned by the application lifespan."""
    return request.app.state.mediator
