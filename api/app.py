"""
Semantic Mediator REST API

FastAPI application exposing the mediation operations via HTTP endpoints.
The mediator, and the cache it owns, live for the lifetime of the
application and are torn down on shutdown.

Usage:
    uvicorn api.app:app --reload --port 8000
    python -m api.app
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.config import APIConfig
from api.models import MediationResponse
from api.routers import cache, health, mediation, records, validation_context
from mediator import __version__
from mediator.config import MediatorConfig
from mediator.errors import MediationError, NotFoundError
from mediator.llm.errors import ConfigurationError
from mediator.service import build_mediator
from mediator.store import InMemoryStore
from mediator.utils.logging_config import configure_logging, logging_config

logger = logging.getLogger(__name__)

config = APIConfig.load()


@asynccontextmanager
async def lifespan(app: FastAPI):
    mediator_config = MediatorConfig.load_from_yaml(config.mediator_config)
    configure_logging(
        level="debug" if config.debug else mediator_config.logging.level,
        log_file=mediator_config.logging.file,
    )
    logging_config.log_configuration_details(mediator_config.to_dict())

    store = InMemoryStore.from_json_file(config.store_path) if config.store_path else InMemoryStore()
    app.state.mediator = build_mediator(mediator_config, store=store)
    logger.info(f"Semantic mediator API started (store: {len(store)} records)")
    try:
        yield
    finally:
        app.state.mediator.close()


app = FastAPI(
    title="Semantic Mediator API",
    description="REST API for translating, reconciling and validating data exchanged between pipeline stages.",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(status_code: int, request: Request, error: Exception) -> JSONResponse:
    operation = request.url.path.rsplit("/", 1)[-1]
    body = MediationResponse(success=False, operation=operation, error=str(error))
    return JSONResponse(status_code=status_code, content=body.model_dump())


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return _error_response(404, request, exc)


@app.exception_handler(MediationError)
async def mediation_error_handler(request: Request, exc: MediationError):
    return _error_response(502, request, exc)


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    return _error_response(500, request, exc)


# Register routers under /api/v1 prefix
PREFIX = "/api/v1"
app.include_router(health.router, prefix=PREFIX, tags=["Health"])
app.include_router(mediation.router, prefix=PREFIX, tags=["Mediation"])
app.include_router(validation_context.router, prefix=PREFIX, tags=["Validation"])
app.include_router(cache.router, prefix=PREFIX, tags=["Cache"])
app.include_router(records.router, prefix=PREFIX, tags=["Records"])


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Semantic Mediator API",
        "version": __version__,
        "docs": "/docs",
        "health": "/api/v1/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api.app:app", host=config.host, port=config.port, reload=config.debug)
