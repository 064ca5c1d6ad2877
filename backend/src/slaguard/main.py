"""
SLA Guard API

Management API of the service level agreement assessment engine:
- Providers and agreements
- Agreement lifecycle transitions
- Violations detected by assessment passes
- On-demand assessment passes
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from slaguard.assessment.lifecycle import InvalidTransitionError
from slaguard.config import Settings, get_settings
from slaguard.generator import GeneratedAgreementInvalidError, UnreplacedPlaceholderError
from slaguard.observability import setup_observability
from slaguard.observability.logging import RequestContextMiddleware, RequestLoggingMiddleware
from slaguard.repositories import build_repository
from slaguard.repositories.base import (
    AlreadyExistsError,
    NotFoundError,
    Repository,
    ValidationError,
)
from slaguard.routers import agreements, assessment, providers, violations

logger = structlog.get_logger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "app.startup",
        environment=app.state.settings.environment,
        repository=type(app.state.repository).__name__,
    )
    yield
    logger.info("app.shutdown")


def create_app(
    settings: Optional[Settings] = None,
    repository: Optional[Repository] = None,
    *,
    tracing_exporter=None,
) -> FastAPI:
    """Build the API around an explicitly constructed repository."""

    settings = settings or get_settings()

    app = FastAPI(
        title="SLA Guard",
        description="Continuous assessment of service level agreements.",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.repository = repository if repository is not None else build_repository(settings)

    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    setup_observability(app, tracing_exporter=tracing_exporter, log_level=settings.log_level)

    app.include_router(providers.router, prefix="/providers", tags=["Providers"])
    app.include_router(agreements.router, prefix="/agreements", tags=["Agreements"])
    app.include_router(violations.router, prefix="/violations", tags=["Violations"])
    app.include_router(assessment.router, prefix="/assessment", tags=["Assessment"])

    _register_exception_handlers(app)

    @app.get("/", tags=["Health"])
    def root():
        return {"status": "running", "service": "SLA Guard", "version": VERSION}

    @app.get("/health", tags=["Health"])
    def health_check():
        return {
            "status": "healthy",
            "components": {
                "api": "up",
                "repository": settings.repository,
                "adapter": settings.adapter,
            },
        }

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(AlreadyExistsError)
    async def already_exists_handler(request: Request, exc: AlreadyExistsError):
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(InvalidTransitionError)
    async def invalid_transition_handler(request: Request, exc: InvalidTransitionError):
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content={"detail": "Validation failed", "errors": exc.messages})

    @app.exception_handler(GeneratedAgreementInvalidError)
    async def generated_invalid_handler(request: Request, exc: GeneratedAgreementInvalidError):
        return JSONResponse(status_code=400, content={"detail": "Validation failed", "errors": exc.messages})

    @app.exception_handler(UnreplacedPlaceholderError)
    async def unreplaced_handler(request: Request, exc: UnreplacedPlaceholderError):
        return JSONResponse(status_code=400, content={"detail": str(exc), "placeholders": exc.placeholders})

    @app.exception_handler(ValueError)
    async def bad_value_handler(request: Request, exc: ValueError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error("request.unhandled_exception", error=str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "type": type(exc).__name__},
        )


app = create_app()
