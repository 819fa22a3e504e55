"""
FastAPI application.

Wires the routes, CORS, error mapping and the services built at startup.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from adgen import __version__
from adgen.api_gateway.container import Services, build_services
from adgen.api_gateway.routes import artifacts, generate, marketing
from adgen.shared.config import get_settings
from adgen.shared.errors import (
    ConfigError,
    GenerationError,
    PersistenceError,
    PipelineError,
    RateLimitError,
    RetryableError,
    ValidationError,
)
from adgen.shared.logging import get_logger

logger = get_logger(__name__)

API_PREFIX = "/api/v1"

GENERATION_FAILED_MESSAGE = "Generation failed. Please try again."


def _error_response(status_code: int, exc: PipelineError, message: Optional[str] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": type(exc).__name__,
            "message": message or exc.message,
            "session_id": exc.session_id,
        },
    )


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return _error_response(status.HTTP_400_BAD_REQUEST, exc)


async def config_error_handler(request: Request, exc: ConfigError) -> JSONResponse:
    logger.error("Configuration error", extra={"path": request.url.path, "error": exc.message})
    return _error_response(status.HTTP_503_SERVICE_UNAVAILABLE, exc)


async def generation_error_handler(request: Request, exc: GenerationError) -> JSONResponse:
    logger.error("Generation error", extra={"path": request.url.path, "error": exc.message})
    return _error_response(status.HTTP_502_BAD_GATEWAY, exc, GENERATION_FAILED_MESSAGE)


async def retryable_error_handler(request: Request, exc: RetryableError) -> JSONResponse:
    logger.warning("Upstream unavailable", extra={"path": request.url.path, "error": exc.message})
    if isinstance(exc, RateLimitError):
        return _error_response(
            status.HTTP_429_TOO_MANY_REQUESTS, exc, "The AI provider is busy. Please try again in a moment."
        )
    return _error_response(status.HTTP_503_SERVICE_UNAVAILABLE, exc, GENERATION_FAILED_MESSAGE)


async def persistence_error_handler(request: Request, exc: PersistenceError) -> JSONResponse:
    logger.error("Persistence error", extra={"path": request.url.path, "error": exc.message})
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc)


def create_app(services: Optional[Services] = None) -> FastAPI:
    """
    Create the application.

    Args:
        services: Prebuilt services (tests); built from settings at startup otherwise
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.services = services or build_services(get_settings())
        logger.info(
            "AdGen API started",
            extra={"environment": app.state.services.settings.environment, "version": __version__}
        )
        yield

    settings = services.settings if services else get_settings()

    app = FastAPI(
        title="AdGen AI API",
        description="Product photo to marketing images, copy and video",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(ConfigError, config_error_handler)
    app.add_exception_handler(GenerationError, generation_error_handler)
    app.add_exception_handler(RetryableError, retryable_error_handler)
    app.add_exception_handler(PersistenceError, persistence_error_handler)

    app.include_router(generate.router, prefix=API_PREFIX, tags=["generation"])
    app.include_router(artifacts.router, prefix=API_PREFIX, tags=["artifacts"])
    app.include_router(marketing.router, prefix=API_PREFIX, tags=["marketing"])

    @app.get(f"{API_PREFIX}/health")
    async def health(request: Request):
        current: Services = request.app.state.services
        database = "not_configured"
        if current.database is not None:
            database = "ok" if await current.database.health_check() else "unavailable"
        return {
            "status": "ok",
            "version": __version__,
            "providers": {
                "openai": current.completion is not None,
                "google": current.genai is not None,
            },
            "database": database,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("adgen.api_gateway.main:app", host="0.0.0.0", port=8000)
