"""Main FastAPI application entry point."""

import os
from contextlib import asynccontextmanager
from typing import Optional
import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api import health, images
from .core import CredentialResolver, ImageSynthesizer, PromptEnhancer
from .models.enums import Operation
from .models.schemas import ErrorResponse
from .providers import OpenAIClient, StepFunClient
from .utils.config import Config, load_config
from .utils.errors import (
    AkiError,
    ConfigurationError,
    ImageConversionError,
    InvalidRequestError,
    MalformedResponseError,
    TransportError,
)
from .utils.logger import get_logger

logger = get_logger(__name__)

ERROR_STATUS = {
    TransportError: 502,
    MalformedResponseError: 502,
    ImageConversionError: 422,
    InvalidRequestError: 400,
}


async def handle_studio_error(request: Request, exc: AkiError) -> JSONResponse:
    """Render a studio error as a JSON message."""
    status_code = next(
        (code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls)),
        500,
    )
    logger.error(
        f"{request.url.path} failed: {type(exc).__name__}",
        extra={"path": request.url.path, "status": status_code, "error": str(exc)}
    )
    body = ErrorResponse(error=type(exc).__name__, detail=str(exc))
    return JSONResponse(status_code=status_code, content=body.model_dump())


def _resolve_operations(config: Config, resolver: CredentialResolver) -> dict:
    """Resolve one credential per operation; missing ones are left out."""
    required = {
        Operation.ENHANCE: config.enhancement.credential,
        Operation.SYNTHESIZE: config.synthesis.credential,
    }

    available = {}
    missing = []
    for operation, name in required.items():
        try:
            available[operation] = resolver.resolve(name)
        except ConfigurationError:
            missing.append(name)

    if missing:
        if config.require_all_credentials:
            raise ConfigurationError(f"Missing required credentials: {', '.join(missing)}")
        logger.warning(
            "Starting with operations disabled",
            extra={"missing": missing, "enabled": [op.value for op in available]}
        )

    return available


def create_app(
    config: Optional[Config] = None,
    resolver: Optional[CredentialResolver] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the application.

    Credentials are resolved here, before the app accepts requests. An
    operation whose credential is missing is not mounted; with
    require_all_credentials any missing credential is fatal.

    Raises:
        ConfigurationError: Invalid config or missing credentials
    """
    config = config or load_config()
    resolver = resolver or CredentialResolver.from_config(config)
    keys = _resolve_operations(config, resolver)

    clients = []
    enhancer = None
    synthesizer = None

    if Operation.ENHANCE in keys:
        openai = OpenAIClient(
            api_key=keys[Operation.ENHANCE],
            endpoint=config.enhancement.endpoint,
            model=config.enhancement.model,
            temperature=config.enhancement.temperature,
            timeout=config.timeout_seconds,
            transport=transport,
        )
        clients.append(openai)
        enhancer = PromptEnhancer(openai_client=openai)

    if Operation.SYNTHESIZE in keys:
        stepfun = StepFunClient(
            api_key=keys[Operation.SYNTHESIZE],
            endpoint=config.synthesis.endpoint,
            model=config.synthesis.model,
            seed=config.synthesis.seed,
            source_weight=config.synthesis.source_weight,
            response_format=config.synthesis.response_format,
            timeout=config.timeout_seconds,
            transport=transport,
        )
        clients.append(stepfun)
        synthesizer = ImageSynthesizer(stepfun_client=stepfun, settings=config.synthesis)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open provider clients on startup, close them on shutdown."""
        logger.info("Application starting up...")
        for client in clients:
            await client.initialize()
        logger.info(
            "Application startup complete",
            extra={"operations": [op.value for op in app.state.operations]}
        )

        yield

        logger.info("Application shutting down...")
        for client in clients:
            await client.close()
        logger.info("Application shutdown complete")

    app = FastAPI(
        title="Aki Image Studio",
        description="Prompt enhancement and image-to-image generation",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.config = config
    app.state.resolver = resolver
    app.state.enhancer = enhancer
    app.state.synthesizer = synthesizer
    app.state.operations = list(keys)

    app.add_exception_handler(AkiError, handle_studio_error)

    app.include_router(health.router, prefix="/health", tags=["health"])
    if enhancer is not None:
        app.include_router(images.enhance_router, prefix="/images", tags=["images"])
    if synthesizer is not None:
        app.include_router(images.synthesize_router, prefix="/images", tags=["images"])

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "service": "aki-image-studio",
            "version": __version__,
            "status": "running",
            "operations": [op.value for op in app.state.operations],
            "docs": "/docs",
        }

    return app


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 8000))

    uvicorn.run(
        "aki.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=port,
        log_level="info",
    )
