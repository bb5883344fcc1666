"""
Quorum: FastAPI Application Entry Point

This module initializes the FastAPI application and defines the endpoints:
- /api/llm: Single-model chat, multi-model fan-out and synthesis
- /cost: Estimated cost of a conversation transcript
- /health: Health check endpoint
- /config: Non-sensitive configuration values
- /models: Model registry grouped by provider

The application uses a lifespan context manager to:
1. Load and validate configuration at startup
2. Configure logging based on settings
3. Report which server-held provider keys are present
4. Close the shared HTTP client on shutdown
"""

from contextlib import asynccontextmanager
from typing import Annotated
import logging
import time

import httpx
from fastapi import Body, Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.background import BackgroundTask

from quorum import __version__
from quorum.config import Settings, configure_logging, get_settings
from quorum.credentials import PROVIDER_KEY_NAMES
from quorum.dispatcher.handlers import dispatch, dispatch_many
from quorum.errors import (
    ConfigurationError,
    NoCredentialsError,
    QuorumError,
    UnknownModelError,
    UnknownProviderError,
    UpstreamError,
)
from quorum.metrics.conversation import calculate_conversation_cost
from quorum.providers.base import close_http_client
from quorum.registry import get_model_registry
from quorum.schemas.api import (
    ChatRequest,
    ChatResponse,
    ComponentHealth,
    ConversationCostRequest,
    ConversationCostResponse,
    ErrorCodes,
    ErrorResponse,
    HealthResponse,
    LLMRequest,
    MultiChatRequest,
    MultiChatResponse,
    SynthesizeResponse,
    cost_response_from_summary,
)
from quorum.synthesis import synthesize

logger = logging.getLogger(__name__)

_start_time: float = 0.0

# HTTP status for each engine error; first match wins
ERROR_STATUS_CODES: list[tuple[type[QuorumError], int]] = [
    (UnknownModelError, 404),
    (ConfigurationError, 401),
    (UpstreamError, 502),
    (NoCredentialsError, 503),
    (UnknownProviderError, 500),
]


def status_for_error(exc: QuorumError) -> int:
    """Map an engine error to the HTTP status it is reported with."""
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return 500


def _server_key_configured(settings: Settings, key_name: str) -> bool:
    secret = getattr(settings, key_name.lower())
    return bool(secret is not None and secret.get_secret_value())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler for startup/shutdown events.

    On startup:
    - Loads configuration from environment
    - Configures logging
    - Logs which server-held keys are configured

    On shutdown:
    - Closes the shared HTTP client
    """
    settings = get_settings()
    configure_logging(settings)

    logger.info("=" * 60)
    logger.info("Quorum starting up...")
    logger.info("=" * 60)
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Synthesis model: {settings.synthesis_model}")
    logger.info(f"Default temperature: {settings.default_temperature}")
    logger.info(f"Request timeout: {settings.request_timeout_sec}s")
    logger.info(f"Debug mode: {'enabled' if settings.debug else 'disabled'}")

    for provider, key_name in PROVIDER_KEY_NAMES.items():
        state = "configured" if _server_key_configured(settings, key_name) else "not configured"
        logger.info(f"{provider.value} server key: {state}")

    if settings.is_development:
        logger.warning("Development mode: server-held keys are used for every caller")
    elif settings.auth_token is None or not settings.auth_token.get_secret_value():
        logger.info("AUTH_TOKEN not set: callers must supply their own keys")

    global _start_time
    _start_time = time.time()

    logger.info(f"{len(get_model_registry().list_models())} models registered")
    logger.info("Quorum ready to accept requests")

    yield  # Application runs here

    logger.info("Quorum shutting down...")
    await close_http_client()


app = FastAPI(
    title="Quorum",
    description="Multi-provider LLM dispatch and synthesis",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    """
    Root endpoint with API information.
    """
    return {
        "name": "Quorum",
        "description": "Multi-provider LLM dispatch and synthesis",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
        "config": "/config",
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check system health and component status.",
)
async def health_check(settings: Settings = Depends(get_settings)):
    """
    Health check endpoint for monitoring and orchestration.

    Checks:
    - Registry availability
    - Server-held credentials (informational; callers may bring their own)
    - System uptime
    """
    components = []
    overall_status = "healthy"

    try:
        model_count = len(get_model_registry().list_models())
        components.append(
            ComponentHealth(
                name="registry",
                status="healthy",
                message=f"{model_count} models registered",
            )
        )
    except Exception as e:
        components.append(ComponentHealth(name="registry", status="unhealthy", message=str(e)))
        overall_status = "unhealthy"

    configured = [
        provider.value
        for provider, key_name in PROVIDER_KEY_NAMES.items()
        if _server_key_configured(settings, key_name)
    ]
    components.append(
        ComponentHealth(
            name="credentials",
            status="healthy",
            message=(
                f"Server keys for: {', '.join(configured)}"
                if configured
                else "No server keys configured"
            ),
        )
    )

    uptime = time.time() - _start_time if _start_time > 0 else 0.0

    return HealthResponse(
        status=overall_status,
        service="quorum",
        version=__version__,
        components=components,
        uptime_seconds=uptime,
    )


@app.get("/config")
async def show_config(settings: Settings = Depends(get_settings)):
    """
    Returns non-sensitive configuration values.

    API keys and the auth token are SecretStr and are NOT exposed in this
    endpoint; only whether each one is set.
    """
    return {
        "environment": settings.environment,
        "synthesis": {
            "model": settings.synthesis_model,
        },
        "requests": {
            "default_temperature": settings.default_temperature,
            "timeout_sec": settings.request_timeout_sec,
        },
        "server": {
            "host": settings.host,
            "port": settings.port,
            "debug": settings.debug,
        },
        "logging": {
            "level": settings.log_level,
        },
        "auth_token_configured": bool(
            settings.auth_token is not None and settings.auth_token.get_secret_value()
        ),
        "api_keys_configured": {
            provider.value: _server_key_configured(settings, key_name)
            for provider, key_name in PROVIDER_KEY_NAMES.items()
        },
    }


@app.get("/models")
async def list_models():
    """
    List all registered models grouped by provider.

    Providers and the models within them appear in registration order.
    """
    registry = get_model_registry()

    return {
        "providers": {
            provider.value: [
                {
                    "model_id": model.model_id,
                    "display_name": model.display_name,
                    "api_model_name": model.api_model_name,
                    "base_url": model.base_url,
                    "cost_per_1m_input": model.cost_per_1m_input_tokens,
                    "cost_per_1m_output": model.cost_per_1m_output_tokens,
                    "max_tokens": model.max_tokens,
                }
                for model in models
            ]
            for provider, models in registry.list_models_by_provider().items()
        },
        "total_models": len(registry.list_models()),
    }


async def _handle_chat(request: ChatRequest, settings: Settings):
    temperature = (
        request.temperature if request.temperature is not None else settings.default_temperature
    )
    result = await dispatch(
        request.messages,
        request.model,
        temperature=temperature,
        system_prompt=request.system_prompt,
        stream=request.stream,
        api_keys=request.api_keys,
    )

    if isinstance(result, httpx.Response):
        return StreamingResponse(
            result.aiter_bytes(),
            status_code=result.status_code,
            media_type=result.headers.get("content-type", "text/event-stream"),
            background=BackgroundTask(result.aclose),
        )
    return ChatResponse(response=result)


async def _handle_multi_chat(request: MultiChatRequest, settings: Settings) -> MultiChatResponse:
    temperature = (
        request.temperature if request.temperature is not None else settings.default_temperature
    )
    results = await dispatch_many(
        request.messages,
        request.models,
        temperature=temperature,
        system_prompt=request.system_prompt,
        api_keys=request.api_keys,
    )
    return MultiChatResponse(responses=results)


@app.post(
    "/api/llm",
    responses={
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
    summary="Call language models",
    description="Chat with one model, fan out to several, or synthesize a fan-out.",
)
async def llm(
    request: Annotated[LLMRequest, Body(discriminator="action")],
    settings: Settings = Depends(get_settings),
):
    """
    Main LLM endpoint, dispatching on `action`.

    - chat: One model; returns `{"response": ...}` or the raw provider
      stream when `stream` is true
    - multi-chat: Several models concurrently; always 200 with per-model
      results, failures included
    - synthesize: One synthesis call over fan-out results; returns
      `{"synthesis": ..., "model": ...}`

    Engine errors are rendered by the QuorumError handler.
    """
    if isinstance(request, ChatRequest):
        return await _handle_chat(request, settings)

    if isinstance(request, MultiChatRequest):
        return await _handle_multi_chat(request, settings)

    turn = await synthesize(
        request.responses,
        synthesis_model=request.synthesis_model,
        synthesis_prompt=request.synthesis_prompt,
        api_keys=request.api_keys,
    )
    return SynthesizeResponse(synthesis=turn.content, model=turn.model)


@app.post(
    "/cost",
    response_model=ConversationCostResponse,
    responses={422: {"model": ErrorResponse}},
    summary="Estimate conversation cost",
    description="Estimate the cost of a transcript from its text.",
)
async def conversation_cost(request: ConversationCostRequest):
    """
    Recompute the estimated cost of a transcript.

    Tokens are approximated from text length; unknown and unpriced models
    contribute zero.
    """
    summary = calculate_conversation_cost(request.messages, request.system_prompt or "")
    return cost_response_from_summary(summary)


@app.exception_handler(QuorumError)
async def quorum_exception_handler(request: Request, exc: QuorumError) -> JSONResponse:
    """
    Handle engine errors.

    Renders the error's code and message in the standard envelope with the
    status mapped from the error type.
    """
    return JSONResponse(
        status_code=status_for_error(exc),
        content={"error": {"code": exc.code, "message": str(exc), "field": None}},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Returns a consistent error response format with the first validation
    error's details for client-side error handling.
    """
    errors = exc.errors()
    first_error = errors[0] if errors else {}

    return JSONResponse(
        status_code=422,
        content={
            "error": {
                "code": ErrorCodes.VALIDATION_ERROR,
                "message": first_error.get("msg", "Validation failed"),
                "field": ".".join(str(loc) for loc in first_error.get("loc", [])),
            }
        },
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """
    Handle HTTP exceptions with consistent format.
    """
    detail = exc.detail
    if isinstance(detail, dict):
        return JSONResponse(status_code=exc.status_code, content={"error": detail})
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"code": "HTTP_ERROR", "message": str(detail), "field": None}},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions.

    Logs the full exception for debugging and returns a generic error
    response to avoid leaking implementation details.
    """
    logger.exception("Unhandled exception")
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": ErrorCodes.INTERNAL_ERROR,
                "message": "An unexpected error occurred",
                "field": None,
            }
        },
    )
