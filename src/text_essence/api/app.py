"""FastAPI relay that forwards analysis requests to the upstream chat endpoint."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from text_essence.adapters.chat_transport import HttpxChatTransport, resolve_transport_config
from text_essence.adapters.relay_settings import RelaySettings, load_relay_settings
from text_essence.api.contracts import (
    TEXT_TOO_LONG_MESSAGE,
    AnalysisResultResponse,
    AnalyzeRequest,
    ApiRootResponse,
    ErrorResponse,
    HealthResponse,
)
from text_essence.core.analysis_adapter import AnalysisAdapter
from text_essence.core.analysis_errors import AnalysisError, AuthError, InputError
from text_essence.domain.ports import ChatTransport

SERVER_CONFIG_ERROR = "Server configuration error"

logger = logging.getLogger(__name__)


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


def _validation_message(exc: RequestValidationError) -> str:
    for error in exc.errors():
        location = tuple(error.get("loc", ()))
        if location[-1:] == ("text",) and error.get("type") == "string_too_long":
            return TEXT_TOO_LONG_MESSAGE
        if location[-1:] == ("text",) or location == ("body",):
            return InputError.default_message
    return "Invalid request body"


def create_app(
    settings: RelaySettings | None = None,
    transport: ChatTransport | None = None,
) -> FastAPI:
    """Create the relay application.

    An explicit ``transport`` bypasses the server-secret check; otherwise an httpx
    transport is built from ``settings`` when an API key is configured.
    """
    effective_settings = settings or load_relay_settings()
    effective_transport = transport
    if effective_transport is None and effective_settings.has_api_key:
        effective_transport = HttpxChatTransport(
            resolve_transport_config(effective_settings),
            api_key=effective_settings.api_key,
        )
    adapter = AnalysisAdapter(effective_transport) if effective_transport is not None else None

    app = FastAPI(
        title="text_essence API",
        version="0.1.0",
        description="Relay between text-analysis clients and a chat-completions endpoint.",
        docs_url="/docs",
        redoc_url=None,
        openapi_url="/openapi.json",
        openapi_tags=[
            {"name": "system", "description": "Service health and runtime metadata."},
            {"name": "analysis", "description": "Text analysis relay."},
        ],
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(effective_settings.cors_origins),
        allow_credentials=False,
        allow_methods=["POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    logger.info(
        "api.start provider=%s upstream_configured=%s json_mode=%s",
        effective_settings.provider,
        adapter is not None,
        effective_transport.supports_json_mode if effective_transport is not None else False,
    )

    @app.exception_handler(AnalysisError)
    async def analysis_error_handler(_: Request, exc: AnalysisError) -> JSONResponse:
        return _error_response(exc.http_status, exc.user_message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 405:
            return _error_response(405, "Method not allowed")
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_response(400, _validation_message(exc))

    @app.get("/healthz", response_model=HealthResponse, tags=["system"])
    def healthz() -> HealthResponse:
        return HealthResponse()

    @app.get("/api", response_model=ApiRootResponse, tags=["system"])
    def api_root() -> ApiRootResponse:
        return ApiRootResponse(
            upstream_configured=adapter is not None,
            json_mode=(
                effective_transport.supports_json_mode
                if effective_transport is not None
                else False
            ),
        )

    @app.options("/api/analyze", tags=["analysis"], include_in_schema=False)
    def analyze_options() -> Response:
        return Response(status_code=200)

    @app.post(
        "/api/analyze",
        response_model=AnalysisResultResponse,
        responses={
            400: {"model": ErrorResponse},
            405: {"model": ErrorResponse},
            500: {"model": ErrorResponse},
        },
        tags=["analysis"],
    )
    async def analyze(payload: AnalyzeRequest) -> AnalysisResultResponse:
        if adapter is None:
            logger.error("api.analyze upstream secret is not configured")
            raise AuthError(SERVER_CONFIG_ERROR)
        if not payload.text.strip():
            raise InputError()
        result = await adapter.analyze(payload.text, payload.app_config())
        return AnalysisResultResponse.from_result(result)

    return app


app = create_app()
