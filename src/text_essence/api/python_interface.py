"""Python client for the analysis relay."""

from __future__ import annotations

import json
import logging

import httpx
from pydantic import ValidationError

from text_essence.api.contracts import (
    MAX_TEXT_LENGTH,
    TEXT_TOO_LONG_MESSAGE,
    AnalysisResultResponse,
    AnalyzeConfigPayload,
    AnalyzeRequest,
)
from text_essence.core.analysis_errors import (
    ConfigError,
    InputError,
    MalformedResponseError,
    ServiceError,
)
from text_essence.domain.models import AnalysisResult, AppConfig

CONNECTION_ERROR_MESSAGE = "Could not connect to the server. Check your connection."
GENERIC_ERROR_MESSAGE = "Text analysis failed. Please try again."
INVALID_SETTINGS_MESSAGE = "Analysis settings are invalid. Check them in the settings editor."

logger = logging.getLogger(__name__)


class AnalyzerApiClient:
    """Tiny typed relay client; satisfies the ``TextAnalyzer`` port."""

    def __init__(
        self,
        api_base_url: str = "http://127.0.0.1:8000",
        *,
        timeout: float = 90.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize client with an API base URL."""
        self._api_base_url = api_base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @property
    def api_base_url(self) -> str:
        """Return normalized API base URL."""
        return self._api_base_url

    async def analyze(self, text: str, config: AppConfig | None = None) -> AnalysisResult:
        """Send text (and optional config overrides) to ``/api/analyze``.

        Every failure, including an unusable 2xx body, is raised as an ``AnalysisError``.
        """
        request = _build_request(text, config)
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    f"{self._api_base_url}/api/analyze",
                    json=request.model_dump(mode="json", by_alias=True, exclude_none=True),
                )
        except httpx.HTTPError as exc:
            logger.warning("client.connect_failed url=%s error=%s", self._api_base_url, exc)
            raise ServiceError(CONNECTION_ERROR_MESSAGE) from exc

        if response.is_success:
            return _parse_result(response)

        message = _error_message(response)
        if response.status_code == 400:
            raise ConfigError(message)
        raise ServiceError(message, upstream_status=response.status_code)


def _build_request(text: str, config: AppConfig | None) -> AnalyzeRequest:
    if not text.strip():
        raise InputError()
    if len(text) > MAX_TEXT_LENGTH:
        raise InputError(TEXT_TOO_LONG_MESSAGE)
    try:
        return AnalyzeRequest(
            text=text,
            config=AnalyzeConfigPayload.from_app_config(config) if config is not None else None,
        )
    except ValidationError as exc:
        logger.warning("client.invalid_config errors=%s", exc.error_count())
        raise ConfigError(INVALID_SETTINGS_MESSAGE) from exc


def _parse_result(response: httpx.Response) -> AnalysisResult:
    try:
        return AnalysisResultResponse.model_validate(response.json()).to_result()
    except (UnicodeDecodeError, json.JSONDecodeError, ValidationError) as exc:
        logger.warning(
            "client.malformed_result status=%s content_type=%s",
            response.status_code,
            response.headers.get("content-type", ""),
        )
        raise MalformedResponseError() from exc


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return GENERIC_ERROR_MESSAGE
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, str) and error.strip():
            return error
    return GENERIC_ERROR_MESSAGE
