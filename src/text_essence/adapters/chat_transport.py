"""httpx transport for OpenAI-compatible chat-completions endpoints."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Final

import httpx

from text_essence.adapters.relay_settings import ProviderName, RelaySettings
from text_essence.core.analysis_errors import ServiceError
from text_essence.domain.ports import TransportResponse

OPENROUTER_API_URL: Final[str] = "https://openrouter.ai/api/v1/chat/completions"
OPENAI_API_URL: Final[str] = "https://api.openai.com/v1/chat/completions"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransportConfig:
    """Everything that differs between upstream chat-completions providers."""

    endpoint: str
    headers: dict[str, str] = field(default_factory=dict)
    supports_json_mode: bool = False
    timeout_seconds: float = 60.0


def resolve_transport_config(settings: RelaySettings) -> TransportConfig:
    """Pick endpoint, headers, and JSON-mode support for the configured provider."""
    provider: ProviderName = settings.provider
    if provider == "openai":
        endpoint = settings.upstream_url or OPENAI_API_URL
        headers: dict[str, str] = {}
        json_mode = True
    elif provider == "custom":
        if not settings.upstream_url:
            raise ValueError("TEXT_ESSENCE_UPSTREAM_URL is required for the custom provider.")
        endpoint = settings.upstream_url
        headers = {}
        json_mode = False
    else:
        endpoint = settings.upstream_url or OPENROUTER_API_URL
        headers = {"X-Title": settings.app_title}
        json_mode = False
    if settings.json_mode is not None:
        json_mode = settings.json_mode
    return TransportConfig(
        endpoint=endpoint,
        headers=headers,
        supports_json_mode=json_mode,
        timeout_seconds=settings.timeout_seconds,
    )


class HttpxChatTransport:
    """POST chat requests with a bearer token; transport failures become ``ServiceError``."""

    def __init__(
        self,
        config: TransportConfig,
        *,
        api_key: str,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._api_key = api_key
        self._http_transport = http_transport

    @property
    def config(self) -> TransportConfig:
        return self._config

    @property
    def supports_json_mode(self) -> bool:
        return self._config.supports_json_mode

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
            **self._config.headers,
        }

    async def send(self, payload: dict[str, Any]) -> TransportResponse:
        try:
            async with httpx.AsyncClient(
                timeout=self._config.timeout_seconds,
                transport=self._http_transport,
            ) as client:
                response = await client.post(
                    self._config.endpoint,
                    json=payload,
                    headers=self._headers(),
                )
        except httpx.HTTPError as exc:
            logger.error(
                "transport.failed endpoint=%s error=%s",
                self._config.endpoint,
                type(exc).__name__,
            )
            raise ServiceError() from exc
        logger.debug(
            "transport.response endpoint=%s status=%s bytes=%s",
            self._config.endpoint,
            response.status_code,
            len(response.content),
        )
        return TransportResponse(status_code=response.status_code, body=response.text)
