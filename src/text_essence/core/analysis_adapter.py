"""Chat-completions orchestration: request building, status classification, normalization."""

from __future__ import annotations

import json
import logging
from typing import Any, Final

from text_essence.core.analysis_errors import (
    AuthError,
    ConfigError,
    EmptyResponseError,
    InputError,
    MalformedResponseError,
    ServiceError,
)
from text_essence.core.response_parsing import (
    ParseFailure,
    normalize_result,
    parse_content,
)
from text_essence.domain.models import (
    DEFAULT_MODEL,
    DEFAULT_SYSTEM_INSTRUCTION,
    AnalysisResult,
    AppConfig,
)
from text_essence.domain.ports import ChatTransport, TransportResponse

JSON_OUTPUT_DIRECTIVE: Final[str] = """Отвечай СТРОГО в формате JSON:
{
  "summary": "краткое изложение текста (2-3 предложения)",
  "keyPoints": ["ключевой тезис 1", "ключевой тезис 2", ...],
  "tone": "тон текста (нейтральный/позитивный/негативный/аналитический/и т.д.)",
  "readingTime": "примерное время чтения",
  "keywords": ["ключевое слово 1", "ключевое слово 2", ...]
}"""
USER_PROMPT_PREFIX: Final[str] = "Проанализируй следующий текст:\n\n"
_ERROR_BODY_LOG_LIMIT: Final[int] = 500

logger = logging.getLogger(__name__)


def parse_response_schema(schema_text: str) -> dict[str, Any] | None:
    """Parse the advisory response schema; blank text means no schema."""
    if not schema_text.strip():
        return None
    try:
        schema = json.loads(schema_text)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid response schema JSON: {exc.msg}") from exc
    if not isinstance(schema, dict):
        raise ConfigError("Invalid response schema JSON: expected an object")
    return schema


def resolve_model(config: AppConfig) -> str:
    return config.model.strip() or DEFAULT_MODEL


def build_system_message(config: AppConfig) -> str:
    instruction = config.system_instruction.strip() or DEFAULT_SYSTEM_INSTRUCTION
    return f"{instruction}\n\n{JSON_OUTPUT_DIRECTIVE}"


def build_chat_request(
    text: str,
    config: AppConfig,
    *,
    supports_json_mode: bool = False,
) -> dict[str, Any]:
    """Build the chat-completions request body for one analysis."""
    payload: dict[str, Any] = {
        "model": resolve_model(config),
        "messages": [
            {"role": "system", "content": build_system_message(config)},
            {"role": "user", "content": f"{USER_PROMPT_PREFIX}{text}"},
        ],
        "temperature": config.temperature,
    }
    if supports_json_mode:
        payload["response_format"] = {"type": "json_object"}
    return payload


def classify_status(response: TransportResponse) -> None:
    """Raise the error class matching a non-2xx upstream status."""
    if response.ok:
        return
    logger.error(
        "analysis.upstream_error status=%s body=%s",
        response.status_code,
        response.body[:_ERROR_BODY_LOG_LIMIT],
    )
    if response.status_code == 401:
        raise AuthError()
    if response.status_code == 404:
        raise ConfigError()
    raise ServiceError(upstream_status=response.status_code)


def extract_message_content(body: str) -> str:
    """Return ``choices[0].message.content`` from a raw envelope body."""
    try:
        envelope = json.loads(body)
    except json.JSONDecodeError as exc:
        raise MalformedResponseError() from exc

    content: object = None
    if isinstance(envelope, dict):
        choices = envelope.get("choices")
        if isinstance(choices, list) and choices and isinstance(choices[0], dict):
            message = choices[0].get("message")
            if isinstance(message, dict):
                content = message.get("content")
    if not isinstance(content, str) or not content.strip():
        raise EmptyResponseError()
    return content


class AnalysisAdapter:
    """Runs one request/response cycle against a chat transport per ``analyze`` call."""

    def __init__(self, transport: ChatTransport) -> None:
        self._transport = transport

    async def analyze(self, text: str, config: AppConfig) -> AnalysisResult:
        if not text.strip():
            raise InputError()
        parse_response_schema(config.response_schema)

        payload = build_chat_request(
            text,
            config,
            supports_json_mode=self._transport.supports_json_mode,
        )
        logger.info(
            "analysis.request model=%s temperature=%s chars=%s json_mode=%s",
            payload["model"],
            config.temperature,
            len(text),
            self._transport.supports_json_mode,
        )
        response = await self._transport.send(payload)
        classify_status(response)

        content = extract_message_content(response.body)
        parsed = parse_content(content)
        if isinstance(parsed, ParseFailure):
            logger.warning("analysis.malformed_content reason=%s", parsed.reason)
            raise MalformedResponseError()
        result = normalize_result(parsed.value)
        logger.info(
            "analysis.complete key_points=%s keywords=%s",
            len(result.key_points),
            len(result.keywords),
        )
        return result
