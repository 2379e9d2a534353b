"""Fence stripping, tagged JSON parsing, and field normalization for model output."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Final

from text_essence.domain.models import (
    FALLBACK_READING_TIME,
    FALLBACK_SUMMARY,
    FALLBACK_TONE,
    AnalysisResult,
)

_FENCE_OPEN: Final[re.Pattern[str]] = re.compile(r"^```(?:json)?[ \t]*\n?", re.IGNORECASE)
_FENCE_CLOSE: Final[re.Pattern[str]] = re.compile(r"\n?```$")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParsedPayload:
    """Content decoded as JSON."""

    value: Any


@dataclass(frozen=True)
class ParseFailure:
    """Content that is not valid JSON, with the decoder's reason."""

    reason: str


ParsedContent = ParsedPayload | ParseFailure


def strip_code_fence(content: str) -> str:
    """Remove a wrapping ```json / ``` markdown fence; clean content is returned trimmed."""
    text = content.strip()
    opened = _FENCE_OPEN.match(text)
    if opened is not None:
        text = text[opened.end() :]
    closed = _FENCE_CLOSE.search(text)
    if closed is not None:
        text = text[: closed.start()]
    return text.strip()


def parse_content(content: str) -> ParsedContent:
    """Decode fence-stripped content into a tagged result."""
    stripped = strip_code_fence(content)
    try:
        return ParsedPayload(value=json.loads(stripped))
    except json.JSONDecodeError as exc:
        return ParseFailure(reason=f"{exc.msg} at line {exc.lineno} column {exc.colno}")


def normalize_result(payload: object) -> AnalysisResult:
    """Map any decoded payload onto a fully populated result."""
    if not isinstance(payload, dict):
        logger.warning("analysis.normalize payload_type=%s", type(payload).__name__)
        return AnalysisResult()

    substituted: list[str] = []
    summary = _string_field(payload, "summary", FALLBACK_SUMMARY, substituted)
    key_points = _string_list_field(payload, "keyPoints", substituted)
    tone = _string_field(payload, "tone", FALLBACK_TONE, substituted)
    reading_time = _string_field(payload, "readingTime", FALLBACK_READING_TIME, substituted)
    keywords = _string_list_field(payload, "keywords", substituted)
    if substituted:
        logger.info("analysis.normalize fallback_fields=%s", ",".join(substituted))
    return AnalysisResult(
        summary=summary,
        key_points=key_points,
        tone=tone,
        reading_time=reading_time,
        keywords=keywords,
    )


def _string_field(
    payload: dict[str, Any],
    key: str,
    fallback: str,
    substituted: list[str],
) -> str:
    value = payload.get(key)
    if isinstance(value, str) and value.strip():
        return value
    substituted.append(key)
    return fallback


def _string_list_field(
    payload: dict[str, Any],
    key: str,
    substituted: list[str],
) -> tuple[str, ...]:
    value = payload.get(key)
    if not isinstance(value, list):
        substituted.append(key)
        return ()
    # Non-string items are dropped; the remaining order is preserved.
    return tuple(item for item in value if isinstance(item, str))
