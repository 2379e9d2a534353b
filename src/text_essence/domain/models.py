"""Core analysis domain models."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Final, Literal

CONFIG_STORAGE_KEY: Final[str] = "app_config_v2"

DEFAULT_SYSTEM_INSTRUCTION: Final[str] = (
    "Ты — профессиональный редактор и аналитик. Твоя задача — извлекать суть из любых текстов. "
    "Отвечай только валидным JSON."
)
DEFAULT_MODEL: Final[str] = "deepseek/deepseek-v3.2"
DEFAULT_TEMPERATURE: Final[float] = 0.7
MIN_TEMPERATURE: Final[float] = 0.0
MAX_TEMPERATURE: Final[float] = 2.0

DEFAULT_SCHEMA: Final[dict[str, Any]] = {
    "type": "OBJECT",
    "properties": {
        "summary": {
            "type": "STRING",
            "description": (
                "Краткая сводка текста в 2-3 предложениях. О чем этот текст глобально."
            ),
        },
        "keyPoints": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "3-5 основных мыслей или тезисов из текста.",
        },
        "tone": {
            "type": "STRING",
            "description": (
                "Тональность текста одним-двумя словами "
                "(например: 'Официальный', 'Ироничный', 'Научный')."
            ),
        },
        "readingTime": {
            "type": "STRING",
            "description": "Примерное время чтения исходного текста (например: '2 мин').",
        },
        "keywords": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "3-5 ключевых тегов или тем.",
        },
    },
    "required": ["summary", "keyPoints", "tone", "readingTime", "keywords"],
}
DEFAULT_RESPONSE_SCHEMA: Final[str] = json.dumps(DEFAULT_SCHEMA, ensure_ascii=False, indent=2)

FALLBACK_SUMMARY: Final[str] = "Не удалось извлечь краткое содержание"
FALLBACK_TONE: Final[str] = "Не определено"
FALLBACK_READING_TIME: Final[str] = "~1 мин"

_CONFIG_FIELD_ALIASES: Final[dict[str, str]] = {
    "systemInstruction": "system_instruction",
    "system_instruction": "system_instruction",
    "model": "model",
    "temperature": "temperature",
    "responseSchema": "response_schema",
    "response_schema": "response_schema",
}

AnalysisStatus = Literal["idle", "loading", "success", "error"]


def config_field_name(key: str) -> str:
    """Map a camelCase or snake_case config key onto the dataclass field name."""
    try:
        return _CONFIG_FIELD_ALIASES[key]
    except KeyError:
        raise ValueError(f"Unknown configuration field: {key!r}") from None


def is_config_field(key: str) -> bool:
    return key in _CONFIG_FIELD_ALIASES


@dataclass(frozen=True)
class AppConfig:
    """Adjustable analysis parameters shared by the adapter and settings editor."""

    system_instruction: str = DEFAULT_SYSTEM_INSTRUCTION
    model: str = DEFAULT_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    response_schema: str = DEFAULT_RESPONSE_SCHEMA

    def __post_init__(self) -> None:
        if not isinstance(self.system_instruction, str):
            raise ValueError("system_instruction must be a string.")
        if not isinstance(self.model, str):
            raise ValueError("model must be a string.")
        if not isinstance(self.response_schema, str):
            raise ValueError("response_schema must be a string.")
        if isinstance(self.temperature, bool) or not isinstance(self.temperature, int | float):
            raise ValueError("temperature must be a number.")
        if not MIN_TEMPERATURE <= float(self.temperature) <= MAX_TEMPERATURE:
            raise ValueError(
                f"temperature must be within [{MIN_TEMPERATURE}, {MAX_TEMPERATURE}]."
            )
        object.__setattr__(self, "temperature", float(self.temperature))

    def merged(self, partial: dict[str, Any]) -> AppConfig:
        """Return a copy with the given camelCase or snake_case fields replaced."""
        values = self.to_fields()
        for key, value in partial.items():
            values[config_field_name(key)] = value
        return AppConfig(**values)

    def to_fields(self) -> dict[str, Any]:
        return {
            "system_instruction": self.system_instruction,
            "model": self.model,
            "temperature": self.temperature,
            "response_schema": self.response_schema,
        }

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize with the camelCase keys used by storage and HTTP payloads."""
        return {
            "systemInstruction": self.system_instruction,
            "model": self.model,
            "temperature": self.temperature,
            "responseSchema": self.response_schema,
        }

    @classmethod
    def from_json_dict(cls, payload: dict[str, Any]) -> AppConfig:
        """Build a config from a (possibly partial) stored document over defaults.

        Keys that are not configuration fields are ignored so that documents written
        by other versions still contribute the fields this version knows about.
        """
        known = {key: value for key, value in payload.items() if is_config_field(key)}
        return cls().merged(known)


@dataclass(frozen=True)
class AnalysisResult:
    """Normalized analysis output; every field is always populated."""

    summary: str = FALLBACK_SUMMARY
    key_points: tuple[str, ...] = ()
    tone: str = FALLBACK_TONE
    reading_time: str = FALLBACK_READING_TIME
    keywords: tuple[str, ...] = ()

    def to_json_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary,
            "keyPoints": list(self.key_points),
            "tone": self.tone,
            "readingTime": self.reading_time,
            "keywords": list(self.keywords),
        }


@dataclass(frozen=True)
class AnalysisState:
    """Presentation-facing analysis status with its payload."""

    status: AnalysisStatus = "idle"
    result: AnalysisResult | None = None
    error: str | None = None

    @classmethod
    def idle(cls) -> AnalysisState:
        return cls()

    @classmethod
    def loading(cls) -> AnalysisState:
        return cls(status="loading")

    @classmethod
    def success(cls, result: AnalysisResult) -> AnalysisState:
        return cls(status="success", result=result)

    @classmethod
    def failed(cls, message: str) -> AnalysisState:
        return cls(status="error", error=message)
