"""Typed contracts shared by the relay handlers and the Python client."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from text_essence.domain.models import (
    MAX_TEMPERATURE,
    MIN_TEMPERATURE,
    AnalysisResult,
    AppConfig,
)

MAX_TEXT_LENGTH = 200_000
MAX_MODEL_LENGTH = 200
TEXT_TOO_LONG_MESSAGE = f"Text is too long (limit {MAX_TEXT_LENGTH} characters)"


class ContractModel(BaseModel):
    """Base model config used by all API contracts."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class AnalyzeConfigPayload(ContractModel):
    """Optional per-request overrides.

    Omitted fields use the built-in defaults; a blank model falls back to the default
    model when the request is built.
    """

    system_instruction: str | None = Field(default=None, alias="systemInstruction")
    model: str | None = Field(default=None, max_length=MAX_MODEL_LENGTH)
    temperature: float | None = Field(default=None, ge=MIN_TEMPERATURE, le=MAX_TEMPERATURE)
    response_schema: str | None = Field(default=None, alias="responseSchema")

    def to_app_config(self) -> AppConfig:
        return AppConfig().merged(self.model_dump(exclude_none=True))

    @classmethod
    def from_app_config(cls, config: AppConfig) -> AnalyzeConfigPayload:
        return cls.model_validate(config.to_json_dict())


class AnalyzeRequest(ContractModel):
    """Inbound relay body."""

    text: str = Field(max_length=MAX_TEXT_LENGTH)
    config: AnalyzeConfigPayload | None = None

    def app_config(self) -> AppConfig:
        if self.config is None:
            return AppConfig()
        return self.config.to_app_config()


class AnalysisResultResponse(ContractModel):
    """Normalized analysis payload returned on success."""

    summary: str
    key_points: list[str] = Field(alias="keyPoints")
    tone: str
    reading_time: str = Field(alias="readingTime")
    keywords: list[str]

    @classmethod
    def from_result(cls, result: AnalysisResult) -> AnalysisResultResponse:
        return cls.model_validate(result.to_json_dict())

    def to_result(self) -> AnalysisResult:
        return AnalysisResult(
            summary=self.summary,
            key_points=tuple(self.key_points),
            tone=self.tone,
            reading_time=self.reading_time,
            keywords=tuple(self.keywords),
        )


class ErrorResponse(BaseModel):
    """One-line error body used for every non-2xx relay answer."""

    error: str


class HealthResponse(BaseModel):
    """Simple health payload used by probes."""

    status: Literal["ok"] = "ok"
    service: str = "text_essence"


class ApiRootResponse(BaseModel):
    """Describes the relay's capabilities and upstream mode."""

    name: str = "text_essence"
    upstream_configured: bool
    json_mode: bool
    endpoints: list[str] = Field(default_factory=lambda: ["/healthz", "/api", "/api/analyze"])
