"""Ports for chat transports, analyzers, and config persistence."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from text_essence.domain.models import AnalysisResult, AppConfig


@dataclass(frozen=True)
class TransportResponse:
    """Raw upstream answer: HTTP status plus undecoded body text."""

    status_code: int
    body: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class ChatTransport(Protocol):
    """Sends one chat-completions request body and returns the raw answer."""

    @property
    def supports_json_mode(self) -> bool:
        ...

    async def send(self, payload: dict[str, Any]) -> TransportResponse:
        ...


class TextAnalyzer(Protocol):
    """Anything that turns text plus config into a normalized result."""

    async def analyze(self, text: str, config: AppConfig) -> AnalysisResult:
        ...


class ConfigPersistence(Protocol):
    """Durable key/value storage for serialized configuration documents."""

    def load(self, key: str) -> str | None:
        ...

    def save(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...
