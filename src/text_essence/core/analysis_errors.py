"""Classified failures raised by analysis, configuration and relay code."""

from __future__ import annotations


class AnalysisError(RuntimeError):
    """Base class for failures that end one analysis invocation.

    ``user_message`` is a single human-readable line safe to show to end users and
    ``http_status`` is the status the relay answers with.
    """

    http_status = 500
    default_message = "Analysis failed. Please try again."

    def __init__(self, user_message: str | None = None) -> None:
        self.user_message = user_message or self.default_message
        super().__init__(self.user_message)


class InputError(AnalysisError):
    """Input text is empty after trimming."""

    http_status = 400
    default_message = "Text is required"


class AuthError(AnalysisError):
    """Server-side secret missing or rejected upstream."""

    default_message = "API authentication error"


class ConfigError(AnalysisError):
    """Unknown model identifier or malformed response schema."""

    http_status = 400
    default_message = "Model not found. Check model name."


class EmptyResponseError(AnalysisError):
    """Upstream answered without message content."""

    default_message = "Empty response from AI"


class MalformedResponseError(AnalysisError):
    """Upstream content could not be parsed as JSON."""

    default_message = "Invalid JSON response from AI"


class ServiceError(AnalysisError):
    """Network/transport failure or a non-2xx upstream status."""

    default_message = "AI service error"

    def __init__(
        self,
        user_message: str | None = None,
        *,
        upstream_status: int | None = None,
    ) -> None:
        super().__init__(user_message)
        self.upstream_status = upstream_status


class ConfigPersistenceError(RuntimeError):
    """Raised by persistence adapters when the stored config cannot be read or written."""


class SettingsLockedError(RuntimeError):
    """Raised when settings are edited before the editor is unlocked."""
