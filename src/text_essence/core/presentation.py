"""Presentation-layer state: analysis session, settings editor, and copy formatting."""

from __future__ import annotations

import logging
from typing import Any, Final

from text_essence.core.analysis_errors import AnalysisError, SettingsLockedError
from text_essence.core.config_store import ConfigStore
from text_essence.domain.models import AnalysisResult, AnalysisState, AppConfig
from text_essence.domain.ports import TextAnalyzer

# Cosmetic speed-bump for the settings surface, not access control.
ADMIN_PASSWORD: Final[str] = "admin"

logger = logging.getLogger(__name__)


def format_clipboard_text(result: AnalysisResult) -> str:
    """Render summary and key points as the copy-to-clipboard text."""
    points = "\n".join(f"- {point}" for point in result.key_points)
    return f"Сводка: {result.summary}\n\nОсновные мысли:\n{points}"


class AnalysisSession:
    """Owns the single ``AnalysisState`` and runs analyses against the live config."""

    def __init__(self, analyzer: TextAnalyzer, store: ConfigStore) -> None:
        self._analyzer = analyzer
        self._store = store
        self._state = AnalysisState.idle()

    @property
    def state(self) -> AnalysisState:
        return self._state

    def can_submit(self, text: str) -> bool:
        """Trigger guard: blank text or an in-flight analysis disables submission."""
        return bool(text.strip()) and self._state.status != "loading"

    async def submit(self, text: str) -> AnalysisState:
        """Run one analysis; the resulting state replaces the previous one."""
        self._state = AnalysisState.loading()
        try:
            result = await self._analyzer.analyze(text, self._store.get())
        except AnalysisError as exc:
            logger.warning("session.failed error=%s", type(exc).__name__)
            self._state = AnalysisState.failed(exc.user_message)
        else:
            self._state = AnalysisState.success(result)
        return self._state

    def clear(self) -> AnalysisState:
        self._state = AnalysisState.idle()
        return self._state


class SettingsEditor:
    """Draft-based editing of the configuration store.

    ``unlock`` compares against a fixed shared string. It keeps casual visitors out of
    the settings screen and is trivially bypassed, so it is not a security boundary.
    """

    def __init__(
        self,
        store: ConfigStore,
        analyzer: TextAnalyzer,
        *,
        password: str = ADMIN_PASSWORD,
    ) -> None:
        self._store = store
        self._analyzer = analyzer
        self._password = password
        self._unlocked = False
        self._draft = store.get()
        self._has_changes = False

    @property
    def unlocked(self) -> bool:
        return self._unlocked

    @property
    def draft(self) -> AppConfig:
        return self._draft

    @property
    def has_changes(self) -> bool:
        return self._has_changes

    def unlock(self, password: str) -> bool:
        self._unlocked = password == self._password
        return self._unlocked

    def change(self, field: str, value: Any) -> AppConfig:
        """Edit one draft field; the live config is untouched until ``save``."""
        self._require_unlocked()
        self._draft = self._draft.merged({field: value})
        self._has_changes = True
        return self._draft

    def save(self) -> AppConfig:
        self._require_unlocked()
        saved = self._store.update(self._draft.to_fields())
        self._draft = saved
        self._has_changes = False
        return saved

    def reset(self) -> AppConfig:
        self._require_unlocked()
        self._draft = self._store.reset()
        self._has_changes = False
        return self._draft

    async def run_test(self, text: str) -> AnalysisState:
        """Analyze with the unsaved draft so edits can be tried before saving."""
        self._require_unlocked()
        try:
            result = await self._analyzer.analyze(text, self._draft)
        except AnalysisError as exc:
            return AnalysisState.failed(exc.user_message)
        return AnalysisState.success(result)

    def _require_unlocked(self) -> None:
        if not self._unlocked:
            raise SettingsLockedError("Settings are locked; call unlock() first.")
