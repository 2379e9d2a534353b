"""Single-writer configuration store with injected persistence."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from text_essence.core.analysis_errors import ConfigPersistenceError
from text_essence.domain.models import CONFIG_STORAGE_KEY, AppConfig, is_config_field
from text_essence.domain.ports import ConfigPersistence

logger = logging.getLogger(__name__)


class ConfigStore:
    """Hold the live ``AppConfig`` and mirror every change into persistence."""

    def __init__(
        self,
        persistence: ConfigPersistence,
        *,
        storage_key: str = CONFIG_STORAGE_KEY,
    ) -> None:
        self._persistence = persistence
        self._storage_key = storage_key
        self._config = self._load()

    @property
    def storage_key(self) -> str:
        return self._storage_key

    def get(self) -> AppConfig:
        return self._config

    def update(self, partial: Mapping[str, Any] | None = None, **fields: Any) -> AppConfig:
        """Merge fields (camelCase or snake_case) and persist the merged config.

        Invalid field names or values raise ``ValueError`` and leave the live config
        untouched. Persistence failures are logged only.
        """
        changes = {**(partial or {}), **fields}
        updated = self._config.merged(changes)
        self._config = updated
        try:
            self._persistence.save(
                self._storage_key,
                json.dumps(updated.to_json_dict(), ensure_ascii=False),
            )
        except ConfigPersistenceError as exc:
            logger.warning("config.save_failed key=%s error=%s", self._storage_key, exc)
        else:
            logger.info("config.saved key=%s fields=%s", self._storage_key, ",".join(changes))
        return updated

    def reset(self) -> AppConfig:
        self._config = AppConfig()
        try:
            self._persistence.delete(self._storage_key)
        except ConfigPersistenceError as exc:
            logger.warning("config.reset_failed key=%s error=%s", self._storage_key, exc)
        else:
            logger.info("config.reset key=%s", self._storage_key)
        return self._config

    def _load(self) -> AppConfig:
        try:
            raw = self._persistence.load(self._storage_key)
        except ConfigPersistenceError as exc:
            logger.warning("config.load_failed key=%s error=%s", self._storage_key, exc)
            return AppConfig()
        if raw is None:
            return AppConfig()
        try:
            payload = json.loads(raw)
            if not isinstance(payload, dict):
                raise ValueError("stored config is not a JSON object")
            ignored = sorted(key for key in payload if not is_config_field(key))
            if ignored:
                logger.info(
                    "config.load_ignored key=%s fields=%s", self._storage_key, ",".join(ignored)
                )
            return AppConfig.from_json_dict(payload)
        except ValueError as exc:
            # json.JSONDecodeError is a ValueError subclass.
            logger.warning("config.load_invalid key=%s error=%s", self._storage_key, exc)
            return AppConfig()
