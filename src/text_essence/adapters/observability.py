"""Runtime logging: console plus a rotating file, with upstream secrets masked."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path

_CONFIGURED = False
DEFAULT_LOG_PATH = "work/logs/text_essence.log"
REDACTED = "[redacted]"
_SECRET_ENV_VARS = ("TEXT_ESSENCE_API_KEY", "OPENROUTER_API_KEY")
_FILE_LOG_DISABLED = {"-", "off", "none"}


@dataclass(frozen=True)
class LoggingSettings:
    """Resolved logging knobs; ``log_path=None`` keeps logs on the console only."""

    level: int = logging.INFO
    log_path: Path | None = Path(DEFAULT_LOG_PATH)
    max_bytes: int = 2 * 1024 * 1024
    backup_count: int = 5
    access_level: int = logging.WARNING
    secrets: tuple[str, ...] = ()


class SecretRedactionFilter(logging.Filter):
    """Replace known secret values in rendered log messages."""

    def __init__(self, secrets: Iterable[str]) -> None:
        super().__init__()
        self._secrets = tuple(secret for secret in secrets if secret)

    def filter(self, record: logging.LogRecord) -> bool:
        if not self._secrets:
            return True
        message = record.getMessage()
        redacted = message
        for secret in self._secrets:
            redacted = redacted.replace(secret, REDACTED)
        if redacted != message:
            record.msg = redacted
            record.args = ()
        return True


def _int_env(name: str, default: int, *, minimum: int, maximum: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return max(minimum, min(maximum, value))


def _level(raw: str | None, default: int) -> int:
    value = getattr(logging, (raw or "").strip().upper(), None)
    return value if isinstance(value, int) else default


def load_logging_settings(*, level: str | None = None) -> LoggingSettings:
    """Read ``TEXT_ESSENCE_LOG_*`` variables; an explicit ``level`` wins over the env."""
    raw_path = os.environ.get("TEXT_ESSENCE_LOG_PATH", "").strip()
    if raw_path.lower() in _FILE_LOG_DISABLED:
        log_path: Path | None = None
    else:
        log_path = Path(raw_path or DEFAULT_LOG_PATH)
    return LoggingSettings(
        level=_level(level or os.environ.get("TEXT_ESSENCE_LOG_LEVEL"), logging.INFO),
        log_path=log_path,
        max_bytes=_int_env(
            "TEXT_ESSENCE_LOG_MAX_BYTES",
            2 * 1024 * 1024,
            minimum=64 * 1024,
            maximum=100 * 1024 * 1024,
        ),
        backup_count=_int_env("TEXT_ESSENCE_LOG_BACKUP_COUNT", 5, minimum=1, maximum=120),
        access_level=_level(os.environ.get("TEXT_ESSENCE_ACCESS_LOG_LEVEL"), logging.WARNING),
        secrets=tuple(
            value
            for value in (os.environ.get(name, "").strip() for name in _SECRET_ENV_VARS)
            if value
        ),
    )


def configure_runtime_logging(settings: LoggingSettings | None = None) -> None:
    """Install root handlers once per process."""
    global _CONFIGURED
    if _CONFIGURED:
        return

    effective = settings or load_logging_settings()
    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if effective.log_path is not None:
        effective.log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                filename=effective.log_path,
                maxBytes=effective.max_bytes,
                backupCount=effective.backup_count,
                encoding="utf-8",
            )
        )

    redaction = SecretRedactionFilter(effective.secrets)
    root = logging.getLogger()
    root.setLevel(effective.level)
    root.handlers.clear()
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(redaction)
        root.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(effective.access_level)
    # httpx logs full request URLs at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)

    _CONFIGURED = True
