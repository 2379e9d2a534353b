"""Environment-driven settings for the relay, transport, and client CLIs."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final, Literal

ProviderName = Literal["openrouter", "openai", "custom"]

DEFAULT_PROVIDER: Final[ProviderName] = "openrouter"
DEFAULT_APP_TITLE: Final[str] = "Суть."
DEFAULT_TIMEOUT_SECONDS: Final[float] = 60.0
DEFAULT_CONFIG_DB_PATH: Final[Path] = Path("work/local/text_essence.db")
DEFAULT_API_URL: Final[str] = "http://127.0.0.1:8000"
_TRUE_VALUES: Final[set[str]] = {"1", "true", "yes", "on"}
_FALSE_VALUES: Final[set[str]] = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class RelaySettings:
    """Resolved runtime settings; ``api_key`` never leaves the server process."""

    api_key: str = ""
    provider: ProviderName = DEFAULT_PROVIDER
    upstream_url: str = ""
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    json_mode: bool | None = None
    app_title: str = DEFAULT_APP_TITLE
    cors_origins: tuple[str, ...] = ("*",)

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)


def load_relay_settings() -> RelaySettings:
    """Read relay settings from ``TEXT_ESSENCE_*`` variables."""
    api_key = (
        os.environ.get("TEXT_ESSENCE_API_KEY", "").strip()
        or os.environ.get("OPENROUTER_API_KEY", "").strip()
    )
    return RelaySettings(
        api_key=api_key,
        provider=_provider_env("TEXT_ESSENCE_PROVIDER"),
        upstream_url=os.environ.get("TEXT_ESSENCE_UPSTREAM_URL", "").strip(),
        timeout_seconds=_float_env(
            "TEXT_ESSENCE_UPSTREAM_TIMEOUT_SECONDS",
            DEFAULT_TIMEOUT_SECONDS,
            minimum=1.0,
            maximum=600.0,
        ),
        json_mode=_optional_bool_env("TEXT_ESSENCE_JSON_MODE"),
        app_title=os.environ.get("TEXT_ESSENCE_APP_TITLE", "").strip() or DEFAULT_APP_TITLE,
        cors_origins=_cors_origins(),
    )


def resolve_config_db_path(db_path: Path | None = None) -> Path:
    """Resolve config DB path from explicit arg, env var, then default path."""
    if db_path is not None:
        return db_path
    env_value = os.environ.get("TEXT_ESSENCE_CONFIG_DB_PATH", "").strip()
    if env_value:
        return Path(env_value)
    return DEFAULT_CONFIG_DB_PATH


def resolve_api_url(api_url: str = "") -> str:
    if api_url.strip():
        return api_url.strip()
    return os.environ.get("TEXT_ESSENCE_API_URL", "").strip() or DEFAULT_API_URL


def _cors_origins() -> tuple[str, ...]:
    raw = os.environ.get("TEXT_ESSENCE_CORS_ORIGINS", "").strip()
    if raw:
        origins = tuple(origin.strip() for origin in raw.split(",") if origin.strip())
        if origins:
            return origins
    return ("*",)


def _provider_env(name: str) -> ProviderName:
    raw = os.environ.get(name, "").strip().lower()
    if raw == "openai":
        return "openai"
    if raw == "custom":
        return "custom"
    return DEFAULT_PROVIDER


def _float_env(name: str, default: float, *, minimum: float, maximum: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return max(minimum, min(maximum, value))


def _optional_bool_env(name: str) -> bool | None:
    raw = os.environ.get(name, "").strip().lower()
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    return None
