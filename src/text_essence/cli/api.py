"""CLI entrypoint for serving the text_essence relay API."""

from __future__ import annotations

import argparse
import os

import uvicorn

from text_essence.adapters.observability import configure_runtime_logging, load_logging_settings


def build_arg_parser() -> argparse.ArgumentParser:
    """Create CLI args for the relay server process."""
    parser = argparse.ArgumentParser(description="Serve the text_essence analysis relay.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--reload", action="store_true")
    parser.add_argument(
        "--provider",
        choices=("openrouter", "openai", "custom"),
        default=None,
        help="Upstream preset (overrides TEXT_ESSENCE_PROVIDER).",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Root log level (overrides TEXT_ESSENCE_LOG_LEVEL).",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse CLI flags and start uvicorn with the app module path."""
    parsed = build_arg_parser().parse_args(argv)
    configure_runtime_logging(load_logging_settings(level=parsed.log_level))
    if parsed.provider:
        # The app module reads its settings from the environment at import time.
        os.environ["TEXT_ESSENCE_PROVIDER"] = str(parsed.provider)
    uvicorn.run(
        "text_essence.api.app:app",
        host=str(parsed.host),
        port=int(parsed.port),
        reload=bool(parsed.reload),
    )


if __name__ == "__main__":
    main()
