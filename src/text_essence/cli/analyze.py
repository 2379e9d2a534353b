"""CLI for analyzing text through the relay or directly against the upstream endpoint."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from text_essence.adapters.chat_transport import HttpxChatTransport, resolve_transport_config
from text_essence.adapters.observability import configure_runtime_logging
from text_essence.adapters.relay_settings import (
    load_relay_settings,
    resolve_api_url,
    resolve_config_db_path,
)
from text_essence.adapters.sqlite_config_store import SQLiteConfigPersistence
from text_essence.api.python_interface import AnalyzerApiClient
from text_essence.core.analysis_adapter import AnalysisAdapter
from text_essence.core.config_store import ConfigStore
from text_essence.core.presentation import AnalysisSession, format_clipboard_text
from text_essence.domain.ports import TextAnalyzer


def build_arg_parser() -> argparse.ArgumentParser:
    """Define CLI flags for one analysis run."""
    parser = argparse.ArgumentParser(description="Summarize text with the configured model.")
    parser.add_argument(
        "--input",
        default="-",
        help="Path to a UTF-8 text file, or '-' to read stdin (default).",
    )
    parser.add_argument("--api-url", default="", help="Relay base URL (default: env or local).")
    parser.add_argument(
        "--direct",
        action="store_true",
        help="Call the upstream endpoint in-process using TEXT_ESSENCE_* settings.",
    )
    parser.add_argument("--db-path", default="", help="SQLite path for saved settings.")
    parser.add_argument("--json", action="store_true", help="Print the full result as JSON.")
    return parser


def read_input_text(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def build_analyzer(*, direct: bool, api_url: str) -> TextAnalyzer:
    if direct:
        settings = load_relay_settings()
        transport = HttpxChatTransport(
            resolve_transport_config(settings),
            api_key=settings.api_key,
        )
        return AnalysisAdapter(transport)
    return AnalyzerApiClient(api_base_url=resolve_api_url(api_url))


def main(argv: list[str] | None = None) -> int:
    """Analyze one text and print the copy-ready summary."""
    configure_runtime_logging()
    parsed = build_arg_parser().parse_args(argv)
    db_path = str(parsed.db_path).strip()
    store = ConfigStore(
        SQLiteConfigPersistence(resolve_config_db_path(Path(db_path) if db_path else None))
    )
    session = AnalysisSession(
        build_analyzer(direct=bool(parsed.direct), api_url=str(parsed.api_url)),
        store,
    )

    text = read_input_text(str(parsed.input))
    if not session.can_submit(text):
        print("Nothing to analyze: input text is empty.", file=sys.stderr)
        return 2

    state = asyncio.run(session.submit(text))
    if state.status == "error" or state.result is None:
        print(state.error or "Analysis failed.", file=sys.stderr)
        return 1
    if parsed.json:
        print(json.dumps(state.result.to_json_dict(), ensure_ascii=False, indent=2))
    else:
        print(format_clipboard_text(state.result))
        print()
        print(f"Тон: {state.result.tone}")
        print(f"Время чтения: {state.result.reading_time}")
        if state.result.keywords:
            print("Ключевые слова: " + ", ".join(state.result.keywords))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
