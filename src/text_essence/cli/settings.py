"""CLI for viewing, editing, and trying out the persisted analysis settings."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from text_essence.adapters.observability import configure_runtime_logging
from text_essence.adapters.relay_settings import resolve_api_url, resolve_config_db_path
from text_essence.adapters.sqlite_config_store import SQLiteConfigPersistence
from text_essence.api.python_interface import AnalyzerApiClient
from text_essence.core.config_store import ConfigStore
from text_essence.core.presentation import SettingsEditor


def _draft_flags() -> argparse.ArgumentParser:
    flags = argparse.ArgumentParser(add_help=False)
    flags.add_argument("--system-instruction", default=None)
    flags.add_argument("--system-instruction-file", default=None)
    flags.add_argument("--model", default=None)
    flags.add_argument("--temperature", type=float, default=None)
    flags.add_argument(
        "--response-schema-file",
        default=None,
        help="Path to a JSON schema document (stored as text, not validated).",
    )
    return flags


def build_arg_parser() -> argparse.ArgumentParser:
    """Define subcommands for settings inspection, edits, and test runs."""
    parser = argparse.ArgumentParser(description="Show, edit, test, or reset analysis settings.")
    parser.add_argument("--db-path", default="", help="SQLite path for saved settings.")
    parser.add_argument("--password", default="", help="Settings password (cosmetic gate).")
    parser.add_argument("--api-url", default="", help="Relay base URL used by `test`.")
    subcommands = parser.add_subparsers(dest="command", required=True)

    subcommands.add_parser("show", help="Print the current settings as JSON.")
    subcommands.add_parser(
        "set",
        parents=[_draft_flags()],
        help="Change one or more settings and save.",
    )
    test_parser = subcommands.add_parser(
        "test",
        parents=[_draft_flags()],
        help="Analyze sample text with unsaved changes applied.",
    )
    test_parser.add_argument(
        "--text",
        default="SpaceX запустила ракету Starship в тестовый полет.",
        help="Sample text to analyze.",
    )
    subcommands.add_parser("reset", help="Delete saved settings and restore defaults.")
    return parser


def _draft_changes(parsed: argparse.Namespace) -> dict[str, object]:
    changes: dict[str, object] = {}
    if parsed.system_instruction_file:
        changes["system_instruction"] = Path(parsed.system_instruction_file).read_text(
            encoding="utf-8"
        )
    elif parsed.system_instruction is not None:
        changes["system_instruction"] = parsed.system_instruction
    if parsed.model is not None:
        changes["model"] = parsed.model
    if parsed.temperature is not None:
        changes["temperature"] = parsed.temperature
    if parsed.response_schema_file:
        changes["response_schema"] = Path(parsed.response_schema_file).read_text(encoding="utf-8")
    return changes


def main(argv: list[str] | None = None) -> int:
    configure_runtime_logging()
    parsed = build_arg_parser().parse_args(argv)
    db_path = str(parsed.db_path).strip()
    store = ConfigStore(
        SQLiteConfigPersistence(resolve_config_db_path(Path(db_path) if db_path else None))
    )

    if parsed.command == "show":
        print(json.dumps(store.get().to_json_dict(), ensure_ascii=False, indent=2))
        return 0

    editor = SettingsEditor(
        store,
        AnalyzerApiClient(api_base_url=resolve_api_url(str(parsed.api_url))),
    )
    if not editor.unlock(str(parsed.password)):
        print("Wrong settings password.", file=sys.stderr)
        return 1

    if parsed.command == "reset":
        editor.reset()
        print("Settings reset to defaults.")
        return 0

    changes = _draft_changes(parsed)
    if parsed.command == "set" and not changes:
        print("No changes given.", file=sys.stderr)
        return 2
    try:
        for field, value in changes.items():
            editor.change(field, value)
    except ValueError as exc:
        print(f"Invalid setting: {exc}", file=sys.stderr)
        return 2

    if parsed.command == "test":
        state = asyncio.run(editor.run_test(str(parsed.text)))
        if state.result is None:
            print(state.error or "Analysis failed.", file=sys.stderr)
            return 1
        print(json.dumps(state.result.to_json_dict(), ensure_ascii=False, indent=2))
        return 0

    saved = editor.save()
    print(json.dumps(saved.to_json_dict(), ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
