"""Command line interface for the haiku assistant."""
from __future__ import annotations

import argparse
import asyncio
import logging
import os
import random
import re
from datetime import date
from pathlib import Path
from typing import List, Optional

from tabulate import tabulate
from tqdm import tqdm

from .completion import OpenRouterClient, available_models
from .config import RECOMMENDED_MODELS, Settings, load_settings
from .database import HistoryDatabase
from .demo import demo_haiku
from .generator import DEFAULT_MAX_RETRIES, HaikuGenerator
from .models import CUSTOM_THEME, GenerationRequest, HaikuCandidate, HaikuRecord
from .syllables import count_line, line_breakdown
from .themes import SUGGESTED_THEMES
from .validation import TARGET_COUNTS, format_counts, line_status, validate

LOGGER = logging.getLogger("haiku_assistant")

DATABASE_ENV = "HAIKU_ASSISTANT_DB"
DATABASE_NAME = "haiku_assistant.db"
SETTING_KEYS = ("api_key", "model")

_STANZA_BREAK = re.compile(r"\n\s*\n")


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _default_database_path() -> Path:
    """Environment override, then a local database, then the XDG data directory."""

    override = os.environ.get(DATABASE_ENV)
    if override:
        return Path(override)
    local = Path.cwd() / DATABASE_NAME
    if local.exists():
        return local
    xdg = os.environ.get("XDG_DATA_HOME")
    data_home = Path(xdg) if xdg else Path.home() / ".local" / "share"
    return data_home / "haiku_assistant" / DATABASE_NAME


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="French haiku generator (5-7-5)")
    parser.add_argument("--database", help="SQLite history database path")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser("generate", help="Generate a haiku with the completion API")
    _add_request_arguments(generate_parser)
    generate_parser.add_argument("--retries", type=int, default=DEFAULT_MAX_RETRIES, help="Extra attempts allowed")
    generate_parser.add_argument("--model", help="Model identifier to use")
    generate_parser.add_argument("--api-key", help="OpenRouter API key (overrides configuration)")
    generate_parser.add_argument("--demo-on-failure", action="store_true", help="Fall back to a demo haiku")
    generate_parser.add_argument("--no-save", action="store_true", help="Do not record the haiku in history")

    demo_parser = subparsers.add_parser("demo", help="Show a pre-written haiku for a theme")
    _add_request_arguments(demo_parser)
    demo_parser.add_argument("--seed", type=int, help="Random seed")
    demo_parser.add_argument("--no-save", action="store_true", help="Do not record the haiku in history")

    count_parser = subparsers.add_parser("count", help="Count syllables in lines of text")
    count_parser.add_argument("lines", nargs="+", help="Lines to count")
    count_parser.add_argument("--words", action="store_true", help="Show the count of every word")

    check_parser = subparsers.add_parser("check", help="Validate haiku from a text file")
    check_parser.add_argument("file", help="File with haiku separated by blank lines")

    history_parser = subparsers.add_parser("history", help="List or manage saved haiku")
    history_parser.add_argument("--theme", help="Only haiku whose theme contains this text")
    history_parser.add_argument("--keyword", help="Only haiku with a keyword containing this text")
    history_parser.add_argument("--limit", type=int, default=10, help="Maximum number of entries")
    history_parser.add_argument("--remove", metavar="ID", help="Delete one entry")
    history_parser.add_argument("--clear", action="store_true", help="Delete every entry")
    history_parser.add_argument("--recent-keywords", action="store_true", help="List recently used keywords")
    history_parser.add_argument("--recent-themes", action="store_true", help="List recently used themes")

    export_parser = subparsers.add_parser("export", help="Write a saved haiku to a text file")
    export_parser.add_argument("id", help="Haiku id (or unique prefix)")
    export_parser.add_argument("--output", help="Destination file")

    subparsers.add_parser("themes", help="List suggested themes")

    models_parser = subparsers.add_parser("models", help="List models suited to creative writing")
    models_parser.add_argument("--api-key", help="OpenRouter API key (overrides configuration)")

    connection_parser = subparsers.add_parser("test-connection", help="Check the API key and model")
    connection_parser.add_argument("--model", help="Model identifier to use")
    connection_parser.add_argument("--api-key", help="OpenRouter API key (overrides configuration)")

    config_parser = subparsers.add_parser("config", help="Show or change stored settings")
    config_parser.add_argument("action", choices=["show", "set", "unset"])
    config_parser.add_argument("key", nargs="?", choices=SETTING_KEYS)
    config_parser.add_argument("value", nargs="?")

    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if args.command == "count":
        _print_counts(args.lines, args.words)
        return
    if args.command == "check":
        path = Path(args.file)
        if not path.exists():
            parser.error(f"File {path} does not exist")
        _check_file(path)
        return
    if args.command == "themes":
        rows = [[theme.id, theme.name, theme.description] for theme in SUGGESTED_THEMES]
        print(tabulate(rows, headers=["Id", "Theme", "Description"]))
        return

    db_path = Path(args.database) if args.database else _default_database_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)
    db = HistoryDatabase(db_path)
    db.initialize()
    try:
        _run_command(parser, args, db)
    finally:
        db.close()


def _add_request_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("keywords", nargs="+", help="Keywords (1 to 5, comma separated or repeated)")
    parser.add_argument("--theme", default="Nature", help="Suggested theme id or name")
    parser.add_argument("--custom-theme", help="Free text theme (3 to 200 characters)")


def _run_command(parser: argparse.ArgumentParser, args: argparse.Namespace, db: HistoryDatabase) -> None:
    if args.command == "generate":
        settings = _resolve_settings(db, args.api_key, args.model)
        request = _build_request(args)
        generator = HaikuGenerator(settings)
        outcome = asyncio.run(generator.generate(request, max_retries=max(0, args.retries)))
        if outcome.accepted and outcome.candidate is not None:
            _print_haiku(outcome.candidate)
            if not args.no_save:
                record = db.add(outcome.candidate.lines, request.resolved_theme, request.keywords, outcome.counts)
                LOGGER.info("Saved haiku %s", record.id)
            return
        if outcome.candidate is not None:
            print("Dernière tentative (rejetée):")
            _print_haiku(outcome.candidate)
        if args.demo_on_failure:
            LOGGER.warning("%s; using a demo haiku", outcome.error)
            _show_demo(db, request, save=not args.no_save)
            return
        parser.exit(1, f"error: {outcome.error}\n")
    elif args.command == "demo":
        request = _build_request(args)
        _show_demo(db, request, save=not args.no_save, rng=random.Random(args.seed))
    elif args.command == "history":
        _history(parser, args, db)
    elif args.command == "export":
        record = _find_record(parser, db, args.id)
        output = Path(args.output) if args.output else Path(f"haiku-{date.today().isoformat()}.txt")
        output.write_text(record.as_text() + "\n", encoding="utf8")
        print(f"Exported {record.id} to {output}")
    elif args.command == "models":
        settings = _resolve_settings(db, args.api_key, None)
        if settings.configured:
            models = asyncio.run(available_models(OpenRouterClient(settings)))
        else:
            LOGGER.warning("No API key configured; showing recommended models")
            models = list(RECOMMENDED_MODELS)
        for model in models:
            marker = "*" if model == settings.model else " "
            print(f"{marker} {model}")
    elif args.command == "test-connection":
        settings = _resolve_settings(db, args.api_key, args.model)
        success, error = asyncio.run(HaikuGenerator(settings).test_connection())
        if success:
            print(f"Connection OK ({settings.model})")
        else:
            parser.exit(1, f"error: {error}\n")
    elif args.command == "config":
        _config(parser, args, db)


def _resolve_settings(db: HistoryDatabase, api_key: Optional[str], model: Optional[str]) -> Settings:
    """Environment first, then stored settings, then command line flags."""

    settings = load_settings()
    settings = settings.with_overrides(api_key=db.get_setting("api_key"), model=db.get_setting("model"))
    return settings.with_overrides(api_key=api_key, model=model)


def _split_keywords(values: List[str]) -> List[str]:
    keywords: List[str] = []
    for value in values:
        for keyword in value.split(","):
            keyword = keyword.strip()
            if keyword and keyword not in keywords:
                keywords.append(keyword)
    return keywords


def _build_request(args: argparse.Namespace) -> GenerationRequest:
    keywords = _split_keywords(args.keywords)
    if args.custom_theme:
        return GenerationRequest(theme=CUSTOM_THEME, keywords=keywords, custom_theme=args.custom_theme)
    return GenerationRequest(theme=args.theme, keywords=keywords)


def _print_haiku(candidate: HaikuCandidate) -> None:
    result = validate(candidate)
    for line, expected, actual in zip(candidate.lines, TARGET_COUNTS, result.counts):
        status = line_status(expected, actual)
        print(f"  {line}  ({status.count} {status.indicator})")
    print(f"Syllabes: {format_counts(result.counts)}")


def _show_demo(
    db: HistoryDatabase, request: GenerationRequest, save: bool, rng: Optional[random.Random] = None
) -> None:
    candidate = demo_haiku(request, rng)
    _print_haiku(candidate)
    if save:
        counts = validate(candidate).counts
        theme = request.resolved_theme or "Personnalisé"
        record = db.add(candidate.lines, theme, request.keywords, counts)
        LOGGER.info("Saved demo haiku %s", record.id)


def _print_counts(lines: List[str], words: bool) -> None:
    rows = []
    for line in lines:
        if words:
            detail = " ".join(f"{token}({count})" for token, count in line_breakdown(line))
            rows.append([line, count_line(line), detail])
        else:
            rows.append([line, count_line(line)])
    headers = ["Line", "Syllables", "Words"] if words else ["Line", "Syllables"]
    print(tabulate(rows, headers=headers))


def _check_file(path: Path) -> None:
    text = path.read_text(encoding="utf8")
    stanzas = [stanza for stanza in _STANZA_BREAK.split(text.strip()) if stanza.strip()]
    rows = []
    valid = 0
    for index, stanza in enumerate(tqdm(stanzas, desc="Validation"), start=1):
        lines = [line.strip() for line in stanza.splitlines() if line.strip()]
        if len(lines) != 3:
            rows.append([index, lines[0], "-", f"{len(lines)} lignes"])
            continue
        result = validate(HaikuCandidate.from_lines(lines))
        if result.valid:
            valid += 1
        status = "ok" if result.valid else "; ".join(result.errors)
        rows.append([index, lines[0], format_counts(result.counts), status])
    print(tabulate(rows, headers=["#", "First line", "Counts", "Status"]))
    print(f"{valid}/{len(stanzas)} valid")


def _history(parser: argparse.ArgumentParser, args: argparse.Namespace, db: HistoryDatabase) -> None:
    if args.clear:
        db.clear()
        print("History cleared")
        return
    if args.remove:
        record = _find_record(parser, db, args.remove)
        db.remove(record.id)
        print(f"Removed {record.id}")
        return
    if args.recent_keywords:
        print("\n".join(db.recent_keywords(args.limit)))
        return
    if args.recent_themes:
        print("\n".join(db.recent_themes(args.limit)))
        return

    if args.theme:
        records = db.find_by_theme(args.theme)
    elif args.keyword:
        records = db.find_by_keyword(args.keyword)
    else:
        records = db.recent()
    records = records[: args.limit]
    if not records:
        print("No haiku saved")
        return
    _print_records(records)


def _print_records(records: List[HaikuRecord]) -> None:
    rows = [
        [
            record.id[:8],
            record.created_at.strftime("%Y-%m-%d %H:%M"),
            record.theme,
            " / ".join(record.lines),
            format_counts(record.syllables),
        ]
        for record in records
    ]
    print(tabulate(rows, headers=["Id", "Created", "Theme", "Haiku", "Syllables"]))


def _find_record(parser: argparse.ArgumentParser, db: HistoryDatabase, haiku_id: str) -> HaikuRecord:
    record = db.get(haiku_id)
    if record is not None:
        return record
    matches = [record for record in db.recent() if record.id.startswith(haiku_id)]
    if len(matches) != 1:
        parser.error(f"No unique haiku matches id {haiku_id!r}")
    return matches[0]


def _config(parser: argparse.ArgumentParser, args: argparse.Namespace, db: HistoryDatabase) -> None:
    if args.action == "show":
        stored = db.settings()
        settings = _resolve_settings(db, None, None)
        if "api_key" in stored:
            key_source = "stored"
        else:
            key_source = "environment" if settings.api_key else "unset"
        rows = [
            ["api_key", _mask(settings.api_key), key_source],
            ["model", settings.model, "stored" if "model" in stored else "default"],
        ]
        print(tabulate(rows, headers=["Key", "Value", "Source"]))
        return
    if not args.key:
        parser.error(f"config {args.action} requires a key")
    if args.action == "set":
        if not args.value:
            parser.error("config set requires a value")
        db.set_setting(args.key, args.value)
        print(f"{args.key} saved")
    else:
        db.delete_setting(args.key)
        print(f"{args.key} removed")


def _mask(secret: str) -> str:
    if not secret:
        return "(not set)"
    return secret[:4] + "…" + secret[-4:] if len(secret) > 8 else "…"


if __name__ == "__main__":  # pragma: no cover
    main()
