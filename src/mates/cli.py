"""Command-line interface for mates.

This module provides the main entry point for the CLI application.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable, Iterator

import structlog
from pydantic import ValidationError

from mates import __version__
from mates.config import Settings, get_settings
from mates.contacts import ContactStore
from mates.edit import EditOutcome, edit_contact
from mates.exceptions import MatesError
from mates.index import IndexQueryEngine, append_to_index, build_index
from mates.ingest import add_contact

logger = structlog.get_logger()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mates",
        description="Manage a directory of vCard contacts and a searchable index.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("help", help="Show this help message")
    subparsers.add_parser("index", help="Rewrite/create the index")

    query_help = {
        "mutt-query": "Search for contact, output is usable for mutt's query_command",
        "file-query": "Search for contact, return just the filename",
        "email-query": 'Search for contact, return "name <email>"',
    }
    for command, help_text in query_help.items():
        query_parser = subparsers.add_parser(command, help=help_text)
        query_parser.add_argument("query", nargs="?", default="", help="Search term")

    subparsers.add_parser("add", help="Take mail from stdin, add sender to contacts. Print filename")

    edit_parser = subparsers.add_parser(
        "edit",
        help=(
            "Open contact (given by filepath or search-string) in $MATES_EDITOR. "
            "If the file is cleared, the contact is removed"
        ),
    )
    edit_parser.add_argument("query", nargs="?", default="", help="Contact file name or search term")

    return parser


def _configure_logging(settings: Settings) -> None:
    # stdout carries query results, so logs go to stderr.
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def _cmd_index(settings: Settings) -> int:
    print(f'Rebuilding index file "{settings.index_path}"...')
    result = build_index(settings.index_path, settings.vdir_path, settings.contact_extension)
    for _, message in result.errors:
        print(message, file=sys.stderr)
    if not result.ok:
        print(
            f"Failed to build index: {len(result.errors)} errors happened while generating the index.",
            file=sys.stderr,
        )
        return 1
    return 0


def _print_lines(lines: Iterator[str]) -> int:
    for line in lines:
        print(line)
    return 0


def _cmd_mutt_query(settings: Settings, query: str) -> int:
    lines = IndexQueryEngine(settings).mutt_query(query)
    # mutt skips the first line of query_command output.
    print("")
    return _print_lines(lines)


def _cmd_file_query(settings: Settings, query: str) -> int:
    return _print_lines(IndexQueryEngine(settings).file_query(query))


def _cmd_email_query(settings: Settings, query: str) -> int:
    return _print_lines(IndexQueryEngine(settings).email_query(query))


def _cmd_add(settings: Settings) -> int:
    store = ContactStore(settings.vdir_path, settings.contact_extension)
    contact = add_contact(store, sys.stdin)
    print(contact.path)
    append_to_index(settings.index_path, contact)
    return 0


def _cmd_edit(settings: Settings, query: str) -> int:
    _, outcome = edit_contact(settings, query)
    if outcome is EditOutcome.REMOVED:
        print("Contact emptied, file removed.")
    return 0


_QUERY_COMMANDS = frozenset({"mutt-query", "file-query", "email-query", "edit"})


def _quote_query_argument(args: list[str]) -> list[str]:
    """Mark a dash-prefixed search term as positional, e.g. `email-query -smith`."""
    if (
        len(args) >= 2
        and args[0] in _QUERY_COMMANDS
        and args[1].startswith("-")
        and args[1] not in ("-h", "--help", "--")
    ):
        return [args[0], "--", *args[1:]]
    return args


_ERROR_CONTEXT = {
    "index": "Failed to build index",
    "mutt-query": "Failed to execute grep",
    "file-query": "Failed to execute grep",
    "email-query": "Failed to execute grep",
    "add": "Failed to add contact",
    "edit": "Failed to edit contact",
}


def main(args: list[str] | None = None) -> int:
    """Main entry point for the mates CLI.

    Args:
        args: Command-line arguments. If None, uses sys.argv.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    if args is None:
        args = sys.argv[1:]

    parser = _build_parser()
    parsed = parser.parse_args(_quote_query_argument(list(args)))

    if parsed.command == "help":
        parser.print_help()
        return 0

    try:
        settings = get_settings()
    except ValidationError as exc:
        details = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        print(f"Error while reading configuration: {details}", file=sys.stderr)
        return 1

    _configure_logging(settings)
    logger.debug("mates_started", version=__version__, command=parsed.command)

    handlers: dict[str, Callable[[], int]] = {
        "index": lambda: _cmd_index(settings),
        "mutt-query": lambda: _cmd_mutt_query(settings, parsed.query),
        "file-query": lambda: _cmd_file_query(settings, parsed.query),
        "email-query": lambda: _cmd_email_query(settings, parsed.query),
        "add": lambda: _cmd_add(settings),
        "edit": lambda: _cmd_edit(settings, parsed.query),
    }
    handler = handlers.get(parsed.command)
    if handler is None:
        logger.error("unknown_command", command=parsed.command)
        return 2

    try:
        return handler()
    except MatesError as exc:
        logger.debug("command_failed", command=parsed.command, error_type=type(exc).__name__)
        print(f"{_ERROR_CONTEXT[parsed.command]}: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
