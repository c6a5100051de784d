"""jot command line - main entry point."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence, TextIO

from loguru import logger

from . import __version__
from .config import JotConfig, load_config
from .engine import JotEngine, parse_date
from .errors import JotError, TemplateNotFoundError
from .log import configure_logging
from .watcher import DEFAULT_POLL_INTERVAL, DirectoryWatcher

PROMPT = "jot › what’s on your mind? "
PATTERNS_MESSAGE = "patterns are coming. keep noticing."


class JotArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that exits 1 on usage errors, like every other jot failure."""

    def error(self, message: str) -> None:  # type: ignore[override]
        self.print_usage(sys.stderr)
        self.exit(1, f"jot: {message}\n")


def _date_arg(value: str):
    try:
        return parse_date(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive number, got {number}")
    return number


def build_parser() -> JotArgumentParser:
    parser = JotArgumentParser(
        prog="jot",
        description="jot - a tiny timestamped journal for your terminal",
    )
    parser.add_argument("--version", action="version", version=f"jot {__version__}")
    parser.add_argument(
        "--log-level",
        help="Log level for diagnostics on stderr (default: WARNING or JOT_LOG_LEVEL)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config file (default: ~/.jot/config.toml or config.json)",
    )

    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    sub.add_parser("init", help="Prompt for a note and append it (the default)")

    add = sub.add_parser("add", help="Append TEXT as a note")
    add.add_argument("text", nargs="+", help="Note text")

    sub.add_parser("edit", help="Write a note in your editor")

    sub.add_parser("list", help="Print the journal")

    search = sub.add_parser("search", help="Search notes (AND/OR/NOT, \"phrases\", parentheses)")
    search.add_argument("query", nargs="*", help="Query terms")
    search.add_argument("--tag", action="append", default=[], help="Require #TAG (repeatable)")
    search.add_argument("--since", type=_date_arg, help="Only entries on or after YYYY-MM-DD")
    search.add_argument("--until", type=_date_arg, help="Only entries on or before YYYY-MM-DD")
    search.add_argument("--project", help="Only entries tagged project:NAME or repo:NAME")

    sub.add_parser("index", help="Build or refresh the search index")

    related = sub.add_parser("related", help="Show notes related to entry N")
    related.add_argument("entry", type=_positive_int, help="Line number of the entry")
    related.add_argument("--limit", type=_positive_int, default=5, help="Maximum results (default: 5)")

    pick = sub.add_parser("pick", help="Fuzzy-find a note")
    pick.add_argument("query", nargs="*", help="Fuzzy query")
    pick.add_argument("--limit", type=_positive_int, default=20, help="Maximum results (default: 20)")

    link = sub.add_parser("link", help="Attach URL to the latest note")
    link.add_argument("url", help="http(s) URL")

    links = sub.add_parser("links", help="List attached links")
    links.add_argument("--timestamp", help="Only links for this note timestamp")

    new = sub.add_parser("new", help="Print a note template")
    new.add_argument("-t", "--template", help="Template name")

    sub.add_parser("templates", help="List available templates")

    watch = sub.add_parser("watch", help="Print file changes under DIR")
    watch.add_argument("directory", type=Path, help="Directory to watch")
    watch.add_argument(
        "--interval",
        type=float,
        default=DEFAULT_POLL_INTERVAL,
        help=f"Seconds between polls (default: {DEFAULT_POLL_INTERVAL})",
    )

    migrate = sub.add_parser("migrate", help="Export the journal as NDJSON")
    migrate.add_argument("--in", dest="input", type=Path, help="Journal to read (default: ~/.jot/journal.txt)")
    migrate.add_argument("--out", dest="output", type=Path, help="Output file (default: ~/.jot/journal.ndjson)")
    migrate.add_argument("--force", action="store_true", help="Overwrite the output file if it exists")

    sub.add_parser("patterns", help=argparse.SUPPRESS)

    return parser


# ========== Commands ==========

def cmd_init(engine: JotEngine, stdin: TextIO, stdout: TextIO) -> int:
    stdout.write(PROMPT)
    stdout.flush()
    line = stdin.readline()
    engine.capture(line)
    return 0


def cmd_list(engine: JotEngine, stdout: TextIO) -> int:
    path = engine.journal_path()
    with open(path, "r", encoding="utf-8", errors="replace", newline="") as f:
        for line in f:
            stdout.write(line)
    return 0


def cmd_search(engine: JotEngine, args: argparse.Namespace, stdout: TextIO) -> int:
    results = engine.search(
        " ".join(args.query),
        tags=args.tag,
        since=args.since,
        until=args.until,
        project=args.project,
    )
    for entry in results:
        stdout.write(entry.raw + "\n")
    return 0


def cmd_related(engine: JotEngine, args: argparse.Namespace, stdout: TextIO) -> int:
    for entry, note in engine.related(args.entry, limit=args.limit):
        stdout.write(f"{note.score:.3f}  {entry.line_number}: {entry.raw}\n")
    return 0


def cmd_pick(engine: JotEngine, args: argparse.Namespace, stdin: TextIO, stdout: TextIO) -> int:
    ranked = engine.pick(" ".join(args.query))[: args.limit]
    for i, scored in enumerate(ranked, start=1):
        stdout.write(f"{i:>3}) {scored.note.line}: {scored.note.text}\n")

    if not ranked or not stdin.isatty():
        return 0

    stdout.write("pick › ")
    stdout.flush()
    choice = stdin.readline().strip()
    if not choice:
        return 0
    if not choice.isdecimal() or not 1 <= int(choice) <= len(ranked):
        raise JotError(f"invalid choice {choice!r}")
    picked = ranked[int(choice) - 1]
    stdout.write(engine.get_entry(picked.note.line).raw + "\n")
    return 0


def cmd_links(engine: JotEngine, args: argparse.Namespace, stdout: TextIO) -> int:
    for link in engine.list_links(args.timestamp):
        stdout.write(f"[{link.note_timestamp}]  {link.url}\n")
    return 0


def cmd_new(engine: JotEngine, args: argparse.Namespace, stdout: TextIO) -> int:
    if not args.template:
        raise TemplateNotFoundError("template required: use --template <name>")
    stdout.write(engine.template(args.template))
    return 0


def cmd_watch(args: argparse.Namespace, stdout: TextIO) -> int:
    watcher = DirectoryWatcher(args.directory)
    handle = watcher.start(interval=args.interval)
    try:
        for event in handle:
            stdout.write(f"{event}\n")
            stdout.flush()
    except KeyboardInterrupt:
        handle.stop()
        return 0

    err = handle.error()
    if err is not None:
        raise err
    return 0


def run(
    args: argparse.Namespace,
    config: JotConfig,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
) -> int:
    """Dispatch a parsed command line."""
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    engine = JotEngine(config)
    command = args.command or "init"

    if command == "init":
        return cmd_init(engine, stdin, stdout)
    if command == "add":
        engine.capture(" ".join(args.text))
        return 0
    if command == "edit":
        engine.capture_from_editor()
        return 0
    if command == "list":
        return cmd_list(engine, stdout)
    if command == "search":
        return cmd_search(engine, args, stdout)
    if command == "index":
        stats = engine.update_index()
        stdout.write(
            f"indexed {stats.total_lines} lines "
            f"({stats.reindexed_lines} reindexed, {stats.reused_lines} reused)\n"
        )
        return 0
    if command == "related":
        return cmd_related(engine, args, stdout)
    if command == "pick":
        return cmd_pick(engine, args, stdin, stdout)
    if command == "link":
        link = engine.link(args.url)
        stdout.write(f"linked {link.url} to [{link.note_timestamp}]\n")
        return 0
    if command == "links":
        return cmd_links(engine, args, stdout)
    if command == "new":
        return cmd_new(engine, args, stdout)
    if command == "templates":
        for name in engine.templates():
            stdout.write(name + "\n")
        return 0
    if command == "watch":
        return cmd_watch(args, stdout)
    if command == "migrate":
        target, count = engine.migrate(output_path=args.output, journal_path=args.input, force=args.force)
        stdout.write(f"wrote {count} entries to {target}\n")
        return 0
    if command == "patterns":
        stdout.write(PATTERNS_MESSAGE + "\n")
        return 0

    raise JotError(f"unknown command: {command}")  # pragma: no cover


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(config_path=args.config)
    except Exception as e:
        print(f"jot: error loading config: {e}", file=sys.stderr)
        return 1

    try:
        configure_logging(config, level=args.log_level)
    except (OSError, ValueError) as e:
        print(f"jot: error configuring logging: {e}", file=sys.stderr)
        return 1

    try:
        return run(args, config)
    except (JotError, OSError, ValueError) as e:
        logger.debug("command {} failed: {!r}", args.command, e)
        print(f"jot: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
