"""Core jot engine - ties the journal, search index, and link store together."""

from __future__ import annotations

import re
from datetime import date, datetime
from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence

from loguru import logger

from .config import JotConfig
from .editor import capture_with_editor, resolve_editor
from .errors import EntryNotFoundError, NoEntryToLinkError, QueryError
from .fuzzy import ScoredNote, fuzzy_rank, notes_from_entries
from .index import JournalIndex, search_index
from .journal import JournalStore
from .links import LinkStore
from .migrate import migrate_to_ndjson
from .models import Entry, LinkMetadata, UpdateStats
from .related import DEFAULT_LIMIT, RelatedNote, related_notes
from .templates import list_templates, load_template

# strptime alone would also take 2024-1-5
DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)


def parse_date(value: str) -> date:
    """Parse a YYYY-MM-DD filter date.

    Raises:
        ValueError: If the value isn't a valid date in that format
    """
    message = f"invalid date {value!r}: expected YYYY-MM-DD"
    if not DATE_PATTERN.fullmatch(value):
        raise ValueError(message)
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise ValueError(message) from None


def filter_entries(
    entries: Iterable[Entry],
    tags: Sequence[str] = (),
    since: Optional[date] = None,
    until: Optional[date] = None,
    project: Optional[str] = None,
) -> list[Entry]:
    """Apply tag/date/project filters.

    Every requested tag must be present. Date bounds are inclusive and
    exclude entries without a timestamp.
    """
    wanted_tags = {t.lstrip("#").casefold() for t in tags if t.lstrip("#")}
    wanted_project = project.casefold() if project else None

    result = []
    for entry in entries:
        if wanted_tags and not wanted_tags <= entry.tags:
            continue
        if since or until:
            if entry.timestamp is None:
                continue
            day = entry.timestamp.date()
            if since and day < since:
                continue
            if until and day > until:
                continue
        if wanted_project and entry.project != wanted_project:
            continue
        result.append(entry)
    return result


class JotEngine:
    """Operations behind every jot command."""

    def __init__(self, config: JotConfig, clock: Callable[[], datetime] = datetime.now):
        self.config = config
        self.store = JournalStore(config.journal_path, clock=clock)
        self.index = JournalIndex(config.journal_path, config.index_path)
        self.links = LinkStore(config.links_path)

    # ========== Capture ==========

    def capture(self, text: str) -> Optional[Entry]:
        """Append a note; returns None for whitespace-only input."""
        return self.store.append(text)

    def capture_from_editor(self, initial: str = "") -> Optional[Entry]:
        """Open the configured editor and append whatever was written."""
        command = resolve_editor(self.config.editor)
        text = capture_with_editor(command, initial=initial)
        return self.store.append(text)

    def journal_path(self) -> Path:
        """Journal path, creating an empty journal if there is none yet."""
        return self.store.ensure()

    # ========== Search ==========

    def update_index(self) -> UpdateStats:
        _, stats = self.index.update()
        return stats

    def search(
        self,
        query: str = "",
        tags: Sequence[str] = (),
        since: Optional[date] = None,
        until: Optional[date] = None,
        project: Optional[str] = None,
    ) -> list[Entry]:
        """Search the journal.

        With a persisted index, the boolean query engine selects lines;
        without one a case-insensitive substring scan is used. Filters
        are applied to the parsed entries either way.

        Raises:
            QueryError: If there is neither a query nor a filter, or the
                query is malformed
        """
        has_filter = bool(tags or since or until or project)
        if not query.strip() and not has_filter:
            raise QueryError("empty query")

        entries = self.store.entries()

        if query.strip():
            if self.index.exists():
                index, _ = self.index.update()
                lines = {hit.line for hit in search_index(index, query)}
                entries = [e for e in entries if e.line_number in lines]
            else:
                logger.debug("no index at {}; falling back to substring scan", self.index.index_path)
                needle = query.strip().lower()
                entries = [e for e in entries if needle in e.raw.lower()]

        return filter_entries(entries, tags=tags, since=since, until=until, project=project)

    def related(self, line: int, limit: int = DEFAULT_LIMIT) -> list[tuple[Entry, RelatedNote]]:
        """Entries most similar to the one on ``line``.

        Raises:
            EntryNotFoundError: If ``line`` is out of range or blank
            NoSearchableContentError: If the entry has no words
        """
        entries = self.store.entries()
        if line < 1:
            raise EntryNotFoundError(f"entry {line} not found")
        by_line = {e.line_number: e for e in entries}
        return [(by_line[note.line], note) for note in related_notes(entries, line, limit)]

    def pick(self, query: str = "") -> list[ScoredNote]:
        """Fuzzy-rank journal notes, best match first."""
        return fuzzy_rank(query, notes_from_entries(self.store.entries()))

    def get_entry(self, line: int) -> Entry:
        entry = self.store.get(line)
        if entry is None or not entry.raw.strip():
            raise EntryNotFoundError(f"entry {line} not found")
        return entry

    # ========== Links ==========

    def link(self, url: str) -> LinkMetadata:
        """Attach a URL to the most recent timestamped entry.

        Raises:
            NoEntryToLinkError: If the journal has no timestamped entry
            InvalidURLError: If the URL fails validation
        """
        stamp = self.store.latest_stamp()
        if not stamp:
            raise NoEntryToLinkError("no journal entry to attach the link to")
        return self.links.add(url, stamp)

    def list_links(self, note_timestamp: Optional[str] = None) -> list[LinkMetadata]:
        if note_timestamp:
            return self.links.for_timestamp(note_timestamp)
        return self.links.all()

    # ========== Templates ==========

    def template(self, name: str) -> str:
        return load_template(name, self.config.templates_dir)

    def templates(self) -> list[str]:
        return list_templates(self.config.templates_dir)

    # ========== Migration ==========

    def migrate(self, output_path: Optional[Path] = None, journal_path: Optional[Path] = None, force: bool = False) -> tuple[Path, int]:
        """Export the journal as NDJSON next to it (journal.ndjson by default)."""
        source = journal_path or self.config.journal_path
        target = output_path or source.with_suffix(".ndjson")
        return target, migrate_to_ndjson(source, target, force=force)
