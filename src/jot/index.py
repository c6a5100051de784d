"""Incremental JSON search index over the journal.

The journal stays the source of truth; the index is a cache that can be
deleted at any time. Each journal line gets one IndexEntry keyed by the
SHA-1 of the line, so a rebuild only re-tokenizes lines whose content at
that position changed.

Index location: ~/.jot/index.json
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from .journal import JournalStore
from .locking import atomic_write
from .models import INDEX_VERSION, IndexEntry, UpdateStats
from .query import compile_query, evaluate
from .text import unique_terms


def hash_line(line: str) -> str:
    """160-bit content digest of a journal line."""
    return hashlib.sha1(line.encode("utf-8")).hexdigest()


def build_terms(entries: list[IndexEntry]) -> dict[str, list[int]]:
    """Invert entries into term -> ascending 0-based positions."""
    terms: dict[str, list[int]] = {}
    for pos, entry in enumerate(entries):
        for term in entry.terms:
            terms.setdefault(term, []).append(pos)
    return terms


def make_entry(line: str, line_number: int, digest: Optional[str] = None) -> IndexEntry:
    normalized = line.lower()
    return IndexEntry(
        line=line_number,
        text=line,
        hash=digest or hash_line(line),
        terms=unique_terms(normalized),
        normalized=normalized,
    )


@dataclass
class Index:
    """In-memory search index. ``terms`` is derived and never persisted."""
    journal_path: str
    entries: list[IndexEntry] = field(default_factory=list)
    version: int = INDEX_VERSION
    terms: dict[str, list[int]] = field(default_factory=dict)

    def rebuild_terms(self) -> None:
        self.terms = build_terms(self.entries)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "journal_path": self.journal_path,
            "entries": [entry.to_dict() for entry in self.entries],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Index":
        index = cls(
            journal_path=data.get("journal_path", ""),
            entries=[IndexEntry.from_dict(e) for e in data.get("entries") or []],
            version=int(data.get("version", 0)),
        )
        index.rebuild_terms()
        return index


class JournalIndex:
    """Builds, persists, and queries the search index for one journal."""

    def __init__(self, journal_path: Path, index_path: Path):
        """Initialize the journal index.

        Args:
            journal_path: Path to the journal text file
            index_path: Path to the JSON index document
        """
        self.journal_path = journal_path
        self.index_path = index_path

    def exists(self) -> bool:
        return self.index_path.exists()

    def load(self) -> Optional[Index]:
        """Load the persisted index.

        Returns:
            The index, or None when the file is missing or its version
            doesn't match the current format.
        """
        try:
            with open(self.index_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return None

        if data.get("version") != INDEX_VERSION:
            logger.warning(
                "ignoring index {} with version {}", self.index_path, data.get("version")
            )
            return None

        return Index.from_dict(data)

    def write(self, index: Index) -> None:
        """Persist entries (not terms) with mode 0600 in a 0700 directory."""
        with atomic_write(self.index_path) as f:
            json.dump(index.to_dict(), f, separators=(",", ":"))

    def update(self) -> tuple[Index, UpdateStats]:
        """Bring the index up to date with the journal.

        Lines whose hash matches the prior entry at the same position are
        reused as-is; everything else is re-tokenized.

        Returns:
            Tuple of (index, stats)

        Raises:
            OSError: On any I/O failure other than a missing journal
        """
        prior = self.load()
        prior_entries = prior.entries if prior is not None else []
        journal_path = str(self.journal_path.absolute())

        store = JournalStore(self.journal_path)
        if not store.exists():
            index = Index(journal_path=journal_path)
            self.write(index)
            return index, UpdateStats()

        entries: list[IndexEntry] = []
        stats = UpdateStats()

        for line_number, line in store.iter_lines():
            digest = hash_line(line)
            stats.total_lines += 1

            if line_number <= len(prior_entries):
                previous = prior_entries[line_number - 1]
                if previous.hash == digest:
                    previous.line = line_number
                    entries.append(previous)
                    stats.reused_lines += 1
                    continue

            entries.append(make_entry(line, line_number, digest))
            stats.reindexed_lines += 1

        index = Index(journal_path=journal_path, entries=entries)
        index.rebuild_terms()
        self.write(index)

        logger.debug(
            "index updated: {} lines ({} reindexed, {} reused)",
            stats.total_lines,
            stats.reindexed_lines,
            stats.reused_lines,
        )
        return index, stats


def search_index(index: Index, query: str) -> list[IndexEntry]:
    """Run a boolean query and return matching entries in line order.

    Raises:
        QueryError: If the query is empty or malformed
    """
    matches = evaluate(compile_query(query), index)
    return [index.entries[pos] for pos in matches]
