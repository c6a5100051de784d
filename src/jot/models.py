"""Data models for journal entries, index records, links, and watcher events."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

# Minute-precision stamp written in front of every journal line
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M"

# Second-precision UTC stamp used for link records
ADDED_AT_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Version of the persisted search index document
INDEX_VERSION = 1


def utc_now() -> datetime:
    """Get current UTC time with timezone info."""
    return datetime.now(timezone.utc)


def format_timestamp(dt: datetime) -> str:
    """Format datetime as a journal stamp (YYYY-MM-DD HH:MM)."""
    return dt.strftime(TIMESTAMP_FORMAT)


def parse_timestamp(s: str) -> Optional[datetime]:
    """Parse a journal stamp; returns None when it does not match exactly."""
    try:
        return datetime.strptime(s, TIMESTAMP_FORMAT)
    except ValueError:
        return None


def format_added_at(dt: datetime) -> str:
    """Format an aware or naive datetime as RFC-3339 UTC with second precision."""
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return dt.strftime(ADDED_AT_FORMAT)


@dataclass
class Entry:
    """A parsed journal line."""
    line_number: int
    raw: str
    text: str
    timestamp: Optional[datetime] = None
    stamp: Optional[str] = None  # bracket contents, kept even when unparseable
    tags: set[str] = field(default_factory=set)
    project: Optional[str] = None

    @property
    def has_timestamp(self) -> bool:
        return self.timestamp is not None


@dataclass
class IndexEntry:
    """One search-index record per journal line."""
    line: int
    text: str
    hash: str
    terms: list[str] = field(default_factory=list)
    normalized: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "line": self.line,
            "text": self.text,
            "hash": self.hash,
            "terms": list(self.terms),
            "normalized": self.normalized,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "IndexEntry":
        return cls(
            line=int(data.get("line", 0)),
            text=data.get("text", ""),
            hash=data.get("hash", ""),
            terms=list(data.get("terms") or []),
            normalized=data.get("normalized", ""),
        )


@dataclass
class UpdateStats:
    """Counters reported by an index update."""
    total_lines: int = 0
    reindexed_lines: int = 0
    reused_lines: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "total_lines": self.total_lines,
            "reindexed_lines": self.reindexed_lines,
            "reused_lines": self.reused_lines,
        }


class LinkKind(Enum):
    """Kind of GitHub resource a link points at."""
    PULL = "pull"
    ISSUE = "issue"


@dataclass
class LinkMetadata:
    """An external link attached to a journal timestamp."""
    note_timestamp: str
    url: str
    host: str
    added_at: str = ""
    owner: Optional[str] = None
    repo: Optional[str] = None
    kind: Optional[LinkKind] = None
    number: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, omitting unset optional fields."""
        data: dict[str, Any] = {
            "note_timestamp": self.note_timestamp,
            "url": self.url,
            "host": self.host,
        }
        if self.owner:
            data["owner"] = self.owner
        if self.repo:
            data["repo"] = self.repo
        if self.kind is not None:
            data["kind"] = self.kind.value
        if self.number is not None:
            data["number"] = self.number
        data["added_at"] = self.added_at
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LinkMetadata":
        kind = data.get("kind")
        number = data.get("number")
        return cls(
            note_timestamp=data.get("note_timestamp", ""),
            url=data.get("url", ""),
            host=data.get("host", ""),
            added_at=data.get("added_at", ""),
            owner=data.get("owner"),
            repo=data.get("repo"),
            kind=LinkKind(kind) if kind else None,
            number=int(number) if number is not None else None,
        )


class EventType(Enum):
    """Type of directory change reported by the watcher."""
    CREATE = "create"
    MODIFY = "modify"
    DELETE = "delete"


@dataclass(frozen=True)
class FileState:
    """Snapshot record for one regular file."""
    mtime_ns: int
    size: int


@dataclass(frozen=True)
class FileEvent:
    """A single change detected between two snapshots."""
    path: str
    type: EventType

    def sort_key(self) -> tuple[str, str]:
        return (self.path, self.type.value)

    def __str__(self) -> str:
        return f"{self.type.value} {self.path}"
