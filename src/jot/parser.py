"""Journal line parsing.

A journal line looks like ``[2024-01-01 10:00] shipped the thing #work repo:jot``.
Lines without a bracket prefix (hand edits, torn writes) still parse; they
just carry no timestamp.
"""

from __future__ import annotations

import re
from typing import Iterable, Iterator, Optional

from .models import Entry, parse_timestamp

_PROJECT = re.compile(r"\b(?:project|repo):([A-Za-z0-9_-]+)\b", re.IGNORECASE)

_TAG_TRAILING = ",.!?;:"


def split_stamp(line: str) -> tuple[Optional[str], str]:
    """Split a line into (bracket contents, trimmed remainder).

    Returns (None, line) when the line has no ``[...]`` prefix.
    """
    if line.startswith("["):
        end = line.find("]")
        if end > 1:
            return line[1:end], line[end + 1:].strip()
    return None, line


def extract_tags(text: str) -> set[str]:
    """Collect ``#tag`` fields, case-folded, with trailing punctuation removed."""
    tags = set()
    for word in text.split():
        if len(word) < 2 or not word.startswith("#"):
            continue
        tag = word[1:].rstrip(_TAG_TRAILING).casefold()
        if tag:
            tags.add(tag)
    return tags


def extract_project(text: str) -> Optional[str]:
    """Return the first ``project:NAME`` / ``repo:NAME`` value, case-folded."""
    match = _PROJECT.search(text)
    if match is None:
        return None
    return match.group(1).casefold()


def parse_entry(line: str, line_number: int) -> Entry:
    """Parse a single journal line into an Entry.

    Args:
        line: Raw line without its trailing newline
        line_number: 1-based position of the line in the journal

    Returns:
        Parsed Entry. ``timestamp`` is None when the bracket contents
        are not exactly ``YYYY-MM-DD HH:MM``.
    """
    stamp, text = split_stamp(line)
    return Entry(
        line_number=line_number,
        raw=line,
        text=text,
        timestamp=parse_timestamp(stamp) if stamp is not None else None,
        stamp=stamp,
        tags=extract_tags(text),
        project=extract_project(text),
    )


def parse_lines(lines: Iterable[tuple[int, str]]) -> Iterator[Entry]:
    """Parse (line_number, line) pairs lazily."""
    for line_number, line in lines:
        yield parse_entry(line, line_number)
