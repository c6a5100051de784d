"""Append-only journal store.

The journal is a UTF-8 text file with one ``[YYYY-MM-DD HH:MM] TEXT`` entry
per line. Entries are never rewritten; the only mutation is an append.
"""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterator, Optional

from loguru import logger

from .locking import ensure_private_dir, file_lock, open_private
from .models import Entry, format_timestamp
from .parser import parse_entry


def normalize_input(text: str) -> str:
    """Fold user input onto a single line.

    Trailing CR/LF is dropped and interior line breaks become single spaces.
    """
    text = text.rstrip("\r\n")
    return " ".join(part for part in text.replace("\r\n", "\n").split("\n") if part.strip())


def format_line(text: str, when: datetime) -> str:
    """Render a journal line, newline included."""
    return f"[{format_timestamp(when)}] {text}\n"


class JournalStore:
    """Reads and appends to a single journal file."""

    def __init__(self, path: Path, clock: Callable[[], datetime] = datetime.now):
        """Initialize the store.

        Args:
            path: Journal file path
            clock: Source of local wall-clock time for new entries
        """
        self.path = path
        self._clock = clock

    def exists(self) -> bool:
        return self.path.exists()

    def ensure(self) -> Path:
        """Create the journal directory (0700) and empty file (0600) lazily."""
        ensure_private_dir(self.path.parent)
        os.close(open_private(self.path, os.O_WRONLY | os.O_CREAT))
        return self.path

    def append(self, text: str) -> Optional[Entry]:
        """Append a timestamped entry.

        Whitespace-only input is ignored and touches nothing on disk.

        Returns:
            The written Entry, or None when the input was empty.
        """
        text = normalize_input(text)
        if not text.strip():
            return None

        ensure_private_dir(self.path.parent)
        line = format_line(text, self._clock())

        with file_lock(self.path):
            fd = open_private(self.path, os.O_WRONLY | os.O_CREAT | os.O_APPEND)
            with open(fd, "w", encoding="utf-8", newline="") as f:
                f.write(line)
            line_number = self._count_lines()

        logger.debug("appended entry {} to {}", line_number, self.path)
        return parse_entry(line.rstrip("\n"), line_number)

    def _count_lines(self) -> int:
        count = 0
        for count, _ in self.iter_lines():
            pass
        return count

    def read_bytes(self) -> bytes:
        """Raw journal contents; empty when the journal doesn't exist yet."""
        try:
            return self.path.read_bytes()
        except FileNotFoundError:
            return b""

    def iter_lines(self) -> Iterator[tuple[int, str]]:
        """Yield (1-based line number, line) pairs.

        Lines split on ``\\n`` only; one trailing ``\\r`` is trimmed. A missing
        journal yields nothing.
        """
        try:
            f = open(self.path, "rb")
        except FileNotFoundError:
            return

        with f:
            for line_number, raw in enumerate(f, start=1):
                line = raw.rstrip(b"\n")
                if line.endswith(b"\r"):
                    line = line[:-1]
                yield line_number, line.decode("utf-8", errors="replace")

    def entries(self, include_blank: bool = False) -> list[Entry]:
        """Parse every line of the journal.

        Args:
            include_blank: Keep whitespace-only lines (dropped by default)
        """
        result = []
        for line_number, line in self.iter_lines():
            if not include_blank and not line.strip():
                continue
            result.append(parse_entry(line, line_number))
        return result

    def get(self, line_number: int) -> Optional[Entry]:
        """Return the entry on a given 1-based line, if any."""
        for number, line in self.iter_lines():
            if number == line_number:
                return parse_entry(line, number)
        return None

    def latest_stamp(self) -> Optional[str]:
        """Bracket contents of the last entry with a parseable timestamp."""
        latest = None
        for entry in self.entries():
            if entry.timestamp is not None:
                latest = entry.stamp
        return latest
