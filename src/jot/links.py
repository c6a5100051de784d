"""External links attached to journal entries.

Links are kept out of the journal itself, in ``~/.jot/links.jsonl``: one
JSON object per line, pointing back at an entry by its timestamp.
"""

from __future__ import annotations

import json
import os
from datetime import datetime
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit

from loguru import logger

from .errors import InvalidURLError
from .locking import ensure_private_dir, file_lock, open_private
from .models import LinkKind, LinkMetadata, format_added_at, utc_now

GITHUB_HOST = "github.com"

_GITHUB_KINDS = {
    "pull": LinkKind.PULL,
    "issues": LinkKind.ISSUE,
}


def parse_link_url(url: str) -> LinkMetadata:
    """Validate a URL and classify GitHub pull requests and issues.

    Returns:
        LinkMetadata with ``url`` and ``host`` set, plus owner/repo/kind/number
        for ``github.com/OWNER/REPO/{pull,issues}/N`` URLs. The note timestamp
        and added_at are left for the caller.

    Raises:
        InvalidURLError: If the scheme isn't http(s) or there is no host
    """
    url = url.strip()
    try:
        parts = urlsplit(url)
    except ValueError as e:
        raise InvalidURLError(f"invalid url {url!r}: {e}") from e

    if parts.scheme.lower() not in ("http", "https"):
        raise InvalidURLError(f"unsupported url scheme {parts.scheme!r}: use http or https")
    if not parts.hostname:
        raise InvalidURLError(f"url has no host: {url}")

    link = LinkMetadata(note_timestamp="", url=url, host=parts.hostname)

    if parts.hostname.lower() == GITHUB_HOST:
        segments = [s for s in parts.path.split("/") if s]
        if len(segments) >= 4 and segments[2] in _GITHUB_KINDS and segments[3].isdecimal():
            link.owner = segments[0]
            link.repo = segments[1]
            link.kind = _GITHUB_KINDS[segments[2]]
            link.number = int(segments[3])

    return link


class LinkStore:
    """Append-only JSONL store of LinkMetadata records."""

    def __init__(self, path: Path):
        self.path = path

    def add(self, url: str, note_timestamp: str, when: Optional[datetime] = None) -> LinkMetadata:
        """Classify ``url`` and record it against ``note_timestamp``.

        Raises:
            InvalidURLError: If the URL fails validation
            ValueError: If ``note_timestamp`` is empty
        """
        if not note_timestamp:
            raise ValueError("note timestamp is required")

        link = parse_link_url(url)
        link.note_timestamp = note_timestamp
        link.added_at = format_added_at(when or utc_now())

        ensure_private_dir(self.path.parent)
        with file_lock(self.path):
            fd = open_private(self.path, os.O_WRONLY | os.O_CREAT | os.O_APPEND)
            with open(fd, "w", encoding="utf-8") as f:
                f.write(json.dumps(link.to_dict(), separators=(",", ":")) + "\n")

        logger.debug("linked {} to entry [{}]", link.url, note_timestamp)
        return link

    def all(self) -> list[LinkMetadata]:
        """Every stored link, oldest first; empty if the file doesn't exist."""
        try:
            f = open(self.path, "r", encoding="utf-8")
        except FileNotFoundError:
            return []

        links = []
        with f:
            for line in f:
                line = line.strip()
                if line:
                    links.append(LinkMetadata.from_dict(json.loads(line)))
        return links

    def for_timestamp(self, note_timestamp: str) -> list[LinkMetadata]:
        return [link for link in self.all() if link.note_timestamp == note_timestamp]
