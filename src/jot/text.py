"""Word extraction shared by the indexer, the related-notes ranker, and search."""

from __future__ import annotations

import re

_WORD = re.compile(r"[a-z0-9]+")


def tokens(s: str) -> list[str]:
    """Lowercase ASCII alphanumeric runs of ``s``, in order, duplicates kept."""
    return _WORD.findall(s.lower())


def unique_terms(s: str) -> list[str]:
    """Sorted, de-duplicated terms of ``s``."""
    return sorted(set(tokens(s)))
