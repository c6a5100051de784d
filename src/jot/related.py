"""TF-IDF "related notes" ranking.

Every non-blank journal entry becomes a sparse tf-idf vector over its
text (timestamp excluded); related entries are the ones with the highest
cosine similarity to a target entry.
"""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass
from typing import Iterable

from .errors import EntryNotFoundError, NoSearchableContentError
from .models import Entry
from .text import tokens

DEFAULT_LIMIT = 5

Vector = dict[str, float]


@dataclass(frozen=True)
class RelatedNote:
    """An entry paired with its similarity to the target."""
    line: int
    score: float


def document_frequencies(docs: Iterable[Counter]) -> Counter:
    df: Counter = Counter()
    for counts in docs:
        df.update(counts.keys())
    return df


def build_vectors(entries: Iterable[Entry]) -> dict[int, Vector]:
    """Compute tf-idf vectors keyed by entry line number.

    tf is the term count over the entry's token count; idf is the smoothed
    ``log((1 + N) / (1 + df)) + 1``. Entries with no tokens get an empty
    vector.
    """
    counts = {entry.line_number: Counter(tokens(entry.text)) for entry in entries}
    n = len(counts)
    df = document_frequencies(counts.values())

    vectors: dict[int, Vector] = {}
    for line, term_counts in counts.items():
        total = sum(term_counts.values())
        vec: Vector = {}
        if total > 0:
            for term, count in term_counts.items():
                idf = math.log((1 + n) / (1 + df[term])) + 1
                vec[term] = (count / total) * idf
        vectors[line] = vec
    return vectors


def norm(vec: Vector) -> float:
    return math.sqrt(sum(w * w for w in vec.values()))


def cosine(a: Vector, b: Vector) -> float:
    """Cosine similarity of two sparse vectors; 0.0 if either is empty."""
    na, nb = norm(a), norm(b)
    if na == 0 or nb == 0:
        return 0.0
    if len(a) > len(b):
        a, b = b, a
    dot = sum(w * b[t] for t, w in a.items() if t in b)
    return dot / (na * nb)


def related_notes(entries: Iterable[Entry], target: int, limit: int = DEFAULT_LIMIT) -> list[RelatedNote]:
    """Rank entries by similarity to the entry on line ``target``.

    Args:
        entries: Journal entries; blank lines should already be excluded
        target: 1-based line number of the entry to compare against
        limit: Maximum number of results

    Returns:
        Up to ``limit`` notes with positive similarity, best first, ties
        broken by ascending line number.

    Raises:
        EntryNotFoundError: If no entry sits on ``target``
        NoSearchableContentError: If the target has no tokens
    """
    entries = [e for e in entries if e.raw.strip()]
    vectors = build_vectors(entries)

    if target not in vectors:
        raise EntryNotFoundError(f"entry {target} not found")

    query = vectors[target]
    if norm(query) == 0:
        raise NoSearchableContentError(f"entry {target} has no searchable content")

    scored = []
    for line, vec in vectors.items():
        if line == target or not vec:
            continue
        score = cosine(query, vec)
        if score > 0:
            scored.append(RelatedNote(line=line, score=score))

    scored.sort(key=lambda note: (-note.score, note.line))
    return scored[:limit]
