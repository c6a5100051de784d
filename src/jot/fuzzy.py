"""Fuzzy note matching for the interactive picker."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

from .models import Entry

SUBSTRING_BASE = 1000
CHAR_SCORE = 10
BOUNDARY_BONUS = 3
CONSECUTIVE_BONUS = 5
TAG_BONUS = 50


@dataclass
class Note:
    """What the picker needs to know about an entry."""
    line: int
    text: str
    tags: list[str] = field(default_factory=list)

    @classmethod
    def from_entry(cls, entry: Entry) -> "Note":
        return cls(line=entry.line_number, text=entry.text, tags=sorted(entry.tags))


@dataclass
class ScoredNote:
    note: Note
    score: int


def score_target(query: str, target: str) -> int:
    """Score one query token against one string.

    A substring hit scores ``1000 - offset``. Otherwise every query
    character must appear in order: 10 per character, +3 when the match
    follows a space or ``#``, +5 when it directly follows the previous
    match. A miss scores 0.
    """
    query = query.lower()
    target = target.lower()
    if not query:
        return 0

    offset = target.find(query)
    if offset >= 0:
        return SUBSTRING_BASE - offset

    score = 0
    pos = 0
    prev = -2
    for ch in query:
        found = target.find(ch, pos)
        if found < 0:
            return 0
        score += CHAR_SCORE
        if found > 0 and target[found - 1] in " #":
            score += BOUNDARY_BONUS
        if found == prev + 1:
            score += CONSECUTIVE_BONUS
        prev = found
        pos = found + 1
    return score


def score_token(token: str, note: Note) -> int:
    """Best of the text score and the best tag score (+50 if a tag wins)."""
    text_score = score_target(token, note.text)
    tag_score = max((score_target(token, tag) for tag in note.tags), default=0)
    if tag_score > text_score:
        return tag_score + TAG_BONUS
    return text_score


def query_tokens(query: str) -> list[str]:
    result = []
    for tok in query.split():
        tok = tok[1:] if tok.startswith("#") else tok
        if tok:
            result.append(tok)
    return result


def fuzzy_rank(query: str, notes: Iterable[Note]) -> list[ScoredNote]:
    """Rank notes against a query.

    Every token must hit either the text or a tag; the note score is the
    sum of token scores. Results are best first, most recent line first
    on ties. An empty query returns every note, most recent first.
    """
    notes = list(notes)
    toks = query_tokens(query)

    if not toks:
        ranked = [ScoredNote(note=n, score=0) for n in notes]
        ranked.sort(key=lambda s: -s.note.line)
        return ranked

    ranked = []
    for note in notes:
        total = 0
        for tok in toks:
            score = score_token(tok, note)
            if score == 0:
                break
            total += score
        else:
            ranked.append(ScoredNote(note=note, score=total))

    ranked.sort(key=lambda s: (-s.score, -s.note.line))
    return ranked


def notes_from_entries(entries: Sequence[Entry]) -> list[Note]:
    return [Note.from_entry(e) for e in entries if e.text.strip()]
