"""Exception hierarchy for jot operations."""

from __future__ import annotations


class JotError(Exception):
    """Base exception for jot operations."""
    pass


class QueryError(JotError):
    """Raised when a search query cannot be lexed, parsed, or evaluated."""
    pass


class InvalidURLError(JotError):
    """Raised when a link URL fails validation."""
    pass


class EntryNotFoundError(JotError):
    """Raised when an entry ID does not name a journal entry."""
    pass


class NoSearchableContentError(JotError):
    """Raised when an entry has no terms to compare against."""
    pass


class EditorCommandError(JotError):
    """Raised when an editor command cannot be split or fails to run."""
    pass


class TemplateNotFoundError(JotError):
    """Raised when a named template doesn't exist."""
    pass


class MigrationError(JotError):
    """Raised when a migration would clobber existing output."""
    pass


class NoEntryToLinkError(JotError):
    """Raised when a link is captured before any timestamped entry exists."""
    pass
