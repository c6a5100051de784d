"""Tests for the jot engine."""

from datetime import date, datetime

import pytest

from jot.engine import filter_entries, parse_date
from jot.errors import (
    EntryNotFoundError,
    InvalidURLError,
    MigrationError,
    NoEntryToLinkError,
    QueryError,
)
from jot.parser import parse_entry

from conftest import SAMPLE_LINES


class TestParseDate:
    """Tests for parse_date."""

    def test_valid(self):
        assert parse_date("2024-02-29") == date(2024, 2, 29)

    def test_invalid(self):
        with pytest.raises(ValueError, match="expected YYYY-MM-DD"):
            parse_date("29/02/2024")

    @pytest.mark.parametrize("value", ["2024-1-5", "2024-01-5", "24-01-05", " 2024-01-05", "2024-01-05\n"])
    def test_requires_zero_padding(self, value):
        """Only the exact YYYY-MM-DD shape is accepted."""
        with pytest.raises(ValueError, match="expected YYYY-MM-DD"):
            parse_date(value)

    def test_impossible_day(self):
        with pytest.raises(ValueError, match="expected YYYY-MM-DD"):
            parse_date("2023-02-29")


class TestFilterEntries:
    """Tests for filter_entries."""

    ENTRIES = [
        parse_entry("[2024-01-01 10:00] kickoff #work repo:jot", 1),
        parse_entry("[2024-01-05 10:00] groceries #home", 2),
        parse_entry("[2024-01-09 10:00] release #work #ship project:other", 3),
        parse_entry("undated #work", 4),
    ]

    def lines(self, **kwargs):
        return [e.line_number for e in filter_entries(self.ENTRIES, **kwargs)]

    def test_no_filters(self):
        assert self.lines() == [1, 2, 3, 4]

    def test_all_tags_required(self):
        assert self.lines(tags=["#work", "SHIP"]) == [3]

    def test_date_bounds_inclusive(self):
        assert self.lines(since=date(2024, 1, 5), until=date(2024, 1, 9)) == [2, 3]

    def test_date_filter_drops_undated(self):
        assert self.lines(tags=["work"], since=date(2000, 1, 1)) == [1, 3]

    def test_project(self):
        assert self.lines(project="JOT") == [1]


class TestCapture:
    """Tests for capturing notes."""

    def test_capture(self, engine, config):
        entry = engine.capture("hello")

        assert entry.raw == "[2024-01-01 10:00] hello"
        assert config.journal_path.read_text(encoding="utf-8") == "[2024-01-01 10:00] hello\n"

    def test_capture_from_editor(self, engine, config, monkeypatch):
        monkeypatch.setattr("jot.engine.capture_with_editor", lambda command, initial="": "from editor\n")

        engine.capture_from_editor()

        assert config.journal_path.read_text(encoding="utf-8") == "[2024-01-01 10:00] from editor\n"

    def test_editor_uses_configured_command(self, engine, config, monkeypatch):
        seen = []
        config.editor = "nano -w"

        def fake(command, initial=""):
            seen.append(command)
            return ""

        monkeypatch.setattr("jot.engine.capture_with_editor", fake)

        assert engine.capture_from_editor() is None
        assert seen == ["nano -w"]
        assert not config.journal_path.exists()


class TestSearch:
    """Tests for JotEngine.search."""

    def test_substring_fallback_without_index(self, engine, write_journal, config):
        write_journal(SAMPLE_LINES)

        hits = engine.search("Brown Fox")

        assert [e.line_number for e in hits] == [1]
        assert not config.index_path.exists()

    def test_boolean_query_with_index(self, engine, write_journal):
        write_journal(SAMPLE_LINES)
        engine.update_index()

        assert [e.line_number for e in engine.search('"quick brown" OR hare')] == [1, 3]
        assert [e.line_number for e in engine.search("quick AND NOT blue")] == [1]

    def test_index_refreshed_on_search(self, engine, write_journal):
        write_journal(SAMPLE_LINES[:1])
        engine.update_index()

        write_journal(SAMPLE_LINES)

        assert [e.line_number for e in engine.search("hare")] == [3]

    def test_filters_only(self, engine, write_journal):
        write_journal(["[2024-01-01 10:00] a #x", "[2024-01-02 10:00] b"])
        assert [e.line_number for e in engine.search("", tags=["x"])] == [1]

    def test_empty_query_without_filters(self, engine):
        with pytest.raises(QueryError, match="empty query"):
            engine.search("   ")

    def test_malformed_query(self, engine, write_journal):
        write_journal(SAMPLE_LINES)
        engine.update_index()

        with pytest.raises(QueryError):
            engine.search("(quick")

    def test_update_index_stats(self, engine, write_journal):
        write_journal(SAMPLE_LINES)
        engine.update_index()
        write_journal([SAMPLE_LINES[0], "lazy dog runs", SAMPLE_LINES[2]])

        stats = engine.update_index()

        assert (stats.reused_lines, stats.reindexed_lines) == (2, 1)


class TestRelatedAndPick:
    """Tests for related notes and the picker."""

    def test_related(self, engine, write_journal):
        write_journal(SAMPLE_LINES)

        results = engine.related(1)

        assert [entry.line_number for entry, _ in results] == [3]
        assert results[0][0].raw == SAMPLE_LINES[2]

    def test_related_bad_line(self, engine, write_journal):
        write_journal(SAMPLE_LINES)
        with pytest.raises(EntryNotFoundError):
            engine.related(0)

    def test_pick(self, engine, write_journal):
        write_journal(SAMPLE_LINES)
        assert engine.pick("hare")[0].note.line == 3

    def test_get_entry_blank(self, engine, write_journal):
        write_journal(["a", ""])
        with pytest.raises(EntryNotFoundError):
            engine.get_entry(2)


class TestLinks:
    """Tests for linking URLs to entries."""

    def test_link_latest_entry(self, engine, clock):
        engine.capture("first")
        clock.now = datetime(2024, 1, 1, 11, 30)
        engine.capture("second")

        link = engine.link("https://github.com/org/repo/issues/9")

        assert link.note_timestamp == "2024-01-01 11:30"
        assert [item.url for item in engine.list_links("2024-01-01 11:30")] == [link.url]
        assert engine.list_links("2024-01-01 10:00") == []

    def test_link_without_entries(self, engine):
        with pytest.raises(NoEntryToLinkError):
            engine.link("https://example.com")

    def test_invalid_url(self, engine):
        engine.capture("note")
        with pytest.raises(InvalidURLError):
            engine.link("ftp://example.com")


class TestMigrate:
    """Tests for JotEngine.migrate."""

    def test_default_output_next_to_journal(self, engine, config):
        engine.capture("one")

        target, count = engine.migrate()

        assert target == config.journal_path.with_suffix(".ndjson")
        assert count == 1
        with pytest.raises(MigrationError):
            engine.migrate()
