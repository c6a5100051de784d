"""Tests for the NDJSON export."""

import json
from datetime import datetime

import pytest

from jot.errors import MigrationError
from jot.migrate import line_to_record, migrate_to_ndjson


def read_records(path):
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


class TestLineToRecord:
    """Tests for line_to_record."""

    def test_stamped_line(self):
        record = line_to_record("[2024-01-01 10:00] hello there", 4, "journal.txt")

        assert record["text"] == "hello there"
        assert record["source"] == {"journal": "journal.txt", "line": 4}
        assert len(record["id"]) == 32
        assert datetime.fromisoformat(record["created_at"]).replace(tzinfo=None) == datetime(2024, 1, 1, 10, 0)

    def test_unstamped_line_keeps_raw_text(self):
        record = line_to_record("torn write", 1, "journal.txt")

        assert record["text"] == "torn write"
        assert "created_at" not in record

    def test_invalid_date_keeps_raw_text(self):
        record = line_to_record("[2024-13-45 10:00] nope", 1, "journal.txt")

        assert record["text"] == "[2024-13-45 10:00] nope"
        assert "created_at" not in record

    def test_ids_unique(self):
        assert line_to_record("a", 1, "j")["id"] != line_to_record("a", 1, "j")["id"]


class TestMigrate:
    """Tests for migrate_to_ndjson."""

    def test_skips_blank_lines(self, tmp_path):
        journal = tmp_path / "journal.txt"
        journal.write_text("[2024-01-01 10:00] a\n\n   \n[2024-01-01 11:00] b\n", encoding="utf-8")
        out = tmp_path / "journal.ndjson"

        assert migrate_to_ndjson(journal, out) == 2
        assert [(r["text"], r["source"]["line"]) for r in read_records(out)] == [("a", 1), ("b", 4)]

    def test_refuses_to_overwrite(self, tmp_path):
        journal = tmp_path / "journal.txt"
        journal.write_text("x\n", encoding="utf-8")
        out = tmp_path / "out.ndjson"
        out.write_text("keep\n", encoding="utf-8")

        with pytest.raises(MigrationError):
            migrate_to_ndjson(journal, out)
        assert out.read_text(encoding="utf-8") == "keep\n"

    def test_force_overwrites(self, tmp_path):
        journal = tmp_path / "journal.txt"
        journal.write_text("x\n", encoding="utf-8")
        out = tmp_path / "out.ndjson"
        out.write_text("old\n", encoding="utf-8")

        assert migrate_to_ndjson(journal, out, force=True) == 1
        assert read_records(out)[0]["text"] == "x"

    def test_missing_journal(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            migrate_to_ndjson(tmp_path / "none.txt", tmp_path / "out.ndjson")

    def test_non_ascii_preserved(self, tmp_path):
        journal = tmp_path / "journal.txt"
        journal.write_text("[2024-01-01 10:00] café ☕\n", encoding="utf-8")
        out = tmp_path / "out.ndjson"

        migrate_to_ndjson(journal, out)

        assert "café ☕" in out.read_text(encoding="utf-8")
