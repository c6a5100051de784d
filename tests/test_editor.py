"""Tests for editor command splitting and capture."""

import os
import sys
import textwrap

import pytest

from jot.editor import (
    capture_with_editor,
    default_editor,
    join_command,
    quote_arg,
    resolve_editor,
    split_command,
)
from jot.errors import EditorCommandError


class TestSplitCommand:
    """Tests for split_command."""

    def test_quoted_path_with_spaces(self):
        command = '"/Applications/Visual Studio Code.app/Contents/Resources/app/bin/code" --wait'
        assert split_command(command) == [
            "/Applications/Visual Studio Code.app/Contents/Resources/app/bin/code",
            "--wait",
        ]

    def test_unterminated_double_quote(self):
        with pytest.raises(EditorCommandError):
            split_command('"foo')

    def test_unterminated_single_quote(self):
        with pytest.raises(EditorCommandError):
            split_command("vim 'oops")

    def test_plain_words(self):
        assert split_command("  vim   -u NONE ") == ["vim", "-u", "NONE"]

    def test_single_quotes_are_literal(self):
        assert split_command(r"ed 'a\b \"c'") == ["ed", r'a\b \"c']

    def test_escaped_space(self):
        assert split_command(r"my\ editor -n") == ["my editor", "-n"]

    def test_windows_path_backslashes_kept(self):
        assert split_command(r"C:\tools\vim.exe -f") == [r"C:\tools\vim.exe", "-f"]

    def test_empty_quoted_argument(self):
        assert split_command("code '' --wait") == ["code", "", "--wait"]

    def test_adjacent_quotes_join(self):
        assert split_command("""a"b c"'d'""") == ["ab cd"]

    def test_empty(self):
        assert split_command("   ") == []


class TestQuoting:
    """Tests for quote_arg and join_command."""

    def test_plain_left_alone(self):
        assert quote_arg("--wait") == "--wait"

    def test_embedded_single_quote(self):
        assert quote_arg("it's") == "'it'\\''s'"

    def test_join_then_split(self):
        argv = ["/opt/My Editor/bin/ed", "it's", "", r"C:\x", '"q"']
        assert split_command(join_command(argv)) == argv


class TestResolveEditor:
    """Tests for editor selection order."""

    def test_configured_wins(self):
        assert resolve_editor("nano", {"VISUAL": "code"}) == "nano"

    def test_visual_before_editor(self):
        assert resolve_editor(None, {"VISUAL": "code", "EDITOR": "vim", "JOT_EDITOR": "ed"}) == "code"

    def test_editor_before_jot_editor(self):
        assert resolve_editor(None, {"EDITOR": "vim", "JOT_EDITOR": "ed"}) == "vim"

    def test_jot_editor(self):
        assert resolve_editor(None, {"VISUAL": "  ", "JOT_EDITOR": "ed"}) == "ed"

    def test_platform_default(self):
        assert resolve_editor(None, {}) == default_editor()

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.delenv("VISUAL", raising=False)
        monkeypatch.setenv("EDITOR", "emacs -nw")
        assert resolve_editor() == "emacs -nw"


@pytest.fixture
def fake_editor(tmp_path):
    """Build an editor command that runs a small Python script."""

    def _make(body):
        script = tmp_path / "fake_editor.py"
        script.write_text(textwrap.dedent(body), encoding="utf-8")
        return join_command([sys.executable, str(script)])

    return _make


class TestCaptureWithEditor:
    """Tests for capture_with_editor."""

    def test_returns_saved_text(self, fake_editor):
        command = fake_editor(
            """
            import sys
            with open(sys.argv[1], "a", encoding="utf-8") as f:
                f.write(" and more")
            """
        )

        assert capture_with_editor(command, initial="seed") == "seed and more"

    def test_temp_file_removed(self, fake_editor, tmp_path):
        record = tmp_path / "seen.txt"
        command = fake_editor(
            f"""
            import sys
            open({str(record)!r}, "w").write(sys.argv[1])
            """
        )

        capture_with_editor(command)

        seen = record.read_text()
        assert seen.endswith(".txt")
        assert not os.path.exists(seen)

    def test_nonzero_exit(self, fake_editor):
        command = fake_editor(
            """
            import sys
            sys.exit(3)
            """
        )

        with pytest.raises(EditorCommandError, match="status 3"):
            capture_with_editor(command)

    def test_empty_command(self):
        with pytest.raises(EditorCommandError):
            capture_with_editor("  ")

    def test_missing_program(self, tmp_path):
        with pytest.raises(OSError):
            capture_with_editor(str(tmp_path / "no-such-editor"))
