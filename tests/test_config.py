"""Tests for configuration loading."""

import json

import pytest

from jot.config import (
    JotConfig,
    default_templates_dir,
    dict_to_config,
    find_config_file,
    home_dir,
    load_config,
)


class TestDefaults:
    """Tests for the zero-config layout."""

    def test_everything_under_dot_jot(self, temp_home):
        config = JotConfig(home=temp_home)

        assert config.data_dir == temp_home / ".jot"
        assert config.journal_path == temp_home / ".jot" / "journal.txt"
        assert config.index_path == temp_home / ".jot" / "index.json"
        assert config.links_path == temp_home / ".jot" / "links.jsonl"
        assert config.templates_dir == temp_home / ".jot" / "templates"
        assert config.editor is None
        assert config.log_level == "WARNING"

    def test_xdg_templates(self, temp_home, monkeypatch, tmp_path):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
        assert default_templates_dir(temp_home) == tmp_path / "xdg" / "jot" / "templates"

    def test_home_from_environment(self, temp_home):
        assert home_dir() == temp_home

    def test_userprofile_fallback(self, temp_home, monkeypatch):
        monkeypatch.delenv("HOME")
        assert home_dir() == temp_home


class TestDictToConfig:
    """Tests for dict_to_config."""

    def test_relative_paths_under_data_dir(self, temp_home):
        config = dict_to_config({"paths": {"journal": "notes.txt", "index": "cache/idx.json"}}, temp_home)

        assert config.journal_path == temp_home / ".jot" / "notes.txt"
        assert config.index_path == temp_home / ".jot" / "cache" / "idx.json"
        assert config.links_path == temp_home / ".jot" / "links.jsonl"

    def test_absolute_path_kept(self, temp_home, tmp_path):
        config = dict_to_config({"paths": {"journal": str(tmp_path / "j.txt")}}, temp_home)
        assert config.journal_path == tmp_path / "j.txt"

    def test_editor_table(self, temp_home):
        assert dict_to_config({"editor": {"command": "code --wait"}}, temp_home).editor == "code --wait"

    def test_editor_string(self, temp_home):
        assert dict_to_config({"editor": "nano"}, temp_home).editor == "nano"

    def test_logging(self, temp_home):
        config = dict_to_config({"logging": {"level": "debug", "file": "jot.log"}}, temp_home)

        assert config.log_level == "DEBUG"
        assert config.log_file == str(temp_home / ".jot" / "jot.log")


class TestLoadConfig:
    """Tests for load_config."""

    def test_no_file(self, temp_home):
        config = load_config()
        assert config.journal_path == temp_home / ".jot" / "journal.txt"

    def test_toml_found(self, temp_home):
        (temp_home / ".jot").mkdir()
        (temp_home / ".jot" / "config.toml").write_text(
            '[paths]\njournal = "diary.txt"\n\n[editor]\ncommand = "vim"\n', encoding="utf-8"
        )

        config = load_config()

        assert config.journal_path == temp_home / ".jot" / "diary.txt"
        assert config.editor == "vim"

    def test_toml_preferred_over_json(self, temp_home):
        data_dir = temp_home / ".jot"
        data_dir.mkdir()
        (data_dir / "config.toml").write_text("", encoding="utf-8")
        (data_dir / "config.json").write_text("{}", encoding="utf-8")

        assert find_config_file(data_dir) == data_dir / "config.toml"

    def test_explicit_json(self, temp_home, tmp_path):
        path = tmp_path / "custom.json"
        path.write_text(json.dumps({"logging": {"level": "info"}}), encoding="utf-8")

        assert load_config(config_path=path).log_level == "INFO"

    def test_unsupported_suffix(self, temp_home, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")

        with pytest.raises(ValueError, match="Unsupported"):
            load_config(config_path=path)

    def test_env_log_level_overrides(self, temp_home, monkeypatch):
        monkeypatch.setenv("JOT_LOG_LEVEL", "debug")
        assert load_config().log_level == "DEBUG"
